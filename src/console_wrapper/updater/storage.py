"""
Artifact store - the content directory holding installed artifacts.

An artifact of a kind is a ``.jar`` whose name is the kind's project
name, a dash, then a version starting with a digit. This keeps
``mirai-console-graphical-1.0.jar`` from being read as a ``mirai-console``
artifact with version ``graphical-1.0``.
"""

import logging
import os
from pathlib import Path

from console_wrapper.core.models import MISSING_VERSION, ArtifactKind

logger = logging.getLogger(__name__)

ARTIFACT_EXTENSION = "jar"
PARTIAL_SUFFIX = ".part"


class ArtifactStore:
    """Reads, removes and writes artifacts in one content directory."""

    def __init__(self, content_dir: Path):
        self.content_dir = Path(content_dir)

    def file_name(self, kind: ArtifactKind, version: str) -> str:
        """Canonical file name of an artifact."""
        return f"{kind.project_name}-{version}.{ARTIFACT_EXTENSION}"

    def path_for(self, kind: ArtifactKind, version: str) -> Path:
        """Canonical path of an artifact."""
        return self.content_dir / self.file_name(kind, version)

    def find_all(self, kind: ArtifactKind) -> list[Path]:
        """All installed artifacts of ``kind``, sorted by name."""
        if not self.content_dir.is_dir():
            return []
        return sorted(
            path
            for path in self.content_dir.iterdir()
            if path.is_file() and self._version_of(kind, path) is not None
        )

    def find(self, kind: ArtifactKind) -> Path | None:
        """The installed artifact of ``kind``, if any."""
        found = self.find_all(kind)
        if len(found) > 1:
            logger.warning("Multiple %s artifacts installed: %s", kind.value, [p.name for p in found])
        return found[0] if found else None

    def current_version(self, kind: ArtifactKind) -> str:
        """
        Version of the installed artifact.

        Returns:
            The version parsed from the file name, or ``"0.0.0"`` when
            nothing is installed
        """
        path = self.find(kind)
        if path is None:
            return MISSING_VERSION
        return self._version_of(kind, path) or MISSING_VERSION

    def remove(self, kind: ArtifactKind) -> list[Path]:
        """
        Delete every installed artifact of ``kind``.

        Files already gone are ignored.

        Returns:
            Paths that were removed
        """
        removed = []
        for path in self.find_all(kind):
            path.unlink(missing_ok=True)
            logger.info("Removed %s", path.name)
            removed.append(path)
        return removed

    def write(self, kind: ArtifactKind, version: str, data: bytes) -> Path:
        """
        Persist an artifact under its canonical name.

        The bytes land in a ``.part`` file first and are moved into place
        only once fully written, so an interrupted write never leaves a
        truncated ``.jar`` behind.
        """
        self.content_dir.mkdir(parents=True, exist_ok=True)
        target = self.path_for(kind, version)
        partial = target.with_name(target.name + PARTIAL_SUFFIX)

        try:
            with open(partial, "wb") as fh:
                fh.write(data)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(partial, target)
        except OSError:
            partial.unlink(missing_ok=True)
            raise

        logger.info("Saved %s (%d bytes)", target.name, len(data))
        return target

    @staticmethod
    def _version_of(kind: ArtifactKind, path: Path) -> str | None:
        name = path.name
        suffix = f".{ARTIFACT_EXTENSION}"
        prefix = f"{kind.project_name}-"
        if not name.endswith(suffix) or not name.startswith(prefix):
            return None
        version = name[len(prefix) : -len(suffix)]
        if not version or not version[0].isdigit():
            return None
        return version
