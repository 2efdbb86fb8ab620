"""
Core data models for Console Wrapper.

Artifact kinds, update policies, proxy settings and the run record
produced by the update orchestrator.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import httpx
from pydantic import BaseModel, Field

# Local version reported when no artifact is installed.
MISSING_VERSION = "0.0.0"

# Proxy value meaning "no explicit proxy configured".
DEFAULT_PROXY = "DEFAULT"

DEFAULT_GROUP = "net/mamoe"


class UpdatePolicy(str, Enum):
    """Which releases are eligible when looking for the newest version."""

    KEEP = "KEEP"  # Never update once something is installed
    STABLE = "STABLE"  # Only versions without a pre-release tag
    EA = "EA"  # Everything, early access included


class ArtifactKind(str, Enum):
    """Sibling artifact variants managed by the wrapper."""

    PURE = "Pure"
    TERMINAL = "Terminal"
    GRAPHICAL = "Graphical"

    @property
    def project_name(self) -> str:
        """Maven artifact id of this variant."""
        if self is ArtifactKind.PURE:
            return "mirai-console"
        return f"mirai-console-{self.value.lower()}"

    def listing_path(self, group: str = DEFAULT_GROUP) -> str:
        """Repository path of the directory page listing all versions."""
        return f"/{group.strip('/')}/{self.project_name}/"


class UpdateState(Enum):
    """States visited by one orchestrator run."""

    CHECKING = "checking"
    DECIDING = "deciding"
    UP_TO_DATE = "up_to_date"
    UPDATING = "updating"
    DONE = "done"


@dataclass(frozen=True)
class ProxyConfig:
    """A single validated proxy endpoint."""

    scheme: str
    host: str
    port: int

    DEFAULT_PORTS = {"http": 80, "https": 443, "socks5": 1080}

    @classmethod
    def from_url(cls, url: str) -> "ProxyConfig":
        """
        Parse a proxy URL such as ``http://127.0.0.1:1080``.

        Raises:
            ValueError: If the URL has no host, carries credentials or has an
                unsupported scheme
        """
        parsed = httpx.URL(url if "://" in url else f"http://{url}")
        scheme = parsed.scheme.lower()
        if scheme not in cls.DEFAULT_PORTS:
            raise ValueError(f"Unsupported proxy scheme: {scheme}")
        if not parsed.host:
            raise ValueError(f"Proxy URL has no host: {url}")
        if parsed.userinfo:
            raise ValueError("Proxy credentials are not supported")
        port = parsed.port or cls.DEFAULT_PORTS[scheme]
        return cls(scheme=scheme, host=parsed.host, port=port)

    @property
    def url(self) -> str:
        """URL form accepted by ``httpx.Client(proxy=...)``."""
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"{self.scheme}://{host}:{self.port}"

    def __str__(self) -> str:
        return self.url


class UpdateResult(BaseModel):
    """Record of one orchestrator run."""

    kind: ArtifactKind
    policy: UpdatePolicy
    current_version: str
    newest_version: str | None = None
    history: list[UpdateState] = Field(default_factory=list)
    artifact_path: Path | None = None

    @property
    def state(self) -> UpdateState | None:
        """The last state reached."""
        return self.history[-1] if self.history else None

    @property
    def updated(self) -> bool:
        """True if a new artifact was installed."""
        return UpdateState.UPDATING in self.history and self.state == UpdateState.DONE

    def to_summary(self) -> dict[str, str | None]:
        """Convert to summary for display."""
        return {
            "kind": self.kind.value,
            "policy": self.policy.value,
            "current": self.current_version,
            "newest": self.newest_version,
            "state": self.state.value if self.state else None,
            "artifact": str(self.artifact_path) if self.artifact_path else None,
        }
