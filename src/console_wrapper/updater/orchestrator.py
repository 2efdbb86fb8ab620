"""
Update Orchestrator - keep one artifact current.

Walks the states CHECKING -> DECIDING -> UP_TO_DATE | UPDATING -> DONE:
read the installed version, find the newest eligible release, and
replace the artifact when they differ.
"""

import logging
from pathlib import Path

from console_wrapper.core.models import (
    MISSING_VERSION,
    ArtifactKind,
    UpdatePolicy,
    UpdateResult,
    UpdateState,
)
from console_wrapper.network.mirrors import MirrorFetcher
from console_wrapper.network.retry import try_n_times
from console_wrapper.updater.storage import ArtifactStore
from console_wrapper.versions.selector import parse_listing, select

logger = logging.getLogger(__name__)


class UpdateOrchestrator:
    """
    Runs one update check for a single artifact kind.

    Errors are never turned into a process exit here: once the retry
    budget is spent they propagate as WrapperError for the caller to
    report.
    """

    def __init__(
        self,
        kind: ArtifactKind,
        policy: UpdatePolicy,
        store: ArtifactStore,
        fetcher: MirrorFetcher,
        attempts: int = 3,
    ):
        self.kind = kind
        self.policy = policy
        self.store = store
        self.fetcher = fetcher
        self.attempts = attempts

    def list_versions(self) -> list[str]:
        """All versions the repository lists for this kind, unfiltered."""
        html = self.fetcher.fetch_listing(self.kind.listing_path(self.fetcher.group))
        return parse_listing(html)

    def newest_version(self) -> str:
        """
        Newest version eligible under the policy.

        Raises:
            NoVersionFoundError: If the listing has no eligible version
            FetchFailedError: If the listing could not be fetched
        """
        outcome = try_n_times(self.attempts, lambda _: select(self.list_versions(), self.policy))
        return outcome.unwrap(f"Failed to fetch newest {self.kind.value} version")

    def run(self) -> UpdateResult:
        """
        Check for an update and install it if needed.

        Returns:
            UpdateResult describing the states visited

        Raises:
            WrapperError: If the listing or the download failed
        """
        result = UpdateResult(kind=self.kind, policy=self.policy, current_version=MISSING_VERSION)

        self._enter(result, UpdateState.CHECKING)
        result.current_version = self.store.current_version(self.kind)
        result.artifact_path = self.store.find(self.kind)

        if result.current_version != MISSING_VERSION and self.policy == UpdatePolicy.KEEP:
            logger.info("Stay on current version.")
            self._enter(result, UpdateState.UP_TO_DATE)
            self._enter(result, UpdateState.DONE)
            return result

        result.newest_version = self.newest_version()
        self._enter(result, UpdateState.DECIDING)
        logger.info(
            "Local %s version: %s | Newest %s version: %s",
            self.kind.value,
            result.current_version,
            self.policy.value,
            result.newest_version,
        )

        if result.current_version == result.newest_version:
            self._enter(result, UpdateState.UP_TO_DATE)
        else:
            self._enter(result, UpdateState.UPDATING)
            result.artifact_path = self._install(result.current_version, result.newest_version)

        self._enter(result, UpdateState.DONE)
        return result

    def _install(self, current: str, newest: str) -> Path:
        logger.info("Updating %s from %s -> %s", self.kind.value, current, newest)
        self.store.remove(self.kind)

        project = self.kind.project_name
        outcome = try_n_times(self.attempts, lambda _: self.fetcher.fetch_archive(project, newest))
        data = outcome.unwrap(f"Failed to download {project}-{newest}")
        return self.store.write(self.kind, newest, data)

    @staticmethod
    def _enter(result: UpdateResult, state: UpdateState) -> None:
        logger.debug("%s: %s", result.kind.value, state.value)
        result.history.append(state)
