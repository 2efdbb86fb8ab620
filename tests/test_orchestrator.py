"""Tests for the update orchestrator."""

from pathlib import Path

import httpx
import pytest

from console_wrapper.core.exceptions import (
    ArtifactNotFoundError,
    FetchFailedError,
    NoVersionFoundError,
)
from console_wrapper.core.models import ArtifactKind, UpdatePolicy, UpdateState
from console_wrapper.updater.orchestrator import UpdateOrchestrator
from console_wrapper.updater.storage import ArtifactStore

LISTING = "https://listing.test/net/mamoe/mirai-console/"


def jar_url(host: str, version: str, project: str = "mirai-console") -> str:
    return f"https://{host}.test/net/mamoe/{project}/{version}/{project}-{version}.jar"


class Repository:
    """Fake Maven repository recording every request."""

    def __init__(self, listing: str | None = None, jars: dict[str, bytes] | None = None):
        self.listing = listing
        self.jars = jars or {}
        self.requests: list[str] = []
        self.listing_status = 200
        self.jar_failures = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append(url)
        if url.startswith("https://listing.test/"):
            if self.listing is None or url != LISTING:
                return httpx.Response(404)
            if self.listing_status != 200:
                return httpx.Response(self.listing_status)
            return httpx.Response(200, text=self.listing)
        if url.endswith(".jar") and self.jar_failures:
            self.jar_failures -= 1
            raise httpx.ConnectError("connection reset")
        if url in self.jars:
            return httpx.Response(200, content=self.jars[url])
        return httpx.Response(404)

    def jar_requests(self) -> list[str]:
        return [url for url in self.requests if url.endswith(".jar")]


@pytest.fixture
def store(content_dir: Path) -> ArtifactStore:
    return ArtifactStore(content_dir)


@pytest.fixture
def make_orchestrator(make_fetcher, store):
    def _make(repository: Repository, policy=UpdatePolicy.STABLE, attempts: int = 3):
        return UpdateOrchestrator(
            kind=ArtifactKind.PURE,
            policy=policy,
            store=store,
            fetcher=make_fetcher(repository),
            attempts=attempts,
        )

    return _make


class TestRun:
    """Tests for UpdateOrchestrator.run."""

    def test_up_to_date(self, make_orchestrator, render_listing, content_dir: Path) -> None:
        """Matching versions stop without downloading."""
        (content_dir / "mirai-console-2.3.0.jar").write_bytes(b"installed")
        repository = Repository(listing=render_listing(["2.2.0", "2.3.0", "2.4.0-EA"]))

        result = make_orchestrator(repository).run()

        assert result.history == [
            UpdateState.CHECKING,
            UpdateState.DECIDING,
            UpdateState.UP_TO_DATE,
            UpdateState.DONE,
        ]
        assert result.updated is False
        assert result.newest_version == "2.3.0"
        assert repository.jar_requests() == []
        assert (content_dir / "mirai-console-2.3.0.jar").read_bytes() == b"installed"

    def test_replaces_old_version(self, make_orchestrator, render_listing, content_dir: Path) -> None:
        """An older artifact is replaced by the newest one."""
        (content_dir / "mirai-console-2.2.0.jar").write_bytes(b"old")
        repository = Repository(
            listing=render_listing(["2.2.0", "2.3.0", "2.3.1"]),
            jars={jar_url("primary", "2.3.1"): b"new"},
        )

        result = make_orchestrator(repository).run()

        assert UpdateState.UPDATING in result.history
        assert result.state == UpdateState.DONE
        assert result.updated is True
        assert result.current_version == "2.2.0"
        assert result.newest_version == "2.3.1"
        assert not (content_dir / "mirai-console-2.2.0.jar").exists()
        assert (content_dir / "mirai-console-2.3.1.jar").read_bytes() == b"new"
        assert result.artifact_path == content_dir / "mirai-console-2.3.1.jar"

    def test_fresh_install(self, make_orchestrator, render_listing, store: ArtifactStore) -> None:
        """With nothing installed the newest version is downloaded."""
        repository = Repository(
            listing=render_listing(["0.5.1", "0.5.2"]),
            jars={jar_url("secondary", "0.5.2"): b"jar"},
        )

        result = make_orchestrator(repository).run()

        assert result.current_version == "0.0.0"
        assert result.updated is True
        assert store.current_version(ArtifactKind.PURE) == "0.5.2"
        assert repository.jar_requests() == [jar_url("primary", "0.5.2"), jar_url("secondary", "0.5.2")]

    def test_ea_policy(self, make_orchestrator, render_listing, store: ArtifactStore) -> None:
        """EA installs a newer pre-release."""
        repository = Repository(
            listing=render_listing(["2.0.0", "2.1.0-EA"]),
            jars={jar_url("primary", "2.1.0-EA"): b"ea"},
        )

        result = make_orchestrator(repository, policy=UpdatePolicy.EA).run()

        assert result.newest_version == "2.1.0-EA"
        assert store.current_version(ArtifactKind.PURE) == "2.1.0-EA"

    def test_keep_with_installed_version(self, make_orchestrator, content_dir: Path) -> None:
        """KEEP never touches the network once something is installed."""
        (content_dir / "mirai-console-0.5.2.jar").write_bytes(b"installed")
        repository = Repository()

        result = make_orchestrator(repository, policy=UpdatePolicy.KEEP).run()

        assert result.history == [UpdateState.CHECKING, UpdateState.UP_TO_DATE, UpdateState.DONE]
        assert result.newest_version is None
        assert repository.requests == []

    def test_keep_without_installed_version(
        self, make_orchestrator, render_listing, store: ArtifactStore
    ) -> None:
        """KEEP still installs when nothing is present yet."""
        repository = Repository(
            listing=render_listing(["2.0.0", "2.1.0-EA"]),
            jars={jar_url("primary", "2.0.0"): b"jar"},
        )

        result = make_orchestrator(repository, policy=UpdatePolicy.KEEP).run()

        assert result.updated is True
        assert store.current_version(ArtifactKind.PURE) == "2.0.0"

    def test_transient_download_failure_retried(
        self, make_orchestrator, render_listing, store: ArtifactStore
    ) -> None:
        """A download that fails on every mirror once is retried."""
        repository = Repository(
            listing=render_listing(["2.3.1"]),
            jars={jar_url("primary", "2.3.1"): b"jar"},
        )
        repository.jar_failures = 2

        result = make_orchestrator(repository, attempts=2).run()

        assert result.updated is True
        assert store.current_version(ArtifactKind.PURE) == "2.3.1"
        assert len(repository.jar_requests()) == 3

    def test_listing_failure_exhausts_attempts(self, make_orchestrator, content_dir: Path) -> None:
        """A listing that keeps failing raises FetchFailedError after every attempt."""
        (content_dir / "mirai-console-2.2.0.jar").write_bytes(b"old")
        repository = Repository(listing="")
        repository.listing_status = 500

        with pytest.raises(FetchFailedError) as exc_info:
            make_orchestrator(repository, attempts=2).run()

        assert exc_info.value.attempts == 2
        assert repository.requests == [LISTING, LISTING]
        assert (content_dir / "mirai-console-2.2.0.jar").exists()

    def test_missing_artifact(self, make_orchestrator, render_listing, content_dir: Path) -> None:
        """A jar missing on every mirror is not retried."""
        (content_dir / "mirai-console-2.2.0.jar").write_bytes(b"old")
        repository = Repository(listing=render_listing(["2.3.0"]))

        with pytest.raises(ArtifactNotFoundError):
            make_orchestrator(repository).run()

        assert len(repository.jar_requests()) == 2
        assert not (content_dir / "mirai-console-2.3.0.jar").exists()

    def test_no_version_found(self, make_orchestrator, render_listing) -> None:
        """An empty filtered listing is fetched only once."""
        repository = Repository(listing=render_listing(["2.0.0-EA"]))

        with pytest.raises(NoVersionFoundError):
            make_orchestrator(repository).run()

        assert repository.requests == [LISTING]


class TestQueries:
    """Tests for the read-only helpers."""

    def test_list_versions(self, make_orchestrator, render_listing) -> None:
        """Listed versions are returned unfiltered in page order."""
        repository = Repository(listing=render_listing(["0.5.2", "2.1.0-EA"]))
        assert make_orchestrator(repository).list_versions() == ["0.5.2", "2.1.0-EA"]

    def test_newest_version(self, make_orchestrator, render_listing) -> None:
        """newest_version applies the policy."""
        repository = Repository(listing=render_listing(["2.0.0", "2.1.0-EA"]))
        assert make_orchestrator(repository).newest_version() == "2.0.0"
        assert make_orchestrator(repository, policy=UpdatePolicy.EA).newest_version() == "2.1.0-EA"

    def test_listing_path_per_kind(self, make_fetcher, store: ArtifactStore, render_listing) -> None:
        """Each kind reads its own listing."""
        repository = Repository(listing=render_listing(["0.0.7"]))
        orchestrator = UpdateOrchestrator(
            kind=ArtifactKind.GRAPHICAL,
            policy=UpdatePolicy.STABLE,
            store=store,
            fetcher=make_fetcher(repository),
        )

        with pytest.raises(ArtifactNotFoundError):
            orchestrator.list_versions()
        assert repository.requests == ["https://listing.test/net/mamoe/mirai-console-graphical/"]
