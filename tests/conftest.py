"""Pytest configuration and fixtures."""

import os
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Generator

import httpx
import pytest

from console_wrapper.network.context import NetworkContext
from console_wrapper.network.mirrors import MirrorFetcher

PRIMARY_MIRROR = "https://primary.test/{group}/{project}/{version}/{project}-{version}.{extension}"
SECONDARY_MIRROR = "https://secondary.test/{group}/{project}/{version}/{project}-{version}.{extension}"
LISTING_URL = "https://listing.test"

# Keep the developer's environment out of config loading
for _name in [k for k in os.environ if k.startswith("CW_")]:
    del os.environ[_name]


def listing_html(versions: list[str]) -> str:
    """Render a directory page in the format the repository serves."""
    rows = [f'<a href="{v}/" rel="nofollow">{v}/</a>' for v in versions]
    rows.append('<a href="maven-metadata.xml" rel="nofollow">maven-metadata.xml</a>')
    return "<html>\n<body>\n<pre>\n" + "\n".join(rows) + "\n</pre>\n</body>\n</html>\n"


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def content_dir(temp_dir: Path) -> Path:
    """Provide an empty content directory."""
    path = temp_dir / "content"
    path.mkdir()
    return path


@pytest.fixture
def make_context() -> Generator[Callable[..., NetworkContext], None, None]:
    """Build NetworkContexts whose client is served by a handler function."""
    contexts: list[NetworkContext] = []

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> NetworkContext:
        context = NetworkContext(client=httpx.Client(transport=httpx.MockTransport(handler)))
        contexts.append(context)
        return context

    yield _make

    for context in contexts:
        context.close()


@pytest.fixture
def make_fetcher(make_context) -> Callable[..., MirrorFetcher]:
    """Build MirrorFetchers pointed at the test mirrors."""

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> MirrorFetcher:
        return MirrorFetcher(
            make_context(handler),
            mirrors=[PRIMARY_MIRROR, SECONDARY_MIRROR],
            listing_base_url=LISTING_URL,
        )

    return _make


@pytest.fixture
def render_listing() -> Callable[[list[str]], str]:
    """Provide the listing page renderer."""
    return listing_html
