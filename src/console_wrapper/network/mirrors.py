"""
Mirror fetcher - download Maven resources with mirror fallback.

Each mirror is a URL template with ``{group}``, ``{project}``,
``{version}`` and ``{extension}`` placeholders. Mirrors are tried in
order, each exactly once; the first good response wins.
"""

import logging

import httpx

from console_wrapper.core.config import DEFAULT_LISTING_URL, DEFAULT_MIRRORS
from console_wrapper.core.exceptions import ArtifactNotFoundError, FetchFailedError
from console_wrapper.core.models import DEFAULT_GROUP
from console_wrapper.network.context import NetworkContext

logger = logging.getLogger(__name__)

NOT_FOUND_STATUSES = (403, 404)


def build_url(template: str, group: str, project: str, version: str, extension: str) -> str:
    """Substitute the Maven coordinates into a mirror template."""
    return (
        template.replace("{group}", group)
        .replace("{project}", project)
        .replace("{extension}", extension)
        .replace("{version}", version)
    )


class MirrorFetcher:
    """
    Fetches artifacts, POMs and version listings.

    All requests go through the context's shared client, so the
    resolved proxy applies to every one of them.
    """

    def __init__(
        self,
        context: NetworkContext,
        mirrors: list[str] | None = None,
        group: str = DEFAULT_GROUP,
        listing_base_url: str = DEFAULT_LISTING_URL,
    ):
        self._context = context
        self.mirrors = list(mirrors) if mirrors else list(DEFAULT_MIRRORS)
        self.group = group.strip("/")
        self.listing_base_url = listing_base_url.rstrip("/")

    def urls_for(self, project: str, version: str, extension: str) -> list[str]:
        """Concrete URLs for one resource, in mirror order."""
        return [build_url(t, self.group, project, version, extension) for t in self.mirrors]

    def fetch(self, project: str, version: str, extension: str) -> bytes:
        """
        Download one resource as bytes.

        Raises:
            ArtifactNotFoundError: If every mirror reports the resource missing
            FetchFailedError: If no mirror could serve it for any other reason
        """
        urls = self.urls_for(project, version, extension)
        response = self._get_with_fallback(urls, f"{project}-{version}.{extension}")
        return response.content

    def fetch_text(self, project: str, version: str, extension: str) -> str:
        """Download one resource as decoded text."""
        urls = self.urls_for(project, version, extension)
        response = self._get_with_fallback(urls, f"{project}-{version}.{extension}")
        return response.text

    def fetch_archive(self, project: str, version: str) -> bytes:
        """Download the ``.jar`` of a version."""
        return self.fetch(project, version, "jar")

    def fetch_pom(self, project: str, version: str) -> bytes:
        """Download the ``.pom`` of a version."""
        return self.fetch(project, version, "pom")

    def fetch_pom_text(self, project: str, version: str) -> str:
        """Download the ``.pom`` of a version as text."""
        return self.fetch_text(project, version, "pom")

    def fetch_listing(self, path: str) -> str:
        """
        Download the repository directory page at ``path``.

        The listing is served by a single host, so there is no fallback.
        """
        url = f"{self.listing_base_url}/{path.lstrip('/')}"
        return self._get_with_fallback([url], path).text

    def _get_with_fallback(self, urls: list[str], resource: str) -> httpx.Response:
        failures: list[BaseException] = []
        missing = 0

        for url in urls:
            try:
                return self._request(url)
            except ArtifactNotFoundError as e:
                logger.warning("%s not found at %s", resource, url)
                failures.append(e)
                missing += 1
            except httpx.HTTPError as e:
                logger.warning("Mirror %s failed for %s: %s", url, resource, e)
                failures.append(e)

        if missing == len(urls):
            raise ArtifactNotFoundError(f"{resource} not found on any mirror", urls=urls)
        raise FetchFailedError(
            f"No mirror could serve {resource}",
            failures=failures,
            attempts=len(urls),
        )

    def _request(self, url: str) -> httpx.Response:
        logger.debug("GET %s", url)
        response = self._context.client.get(url)
        if response.status_code in NOT_FOUND_STATUSES or response.headers.get("status") == "404":
            raise ArtifactNotFoundError("File not found", urls=[url])
        response.raise_for_status()
        return response
