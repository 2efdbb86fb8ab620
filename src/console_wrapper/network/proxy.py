"""
Proxy probe - decide which network path every later request uses.

An explicitly configured proxy must answer a probe request or the run
stops. Without one the wrapper connects directly, optionally after
racing probes against well-known local proxy ports.
"""

import asyncio
import logging
import re
from collections.abc import Sequence

import httpx

from console_wrapper.core.config import DEFAULT_PROBE_URL
from console_wrapper.core.exceptions import InvalidProxyError
from console_wrapper.core.models import DEFAULT_PROXY, ProxyConfig

logger = logging.getLogger(__name__)

# Shadowsocks-style clients listen on these by default
LOCAL_PROXY_CANDIDATES = (
    "http://127.0.0.1:1080",
    "http://127.0.0.1:1088",
    "socks5://127.0.0.1:1080",
    "socks5://127.0.0.1:1088",
)

_UNRESOLVED = object()

_USERINFO = re.compile(r"^([a-z0-9+.-]+://)?[^/@]*@", re.IGNORECASE)


class _ProbeSucceeded(Exception):
    """Raised inside the probe task group to stop the remaining probes."""

    def __init__(self, proxy: ProxyConfig):
        super().__init__(proxy.url)
        self.proxy = proxy


def _redact(url: str) -> str:
    """Hide any user:password part of a proxy URL."""
    return _USERINFO.sub(r"\1***@", url)


def _is_acceptable(response: httpx.Response) -> bool:
    return 200 <= response.status_code < 400


class ProxyProbe:
    """
    Resolves the proxy for the process.

    The first call to ``resolve`` fixes the result; later calls return
    the same value without probing again.
    """

    def __init__(
        self,
        probe_url: str = DEFAULT_PROBE_URL,
        timeout: float = 5.0,
        auto_detect: bool = False,
        candidates: Sequence[str] = LOCAL_PROXY_CANDIDATES,
    ):
        self.probe_url = probe_url
        self.timeout = timeout
        self.auto_detect = auto_detect
        self.candidates = tuple(candidates)
        self._resolved: ProxyConfig | None | object = _UNRESOLVED

    def resolve(self, configured: str | None = None) -> ProxyConfig | None:
        """
        Resolve the proxy to use.

        Args:
            configured: Proxy URL from the user, or None/``"DEFAULT"``

        Returns:
            The validated ProxyConfig, or None for a direct connection

        Raises:
            InvalidProxyError: If an explicit proxy is malformed or unreachable
        """
        if self._resolved is _UNRESOLVED:
            self._resolved = self._resolve(configured)
            logger.info("Using proxy: %s", self._resolved or "none (direct connection)")
        return self._resolved  # type: ignore[return-value]

    def _resolve(self, configured: str | None) -> ProxyConfig | None:
        if configured and configured != DEFAULT_PROXY:
            try:
                proxy = ProxyConfig.from_url(configured)
            except (ValueError, httpx.InvalidURL) as e:
                raise InvalidProxyError(
                    f"Proxy {_redact(configured)} is invalid: {e}",
                    proxy_url=_redact(configured),
                ) from e

            logger.info("Testing proxy %s...", proxy)
            if not self.validate(proxy):
                raise InvalidProxyError(
                    f"Proxy {configured} is invalid.",
                    proxy_url=configured,
                    probe_url=self.probe_url,
                )
            logger.info("Proxy is valid.")
            return proxy

        if self.auto_detect:
            return self.detect()
        return None

    def validate(self, proxy: ProxyConfig) -> bool:
        """Return True if ``probe_url`` is reachable through ``proxy``."""
        try:
            with httpx.Client(proxy=proxy.url, timeout=self.timeout) as client:
                response = client.get(self.probe_url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.debug("Proxy %s failed probe: %s", proxy, e)
            return False
        return _is_acceptable(response)

    async def validate_async(self, proxy: ProxyConfig) -> bool:
        """Async variant of ``validate`` used by the detection race."""
        try:
            async with httpx.AsyncClient(proxy=proxy.url, timeout=self.timeout) as client:
                response = await client.get(self.probe_url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.debug("Proxy %s failed probe: %s", proxy, e)
            return False
        return _is_acceptable(response)

    def detect(self) -> ProxyConfig | None:
        """
        Probe the local candidates concurrently.

        Returns:
            The first candidate that answered, or None if none did
            within ``timeout`` seconds
        """
        candidates = [ProxyConfig.from_url(url) for url in self.candidates]
        if not candidates:
            return None
        return asyncio.run(self._race(candidates))

    async def _race(self, candidates: Sequence[ProxyConfig]) -> ProxyConfig | None:
        winner: ProxyConfig | None = None
        try:
            async with asyncio.timeout(self.timeout):
                async with asyncio.TaskGroup() as group:
                    for candidate in candidates:
                        group.create_task(self._probe(candidate))
        except* _ProbeSucceeded as found:
            winner = found.exceptions[0].proxy
        except* TimeoutError:
            logger.info("No local proxy answered within %.1fs", self.timeout)

        if winner is not None:
            logger.info("Detected local proxy %s", winner)
        return winner

    async def _probe(self, candidate: ProxyConfig) -> None:
        if await self.validate_async(candidate):
            raise _ProbeSucceeded(candidate)
