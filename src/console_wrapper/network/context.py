"""
Network context - the resolved proxy plus the one shared HTTP client.

Built once at startup and handed to every component that performs
network I/O. Neither field changes after construction.
"""

from dataclasses import dataclass

import httpx

from console_wrapper import __version__
from console_wrapper.core.config import WrapperConfig
from console_wrapper.core.models import ProxyConfig
from console_wrapper.network.proxy import ProxyProbe


@dataclass(frozen=True)
class NetworkContext:
    """Shared network state for one run."""

    client: httpx.Client
    proxy: ProxyConfig | None = None

    @classmethod
    def create(cls, config: WrapperConfig, probe: ProxyProbe | None = None) -> "NetworkContext":
        """
        Resolve the proxy and build the shared client.

        Args:
            config: Wrapper configuration
            probe: Probe to use instead of one built from ``config``

        Raises:
            InvalidProxyError: If the configured proxy is unusable
        """
        probe = probe or ProxyProbe(
            probe_url=config.probe_url,
            timeout=config.probe_timeout_seconds,
            auto_detect=config.auto_detect_proxy,
        )
        proxy = probe.resolve(config.proxy)
        client = httpx.Client(
            proxy=proxy.url if proxy else None,
            timeout=config.timeout_seconds,
            follow_redirects=True,
            headers={"User-Agent": f"console-wrapper/{__version__}"},
        )
        return cls(client=client, proxy=proxy)

    def close(self) -> None:
        """Close the HTTP client."""
        self.client.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, *args):
        """Context manager exit."""
        self.close()
