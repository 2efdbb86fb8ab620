"""
Console Wrapper Network Module.

Proxy resolution, the shared HTTP client, mirror fallback and retries.
"""

__all__ = [
    "MirrorFetcher",
    "NetworkContext",
    "ProxyProbe",
    "RetryOutcome",
    "try_n_times",
]

from console_wrapper.network.context import NetworkContext
from console_wrapper.network.mirrors import MirrorFetcher
from console_wrapper.network.proxy import ProxyProbe
from console_wrapper.network.retry import RetryOutcome, try_n_times
