"""
Console Wrapper Core Module.

Provides foundational types, configuration and exceptions for the updater.
"""

__all__ = [
    "ArtifactKind",
    "ProxyConfig",
    "UpdatePolicy",
    "UpdateResult",
    "UpdateState",
    "WrapperConfig",
    "load_config",
    # Exceptions
    "WrapperError",
    "InvalidProxyError",
    "NoVersionFoundError",
    "ArtifactNotFoundError",
    "FetchFailedError",
    "ConfigurationError",
]

from console_wrapper.core.config import WrapperConfig, load_config
from console_wrapper.core.exceptions import (
    ArtifactNotFoundError,
    ConfigurationError,
    FetchFailedError,
    InvalidProxyError,
    NoVersionFoundError,
    WrapperError,
)
from console_wrapper.core.models import (
    ArtifactKind,
    ProxyConfig,
    UpdatePolicy,
    UpdateResult,
    UpdateState,
)
