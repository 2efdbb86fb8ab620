"""
Console Wrapper Exception Hierarchy.

Defines all custom exceptions raised by the updater.
Every error carries structured details so the CLI can print full diagnostics.
"""

from typing import Any

import httpx


class WrapperError(Exception):
    """
    Base exception for all Console Wrapper errors.

    All custom exceptions inherit from this class, allowing
    generic catch blocks at the top level of the CLI.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None):
        """
        Initialize a WrapperError.

        Args:
            message: Human-readable error message
            details: Optional structured data for debugging
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation with details."""
        base = self.message
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{base} ({details_str})"
        return base

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class InvalidProxyError(WrapperError):
    """
    Raised when an explicitly configured proxy cannot be used.

    There is no fallback to a direct connection: the user asked
    for this proxy, so the run stops.
    """

    def __init__(
        self,
        message: str,
        *,
        proxy_url: str | None = None,
        probe_url: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize an InvalidProxyError.

        Args:
            message: Human-readable error message
            proxy_url: The configured proxy URL
            probe_url: Endpoint used to validate the proxy
            details: Optional structured data for debugging
        """
        details = details or {}
        if proxy_url:
            details["proxy_url"] = proxy_url
        if probe_url:
            details["probe_url"] = probe_url

        super().__init__(message, details=details)
        self.proxy_url = proxy_url
        self.probe_url = probe_url


class NoVersionFoundError(WrapperError):
    """Raised when a version listing yields no candidates after filtering."""

    def __init__(
        self,
        message: str = "No version found",
        *,
        policy: str | None = None,
        listed: int | None = None,
    ):
        details: dict[str, Any] = {}
        if policy:
            details["policy"] = policy
        if listed is not None:
            details["listed"] = listed
        super().__init__(message, details=details)
        self.policy = policy
        self.listed = listed


class ArtifactNotFoundError(WrapperError):
    """
    Raised when a remote resource is missing on every mirror.

    A 404 or 403 status, or a ``status: 404`` response header,
    counts as "not found".
    """

    def __init__(
        self,
        message: str = "Artifact not found",
        *,
        project: str | None = None,
        version: str | None = None,
        extension: str | None = None,
        urls: list[str] | None = None,
    ):
        details: dict[str, Any] = {}
        if project:
            details["project"] = project
        if version:
            details["version"] = version
        if extension:
            details["extension"] = extension
        if urls:
            details["urls"] = urls
        super().__init__(message, details=details)
        self.project = project
        self.version = version
        self.extension = extension
        self.urls = urls or []


class FetchFailedError(WrapperError):
    """
    Raised when no mirror or retry attempt succeeded.

    Carries every prior failure so the CLI can print the whole
    chain instead of just the last error.
    """

    def __init__(
        self,
        message: str,
        *,
        failures: list[BaseException] | None = None,
        attempts: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize a FetchFailedError.

        Args:
            message: Human-readable error message
            failures: Exceptions collected from each failed attempt
            attempts: Number of attempts made
            details: Optional structured data for debugging
        """
        details = details or {}
        if attempts is not None:
            details["attempts"] = attempts
        if failures:
            details["failures"] = len(failures)

        super().__init__(message, details=details)
        self.failures = failures or []
        self.attempts = attempts


class ConfigurationError(WrapperError):
    """
    Errors in configuration loading or validation.

    Raised when:
    - An environment variable holds a value of the wrong type
    - A mirror template is missing required placeholders
    """

    def __init__(
        self,
        message: str,
        *,
        env_var: str | None = None,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if env_var:
            details["env_var"] = env_var
        if config_key:
            details["config_key"] = config_key

        super().__init__(message, details=details)
        self.env_var = env_var
        self.config_key = config_key


def format_exception(error: BaseException) -> str:
    """
    Format an exception for user-friendly display.

    Args:
        error: The exception to format

    Returns:
        Formatted error message string
    """
    if isinstance(error, WrapperError):
        return str(error)
    return f"{error.__class__.__name__}: {error}"


def is_retriable_error(error: BaseException) -> bool:
    """
    Determine if an error is suitable for retry.

    Missing artifacts, empty listings and bad proxies are permanent for
    the run; only transport-level failures are worth another attempt.

    Args:
        error: The exception to check

    Returns:
        True if the error should be retried
    """
    if isinstance(error, FetchFailedError):
        return True
    if isinstance(error, httpx.TransportError):
        return True
    return False
