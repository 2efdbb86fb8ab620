"""
Wrapper configuration - loaded from environment variables.

Environment variables:
- CW_CONTENT_DIR: Directory holding the installed artifact
- CW_GROUP: Maven group path (default net/mamoe)
- CW_LISTING_URL: Base URL of the repository directory listing
- CW_MIRRORS: Comma-separated mirror templates, primary first
- CW_PROXY: Proxy URL, or DEFAULT for a direct connection
- CW_AUTO_DETECT_PROXY: Probe well-known local proxy ports (true|false)
- CW_PROBE_URL: Endpoint used to validate a proxy
- CW_PROBE_TIMEOUT: Seconds allowed for proxy probing
- CW_TIMEOUT: Per-request timeout in seconds
- CW_ATTEMPTS: Attempts for listing and download before giving up
"""

import os
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from console_wrapper.core.exceptions import ConfigurationError
from console_wrapper.core.models import DEFAULT_GROUP, DEFAULT_PROXY

ALIYUN_MIRROR = (
    "https://maven.aliyun.com/nexus/content/repositories/jcenter/"
    "{group}/{project}/{version}/{project}-{version}.{extension}"
)
JCENTER_MIRROR = "https://jcenter.bintray.com/{group}/{project}/{version}/{project}-{version}.{extension}"

DEFAULT_MIRRORS = [ALIYUN_MIRROR, JCENTER_MIRROR]
DEFAULT_LISTING_URL = "https://jcenter.bintray.com"
DEFAULT_PROBE_URL = "https://www.baidu.com"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


class WrapperConfig(BaseModel):
    """Configuration for one updater run."""

    content_dir: Path = Path("content")
    group: str = DEFAULT_GROUP
    listing_base_url: str = DEFAULT_LISTING_URL
    mirrors: list[str] = Field(default_factory=lambda: list(DEFAULT_MIRRORS))
    proxy: str = DEFAULT_PROXY
    auto_detect_proxy: bool = False
    probe_url: str = DEFAULT_PROBE_URL
    probe_timeout_seconds: float = 5.0
    timeout_seconds: float = 30.0
    attempts: int = Field(default=3, ge=1)

    @field_validator("mirrors")
    @classmethod
    def _check_mirrors(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("at least one mirror is required")
        for template in value:
            if "{project}" not in template or "{version}" not in template:
                raise ValueError(f"mirror template lacks {{project}}/{{version}}: {template}")
        return value


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"Expected a number, got {raw!r}", env_var=name)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"Expected an integer, got {raw!r}", env_var=name)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"Expected a boolean, got {raw!r}", env_var=name)


def load_config() -> WrapperConfig:
    """
    Load configuration from environment.

    Returns:
        WrapperConfig with defaults for every unset variable

    Raises:
        ConfigurationError: If a variable holds an invalid value
    """
    mirrors_env = os.getenv("CW_MIRRORS")
    mirrors = (
        [m.strip() for m in mirrors_env.split(",") if m.strip()]
        if mirrors_env
        else list(DEFAULT_MIRRORS)
    )

    try:
        return WrapperConfig(
            content_dir=Path(os.getenv("CW_CONTENT_DIR", "content")),
            group=os.getenv("CW_GROUP", DEFAULT_GROUP),
            listing_base_url=os.getenv("CW_LISTING_URL", DEFAULT_LISTING_URL),
            mirrors=mirrors,
            proxy=os.getenv("CW_PROXY", DEFAULT_PROXY),
            auto_detect_proxy=_env_bool("CW_AUTO_DETECT_PROXY", False),
            probe_url=os.getenv("CW_PROBE_URL", DEFAULT_PROBE_URL),
            probe_timeout_seconds=_env_float("CW_PROBE_TIMEOUT", 5.0),
            timeout_seconds=_env_float("CW_TIMEOUT", 30.0),
            attempts=_env_int("CW_ATTEMPTS", 3),
        )
    except ValueError as e:
        # pydantic.ValidationError is a ValueError subclass
        raise ConfigurationError(
            f"Invalid configuration: {e}",
            details={"errors": str(e).splitlines()[0]},
        ) from e
