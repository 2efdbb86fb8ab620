"""
Version selection - pick the newest release allowed by an update policy.
"""

import logging
import re
from collections.abc import Iterable

from console_wrapper.core.exceptions import NoVersionFoundError
from console_wrapper.core.models import UpdatePolicy
from console_wrapper.versions.weighting import sort_by_version

logger = logging.getLogger(__name__)

# Directory entries on the listing page look like:
#   <a href="1.0.0/" rel="nofollow">1.0.0/</a>
LISTING_PATTERN = re.compile(r'rel="nofollow">[0-9][0-9]*(\.[0-9]*)*.*/<', re.IGNORECASE)

LEGACY_PREFIX = "1."


def parse_listing(html: str) -> list[str]:
    """
    Extract version tokens from a repository directory page.

    Args:
        html: Raw HTML of the listing

    Returns:
        Version strings in page order
    """
    versions = []
    for match in LISTING_PATTERN.finditer(html):
        text = match.group(0)
        versions.append(text.split(">", 1)[1].split("/", 1)[0])
    return versions


def filter_candidates(versions: Iterable[str], policy: UpdatePolicy) -> list[str]:
    """
    Apply the update policy to a raw version list.

    The 1.x line only ever shipped pre-release tags, so when every 1.x
    version carries a ``-`` tag they are all treated as releases and
    nothing else is considered.
    """
    versions = list(versions)
    legacy = [v for v in versions if v.startswith(LEGACY_PREFIX)]
    if legacy and all("-" in v for v in legacy):
        return legacy

    match policy:
        case UpdatePolicy.KEEP | UpdatePolicy.STABLE:
            return [v for v in versions if "-" not in v]
        case UpdatePolicy.EA:
            return versions
        case _:
            raise ValueError(f"Unknown update policy: {policy}")


def select(raw_versions: Iterable[str], policy: UpdatePolicy) -> str:
    """
    Pick the newest version eligible under ``policy``.

    Args:
        raw_versions: Version strings as listed by the repository
        policy: Update policy in effect

    Returns:
        The highest-ranked candidate

    Raises:
        NoVersionFoundError: If no candidate survives filtering
    """
    raw = list(raw_versions)
    candidates = filter_candidates(raw, policy)
    ranked = sort_by_version(candidates)
    if not ranked:
        raise NoVersionFoundError(
            "No version matches the update policy",
            policy=policy.value,
            listed=len(raw),
        )
    logger.debug("Ranked %d candidates for %s, newest %s", len(ranked), policy.value, ranked[0])
    return ranked[0]
