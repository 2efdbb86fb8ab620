"""
Version weighting - rank version strings on a single integer scale.

Version strings come straight from a scraped directory listing and are
not semver. Each dot-separated component contributes a score scaled by
``10000 ** position`` (position 0 = least significant), so any difference
in a more significant component outweighs everything after it.

Pre-release tags sort below the plain release of the same component:
stable > RC > EA.
"""

import math
import re
from collections.abc import Iterable

from console_wrapper.core.exceptions import NoVersionFoundError

COMPONENT_BASE = 10000.0

# Terms are clamped to the signed 64-bit range
LONG_MIN = -(2**63)
LONG_MAX = 2**63 - 1

_PLAIN_INT = re.compile(r"[+-]?\d+")


def weight(version: str) -> int:
    """
    Calculate the rank of a version string.

    ``"2.3"`` is read as ``"2.3.0"``, so both weigh the same.

    Args:
        version: Raw version token, e.g. ``"2.3.1-EA"``

    Returns:
        Integer rank; a newer release has a larger rank
    """
    if not version.strip():
        return 0

    components = version.split(".")
    if len(components) == 2:
        components.append("0")

    total = 0
    for index, component in enumerate(reversed(components)):
        total += _clamp_long(_scale(index) * (1 + patch_weight(component)))
    return total


def patch_weight(component: str) -> float:
    """
    Score a single dot-separated component.

    Plain integers score ``1 + n`` (always >= 1 for release numbers),
    while tagged components score below 1 for EA builds and around
    the numeric value for release candidates.

    Args:
        component: One component such as ``"3"``, ``"0-RC-2"`` or ``"1-EA"``

    Returns:
        Component score
    """
    if _PLAIN_INT.fullmatch(component):
        return 1 + float(component)

    parts = component.split("-")
    while len(parts) < 3:
        parts.append("0")

    if "RC" in component:
        return (
            _to_float_or_zero(parts[0])
            + 0.1 * _to_float_or_zero(parts[1])
            + 0.01 * _to_float_or_zero(parts[2])
            + 0.01
        )
    # EA and any other tag
    return (
        0.001 * _to_float_or_zero(parts[0])
        + 0.0001 * _to_float_or_zero(parts[1])
        + 0.00001 * _to_float_or_zero(parts[2])
    )


def _scale(index: int) -> float:
    try:
        return COMPONENT_BASE**index
    except OverflowError:
        return math.inf


def _clamp_long(value: float) -> int:
    """Truncate toward zero, saturating at the 64-bit bounds; NaN is 0."""
    if math.isnan(value):
        return 0
    if value >= LONG_MAX:
        return LONG_MAX
    if value <= LONG_MIN:
        return LONG_MIN
    return int(value)


def _to_float_or_zero(text: str) -> float:
    """Parse ``text`` as a float after trimming ASCII letters off both ends."""
    trimmed = text.strip("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz")
    try:
        return float(trimmed)
    except ValueError:
        return 0.0


def sort_by_version(versions: Iterable[str]) -> list[str]:
    """
    Sort versions newest first.

    Equal weights are ordered by descending string value so the
    result never depends on input order.
    """
    return sorted(set(versions), key=lambda v: (weight(v), v), reverse=True)


def latest_version(versions: Iterable[str]) -> str:
    """
    Return the newest version.

    Raises:
        NoVersionFoundError: If ``versions`` is empty
    """
    ranked = sort_by_version(versions)
    if not ranked:
        raise NoVersionFoundError("No version to choose from", listed=0)
    return ranked[0]
