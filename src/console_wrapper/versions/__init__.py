"""
Console Wrapper Versions Module.

Ranks scraped version strings and selects the newest one for a policy.
"""

__all__ = [
    "filter_candidates",
    "latest_version",
    "parse_listing",
    "select",
    "sort_by_version",
    "weight",
]

from console_wrapper.versions.selector import filter_candidates, parse_listing, select
from console_wrapper.versions.weighting import latest_version, sort_by_version, weight
