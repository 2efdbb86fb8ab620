"""Tests for listing parsing and version selection."""

import pytest

from console_wrapper.core.exceptions import NoVersionFoundError
from console_wrapper.core.models import UpdatePolicy
from console_wrapper.versions.selector import filter_candidates, parse_listing, select


class TestParseListing:
    """Tests for scraping version tokens from the directory page."""

    def test_extracts_versions(self, render_listing) -> None:
        """Each directory entry yields its version."""
        html = render_listing(["0.5.2", "1.0-RC-dev-28", "1.0.0-EA"])
        assert parse_listing(html) == ["0.5.2", "1.0-RC-dev-28", "1.0.0-EA"]

    def test_skips_non_version_entries(self) -> None:
        """Entries not starting with a digit are ignored."""
        html = (
            '<a href="maven-metadata.xml" rel="nofollow">maven-metadata.xml</a>\n'
            '<a href="../" rel="nofollow">../</a>\n'
            '<a href="0.1.0/" rel="nofollow">0.1.0/</a>\n'
        )
        assert parse_listing(html) == ["0.1.0"]

    def test_case_insensitive(self) -> None:
        """The attribute match ignores case."""
        html = '<A HREF="2.0.0/" REL="NOFOLLOW">2.0.0/</A>'
        assert parse_listing(html) == ["2.0.0"]

    def test_empty_page(self) -> None:
        """A page without entries yields nothing."""
        assert parse_listing("<html></html>") == []


class TestFilterCandidates:
    """Tests for policy filtering."""

    def test_stable_drops_tagged(self) -> None:
        """STABLE keeps only untagged versions."""
        assert filter_candidates(["2.0.0", "2.1.0-EA", "2.1.0-RC"], UpdatePolicy.STABLE) == ["2.0.0"]

    def test_keep_behaves_like_stable(self) -> None:
        """KEEP filters the same way as STABLE."""
        versions = ["2.0.0", "2.1.0-EA"]
        assert filter_candidates(versions, UpdatePolicy.KEEP) == filter_candidates(
            versions, UpdatePolicy.STABLE
        )

    def test_ea_keeps_everything(self) -> None:
        """EA keeps pre-releases too."""
        assert filter_candidates(["2.0.0", "2.1.0-EA"], UpdatePolicy.EA) == ["2.0.0", "2.1.0-EA"]

    def test_legacy_line_only_tagged(self) -> None:
        """When every 1.x version is tagged, the 1.x versions are the candidates."""
        versions = ["0.5.2", "1.0.0-EA", "1.1.0-EA"]
        assert filter_candidates(versions, UpdatePolicy.STABLE) == ["1.0.0-EA", "1.1.0-EA"]
        assert filter_candidates(versions, UpdatePolicy.EA) == ["1.0.0-EA", "1.1.0-EA"]

    def test_legacy_line_with_stable_release(self) -> None:
        """A single untagged 1.x version disables the legacy rule."""
        versions = ["1.0.0", "1.1.0-EA"]
        assert filter_candidates(versions, UpdatePolicy.STABLE) == ["1.0.0"]

    def test_no_legacy_versions(self) -> None:
        """Without any 1.x version the policy applies normally."""
        assert filter_candidates(["2.0.0-EA"], UpdatePolicy.STABLE) == []


class TestSelect:
    """Tests for select."""

    def test_legacy_ea_line_under_stable(self) -> None:
        """The newest legacy EA version is chosen even under STABLE."""
        assert select({"1.0.0-EA", "1.2.0-EA"}, UpdatePolicy.STABLE) == "1.2.0-EA"

    def test_stable_ignores_newer_ea(self) -> None:
        """STABLE returns the newest untagged version."""
        assert select({"2.0.0", "2.1.0-EA"}, UpdatePolicy.STABLE) == "2.0.0"

    def test_ea_returns_newer_ea(self) -> None:
        """EA returns the tagged version when it is newest."""
        assert select({"2.0.0", "2.1.0-EA"}, UpdatePolicy.EA) == "2.1.0-EA"

    def test_empty_set_raises(self) -> None:
        """An empty listing raises NoVersionFoundError."""
        with pytest.raises(NoVersionFoundError):
            select(set(), UpdatePolicy.EA)

    def test_everything_filtered_raises(self) -> None:
        """A listing with only tagged versions raises under STABLE."""
        with pytest.raises(NoVersionFoundError) as exc_info:
            select(["2.0.0-EA", "2.1.0-EA"], UpdatePolicy.STABLE)
        assert exc_info.value.policy == "STABLE"
        assert exc_info.value.listed == 2

    def test_tie_break_is_order_independent(self) -> None:
        """Equal-rank versions resolve the same way in any order."""
        assert select(["2.3.0", "2.3.1-RC"], UpdatePolicy.EA) == "2.3.1-RC"
        assert select(["2.3.1-RC", "2.3.0"], UpdatePolicy.EA) == "2.3.1-RC"

    def test_two_component_versions(self) -> None:
        """Short versions are compared as if padded with .0."""
        assert select(["0.9", "0.10", "0.9.5"], UpdatePolicy.STABLE) == "0.10"

    def test_overflowing_token_in_listing(self, render_listing) -> None:
        """Scraped tokens with out-of-range numbers are ranked, not fatal."""
        listed = parse_listing(render_listing(["2.0.0", "2.0.1e999-EA"]))
        assert select(listed, UpdatePolicy.EA) == "2.0.1e999-EA"
        assert select(listed, UpdatePolicy.STABLE) == "2.0.0"
