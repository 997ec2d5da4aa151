"""Unit tests for Ruby version catalog construction."""

import pytest
from packaging.version import Version

from rails_ci_matrix.errors import EmptyVersionCatalogError
from rails_ci_matrix.versions import RuntimeVersion, build_catalog, max_ruby_for


@pytest.mark.unit
class TestRuntimeVersion:
    """Tests for RuntimeVersion parsing and ordering."""

    @pytest.mark.parametrize("token", ["3.3", "3.3.1", " 2.7 ", 3.4])
    def test_parses_numeric_tokens(self, token):
        assert RuntimeVersion.parse(token) is not None

    @pytest.mark.parametrize("token", ["3", "head", "3.4-preview1", "", None, True, ["3.3"]])
    def test_rejects_non_numeric_tokens(self, token):
        assert RuntimeVersion.parse(token) is None

    def test_orders_numerically(self):
        versions = [RuntimeVersion(v) for v in ("3.10", "3.2", "3.9.1")]
        assert [v.text for v in sorted(versions)] == ["3.2", "3.9.1", "3.10"]

    def test_equality_uses_canonical_string(self):
        assert RuntimeVersion("3.0") == RuntimeVersion("3.0")
        assert RuntimeVersion("3.0") != RuntimeVersion("3.0.0")


@pytest.mark.unit
class TestBuildCatalog:
    """Tests for build_catalog."""

    def test_end_to_end_classification(self, catalog):
        """Minimum 3.0, candidates 3.4 and 3.1, maximum 3.3."""
        assert catalog.all == ("3.4", "3.1", "3.0")
        assert catalog.soft_fail == ("3.4",)
        assert catalog.supported == ("3.1", "3.0")
        assert catalog.default == "3.1"
        assert catalog.is_soft_fail("3.4") is True
        assert catalog.is_soft_fail("3.1") is False

    def test_drops_versions_below_minimum(self):
        catalog = build_catalog(
            minimum=RuntimeVersion("3.1"),
            default_candidates=("3.4", "3.3", "3.0", "2.7"),
        )

        assert all(RuntimeVersion(v) >= RuntimeVersion("3.1") for v in catalog.all)
        assert "3.0" not in catalog.all
        assert "3.1" in catalog.all

    def test_sorted_descending_without_duplicates(self):
        catalog = build_catalog(
            minimum=RuntimeVersion("2.7"),
            default_candidates=("3.2", "2.7", "3.10"),
            env_candidates=("3.2", "3.3"),
            config_tokens=["3.3", "all", "default", "head"],
        )

        assert catalog.all == ("3.10", "3.3", "3.2", "2.7")

    def test_supported_and_soft_fail_partition_all(self):
        catalog = build_catalog(
            minimum=RuntimeVersion("2.7"),
            maximum=RuntimeVersion("3.1"),
            default_candidates=("3.4", "3.3", "3.2", "3.1", "3.0", "2.7"),
        )

        assert set(catalog.supported).isdisjoint(catalog.soft_fail)
        assert set(catalog.supported) | set(catalog.soft_fail) == set(catalog.all)
        assert catalog.default == max(catalog.supported, key=RuntimeVersion)

    def test_patch_release_of_maximum_is_not_soft_fail(self):
        catalog = build_catalog(
            minimum=RuntimeVersion("3.0"),
            maximum=RuntimeVersion("3.3"),
            default_candidates=("3.3.5", "3.4"),
        )

        assert catalog.soft_fail_map["3.3.5"] is False
        assert catalog.soft_fail_map["3.4"] is True
        assert catalog.default == "3.3.5"

    def test_no_maximum_means_nothing_soft_fails(self):
        catalog = build_catalog(
            minimum=RuntimeVersion("3.0"),
            default_candidates=("3.5", "3.4"),
        )

        assert catalog.soft_fail == ()
        assert catalog.default == "3.5"

    def test_default_falls_back_to_highest_when_all_soft_fail(self):
        catalog = build_catalog(
            minimum=RuntimeVersion("3.4"),
            maximum=RuntimeVersion("3.3"),
            default_candidates=("3.5", "3.4"),
        )

        assert catalog.supported == ()
        assert catalog.default == "3.5"

    def test_minimum_is_always_a_candidate(self):
        catalog = build_catalog(minimum=RuntimeVersion("3.2"), default_candidates=())

        assert catalog.all == ("3.2",)

    def test_empty_catalog_raises(self, monkeypatch):
        monkeypatch.setattr(
            "rails_ci_matrix.versions.catalog.RuntimeVersion.parse",
            classmethod(lambda cls, token: None),
        )

        with pytest.raises(EmptyVersionCatalogError):
            build_catalog(minimum=RuntimeVersion("3.0"))


@pytest.mark.unit
class TestMaxRubyFor:
    """Tests for the Rails-to-Ruby compatibility lookup."""

    @pytest.mark.parametrize(
        ("rails", "expected"),
        [
            ("6.0.6", "2.7"),
            ("7.1.3", "3.3"),
            ("8.0.0.alpha", "3.3"),
            ("8.0.1", None),
        ],
    )
    def test_default_table(self, rails, expected):
        maximum = max_ruby_for(Version(rails))
        assert (maximum.text if maximum else None) == expected

    def test_unknown_rails_version_is_unconstrained(self):
        assert max_ruby_for(None) is None

    def test_first_matching_row_wins(self):
        table = ((">= 7.0", "3.2"), (">= 6.0", "3.0"))
        assert max_ruby_for(Version("7.1"), table).text == "3.2"
        assert max_ruby_for(Version("6.1"), table).text == "3.0"
