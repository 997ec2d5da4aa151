"""Unit tests for Rails checkout metadata discovery."""

import logging

import pytest
from packaging.version import Version

from rails_ci_matrix.errors import ManifestNotFoundError
from rails_ci_matrix.project import load_project, min_ruby_from_gemspec


@pytest.mark.unit
class TestLoadProject:
    """Tests for load_project."""

    def test_reads_version_and_minimum_ruby(self, rails_root):
        project = load_project(rails_root)

        assert project.rails_version == Version("7.1.0")
        assert project.min_ruby.text == "3.1"

    def test_missing_gemspec_uses_fallback_floor(self, rails_root):
        (rails_root / "rails.gemspec").unlink()

        assert load_project(rails_root).min_ruby.text == "2.0"

    def test_missing_version_file_is_fatal(self, rails_root):
        (rails_root / "RAILS_VERSION").unlink()

        with pytest.raises(ManifestNotFoundError, match="Rails version file not found"):
            load_project(rails_root)

    def test_missing_root_is_fatal(self, tmp_path):
        with pytest.raises(ManifestNotFoundError, match="Rails source directory not found"):
            load_project(tmp_path / "missing")

    def test_prerelease_version(self, rails_root):
        (rails_root / "RAILS_VERSION").write_text("8.1.0.alpha\n")

        assert load_project(rails_root).rails_version == Version("8.1.0a0")

    def test_unparseable_version_is_absent(self, rails_root, caplog):
        (rails_root / "RAILS_VERSION").write_text("main\n")

        with caplog.at_level(logging.WARNING, logger="rails_ci_matrix"):
            assert load_project(rails_root).rails_version is None

        assert "Could not parse Rails version" in caplog.text


@pytest.mark.unit
class TestMinRubyFromGemspec:
    """Tests for min_ruby_from_gemspec."""

    @pytest.mark.parametrize(
        ("contents", "expected"),
        [
            ('s.required_ruby_version = ">= 3.2.0"', "3.2"),
            ("s.required_ruby_version = '~> 2.7'", "2.7"),
            ("s.name = 'rails'", "2.0"),
            ("", "2.0"),
            (None, "2.0"),
        ],
    )
    def test_extraction(self, contents, expected):
        assert min_ruby_from_gemspec(contents).text == expected
