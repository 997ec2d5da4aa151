"""Shared fixtures for rails_ci_matrix tests."""

import logging
from pathlib import Path

import pytest
import yaml

from rails_ci_matrix.logs import PACKAGE_LOGGER
from rails_ci_matrix.versions import RuntimeVersion, build_catalog


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers the CLI attaches so later tests log through caplog only."""
    yield
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def catalog():
    """Catalog with one soft-fail Ruby.

    Returns
    -------
    VersionCatalog
        all=3.4,3.1,3.0; supported=3.1,3.0; soft_fail=3.4; default=3.1
    """
    return build_catalog(
        minimum=RuntimeVersion("3.0"),
        maximum=RuntimeVersion("3.3"),
        default_candidates=(),
        env_candidates=("3.4", "3.1"),
    )


@pytest.fixture
def matrix_config() -> dict:
    """Configuration document covering all four sections."""
    return {
        "lint": {
            "rubies": ["default"],
            "tasks": [
                {"task": "rubocop", "command": "bundle exec rubocop"},
                {"task": "guides", "command": "bundle exec rake guides:lint", "rubies": ["all"]},
            ],
        },
        "frameworks": {
            "rubies": ["supported"],
            "defaults": {"allow_failure": False, "rails_version": ">= 7.0"},
            "entries": [
                {
                    "framework": "activerecord",
                    "name": "Active Record (mysql2)",
                    "variant": "mysql2",
                    "task": "db:mysql:rebuild test:mysql2",
                    "mysql_image": "mariadb:11",
                },
                {"framework": "actionpack", "supported_rubies": ["default"]},
            ],
        },
        "railties": {
            "rubies": ["default"],
            "shards": [1, 2, 3],
            "variants": [{"variant": "default"}],
        },
        "isolated": {
            "rubies": ["default"],
            "suites": [{"framework": "activesupport", "variant_label": "isolated"}],
        },
    }


@pytest.fixture
def write_config(tmp_path: Path):
    """Write a configuration document to disk.

    Returns
    -------
    Callable[[dict], Path]
        Writes the given mapping as YAML and returns its path
    """

    def _write(data: dict, name: str = "ci.yml") -> Path:
        path = tmp_path / name
        path.write_text(yaml.safe_dump(data, sort_keys=False))
        return path

    return _write


@pytest.fixture
def rails_root(tmp_path: Path) -> Path:
    """Minimal Rails checkout: Rails 7.1.0 requiring Ruby >= 3.1.0."""
    root = tmp_path / "rails"
    root.mkdir()
    (root / "RAILS_VERSION").write_text("7.1.0\n")
    (root / "rails.gemspec").write_text(
        'Gem::Specification.new do |s|\n  s.required_ruby_version = ">= 3.1.0"\nend\n',
    )
    return root
