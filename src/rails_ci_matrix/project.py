"""Metadata discovered from the Rails checkout."""

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from packaging.version import Version

from rails_ci_matrix.constants import FALLBACK_MIN_RUBY, ProjectFiles
from rails_ci_matrix.errors import ManifestNotFoundError
from rails_ci_matrix.io import read_text
from rails_ci_matrix.versions import RuntimeVersion, parse_version

logger = logging.getLogger(__name__)

REQUIRED_RUBY_PATTERN = re.compile(r"required_ruby_version[^0-9]+([0-9]+\.[0-9]+)")


@dataclass(frozen=True)
class ProjectMetadata:
    """Rails version and minimum Ruby of the project under test."""

    rails_version: Version | None
    min_ruby: RuntimeVersion


def min_ruby_from_gemspec(contents: str | None) -> RuntimeVersion:
    """Extract the minimum Ruby from gemspec contents, else the fallback floor."""
    if contents:
        match = REQUIRED_RUBY_PATTERN.search(contents)
        if match:
            return RuntimeVersion(match.group(1))
    return RuntimeVersion(FALLBACK_MIN_RUBY)


def load_project(root: Path) -> ProjectMetadata:
    """Read Rails metadata from a checkout.

    Parameters
    ----------
    root : Path
        Rails repository root

    Returns
    -------
    ProjectMetadata
        Discovered metadata

    Raises
    ------
    ManifestNotFoundError
        If the root directory or its RAILS_VERSION file is missing
    """
    if not root.is_dir():
        msg = f"Rails source directory not found: {root}"
        raise ManifestNotFoundError(msg)

    version_path = root / ProjectFiles.VERSION
    contents = read_text(version_path)
    if contents is None:
        msg = f"Rails version file not found: {version_path}"
        raise ManifestNotFoundError(msg)

    rails_version = parse_version(contents.strip()) if contents.strip() else None
    if rails_version is None:
        logger.warning("Could not parse Rails version from %s: %r", version_path, contents.strip())

    gemspec_path = root / ProjectFiles.GEMSPEC
    min_ruby = min_ruby_from_gemspec(read_text(gemspec_path))
    logger.debug("Rails %s, minimum Ruby %s", rails_version, min_ruby)

    return ProjectMetadata(rails_version=rails_version, min_ruby=min_ruby)
