"""Ruby version catalog, token expansion and Rails requirement matching."""

from .catalog import VersionCatalog, build_catalog, max_ruby_for
from .requirements import Requirement, parse_version, requirement_satisfied
from .runtime import RuntimeVersion, is_numeric_version
from .tokens import as_list, expand_tokens

__all__ = [
    "Requirement",
    "RuntimeVersion",
    "VersionCatalog",
    "as_list",
    "build_catalog",
    "expand_tokens",
    "is_numeric_version",
    "max_ruby_for",
    "parse_version",
    "requirement_satisfied",
]
