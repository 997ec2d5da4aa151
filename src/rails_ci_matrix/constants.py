"""Constants for the Rails CI matrix generator."""

from enum import Enum


class EnvVars:
    """Environment variables read by the generator."""

    RUBIES = "RAILS_CI_RUBIES"
    LOG_LEVEL = "RAILS_CI_LOG_LEVEL"
    GITHUB_OUTPUT = "GITHUB_OUTPUT"
    GITHUB_ACTIONS = "GITHUB_ACTIONS"


class ExitCode:
    """Exit codes for CLI operations."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    USAGE_ERROR = 2


class LogLevel(str, Enum):
    """Supported log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class ProjectFiles:
    """Files read from the Rails checkout."""

    VERSION = "RAILS_VERSION"
    GEMSPEC = "rails.gemspec"


class OutputKeys:
    """Top-level output keys consumed by the workflow."""

    LINT = "lint-matrix"
    FRAMEWORKS = "frameworks-matrix"
    RAILTIES = "railties-matrix"
    ISOLATED = "isolated-matrix"
    RUBY_DEFAULT = "ruby-default"
    RUBY_SUPPORTED = "ruby-supported"


class RubyTokens:
    """Symbolic Ruby version tokens accepted in the configuration."""

    DEFAULT = ("default", "latest", "latest-stable")
    SUPPORTED = ("supported", "stable")
    ALL = "all"
    SOFT_FAIL = "soft-fail"


DEFAULT_RUBY_CANDIDATES = ("3.4", "3.3", "3.2", "3.1", "3.0", "2.7", "2.6", "2.5", "2.4")

# Used when rails.gemspec is absent or declares no required_ruby_version
FALLBACK_MIN_RUBY = "2.0"

# Ordered (requirement, max_ruby) pairs; the first matching requirement wins
DEFAULT_RUBY_COMPATIBILITY = (
    ("< 6.1", "2.7"),
    ("< 8", "3.3"),
)

REQUIREMENT_KEY = "rails_version"
SECTION_RUBIES_KEY = "rubies"
