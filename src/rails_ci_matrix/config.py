"""Environment-driven settings and configuration document loading."""

import os
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from rails_ci_matrix.constants import DEFAULT_RUBY_COMPATIBILITY, REQUIREMENT_KEY, EnvVars, LogLevel
from rails_ci_matrix.errors import ConfigFormatError, ConfigNotFoundError
from rails_ci_matrix.io import FileOperationError, safe_read_yaml

_CANDIDATE_SEPARATORS = re.compile(r"[ ,\n\t]+")


def split_candidates(raw: str | None) -> tuple[str, ...]:
    """Split a whitespace/comma separated list of Ruby versions."""
    if not raw or not raw.strip():
        return ()
    return tuple(token for token in _CANDIDATE_SEPARATORS.split(raw.strip()) if token)


@dataclass(frozen=True)
class Settings:
    """Settings read from the environment once at startup."""

    ruby_candidates: tuple[str, ...] = ()
    github_output: Path | None = None
    log_level: str = LogLevel.INFO.value

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ
        github_output = env.get(EnvVars.GITHUB_OUTPUT, "").strip()
        return cls(
            ruby_candidates=split_candidates(env.get(EnvVars.RUBIES)),
            github_output=Path(github_output) if github_output else None,
            log_level=(env.get(EnvVars.LOG_LEVEL) or LogLevel.INFO.value).upper(),
        )


def load_config(path: Path) -> dict[str, Any]:
    """Load the matrix configuration document.

    Raises
    ------
    ConfigNotFoundError
        If the file does not exist
    ConfigFormatError
        If the file is not valid YAML or not a mapping
    """
    if not path.is_file():
        msg = f"Configuration file not found: {path}"
        raise ConfigNotFoundError(msg)

    try:
        data = safe_read_yaml(path)
    except FileOperationError as e:
        raise ConfigFormatError(str(e)) from e

    if not isinstance(data, dict):
        msg = f"Configuration must be a mapping at the top level: {path}"
        raise ConfigFormatError(msg)
    return data


def compatibility_table(config: Mapping[str, Any]) -> tuple[tuple[str, str], ...]:
    """Return the Rails-to-max-Ruby table, from the document or the built-in one.

    The document may carry a top-level ``compatibility`` list of
    ``{rails_version, max_ruby}`` mappings, checked in order.
    """
    raw = config.get("compatibility")
    if raw is None:
        return DEFAULT_RUBY_COMPATIBILITY
    if not isinstance(raw, Sequence) or isinstance(raw, str):
        msg = "'compatibility' must be a list of {rails_version, max_ruby} mappings"
        raise ConfigFormatError(msg)

    table = []
    for index, row in enumerate(raw):
        if not isinstance(row, Mapping) or REQUIREMENT_KEY not in row or "max_ruby" not in row:
            msg = f"compatibility entry #{index + 1} needs '{REQUIREMENT_KEY}' and 'max_ruby'"
            raise ConfigFormatError(msg)
        table.append((row[REQUIREMENT_KEY], str(row["max_ruby"])))
    return tuple(table)
