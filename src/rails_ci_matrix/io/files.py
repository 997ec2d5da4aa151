"""Safe file operations for the matrix generator."""

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml


class FileOperationError(Exception):
    """Raised when file operations fail."""


def safe_read_yaml(path: Path) -> Any:
    """Safely read YAML file with error handling.

    Anchors and aliases are resolved; configuration documents use them to
    share Ruby lists between sections.

    Parameters
    ----------
    path : Path
        Path to YAML file

    Returns
    -------
    Any
        Parsed YAML data, or an empty dict for an empty document

    Raises
    ------
    FileOperationError
        If file cannot be read or parsed
    """
    try:
        if not path.exists():
            msg = f"YAML file does not exist: {path}"
            raise FileOperationError(msg)

        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
            return data if data is not None else {}

    except yaml.YAMLError as e:
        msg = f"Invalid YAML in {path}: {e}"
        raise FileOperationError(msg) from e
    except OSError as e:
        msg = f"Cannot read YAML file {path}: {e}"
        raise FileOperationError(msg) from e


def read_text(path: Path) -> str | None:
    """Read a text file, returning None when it does not exist."""
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except OSError as e:
        msg = f"Cannot read {path}: {e}"
        raise FileOperationError(msg) from e


def append_github_output(path: Path, outputs: Mapping[str, Any]) -> None:
    """Append ``key=value`` lines to a GitHub Actions output file.

    String values are written as-is; everything else is compact JSON.

    Parameters
    ----------
    path : Path
        Path from ``GITHUB_OUTPUT``
    outputs : Mapping[str, Any]
        Output values keyed by output name

    Raises
    ------
    FileOperationError
        If the file cannot be written
    """
    try:
        with path.open("a", encoding="utf-8") as f:
            for key, value in outputs.items():
                serialized = value if isinstance(value, str) else json.dumps(value, separators=(",", ":"))
                f.write(f"{key}={serialized}\n")
    except OSError as e:
        msg = f"Cannot write GitHub output {path}: {e}"
        raise FileOperationError(msg) from e
