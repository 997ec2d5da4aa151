"""File helpers for the matrix generator."""

from .files import FileOperationError, append_github_output, read_text, safe_read_yaml

__all__ = [
    "FileOperationError",
    "append_github_output",
    "read_text",
    "safe_read_yaml",
]
