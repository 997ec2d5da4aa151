"""Logging setup for the matrix generator.

All modules log through ``logging.getLogger(__name__)``; ``configure_logger``
attaches a single stderr handler to the package logger. Under GitHub Actions,
warnings and errors are rendered as workflow commands so they surface as
annotations on the run.
"""

import logging
import os
import sys

from rails_ci_matrix.constants import EnvVars, LogLevel

PACKAGE_LOGGER = "rails_ci_matrix"

_ANNOTATIONS = {
    logging.WARNING: "warning",
    logging.ERROR: "error",
    logging.CRITICAL: "error",
}


class GitHubAnnotationFormatter(logging.Formatter):
    """Render warnings and errors as ``::warning::`` / ``::error::`` commands."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        command = _ANNOTATIONS.get(record.levelno)
        if command is None:
            return message
        return f"::{command}::{message}"


def in_github_actions() -> bool:
    return os.environ.get(EnvVars.GITHUB_ACTIONS, "").lower() == "true"


def configure_logger(
    name: str = PACKAGE_LOGGER,
    level: str | int = LogLevel.INFO.value,
    annotate: bool | None = None,
) -> logging.Logger:
    """Configure a logger with one stderr handler.

    Parameters
    ----------
    name : str
        Logger name
    level : str | int
        Log level name or number
    annotate : bool | None
        Use GitHub workflow-command formatting; None detects it from the
        environment

    Returns
    -------
    logging.Logger
        The configured logger

    Raises
    ------
    ValueError
        If ``level`` is not a known level name
    """
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            msg = f"Unknown log level: {level}"
            raise ValueError(msg)
        level = resolved

    logger = logging.getLogger(name)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    use_annotations = in_github_actions() if annotate is None else annotate
    handler = logging.StreamHandler(sys.stderr)
    if use_annotations:
        handler.setFormatter(GitHubAnnotationFormatter("%(message)s"))
    else:
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))

    logger.addHandler(handler)
    logger.setLevel(level)
    return logger
