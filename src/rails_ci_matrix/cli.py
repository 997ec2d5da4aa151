"""Command-line entry point.

Usage: ``rails-ci-matrix CONFIG_PATH RAILS_ROOT``
"""

import functools
import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

import click

from rails_ci_matrix.config import Settings, load_config
from rails_ci_matrix.constants import ExitCode
from rails_ci_matrix.errors import MatrixError
from rails_ci_matrix.io import FileOperationError, append_github_output
from rails_ci_matrix.logs import configure_logger
from rails_ci_matrix.matrix import generate_matrix
from rails_ci_matrix.project import load_project

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def handle_exceptions(func: F) -> F:
    """Convert generator errors into a message on stderr and a nonzero exit.

    Parameters
    ----------
    func : Callable
        Command callback to wrap

    Returns
    -------
    Callable
        Wrapped callback
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (MatrixError, FileOperationError) as e:
            logger.debug("Matrix generation failed", exc_info=True)
            click.echo(f"Error: {e}", err=True)
            click.get_current_context().exit(ExitCode.GENERAL_ERROR)

    return wrapper  # type: ignore[return-value]


def _setup_logging(settings: Settings) -> None:
    try:
        configure_logger(level=settings.log_level)
    except ValueError:
        configure_logger()
        logger.warning("Unknown log level %r, using INFO", settings.log_level)


@click.command(name="rails-ci-matrix")
@click.argument("config_path", type=click.Path(path_type=Path))
@click.argument("rails_root", type=click.Path(path_type=Path))
@handle_exceptions
def main(config_path: Path, rails_root: Path) -> None:
    """Generate the Rails CI job matrix from CONFIG_PATH for the checkout at RAILS_ROOT.

    When GITHUB_OUTPUT is set, one ``key=value`` line per output is appended
    to it. The full output is always printed to stdout as JSON.
    """
    settings = Settings.from_env()
    _setup_logging(settings)

    config = load_config(config_path.expanduser().resolve())
    project = load_project(rails_root.expanduser().resolve())

    outputs = generate_matrix(config, project, settings).to_dict()

    if settings.github_output is not None:
        append_github_output(settings.github_output, outputs)
        logger.debug("Wrote %d outputs to %s", len(outputs), settings.github_output)

    click.echo(json.dumps(outputs, indent=2))
