"""Unit tests for file helpers and logging setup."""

import json
import logging

import pytest

from rails_ci_matrix.io import FileOperationError, append_github_output, read_text, safe_read_yaml
from rails_ci_matrix.logs import GitHubAnnotationFormatter, configure_logger


@pytest.mark.unit
class TestFiles:
    """Tests for the io helpers."""

    def test_append_github_output(self, tmp_path):
        path = tmp_path / "output"
        path.write_text("existing=1\n")

        append_github_output(path, {"ruby-default": "3.3", "ruby-supported": ["3.3", "3.2"]})

        assert path.read_text().splitlines() == [
            "existing=1",
            "ruby-default=3.3",
            'ruby-supported=["3.3","3.2"]',
        ]

    def test_append_github_output_round_trips_json(self, tmp_path):
        path = tmp_path / "output"
        matrix = {"include": [{"ruby": "3.3", "allow_failure": False}]}

        append_github_output(path, {"lint-matrix": matrix})

        key, _, value = path.read_text().strip().partition("=")
        assert key == "lint-matrix"
        assert json.loads(value) == matrix

    def test_read_text_missing_returns_none(self, tmp_path):
        assert read_text(tmp_path / "missing") is None

    def test_safe_read_yaml_empty_document(self, tmp_path):
        path = tmp_path / "empty.yml"
        path.write_text("")

        assert safe_read_yaml(path) == {}

    def test_safe_read_yaml_missing(self, tmp_path):
        with pytest.raises(FileOperationError):
            safe_read_yaml(tmp_path / "missing.yml")


@pytest.mark.unit
class TestConfigureLogger:
    """Tests for configure_logger."""

    def test_replaces_handlers_and_sets_level(self):
        logger = configure_logger("rails_ci_matrix", level="debug", annotate=False)
        configure_logger("rails_ci_matrix", level="WARNING", annotate=False)

        assert len(logger.handlers) == 1
        assert logger.level == logging.WARNING

    def test_unknown_level(self):
        with pytest.raises(ValueError, match="Unknown log level"):
            configure_logger("rails_ci_matrix", level="TRACE")

    def test_annotation_formatter(self):
        formatter = GitHubAnnotationFormatter("%(message)s")
        warning = logging.LogRecord("x", logging.WARNING, __file__, 1, "careful", None, None)
        info = logging.LogRecord("x", logging.INFO, __file__, 1, "hello", None, None)

        assert formatter.format(warning) == "::warning::careful"
        assert formatter.format(info) == "hello"

    def test_annotations_follow_environment(self, monkeypatch):
        monkeypatch.setenv("GITHUB_ACTIONS", "true")

        logger = configure_logger("rails_ci_matrix")

        assert isinstance(logger.handlers[0].formatter, GitHubAnnotationFormatter)
