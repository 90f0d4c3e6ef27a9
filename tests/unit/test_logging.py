"""Unit tests for structured logging setup."""

import json

import pytest
import structlog

from promptprinter.utils.logging import _log_level, configure_logging


@pytest.mark.parametrize("value,expected", [
    ("debug", "DEBUG"),
    ("WARNING", "WARNING"),
    ("verbose", "INFO"),
])
def test_log_level_from_environment(monkeypatch, value, expected):
    monkeypatch.setenv("PROMPTPRINTER_LOG_LEVEL", value)

    assert _log_level() == expected


def test_events_written_as_json_lines(tmp_path, monkeypatch):
    monkeypatch.delenv("PROMPTPRINTER_LOG_LEVEL", raising=False)
    log_file = tmp_path / "logs" / "promptprinter.log"

    try:
        configure_logging(log_file)
        logger = structlog.get_logger("test")
        logger.debug("analysis_response_content", content="hidden at INFO")
        logger.info("prompt_saved", prompt_id=7, version="v4.0")
    finally:
        structlog.reset_defaults()

    lines = log_file.read_text().splitlines()
    assert len(lines) == 1
    entry = json.loads(lines[0])
    assert entry["event"] == "prompt_saved"
    assert entry["level"] == "info"
    assert entry["version"] == "v4.0"
    assert "timestamp" in entry
