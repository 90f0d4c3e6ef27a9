"""Structured logging setup for Prompt Printer."""

import os
from pathlib import Path
from typing import Any

import structlog

LOG_FILE = Path.home() / ".cache" / "promptprinter" / "logs" / "promptprinter.log"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def _log_level() -> str:
    level = os.environ.get("PROMPTPRINTER_LOG_LEVEL", "INFO").upper()
    return level if level in LOG_LEVELS else "INFO"


def configure_logging(log_file: Path = LOG_FILE) -> None:
    """
    Send structlog events as JSON lines to ``log_file``.

    PROMPTPRINTER_LOG_LEVEL picks the threshold (default INFO). DEBUG adds
    request payloads and raw model responses; WARNING covers failed probes
    and discarded stale analyses.

        tail -f ~/.cache/promptprinter/logs/promptprinter.log | jq .
    """
    log_file.parent.mkdir(parents=True, exist_ok=True)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_log_level()),
        context_class=dict,
        logger_factory=structlog.WriteLoggerFactory(file=open(log_file, "a")),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> Any:
    """Return a structlog logger bound to ``name``."""
    return structlog.get_logger(name)
