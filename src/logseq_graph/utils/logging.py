"""Structured logging setup for logseq-graph."""

import logging
import os
from pathlib import Path
from typing import Any, Optional

import structlog

LOG_LEVEL_ENV = "LOGSEQ_GRAPH_LOG_LEVEL"
VALID_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]
DEFAULT_LEVEL = "INFO"


def default_log_file() -> Path:
    return Path.home() / ".cache" / "logseq-graph" / "logs" / "logseq-graph.log"


def log_level_from_env() -> str:
    """Level named by LOGSEQ_GRAPH_LOG_LEVEL, INFO when unset or unknown."""
    level = os.environ.get(LOG_LEVEL_ENV, DEFAULT_LEVEL).upper()
    if level not in VALID_LEVELS:
        return DEFAULT_LEVEL
    return level


def configure_logging(log_file: Optional[Path] = None) -> None:
    """
    Send structlog events as JSON lines to the log file.

    Each line carries the event name, its keyword context, the level and an
    ISO timestamp. Exceptions logged with ``exc_info`` are rendered into the
    entry.

    Levels used by the library:
    - DEBUG: index document writes, watcher flushes, atomic writes
    - INFO: graph opened, pages saved, index sync summaries
    - WARNING: pages skipped while syncing, missing journal templates
    - ERROR: failed writes, graphs that could not be opened

    Example:
        export LOGSEQ_GRAPH_LOG_LEVEL=DEBUG
        logseq-graph index --graph ~/notes
        tail -f ~/.cache/logseq-graph/logs/logseq-graph.log | jq .

    Args:
        log_file: Log file, defaults to ~/.cache/logseq-graph/logs/logseq-graph.log
    """
    log_file = log_file or default_log_file()
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
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, log_level_from_env())),
        context_class=dict,
        logger_factory=structlog.WriteLoggerFactory(file=log_file.open("a", encoding="utf-8")),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> Any:
    """
    Structured logger for a module.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("page_saved", path="pages/Books.md")
    """
    return structlog.get_logger(name)
