"""
Logging Configuration: structured logging with save/upload context.

A save touches several images concurrently, so log lines are only useful
when they say which save and which image they belong to. Context is bound
with ``log_context`` and stamped onto every record by ``ContextFilter``:

    with log_context(save_id="ab12cd34"):
        logger.info("Uploading 2 staged image(s)")   # carries save_id

Asyncio tasks copy the context they are created in, so uploads started
inside a save inherit its ``save_id`` and add their own ``temp_id``.

## Environment Variables

- LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
- LOG_FORMAT: json, text (default: text)

## Usage

    from quillpress.logging_config import setup_logging

    setup_logging()  # Call once at startup, from the host application
"""

from __future__ import annotations

import json
import logging
import os
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Iterator

# Record attributes copied into output when present
CONTEXT_FIELDS = ("save_id", "temp_id", "article_id")

_context: ContextVar[Dict[str, str]] = ContextVar("quillpress_log_context", default={})


@contextmanager
def log_context(**fields: str) -> Iterator[None]:
    """Bind context fields to every record logged inside the block."""
    token = _context.set({**_context.get(), **fields})
    try:
        yield
    finally:
        _context.reset(token)


class ContextFilter(logging.Filter):
    """Copy bound context onto records; explicit ``extra`` wins."""

    def filter(self, record: logging.LogRecord) -> bool:
        for name, value in _context.get().items():
            if not hasattr(record, name):
                setattr(record, name, value)
        return True


def _record_context(record: logging.LogRecord) -> Dict[str, Any]:
    return {name: getattr(record, name) for name in CONTEXT_FIELDS if hasattr(record, name)}


class JSONFormatter(logging.Formatter):
    """One JSON object per line: ts, level, logger, message, context fields."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_record_context(record),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


class HumanFormatter(logging.Formatter):
    """
    Single-line output for development.

        12:34:56 INFO    pipeline      Saved article art_1  save=ab12cd34
    """

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        level = f"{record.levelname:7}"
        if sys.stderr.isatty():
            level = f"{self.COLORS.get(record.levelname, '')}{level}{self.RESET}"

        component = record.name.rsplit(".", 1)[-1][:13]
        line = f"{datetime.now():%H:%M:%S} {level} {component:13} {record.getMessage()}"

        context = _record_context(record)
        if context:
            tags = " ".join(f"{k.split('_')[0]}={v}" for k, v in context.items())
            line = f"{line}  {tags}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def setup_logging(level: str | None = None, format_type: str | None = None) -> None:
    """
    Configure the root logger.

    Args:
        level: DEBUG, INFO, WARNING or ERROR. Defaults to LOG_LEVEL or INFO.
        format_type: json or text. Defaults to LOG_FORMAT or text.
    """
    log_level = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    log_format = (format_type or os.environ.get("LOG_FORMAT", "text")).lower()
    numeric_level = getattr(logging, log_level, logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if log_format == "json" else HumanFormatter())
    handler.addFilter(ContextFilter())
    handler.setLevel(numeric_level)

    root = logging.getLogger()
    root.setLevel(numeric_level)
    root.handlers.clear()
    root.addHandler(handler)

    # Suppress per-request noise
    for noisy in ("httpx", "httpcore", "PIL"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(f"Logging configured: level={log_level}, format={log_format}")
