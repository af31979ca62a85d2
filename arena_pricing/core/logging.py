"""Centralized logging configuration with JSON-formatted extras."""

import json
import logging
import sys
from typing import TextIO

from arena_pricing.config import settings


class JSONExtrasFormatter(logging.Formatter):
    """Formatter that outputs a readable log line with extras as JSON.

    Output format:
        2025-11-02 10:30:45 | INFO | arena_pricing.module | Message {"key": "value"}
    """

    RESERVED_ATTRS = frozenset(
        {
            "args",
            "asctime",
            "created",
            "exc_info",
            "exc_text",
            "filename",
            "funcName",
            "levelname",
            "levelno",
            "lineno",
            "message",
            "module",
            "msecs",
            "msg",
            "name",
            "pathname",
            "process",
            "processName",
            "relativeCreated",
            "stack_info",
            "taskName",
            "thread",
            "threadName",
        }
    )

    def format(self, record: logging.LogRecord) -> str:
        record.message = record.getMessage()
        timestamp = self.formatTime(record, self.datefmt)
        base = f"{timestamp} | {record.levelname:<8} | {record.name} | {record.message}"

        extras = {
            k: v
            for k, v in record.__dict__.items()
            if k not in self.RESERVED_ATTRS and not k.startswith("_")
        }

        if extras:
            try:
                extras_str = json.dumps(extras, default=str, ensure_ascii=False)
                base = f"{base} {extras_str}"
            except (TypeError, ValueError):
                pass

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            base = f"{base}\n{record.exc_text}"

        return base


def setup_logging(level: str | None = None, stream: TextIO | None = None) -> None:
    """Configure the 'arena_pricing' logger with console output and JSON extras.

    Logs default to stderr: the CLI writes its table, JSON or YAML to stdout.
    """
    logger = logging.getLogger("arena_pricing")
    resolved_level = (level or settings.log_level).upper()
    resolved_stream = stream or sys.stderr
    logger.setLevel(resolved_level)

    # Repeated calls retarget the existing handler
    if logger.handlers:
        for existing in logger.handlers:
            existing.setLevel(resolved_level)
            if isinstance(existing, logging.StreamHandler):
                existing.setStream(resolved_stream)
        return

    handler = logging.StreamHandler(resolved_stream)
    handler.setLevel(resolved_level)
    handler.setFormatter(
        JSONExtrasFormatter(datefmt="%Y-%m-%d %H:%M:%S")
    )

    logger.addHandler(handler)

    # Keep records out of the root logger
    logger.propagate = False
