"""Stdout logging configuration for the knaudit process.

The job runs as a short-lived container step, so logs go to stdout as
newline-delimited JSON for the cluster log collector. A plain formatter is
available for local runs.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

from . import fields
from .context import bind_context, get_context

_FIELDS_ATTR = "fields"
_CONTEXT_ATTR = "context"


def _structured_fields(record: logging.LogRecord) -> dict[str, Any]:
    """Merge bound context with the per-call ``log_fields``; call fields win."""
    merged: dict[str, Any] = {}
    for attr in (_CONTEXT_ATTR, _FIELDS_ATTR):
        values = getattr(record, attr, None)
        if isinstance(values, dict):
            merged.update(values)
    return merged


class ContextFilter(logging.Filter):
    """Snapshot the bound logging context onto each record at emit time."""

    def filter(self, record: logging.LogRecord) -> bool:
        setattr(record, _CONTEXT_ATTR, get_context())
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line: core keys first, then structured fields."""

    def format(self, record: logging.LogRecord) -> str:
        document: dict[str, Any] = {
            fields.TIMESTAMP: datetime.fromtimestamp(record.created, UTC).isoformat(),
            fields.LEVEL: record.levelname,
            fields.LOGGER: record.name,
            fields.MESSAGE: record.getMessage(),
            **_structured_fields(record),
        }
        if record.exc_info:
            document["exception"] = self.formatException(record.exc_info)
        return json.dumps(document, default=str, separators=(",", ":"))


class PlainFormatter(logging.Formatter):
    """Single-line text for terminals, structured fields as sorted ``k=v``."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S%z",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        pairs = _structured_fields(record)
        if pairs:
            line += " " + " ".join(f"{key}={pairs[key]}" for key in sorted(pairs))
        return line


def _stdout_handler(level: str, json_output: bool) -> logging.Handler:
    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setLevel(level)
    handler.addFilter(ContextFilter())
    handler.setFormatter(JsonFormatter() if json_output else PlainFormatter())
    return handler


def configure_logging(
    *,
    level: str = "INFO",
    json_output: bool = True,
    service: str | None = None,
    environment: str | None = None,
) -> None:
    """Route the root logger to one stdout handler.

    Calling this again replaces the handler instead of stacking a second one.
    """
    normalized = level.upper()
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(normalized)
    root.addHandler(_stdout_handler(normalized, json_output))

    bind_context(**{fields.SERVICE: service, fields.ENVIRONMENT: environment})


def get_logger(name: str | None = None) -> logging.Logger:
    return logging.getLogger(name)


def log_fields(**values: object) -> dict[str, dict[str, object]]:
    """Build the ``extra`` argument carrying per-call structured fields.

    Usage:
        _LOGGER.info("delivered", extra=log_fields(backend="proxy"))
    """
    return {_FIELDS_ATTR: {key: value for key, value in values.items() if value is not None}}
