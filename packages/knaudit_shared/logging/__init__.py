"""Public logging API for knaudit.

This package wraps Python's ``logging`` module with stdout emission and
structured context propagation.
"""

from .config import configure_logging, get_logger, log_fields
from .context import (
    bind_context,
    bind_run_context,
    clear_context,
    get_context,
    log_context,
)

__all__ = [
    "bind_context",
    "bind_run_context",
    "clear_context",
    "configure_logging",
    "get_context",
    "get_logger",
    "log_context",
    "log_fields",
]
