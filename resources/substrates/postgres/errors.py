"""Describe low-level database failures for error messages."""

from __future__ import annotations


def describe_database_error(exc: Exception) -> str:
    """Map a DB exception to a short, classified message."""
    exc_type_name = type(exc).__name__
    message = str(exc).strip().splitlines()[0] if str(exc).strip() else ""

    if "OperationalError" in exc_type_name or "timeout" in message.lower():
        summary = "postgres unavailable"
    elif "InterfaceError" in exc_type_name or "ProgrammingError" in exc_type_name:
        summary = "postgres request failed"
    else:
        summary = "unexpected postgres failure"

    if not message:
        return f"{summary} ({exc_type_name})"
    return f"{summary} ({exc_type_name}): {message}"
