"""Exception normalization for the process error boundary."""

from __future__ import annotations

from pydantic import ValidationError

from . import codes
from .types import ErrorCategory, ErrorDetail


def exception_to_error(exc: Exception) -> ErrorDetail:
    """Normalize any exception into an ``ErrorDetail``.

    Exceptions exposing ``to_error_detail`` describe themselves; settings
    validation failures become configuration errors; anything else is internal.
    """
    to_detail = getattr(exc, "to_error_detail", None)
    if callable(to_detail):
        detail = to_detail()
        if isinstance(detail, ErrorDetail):
            return detail

    metadata = {"exception_type": type(exc).__name__}

    if isinstance(exc, ValidationError):
        return ErrorDetail(
            code=codes.INVALID_CONFIGURATION,
            message=str(exc),
            category=ErrorCategory.VALIDATION,
            metadata=metadata,
        )

    return ErrorDetail(
        code=codes.UNEXPECTED_EXCEPTION,
        message=str(exc) or "unexpected exception",
        category=ErrorCategory.INTERNAL,
        metadata=metadata,
    )
