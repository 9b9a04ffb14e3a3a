"""Structured error shape used when reporting failures.

Every failure that ends the process is converted to an ``ErrorDetail`` so the
top-level boundary can log one stable set of fields whatever raised it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping


class ErrorCategory(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    DEPENDENCY = "dependency"
    INTERNAL = "internal"


@dataclass(frozen=True)
class ErrorDetail:
    """Code, category and context of one failure; ``code`` is stable for alerting."""

    code: str
    message: str
    category: ErrorCategory
    retryable: bool = False
    metadata: Mapping[str, str] = field(default_factory=dict)

    def log_fields(self) -> dict[str, str]:
        """Flatten into the structured fields logged at the process boundary."""
        return {
            **self.metadata,
            "error_code": self.code,
            "error_category": self.category.value,
        }
