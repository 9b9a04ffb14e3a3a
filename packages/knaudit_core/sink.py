"""Delivery sink protocol shared by every backend."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from packages.knaudit_core.record import AuditRecord


@runtime_checkable
class AuditSink(Protocol):
    """Store one audit record in a downstream system.

    Implementations acquire and release their own client or connection inside
    each ``deliver`` call and never retry internally.
    """

    name: str

    def deliver(self, record: AuditRecord) -> None:
        """Deliver ``record`` once, raising ``DeliveryError`` on failure."""
