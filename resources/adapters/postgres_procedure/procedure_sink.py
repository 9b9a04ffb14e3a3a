"""Deliver audit records by calling a stored function with the JSON text.

The function is expected to insert one row into the append-only audit log and
return the number of rows it inserted. Anything other than exactly one means
the call ran without recording the run, which is treated as a failure.
"""

from __future__ import annotations

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from packages.knaudit_core.errors import DeliveryError
from packages.knaudit_core.record import AuditRecord
from packages.knaudit_core.sink import AuditSink
from packages.knaudit_shared.logging import get_logger, log_fields
from resources.adapters.postgres_procedure.config import ProcedureSinkSettings
from resources.substrates.postgres import (
    EngineFactory,
    describe_database_error,
    engine_factory,
    transactional_connection,
)

_LOGGER = get_logger(__name__)


class _RowCountMismatch(Exception):
    """Raised inside the transaction so it is rolled back."""

    def __init__(self, affected: object) -> None:
        super().__init__(f"expected 1 affected row, got {affected!r}")
        self.affected = affected


class ProcedureSink(AuditSink):
    """Call ``SELECT <procedure>(:payload)`` and require a result of 1."""

    name = "postgres"

    def __init__(
        self,
        *,
        settings: ProcedureSinkSettings,
        engines: EngineFactory | None = None,
    ) -> None:
        self._settings = settings
        self._engines = engines or engine_factory(
            settings.database_url,
            connect_timeout_seconds=settings.connect_timeout_seconds,
        )
        self._statement = text(f"SELECT {settings.procedure}(:payload)")

    def deliver(self, record: AuditRecord) -> None:
        payload = record.to_json()
        try:
            with transactional_connection(self._engines) as connection:
                affected = connection.execute(
                    self._statement, {"payload": payload}
                ).scalar()
                if affected != 1:
                    raise _RowCountMismatch(affected)
        except _RowCountMismatch as exc:
            raise DeliveryError(
                f"{self._settings.procedure} returned {exc.affected!r} affected rows, expected 1",
                backend=self.name,
            ) from exc
        except SQLAlchemyError as exc:
            raise DeliveryError(
                f"calling {self._settings.procedure} failed: {describe_database_error(exc)}",
                backend=self.name,
            ) from exc

        _LOGGER.debug(
            "audit record stored",
            extra=log_fields(procedure=self._settings.procedure),
        )
