"""Decide who or what triggered a workflow run.

Runs started by the scheduler carry a ``scheduled`` run-id prefix and are
attributed without touching the database. Anything else (UI trigger, API call,
CLI run) is looked up in the workflow engine's event log, picking the most
recent trigger-class event for the DAG.
"""

from __future__ import annotations

from sqlalchemy import bindparam, text
from sqlalchemy.exc import SQLAlchemyError

from packages.knaudit_core.errors import NoOwnerFoundError, ProvenanceLookupError
from packages.knaudit_shared.config import ProvenanceSettings
from packages.knaudit_shared.logging import get_logger, log_fields
from resources.substrates.postgres import (
    EngineFactory,
    describe_database_error,
    engine_factory,
    scoped_connection,
)

_LOGGER = get_logger(__name__)


def owner_query(log_table: str):
    """Build the latest-trigger-owner query for an already validated table name."""
    return text(
        f"SELECT owner FROM {log_table} "
        "WHERE dag_id = :dag_id AND event IN :events "
        "ORDER BY dttm DESC LIMIT 1"
    ).bindparams(bindparam("events", expanding=True))


class ProvenanceResolver:
    """Resolve the ``triggered_by`` field of an audit record."""

    def __init__(
        self,
        settings: ProvenanceSettings,
        *,
        engines: EngineFactory | None = None,
    ) -> None:
        self._settings = settings
        self._engines = engines

    def resolve(self, dag_id: str, run_id: str) -> str:
        """Return the actor that triggered ``run_id`` of ``dag_id``.

        Raises:
            NoOwnerFoundError: no trigger event exists for the DAG.
            ProvenanceLookupError: the metadata database could not be queried.
        """
        if run_id.startswith(self._settings.scheduled_prefix):
            return self._settings.scheduler_actor

        owner = self._lookup_owner(dag_id)
        _LOGGER.debug("resolved run owner", extra=log_fields(dag_id=dag_id, owner=owner))
        return owner

    def _lookup_owner(self, dag_id: str) -> str:
        factory = self._resolve_engine_factory()
        try:
            with scoped_connection(factory) as connection:
                row = connection.execute(
                    owner_query(self._settings.log_table),
                    {"dag_id": dag_id, "events": list(self._settings.trigger_events)},
                ).first()
        except SQLAlchemyError as exc:
            raise ProvenanceLookupError(
                f"owner lookup for DAG '{dag_id}' failed: {describe_database_error(exc)}"
            ) from exc

        if row is None or row[0] is None or not str(row[0]).strip():
            raise NoOwnerFoundError(dag_id)
        return str(row[0]).strip()

    def _resolve_engine_factory(self) -> EngineFactory:
        if self._engines is not None:
            return self._engines
        url = self._settings.database_url
        if not url or not url.strip():
            raise ProvenanceLookupError(
                "provenance.database_url is not set; cannot look up who triggered the run"
            )
        return engine_factory(
            url, connect_timeout_seconds=self._settings.connect_timeout_seconds
        )
