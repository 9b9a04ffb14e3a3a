"""Relational stored-function sink."""

from resources.adapters.postgres_procedure.config import (
    COMPONENT_ID,
    ProcedureSinkSettings,
    resolve_procedure_sink_settings,
)
from resources.adapters.postgres_procedure.procedure_sink import ProcedureSink

__all__ = [
    "COMPONENT_ID",
    "ProcedureSink",
    "ProcedureSinkSettings",
    "resolve_procedure_sink_settings",
]
