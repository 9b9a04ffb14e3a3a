"""Pydantic settings for the relational stored-function sink."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from packages.knaudit_shared.config import (
    KnauditSettings,
    resolve_component_settings,
    validate_sql_identifier,
)

COMPONENT_ID = "adapter_postgres"


class ProcedureSinkSettings(BaseModel):
    """Database and stored function receiving the record as JSON text."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    database_url: str
    procedure: str = "insert_audit_record"
    connect_timeout_seconds: float = Field(default=10.0, gt=0)

    @field_validator("database_url")
    @classmethod
    def _require_url(cls, value: str) -> str:
        normalized = value.strip()
        if normalized == "":
            raise ValueError("database_url must be non-empty")
        return normalized

    @field_validator("procedure")
    @classmethod
    def _validate_procedure(cls, value: str) -> str:
        return validate_sql_identifier(value, field="procedure")


def resolve_procedure_sink_settings(settings: KnauditSettings) -> ProcedureSinkSettings:
    """Resolve sink settings from ``components.adapter.postgres``."""
    return resolve_component_settings(
        settings=settings,
        component_id=COMPONENT_ID,
        model=ProcedureSinkSettings,
    )
