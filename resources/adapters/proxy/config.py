"""Pydantic settings for the HTTP audit proxy sink."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from packages.knaudit_shared.config import KnauditSettings, resolve_component_settings

COMPONENT_ID = "adapter_proxy"


class ProxySinkSettings(BaseModel):
    """Where and how to POST audit records to the proxy."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    base_url: str
    report_path: str = "/report"
    timeout_seconds: float = Field(default=10.0, gt=0)
    success_status: int = 200
    ca_certs: str | None = None

    @field_validator("base_url", mode="before")
    @classmethod
    def _validate_base_url(cls, value: object) -> object:
        """Require a non-empty base URL and drop any trailing slash."""
        if not isinstance(value, str):
            return value
        normalized = value.strip().rstrip("/")
        if normalized == "":
            raise ValueError("base_url must be non-empty")
        return normalized


def resolve_proxy_sink_settings(settings: KnauditSettings) -> ProxySinkSettings:
    """Resolve sink settings from ``components.adapter.proxy``."""
    return resolve_component_settings(
        settings=settings,
        component_id=COMPONENT_ID,
        model=ProxySinkSettings,
    )
