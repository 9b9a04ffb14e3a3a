"""Pydantic settings for the Elasticsearch index sink."""

from __future__ import annotations

from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from packages.knaudit_shared.config import KnauditSettings, resolve_component_settings

COMPONENT_ID = "adapter_elasticsearch"


def _require_node_url(host: str) -> None:
    """Node URLs need scheme, host and port, as in ``https://es-1:9200``."""
    try:
        parts = urlsplit(host)
        port = parts.port
    except ValueError as exc:
        raise ValueError(f"invalid Elasticsearch host {host!r}: {exc}") from exc
    if parts.scheme not in ("http", "https") or not parts.hostname or port is None:
        raise ValueError(
            f"Elasticsearch host {host!r} must include scheme, host and port "
            "(e.g. https://es-1:9200)"
        )


class ElasticsearchSinkSettings(BaseModel):
    """Cluster connection and target index for audit documents."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    hosts: tuple[str, ...]
    index: str
    username: str | None = None
    password: str | None = None
    ca_certs: str | None = None
    request_timeout_seconds: float = Field(default=10.0, gt=0)

    @field_validator("hosts")
    @classmethod
    def _require_hosts(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        hosts = tuple(host.strip() for host in value if host.strip())
        if not hosts:
            raise ValueError("hosts must name at least one node")
        for host in hosts:
            _require_node_url(host)
        return hosts

    @field_validator("index")
    @classmethod
    def _require_index(cls, value: str) -> str:
        normalized = value.strip()
        if normalized == "":
            raise ValueError("index must be non-empty")
        return normalized

    @model_validator(mode="after")
    def _credentials_come_in_pairs(self) -> "ElasticsearchSinkSettings":
        if bool(self.username) != bool(self.password):
            raise ValueError("username and password must be set together")
        return self


def resolve_elasticsearch_sink_settings(
    settings: KnauditSettings,
) -> ElasticsearchSinkSettings:
    """Resolve sink settings from ``components.adapter.elasticsearch``."""
    return resolve_component_settings(
        settings=settings,
        component_id=COMPONENT_ID,
        model=ElasticsearchSinkSettings,
    )
