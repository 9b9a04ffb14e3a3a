"""Typed configuration models for knaudit runtime settings."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from .sources import legacy_env_settings_source

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "knaudit" / "knaudit.yaml"
DEFAULT_ENV_FILE = Path(".env")

_SQL_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")


def validate_sql_identifier(value: str, *, field: str) -> str:
    """Require an optionally schema-qualified SQL identifier."""
    normalized = value.strip()
    if not _SQL_IDENTIFIER.match(normalized):
        raise ValueError(f"{field} must be a SQL identifier, got {value!r}")
    return normalized


class LoggingSettings(BaseModel):
    """Structured logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    json_output: bool = True
    service: str = "knaudit"
    environment: str = "dev"


class RunSettings(BaseModel):
    """Identity of the workflow task execution being audited."""

    hostname: str | None = None
    namespace: str = ""
    dag_id: str = ""
    run_id: str = ""
    task_id: str = ""


class GitSettings(BaseModel):
    """Location of the checked-out repository and accepted GitHub orgs."""

    repo_path: Path = Path(".")
    allowed_orgs: tuple[str, ...] = ("navikt", "nais")

    @field_validator("allowed_orgs")
    @classmethod
    def _require_orgs(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        orgs = tuple(org.strip() for org in value if org.strip())
        if not orgs:
            raise ValueError("allowed_orgs must name at least one organization")
        return orgs


class ProvenanceSettings(BaseModel):
    """Settings for deciding who triggered a run."""

    database_url: str | None = None
    scheduled_prefix: str = "scheduled"
    scheduler_actor: str = "scheduler"
    log_table: str = "public.log"
    trigger_events: tuple[str, ...] = ("trigger", "cli_task_run")
    connect_timeout_seconds: float = Field(default=10.0, gt=0)

    @field_validator("log_table")
    @classmethod
    def _validate_log_table(cls, value: str) -> str:
        return validate_sql_identifier(value, field="log_table")

    @field_validator("trigger_events")
    @classmethod
    def _require_events(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if not value:
            raise ValueError("trigger_events must not be empty")
        return value


class RecordSettings(BaseModel):
    """Options affecting how the audit record is assembled."""

    timestamp_source: Literal["now", "run_id"] = "now"


class RetrySettings(BaseModel):
    """Fixed backoff schedule applied around delivery."""

    delays_seconds: tuple[float, ...] = (1.0, 3.0, 5.0)

    @field_validator("delays_seconds")
    @classmethod
    def _non_negative(cls, value: tuple[float, ...]) -> tuple[float, ...]:
        if any(delay < 0 for delay in value):
            raise ValueError("delays_seconds must all be >= 0")
        return value


class SinkSettings(BaseModel):
    """Selects which delivery backend is active for this deployment."""

    backend: Literal["proxy", "elasticsearch", "postgres"] = "proxy"


class ComponentNamespaceSettings(BaseModel):
    """Namespace map for grouped component settings under ``components.<kind>``."""

    model_config = ConfigDict(extra="allow")


class ComponentsSettings(BaseModel):
    """Typed ``components`` subtree holding adapter-local settings."""

    model_config = ConfigDict(extra="allow")

    adapter: ComponentNamespaceSettings = Field(
        default_factory=ComponentNamespaceSettings
    )


class KnauditSettings(BaseSettings):
    """Root runtime settings resolved from init/env/dotenv/yaml/defaults sources."""

    model_config = SettingsConfigDict(
        env_prefix="KNAUDIT_",
        env_nested_delimiter="__",
        extra="ignore",
        nested_model_default_partial_update=True,
        yaml_file=DEFAULT_CONFIG_PATH,
        yaml_file_encoding="utf-8",
        env_file=DEFAULT_ENV_FILE,
    )

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    run: RunSettings = Field(default_factory=RunSettings)
    git: GitSettings = Field(default_factory=GitSettings)
    provenance: ProvenanceSettings = Field(default_factory=ProvenanceSettings)
    record: RecordSettings = Field(default_factory=RecordSettings)
    retry: RetrySettings = Field(default_factory=RetrySettings)
    sink: SinkSettings = Field(default_factory=SinkSettings)
    components: ComponentsSettings = Field(default_factory=ComponentsSettings)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Apply precedence: init > prefixed env > legacy env/.env > yaml."""
        env_file = settings_cls.model_config.get("env_file")
        return (
            init_settings,
            env_settings,
            legacy_env_settings_source(env_file),
            YamlConfigSettingsSource(settings_cls),
        )


TComponentSettings = TypeVar("TComponentSettings", bound=BaseModel)


def resolve_component_settings(
    *,
    settings: KnauditSettings,
    component_id: str,
    model: type[TComponentSettings],
) -> TComponentSettings:
    """Resolve one component settings object from grouped ``components`` keys."""
    raw_components = settings.components.model_dump(mode="python")
    kind, separator, name = component_id.partition("_")
    if not separator or kind != "adapter":
        raise ValueError(f"unsupported component id: {component_id!r}")

    namespace = raw_components.get(kind, {})
    if not isinstance(namespace, dict):
        raise TypeError(f"components.{kind} must resolve to an object mapping")
    resolved = namespace.get(name, {})
    if not isinstance(resolved, dict):
        raise TypeError(f"components.{kind}.{name} must resolve to an object mapping")
    return model.model_validate(resolved)
