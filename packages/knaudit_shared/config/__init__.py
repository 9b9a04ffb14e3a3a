"""Public API for knaudit configuration utilities."""

from .loader import load_settings
from .models import (
    DEFAULT_CONFIG_PATH,
    DEFAULT_ENV_FILE,
    ComponentsSettings,
    GitSettings,
    KnauditSettings,
    LoggingSettings,
    ProvenanceSettings,
    RecordSettings,
    RetrySettings,
    RunSettings,
    SinkSettings,
    resolve_component_settings,
    validate_sql_identifier,
)
from .sources import LEGACY_ENV_MAPPING, read_env_file

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_ENV_FILE",
    "LEGACY_ENV_MAPPING",
    "ComponentsSettings",
    "GitSettings",
    "KnauditSettings",
    "LoggingSettings",
    "ProvenanceSettings",
    "RecordSettings",
    "RetrySettings",
    "RunSettings",
    "SinkSettings",
    "load_settings",
    "read_env_file",
    "resolve_component_settings",
    "validate_sql_identifier",
]
