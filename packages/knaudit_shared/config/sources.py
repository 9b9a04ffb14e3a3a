"""Settings source mapping the deployed job's environment names to config keys.

The workflow pods export plain variables such as ``AIRFLOW_RUN_ID`` or
``KNAUDIT_PROXY_URL`` rather than ``KNAUDIT_<SECTION>__<KEY>`` names. This
source translates them into the nested settings tree. When a dotenv file is
present its values are read first so real environment variables still win.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Callable

from dotenv import dotenv_values

LEGACY_ENV_MAPPING: dict[str, tuple[str, str]] = {
    "POD_NAME": ("run.hostname", "str"),
    "NAMESPACE": ("run.namespace", "str"),
    "AIRFLOW_DAG_ID": ("run.dag_id", "str"),
    "AIRFLOW_RUN_ID": ("run.run_id", "str"),
    "AIRFLOW_TASK_ID": ("run.task_id", "str"),
    "GIT_REPO_PATH": ("git.repo_path", "str"),
    "AIRFLOW_DB_URL": ("provenance.database_url", "str"),
    "KNAUDIT_BACKEND": ("sink.backend", "str"),
    "KNAUDIT_PROXY_URL": ("components.adapter.proxy.base_url", "str"),
    "ELASTICSEARCH_HOSTS": ("components.adapter.elasticsearch.hosts", "csv"),
    "ELASTICSEARCH_USERNAME": ("components.adapter.elasticsearch.username", "str"),
    "ELASTICSEARCH_PASSWORD": ("components.adapter.elasticsearch.password", "str"),
    "ELASTICSEARCH_INDEX": ("components.adapter.elasticsearch.index", "str"),
    "ELASTICSEARCH_CA_CERTS": ("components.adapter.elasticsearch.ca_certs", "str"),
    "KNAUDIT_DB_URL": ("components.adapter.postgres.database_url", "str"),
    "KNAUDIT_DB_PROCEDURE": ("components.adapter.postgres.procedure", "str"),
}


def _set_nested_value(target: dict[str, Any], path: str, value: Any) -> None:
    """Set a dotted-path value on a nested mapping, creating containers."""
    parts = path.split(".")
    cursor = target
    for key in parts[:-1]:
        node = cursor.get(key)
        if not isinstance(node, dict):
            node = {}
            cursor[key] = node
        cursor = node
    cursor[parts[-1]] = value


def _parse_env_value(raw: str, kind: str) -> Any:
    """Parse an environment value into the requested primitive type."""
    if kind == "csv":
        return [item.strip() for item in raw.split(",") if item.strip()]
    if kind == "json":
        return json.loads(raw)
    return raw


def read_env_file(env_file: str | Path | None) -> dict[str, str]:
    """Return non-null values from a dotenv file, or nothing when it is absent."""
    if env_file is None:
        return {}
    path = Path(env_file)
    if not path.is_file():
        return {}
    return {key: value for key, value in dotenv_values(path).items() if value is not None}


def legacy_env_settings_source(
    env_file: str | Path | None,
) -> Callable[[], dict[str, Any]]:
    """Create a settings source for the legacy environment variable names."""

    def source() -> dict[str, Any]:
        values = read_env_file(env_file)
        values.update(os.environ)
        data: dict[str, Any] = {}
        for env_key, (path, kind) in LEGACY_ENV_MAPPING.items():
            raw = values.get(env_key)
            if raw is None or raw.strip() == "":
                continue
            _set_nested_value(data, path, _parse_env_value(raw.strip(), kind))
        return data

    return source
