"""Tests for pydantic-settings-backed knaudit configuration loading."""

from __future__ import annotations

import os
from pathlib import Path

import pytest
from pydantic import ValidationError

from packages.knaudit_shared.config import (
    LEGACY_ENV_MAPPING,
    load_settings,
    resolve_component_settings,
)
from resources.adapters.postgres_procedure import ProcedureSinkSettings
from resources.adapters.proxy import ProxySinkSettings, resolve_proxy_sink_settings
from resources.adapters.search_index import resolve_elasticsearch_sink_settings


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove job variables that a CI runner or pod may already export."""
    for name in list(os.environ):
        if name in LEGACY_ENV_MAPPING or name.startswith("KNAUDIT_"):
            monkeypatch.delenv(name, raising=False)


def _write_yaml(path: Path, lines: list[str]) -> Path:
    path.write_text("\n".join(lines), encoding="utf-8")
    return path


def test_load_settings_uses_knaudit_precedence_cascade(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Init params beat prefixed env, which beats legacy names, which beat YAML."""
    config_file = _write_yaml(
        tmp_path / "knaudit.yaml",
        [
            "logging:",
            "  level: WARNING",
            "  service: knaudit-yaml",
            "sink:",
            "  backend: postgres",
            "run:",
            "  namespace: yaml-namespace",
            "  dag_id: yaml-dag",
            "components:",
            "  adapter:",
            "    proxy:",
            "      base_url: https://yaml-proxy.example",
            "      timeout_seconds: 3",
        ],
    )
    monkeypatch.setenv("KNAUDIT_LOGGING__LEVEL", "ERROR")
    monkeypatch.setenv("KNAUDIT_RUN__DAG_ID", "prefixed-dag")
    monkeypatch.setenv("AIRFLOW_DAG_ID", "legacy-dag")
    monkeypatch.setenv("NAMESPACE", "legacy-namespace")
    monkeypatch.setenv("KNAUDIT_PROXY_URL", "https://env-proxy.example/")

    settings = load_settings(
        cli_params={"logging": {"level": "DEBUG"}, "sink": {"backend": "proxy"}},
        config_path=config_file,
        env_file=tmp_path / ".env",
    )
    proxy = resolve_proxy_sink_settings(settings)

    assert settings.logging.level == "DEBUG"
    assert settings.logging.service == "knaudit-yaml"
    assert settings.sink.backend == "proxy"
    assert settings.run.dag_id == "prefixed-dag"
    assert settings.run.namespace == "legacy-namespace"
    assert proxy.base_url == "https://env-proxy.example"
    assert proxy.timeout_seconds == 3


def test_load_settings_uses_model_defaults_when_sources_missing(tmp_path: Path) -> None:
    settings = load_settings(
        config_path=tmp_path / "knaudit.yaml", env_file=tmp_path / ".env"
    )

    assert settings.logging.level == "INFO"
    assert settings.logging.json_output is True
    assert settings.sink.backend == "proxy"
    assert settings.retry.delays_seconds == (1.0, 3.0, 5.0)
    assert settings.provenance.scheduler_actor == "scheduler"
    assert settings.provenance.trigger_events == ("trigger", "cli_task_run")
    assert settings.git.allowed_orgs == ("navikt", "nais")
    assert settings.record.timestamp_source == "now"
    assert settings.run.dag_id == ""


def test_env_file_supplies_legacy_names_below_real_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """A .env file configures local runs; exported variables still win."""
    env_file = tmp_path / ".env"
    env_file.write_text(
        "\n".join(
            [
                "AIRFLOW_RUN_ID=manual__2023-02-13T131127",
                "AIRFLOW_TASK_ID=from-dotenv",
                "AIRFLOW_DB_URL=postgres://airflow:pw@localhost/airflow",
                "ELASTICSEARCH_HOSTS=https://es-1:9200, https://es-2:9200",
                "ELASTICSEARCH_INDEX=audit",
            ]
        ),
        encoding="utf-8",
    )
    monkeypatch.setenv("AIRFLOW_TASK_ID", "from-environment")

    settings = load_settings(config_path=tmp_path / "knaudit.yaml", env_file=env_file)
    elasticsearch = resolve_elasticsearch_sink_settings(settings)

    assert settings.run.run_id == "manual__2023-02-13T131127"
    assert settings.run.task_id == "from-environment"
    assert settings.provenance.database_url == "postgres://airflow:pw@localhost/airflow"
    assert elasticsearch.hosts == ("https://es-1:9200", "https://es-2:9200")
    assert elasticsearch.index == "audit"


def test_blank_legacy_variables_are_ignored(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("KNAUDIT_BACKEND", "  ")

    settings = load_settings(config_path=tmp_path / "knaudit.yaml", env_file=None)

    assert settings.sink.backend == "proxy"


def test_invalid_values_fail_settings_validation(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("KNAUDIT_RECORD__TIMESTAMP_SOURCE", "sundial")

    with pytest.raises(ValidationError):
        load_settings(config_path=tmp_path / "knaudit.yaml", env_file=None)


def test_resolve_component_settings_validates_adapter_namespace(tmp_path: Path) -> None:
    """Adapter settings are strict: unknown keys and missing URLs are rejected."""
    config_file = _write_yaml(
        tmp_path / "knaudit.yaml",
        [
            "components:",
            "  adapter:",
            "    postgres:",
            "      database_url: postgres://audit:pw@db/audit",
            "      procedure: audit.insert_record",
            "    proxy:",
            "      base_url: https://proxy.example",
            "      retries: 5",
        ],
    )
    settings = load_settings(config_path=config_file, env_file=None)

    procedure = resolve_component_settings(
        settings=settings,
        component_id="adapter_postgres",
        model=ProcedureSinkSettings,
    )

    assert procedure.procedure == "audit.insert_record"
    with pytest.raises(ValidationError):
        resolve_component_settings(
            settings=settings, component_id="adapter_proxy", model=ProxySinkSettings
        )
    with pytest.raises(ValueError):
        resolve_component_settings(
            settings=settings, component_id="substrate_postgres", model=ProxySinkSettings
        )
