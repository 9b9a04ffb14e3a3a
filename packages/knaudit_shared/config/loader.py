"""Configuration loading with deterministic precedence.

The cascade is always:
1) CLI params
2) ``KNAUDIT_`` environment variables (``__`` separates nested keys)
3) Legacy job variables (``AIRFLOW_RUN_ID``, ``KNAUDIT_PROXY_URL``, ...)
4) The same legacy variables read from a local ``.env`` file
5) ``~/.config/knaudit/knaudit.yaml`` or an explicit YAML path
6) Built-in model defaults

Example: ``KNAUDIT_RETRY__DELAYS_SECONDS=[0,0]`` -> ``retry.delays_seconds``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from pydantic_settings import SettingsConfigDict

from .models import DEFAULT_CONFIG_PATH, DEFAULT_ENV_FILE, KnauditSettings


def load_settings(
    *,
    cli_params: Mapping[str, Any] | None = None,
    config_path: str | Path | None = None,
    env_file: str | Path | None = DEFAULT_ENV_FILE,
) -> KnauditSettings:
    """Build the process-wide settings object once, at start of process."""
    yaml_file = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH

    class _ResolvedSettings(KnauditSettings):
        model_config = SettingsConfigDict(yaml_file=yaml_file, env_file=env_file)

    return _ResolvedSettings(**_as_plain_dict(cli_params or {}))


def _as_plain_dict(value: Mapping[str, Any]) -> dict[str, Any]:
    """Copy a mapping into plain ``dict`` values recursively."""
    output: dict[str, Any] = {}
    for key, subvalue in value.items():
        if isinstance(subvalue, Mapping):
            output[str(key)] = _as_plain_dict(subvalue)
        else:
            output[str(key)] = subvalue
    return output
