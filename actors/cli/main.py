"""knaudit command-line entrypoint implemented with Typer.

This module is the single error boundary of the process: every failure is
classified, logged once with structured context, and mapped to an exit code.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, TypeVar

import typer
from pydantic import ValidationError

from packages.knaudit_core import (
    CollectionError,
    DeliveryError,
    NoOwnerFoundError,
    NotFoundError,
    ProvenanceLookupError,
    build_assembler,
    run_pipeline,
)
from packages.knaudit_shared.config import (
    DEFAULT_ENV_FILE,
    KnauditSettings,
    load_settings,
    read_env_file,
)
from packages.knaudit_shared.errors import exception_to_error
from packages.knaudit_shared.logging import (
    bind_run_context,
    configure_logging,
    get_logger,
    log_fields,
)
from resources.adapters.sinks import build_sink

_LOGGER = get_logger("knaudit")

T = TypeVar("T")

SUCCESS_EXIT_CODE = 0
UNEXPECTED_ERROR_EXIT_CODE = 1
COLLECTION_ERROR_EXIT_CODE = 2
NO_OWNER_EXIT_CODE = 3
PROVENANCE_ERROR_EXIT_CODE = 4
DELIVERY_ERROR_EXIT_CODE = 5

_EXIT_CODES: tuple[tuple[type[Exception], int], ...] = (
    (ValidationError, COLLECTION_ERROR_EXIT_CODE),
    (CollectionError, COLLECTION_ERROR_EXIT_CODE),
    (NotFoundError, COLLECTION_ERROR_EXIT_CODE),
    (NoOwnerFoundError, NO_OWNER_EXIT_CODE),
    (ProvenanceLookupError, PROVENANCE_ERROR_EXIT_CODE),
    (DeliveryError, DELIVERY_ERROR_EXIT_CODE),
)


class SinkBackend(str, Enum):
    """Delivery backends selectable from the command line."""

    PROXY = "proxy"
    ELASTICSEARCH = "elasticsearch"
    POSTGRES = "postgres"


@dataclass(frozen=True)
class CliConfig:
    """Global CLI options applied on top of the loaded settings."""

    config_path: Path | None
    env_file: Path
    backend: SinkBackend | None
    log_level: str | None
    json_logs: bool | None


def exit_code_for(exc: Exception) -> int:
    """Map a failure to the process exit code."""
    for exc_type, code in _EXIT_CODES:
        if isinstance(exc, exc_type):
            return code
    return UNEXPECTED_ERROR_EXIT_CODE


def _cli_params(cfg: CliConfig) -> dict[str, Any]:
    """Translate CLI overrides into the nested settings shape."""
    params: dict[str, Any] = {}
    logging_params: dict[str, Any] = {}
    if cfg.log_level is not None:
        logging_params["level"] = cfg.log_level.upper()
    if cfg.json_logs is not None:
        logging_params["json_output"] = cfg.json_logs
    if logging_params:
        params["logging"] = logging_params
    if cfg.backend is not None:
        params["sink"] = {"backend": cfg.backend.value}
    return params


def _bootstrap(cfg: CliConfig) -> KnauditSettings:
    """Load settings once and configure logging from them."""
    settings = load_settings(
        cli_params=_cli_params(cfg),
        config_path=cfg.config_path,
        env_file=cfg.env_file,
    )
    configure_logging(
        level=settings.logging.level,
        json_output=settings.logging.json_output,
        service=settings.logging.service,
        environment=settings.logging.environment,
    )
    if read_env_file(cfg.env_file):
        _LOGGER.info(".env file found, application has been configured to run locally.")
    bind_run_context(
        dag_id=settings.run.dag_id,
        run_id=settings.run.run_id,
        task_id=settings.run.task_id,
    )
    return settings


def _execute(cfg: CliConfig, action: Callable[[KnauditSettings], T]) -> T:
    """Run ``action`` with loaded settings, turning failures into exit codes."""
    configure_logging(level="INFO", json_output=cfg.json_logs is not False)
    try:
        settings = _bootstrap(cfg)
        return action(settings)
    except Exception as exc:
        code = exit_code_for(exc)
        detail = exception_to_error(exc)
        _LOGGER.error(
            detail.message,
            exc_info=exc if code == UNEXPECTED_ERROR_EXIT_CODE else None,
            extra=log_fields(exit_code=code, **detail.log_fields()),
        )
        raise typer.Exit(code=code) from exc


def _require_config(ctx: typer.Context) -> CliConfig:
    """Return required CLI config from Typer context."""
    config = ctx.obj
    if not isinstance(config, CliConfig):
        raise RuntimeError("CLI configuration not initialized")
    return config


app = typer.Typer(
    no_args_is_help=True,
    help="Emit one audit record for a workflow task run",
)


@app.callback()
def main(
    ctx: typer.Context,
    config: Path | None = typer.Option(
        None,
        "--config",
        envvar="KNAUDIT_CONFIG_PATH",
        help="YAML settings file (default ~/.config/knaudit/knaudit.yaml)",
    ),
    env_file: Path = typer.Option(
        DEFAULT_ENV_FILE,
        "--env-file",
        help="dotenv file read for local runs",
    ),
    backend: SinkBackend | None = typer.Option(
        None,
        "--backend",
        help="Override the configured delivery backend",
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Log level"),
    json_logs: bool | None = typer.Option(
        None,
        "--json-logs/--plain-logs",
        help="Emit JSON or human-readable logs",
    ),
) -> None:
    """Store global options for all commands."""
    ctx.obj = CliConfig(
        config_path=config,
        env_file=env_file,
        backend=backend,
        log_level=log_level,
        json_logs=json_logs,
    )


@app.command("report")
def report_command(ctx: typer.Context) -> None:
    """Assemble the audit record and deliver it to the configured backend."""
    cfg = _require_config(ctx)
    _execute(cfg, lambda settings: run_pipeline(settings, sink=build_sink(settings)))
    raise typer.Exit(code=SUCCESS_EXIT_CODE)


@app.command("record")
def record_command(ctx: typer.Context) -> None:
    """Assemble the audit record and print it as JSON without delivering it."""
    cfg = _require_config(ctx)
    record = _execute(cfg, lambda settings: build_assembler(settings).assemble())
    typer.echo(record.to_json())
    raise typer.Exit(code=SUCCESS_EXIT_CODE)


if __name__ == "__main__":
    app()
