"""Select the delivery sink named by ``sink.backend``."""

from __future__ import annotations

from packages.knaudit_core.sink import AuditSink
from packages.knaudit_shared.config import KnauditSettings
from resources.adapters.postgres_procedure import (
    ProcedureSink,
    resolve_procedure_sink_settings,
)
from resources.adapters.proxy import ProxySink, resolve_proxy_sink_settings
from resources.adapters.search_index import (
    ElasticsearchSink,
    resolve_elasticsearch_sink_settings,
)


def build_sink(settings: KnauditSettings) -> AuditSink:
    """Build the one sink active for this deployment from its adapter settings."""
    backend = settings.sink.backend
    if backend == "proxy":
        return ProxySink(settings=resolve_proxy_sink_settings(settings))
    if backend == "elasticsearch":
        return ElasticsearchSink(settings=resolve_elasticsearch_sink_settings(settings))
    if backend == "postgres":
        return ProcedureSink(settings=resolve_procedure_sink_settings(settings))
    raise ValueError(f"unsupported sink backend: {backend!r}")
