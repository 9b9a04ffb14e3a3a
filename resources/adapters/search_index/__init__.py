"""Elasticsearch index sink."""

from resources.adapters.search_index.config import (
    COMPONENT_ID,
    ElasticsearchSinkSettings,
    resolve_elasticsearch_sink_settings,
)
from resources.adapters.search_index.index_sink import (
    ElasticsearchSink,
    new_document_id,
)

__all__ = [
    "COMPONENT_ID",
    "ElasticsearchSink",
    "ElasticsearchSinkSettings",
    "new_document_id",
    "resolve_elasticsearch_sink_settings",
]
