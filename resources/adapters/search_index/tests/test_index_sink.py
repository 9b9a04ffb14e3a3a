"""Tests for indexing audit records into Elasticsearch."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any

import pytest
from elasticsearch import ApiError
from elasticsearch import ConnectionError as EsConnectionError

from packages.knaudit_core import (
    AuditRecord,
    CollectionError,
    DeliveryError,
    RetryPolicy,
    with_retry,
)
from resources.adapters.search_index import (
    ElasticsearchSink,
    ElasticsearchSinkSettings,
    new_document_id,
)


class _StubClient:
    """Record ``index`` calls, optionally failing with ``error``."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    def index(self, **kwargs: Any) -> dict[str, Any]:
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return {"result": "created", "_id": kwargs["id"]}

    def close(self) -> None:
        self.closed = True


def _record() -> AuditRecord:
    return AuditRecord(
        hostname="dataverk-task-7f9c",
        ip="10.4.2.17",
        namespace="team-data",
        dag_id="daily_export",
        run_id="manual__2023-02-13T131127",
        task_id="export",
        triggered_by="bob@nav.no",
        commit_sha1="5e8d2f7",
        git_branch="main",
        git_repo="navikt/dataverk-jobs",
        timestamp="2023-02-13T13:11:30Z",
    )


def _settings() -> ElasticsearchSinkSettings:
    return ElasticsearchSinkSettings(hosts=("https://es-1:9200",), index="knaudit")


def test_deliver_indexes_record_with_refresh_and_closes_client() -> None:
    client = _StubClient()
    sink = ElasticsearchSink(
        settings=_settings(),
        client_factory=lambda: client,
        id_factory=lambda: "doc-1",
    )

    sink.deliver(_record())

    assert client.calls == [
        {
            "index": "knaudit",
            "id": "doc-1",
            "document": _record().as_dict(),
            "refresh": True,
        }
    ]
    assert client.closed is True


def test_each_delivery_uses_fresh_client_and_document_id() -> None:
    clients: list[_StubClient] = []

    def factory() -> _StubClient:
        clients.append(_StubClient())
        return clients[-1]

    sink = ElasticsearchSink(settings=_settings(), client_factory=factory)
    sink.deliver(_record())
    sink.deliver(_record())

    ids = [client.calls[0]["id"] for client in clients]
    assert len(clients) == 2
    assert ids[0] != ids[1]


def test_api_error_becomes_delivery_error_and_client_is_closed() -> None:
    client = _StubClient(
        ApiError(
            "index_closed_exception",
            meta=SimpleNamespace(status=400),
            body={"error": {"type": "index_closed_exception"}},
        )
    )
    sink = ElasticsearchSink(settings=_settings(), client_factory=lambda: client)

    with pytest.raises(DeliveryError) as exc_info:
        sink.deliver(_record())

    error = exc_info.value
    assert error.backend == "elasticsearch"
    assert error.status_code == 400
    assert "index_closed_exception" in (error.response_body or "")
    assert client.closed is True


def test_transport_error_becomes_delivery_error() -> None:
    client = _StubClient(EsConnectionError("connection refused"))
    sink = ElasticsearchSink(settings=_settings(), client_factory=lambda: client)

    with pytest.raises(DeliveryError, match="connection refused"):
        sink.deliver(_record())

    assert client.closed is True


def test_new_document_id_is_random() -> None:
    assert new_document_id() != new_document_id()


def test_settings_require_paired_credentials() -> None:
    with pytest.raises(ValueError):
        ElasticsearchSinkSettings(hosts=("https://es-1:9200",), index="x", username="u")
    with pytest.raises(ValueError):
        ElasticsearchSinkSettings(hosts=(" ",), index="x")


def test_host_without_scheme_is_rejected_by_settings() -> None:
    with pytest.raises(ValueError, match="scheme, host and port"):
        ElasticsearchSinkSettings(hosts=("es.internal:9200",), index="knaudit")
    with pytest.raises(ValueError, match="scheme, host and port"):
        ElasticsearchSinkSettings(hosts=("https://es-1",), index="knaudit")


def test_client_construction_failure_is_collection_error_and_not_retried() -> None:
    attempts: list[int] = []
    sleeps: list[float] = []

    def factory() -> _StubClient:
        attempts.append(1)
        raise ValueError("URL must include a 'scheme', 'host', and 'port' component")

    sink = ElasticsearchSink(settings=_settings(), client_factory=factory)

    with pytest.raises(CollectionError, match="cannot configure Elasticsearch client"):
        with_retry(RetryPolicy(), lambda: sink.deliver(_record()), sleep=sleeps.append)

    assert attempts == [1]
    assert sleeps == []
