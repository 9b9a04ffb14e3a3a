"""Tests for delivering audit records to the HTTP audit proxy."""

from __future__ import annotations

import json

import httpx
import pytest

from packages.knaudit_core import AuditRecord, CollectionError, DeliveryError
from resources.adapters.proxy import ProxySink, ProxySinkSettings


def _record() -> AuditRecord:
    return AuditRecord(
        hostname="dataverk-task-7f9c",
        ip="10.4.2.17",
        namespace="team-data",
        dag_id="daily_export",
        run_id="scheduled__2024-01-01T000000",
        task_id="export",
        triggered_by="scheduler",
        commit_sha1="5e8d2f7",
        git_branch="main",
        git_repo="navikt/dataverk-jobs",
        timestamp="2024-01-01T00:00:05Z",
    )


def _sink(handler, **overrides: object) -> ProxySink:
    settings = ProxySinkSettings(base_url="https://audit-proxy.example/", **overrides)
    return ProxySink(settings=settings, transport=httpx.MockTransport(handler))


def test_deliver_posts_json_record_to_report_path() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, text="ok", request=request)

    _sink(handler).deliver(_record())

    assert len(requests) == 1
    request = requests[0]
    assert request.method == "POST"
    assert str(request.url) == "https://audit-proxy.example/report"
    assert request.headers["content-type"] == "application/json"
    assert json.loads(request.content) == _record().as_dict()


def test_non_success_status_raises_delivery_error_with_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="database unavailable", request=request)

    with pytest.raises(DeliveryError) as exc_info:
        _sink(handler).deliver(_record())

    error = exc_info.value
    assert error.backend == "proxy"
    assert error.status_code == 500
    assert error.response_body == "database unavailable"
    assert str(error) == (
        "posting audit record to proxy returned status code 500, "
        "response: database unavailable"
    )


def test_other_success_codes_are_failures_unless_configured() -> None:
    """Only the configured success status counts; 201 is not implied by 200."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(201, request=request)

    with pytest.raises(DeliveryError):
        _sink(handler).deliver(_record())

    _sink(handler, success_status=201).deliver(_record())


def test_transport_failure_raises_delivery_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    with pytest.raises(DeliveryError, match="timed out") as exc_info:
        _sink(handler).deliver(_record())

    assert exc_info.value.status_code is None


class _BodyDroppedMidway(httpx.SyncByteStream):
    """Response body that loses its connection after the first chunk."""

    def __iter__(self):
        yield b"{\"stored\": "
        raise httpx.ReadError("connection reset while reading body")


def test_failure_reading_response_body_raises_delivery_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, stream=_BodyDroppedMidway(), request=request)

    with pytest.raises(DeliveryError, match="connection reset while reading body") as exc_info:
        _sink(handler).deliver(_record())

    assert exc_info.value.backend == "proxy"
    assert exc_info.value.status_code is None


def test_repeated_deliveries_send_identical_bodies() -> None:
    """Retries rely on each attempt carrying the very same payload."""
    bodies: list[bytes] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(request.content)
        return httpx.Response(503 if len(bodies) == 1 else 200, request=request)

    sink = _sink(handler)
    record = _record()
    with pytest.raises(DeliveryError):
        sink.deliver(record)
    sink.deliver(record)

    assert len(bodies) == 2
    assert bodies[0] == bodies[1]


def test_unreadable_ca_bundle_is_a_collection_error(tmp_path) -> None:
    settings = ProxySinkSettings(
        base_url="https://audit-proxy.example",
        ca_certs=str(tmp_path / "missing.pem"),
    )

    with pytest.raises(CollectionError, match="CA certificates"):
        ProxySink(settings=settings)


def test_settings_require_base_url() -> None:
    with pytest.raises(ValueError):
        ProxySinkSettings(base_url="  ")
