"""Synchronous HTTP client for one-shot outbound calls, built on httpx."""

from __future__ import annotations

import ssl
from collections.abc import Collection, Mapping
from typing import Any

import httpx

from .errors import HttpRequestError, HttpStatusError


def status_error(response: httpx.Response) -> HttpStatusError:
    """Describe a rejected response, keeping its body for error reports."""
    request = response.request
    try:
        body = response.text
    except (httpx.ResponseNotRead, UnicodeDecodeError, LookupError):
        body = ""
    return HttpStatusError(
        message=f"HTTP {response.status_code} for {request.method} {request.url}",
        method=request.method,
        url=str(request.url),
        status_code=response.status_code,
        response_body=body,
        response_headers=dict(response.headers.items()),
    )


def _request_error(exc: httpx.RequestError, method: str, url: str) -> HttpRequestError:
    # ``exc.request`` raises RuntimeError when httpx never built a request.
    try:
        method, url = exc.request.method, str(exc.request.url)
    except RuntimeError:
        method = method.upper()
    return HttpRequestError(
        message=f"HTTP request failed for {method} {url}: {exc}",
        method=method,
        url=url,
        cause=exc,
    )


def _accepted(response: httpx.Response, accept_status: Collection[int] | None) -> bool:
    if accept_status is None:
        return not response.is_error
    return response.status_code in accept_status


class HttpClient:
    """Owns one ``httpx.Client`` for a single call scope::

        with HttpClient(base_url=url) as client:
            client.post("/report", content=body, accept_status={200})
    """

    def __init__(
        self,
        *,
        base_url: str = "",
        timeout_seconds: float = 10.0,
        headers: Mapping[str, str] | None = None,
        verify: ssl.SSLContext | bool = True,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(
            base_url=base_url,
            timeout=timeout_seconds,
            headers=dict(headers or {}),
            verify=verify,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> HttpClient:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    def request(
        self,
        method: str,
        url: str,
        *,
        accept_status: Collection[int] | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send one request; raise ``HttpRequestError`` or ``HttpStatusError`` on failure.

        Without ``accept_status`` every non-error status passes; with it only
        the listed codes do.
        """
        try:
            response = self._client.request(method=method, url=url, **kwargs)
        except httpx.RequestError as exc:
            raise _request_error(exc, method, url) from exc
        if not _accepted(response, accept_status):
            raise status_error(response)
        return response

    def post(self, url: str, **kwargs: Any) -> httpx.Response:
        return self.request("POST", url, **kwargs)
