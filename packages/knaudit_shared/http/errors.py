"""Typed errors raised by the shared HTTP client."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping


@dataclass(frozen=True)
class HttpError(Exception):
    """Base error for outbound HTTP call failures."""

    message: str
    method: str
    url: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class HttpRequestError(HttpError):
    """Transport-level failure: connect, timeout, or reading the response body."""

    cause: Exception | None = None


@dataclass(frozen=True)
class HttpStatusError(HttpError):
    """The server answered with a status the caller does not accept."""

    status_code: int = 0
    response_body: str = ""
    response_headers: Mapping[str, str] = field(default_factory=dict)
