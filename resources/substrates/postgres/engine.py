"""SQLAlchemy engine construction for short-lived Postgres calls."""

from __future__ import annotations

import math
from collections.abc import Callable

from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.pool import NullPool

EngineFactory = Callable[[], Engine]

_PSYCOPG_DRIVER = "postgresql+psycopg"


def normalize_postgres_url(url: str) -> str:
    """Point bare ``postgres://``/``postgresql://`` URLs at the psycopg driver."""
    for prefix in ("postgres://", "postgresql://"):
        if url.startswith(prefix):
            return f"{_PSYCOPG_DRIVER}://{url[len(prefix):]}"
    return url


def create_postgres_engine(url: str, *, connect_timeout_seconds: float = 10.0) -> Engine:
    """Construct an unpooled engine; each ``connect()`` opens a fresh connection."""
    if not url or not url.strip():
        raise ValueError("database url is required")
    normalized = normalize_postgres_url(url.strip())
    connect_args: dict[str, object] = {}
    if make_url(normalized).get_backend_name() == "postgresql":
        # libpq takes whole seconds and treats 0 as no timeout.
        connect_args["connect_timeout"] = max(1, math.ceil(connect_timeout_seconds))
    return create_engine(normalized, poolclass=NullPool, connect_args=connect_args)


def engine_factory(url: str, *, connect_timeout_seconds: float = 10.0) -> EngineFactory:
    """Return a factory building one new engine per call scope."""

    def build() -> Engine:
        return create_postgres_engine(url, connect_timeout_seconds=connect_timeout_seconds)

    return build
