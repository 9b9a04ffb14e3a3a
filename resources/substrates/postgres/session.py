"""Connection lifecycle helpers: acquire right before use, release on every path."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import Connection

from resources.substrates.postgres.engine import EngineFactory


@contextmanager
def scoped_connection(factory: EngineFactory) -> Iterator[Connection]:
    """Yield one connection from a fresh engine and dispose the engine afterwards."""
    engine = factory()
    try:
        with engine.connect() as connection:
            yield connection
    finally:
        engine.dispose()


@contextmanager
def transactional_connection(factory: EngineFactory) -> Iterator[Connection]:
    """Yield a connection inside a transaction; commit on success, else roll back."""
    with scoped_connection(factory) as connection:
        with connection.begin():
            yield connection
