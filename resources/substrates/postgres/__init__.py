"""Postgres access primitives shared by provenance lookup and the procedure sink."""

from resources.substrates.postgres.engine import (
    EngineFactory,
    create_postgres_engine,
    engine_factory,
    normalize_postgres_url,
)
from resources.substrates.postgres.errors import describe_database_error
from resources.substrates.postgres.session import (
    scoped_connection,
    transactional_connection,
)

__all__ = [
    "EngineFactory",
    "create_postgres_engine",
    "describe_database_error",
    "engine_factory",
    "normalize_postgres_url",
    "scoped_connection",
    "transactional_connection",
]
