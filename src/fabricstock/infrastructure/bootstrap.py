"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from functools import lru_cache

from sqlalchemy import Engine

from fabricstock.infrastructure.config import Settings
from fabricstock.infrastructure.persistence.database import (
    create_db_engine,
    create_schema,
    create_session_factory,
)
from fabricstock.infrastructure.persistence.unit_of_work import SqlAlchemyUnitOfWork


def settings() -> Settings:
    return Settings.from_env()


@lru_cache(maxsize=None)
def _engine(database_url: str, busy_timeout: float) -> Engine:
    return create_db_engine(database_url, busy_timeout)


def engine() -> Engine:
    current = settings()
    return _engine(current.database_url, current.sqlite_busy_timeout)


def unit_of_work() -> SqlAlchemyUnitOfWork:
    return SqlAlchemyUnitOfWork(create_session_factory(engine()))


def init_database() -> None:
    create_schema(engine())
