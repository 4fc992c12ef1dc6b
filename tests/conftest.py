from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from infragraph.adapters.sqlalchemy import start_mappers
from infragraph.adapters.sqlalchemy.migrations import upgrade_head
from infragraph.adapters.sqlalchemy.unit_of_work import SqlAlchemyStore, shutdown, startup

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from infragraph.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    start_mappers()
    upgrade_head(engine=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Iterator[Session]:
    session_factory = sessionmaker(bind=sqlite_engine, future=True)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store(sqlite_engine: Engine) -> Iterator[SqlAlchemyStore]:
    handle = startup(engine=sqlite_engine, migrate=False)
    try:
        yield handle
    finally:
        shutdown(handle)


@pytest.fixture
def sqlite_unit_of_work(store: SqlAlchemyStore) -> Callable[[], SqlAlchemyUnitOfWork]:
    return store.unit_of_work
