"""SQLAlchemy-backed store handle and unit of work for inventory reconciliation."""

from __future__ import annotations

import threading
import weakref
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from infragraph.adapters.sqlalchemy.mappings import (
    mapper_registry,
    reference_columns,
    start_mappers,
)
from infragraph.adapters.sqlalchemy.migrations import upgrade_head
from infragraph.adapters.sqlalchemy.repositories import (
    SqlAlchemyConfigItemRepository,
    SqlAlchemyEvidenceRepository,
    SqlAlchemyReferenceRepository,
    SqlAlchemyRelationshipRepository,
    SqlAlchemyScrapeConfigRepository,
)
from infragraph.config import get_database_config
from infragraph.domain.errors import PersistenceError
from infragraph.domain.ports.unit_of_work import InventoryRepositories, RepositoryCollection

if TYPE_CHECKING:
    import uuid
    from types import TracebackType

    from sqlalchemy import Column
    from sqlalchemy.engine import Engine

    from infragraph.config import ReconciliationConfig


class StartupError(RuntimeError):
    """Raised when a SQLAlchemy unit of work is used before initialisation."""


@dataclass(slots=True)
class SqlAlchemyStore:
    """Process-wide storage handle: engine, session factory and per-scraper write locks.

    Built once by :func:`startup` and passed explicitly to every unit of work.
    A scraper lock lives only while some unit of work holds a reference to it.
    """

    engine: Engine
    session_factory: sessionmaker[Session]
    reference_columns: tuple[Column[uuid.UUID], ...] = ()
    _locks: weakref.WeakValueDictionary[uuid.UUID, threading.RLock] = field(
        default_factory=weakref.WeakValueDictionary, repr=False
    )
    _guard: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def scraper_lock(self, scraper_id: uuid.UUID) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(scraper_id)
            if lock is None:
                lock = self._locks[scraper_id] = threading.RLock()
            return lock

    def unit_of_work(self) -> SqlAlchemyUnitOfWork:
        return SqlAlchemyUnitOfWork(self)


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    reconciliation: ReconciliationConfig | None = None,
    migrate: bool = True,
) -> SqlAlchemyStore:
    """Initialise the SQLAlchemy engine, metadata, and session factory."""

    resolved_engine = engine or create_engine(
        database_uri or get_database_config().uri, future=True
    )
    start_mappers()
    if migrate:
        upgrade_head(engine=resolved_engine)

    tables = reconciliation.reference_tables if reconciliation is not None else None
    return SqlAlchemyStore(
        engine=resolved_engine,
        session_factory=sessionmaker(bind=resolved_engine, expire_on_commit=False),
        reference_columns=reference_columns(mapper_registry.metadata, tables),
    )


def shutdown(store: SqlAlchemyStore) -> None:
    """Dispose the store's engine."""

    store.engine.dispose()


class BaseSqlAlchemyUnitOfWork[TRepositories: RepositoryCollection](ABC):
    """Generic SQLAlchemy unit of work with pluggable repository collections."""

    def __init__(self, store: SqlAlchemyStore) -> None:
        self.store = store
        self.session_factory: sessionmaker[Session] = store.session_factory
        self._session: Session | None = None
        self._held_locks: list[threading.RLock] = []

    @abstractmethod
    def _build_repositories(self, session: Session) -> TRepositories: ...

    def __enter__(self) -> BaseSqlAlchemyUnitOfWork[TRepositories]:
        self.session = self.session_factory()
        self._repositories = self._build_repositories(self.session)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        try:
            if exc_type is not None:
                self.rollback()
            self.session.close()
        finally:
            self.session = None
            while self._held_locks:
                self._held_locks.pop().release()
        return False

    def lock_scraper(self, scraper_id: uuid.UUID) -> None:
        lock = self.store.scraper_lock(scraper_id)
        lock.acquire()
        self._held_locks.append(lock)
        self._lock_row(scraper_id)

    def _lock_row(self, scraper_id: uuid.UUID) -> None:
        _ = scraper_id

    def commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise PersistenceError(f"commit failed: {exc}") from exc

    def rollback(self) -> None:
        self.session.rollback()

    @property
    def repositories(self) -> TRepositories:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._repositories

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session

    @session.setter
    def session(self, session: Session | None) -> None:
        if self._session is not None and session is not None:
            raise StartupError("Unit of work session already initialised")
        self._session = session


class SqlAlchemyUnitOfWork(BaseSqlAlchemyUnitOfWork[InventoryRepositories]):
    """Unit of work for scrape configs and inventory."""

    def _build_repositories(self, session: Session) -> InventoryRepositories:
        return InventoryRepositories(
            scrapers=SqlAlchemyScrapeConfigRepository(session),
            config_items=SqlAlchemyConfigItemRepository(session),
            relationships=SqlAlchemyRelationshipRepository(session),
            references=SqlAlchemyReferenceRepository(session, self.store.reference_columns),
            evidences=SqlAlchemyEvidenceRepository(session),
        )

    def _lock_row(self, scraper_id: uuid.UUID) -> None:
        # FOR UPDATE is a no-op on SQLite; the in-process lock still serialises writers
        self.repositories.scrapers.lock(scraper_id)


if TYPE_CHECKING:
    from infragraph.domain.ports.unit_of_work import InventoryUnitOfWork

    def _uow_check(store: SqlAlchemyStore) -> InventoryUnitOfWork:
        return SqlAlchemyUnitOfWork(store)
