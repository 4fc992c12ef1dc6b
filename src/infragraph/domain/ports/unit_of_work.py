"""Unit-of-work abstractions for coordinating repositories."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType
    from uuid import UUID

    from infragraph.domain.ports.persistence import (
        ConfigItemRepository,
        EvidenceRepository,
        ReferenceRepository,
        RelationshipRepository,
        ScrapeConfigRepository,
    )


@runtime_checkable
class RepositoryCollection(Protocol):
    """Marker protocol for groups of repositories managed together."""


@runtime_checkable
class UnitOfWork[TRepositories: RepositoryCollection](Protocol):
    """Generic unit-of-work boundary around a repository collection."""

    @property
    def repositories(self) -> TRepositories: ...

    def __enter__(self) -> UnitOfWork[TRepositories]: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def lock_scraper(self, scraper_id: UUID) -> None:
        """Serialise writers for ``scraper_id`` until the unit of work exits."""
        ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


@dataclass(slots=True)
class InventoryRepositories(RepositoryCollection):
    """Repositories required to reconcile scrape results."""

    scrapers: ScrapeConfigRepository
    config_items: ConfigItemRepository
    relationships: RelationshipRepository
    references: ReferenceRepository
    evidences: EvidenceRepository


type InventoryUnitOfWork = UnitOfWork[InventoryRepositories]
