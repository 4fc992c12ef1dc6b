"""Ports for persisting scrape configs and inventory."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Collection, Sequence
    from datetime import datetime
    from uuid import UUID

    from infragraph.domain.model import (
        ConfigItem,
        ConfigRelationship,
        Evidence,
        ExternalID,
        ScrapeConfig,
    )


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class ScrapeConfigRepository(Repository["ScrapeConfig"], Protocol):
    def get(self, scraper_id: UUID) -> ScrapeConfig | None: ...

    def lock(self, scraper_id: UUID) -> ScrapeConfig | None:
        """Return the row while holding a write lock on it for the transaction."""
        ...

    def find_by_spec(self, spec: str) -> ScrapeConfig | None: ...

    def list_active(self) -> Sequence[ScrapeConfig]: ...


@runtime_checkable
class ConfigItemRepository(Repository["ConfigItem"], Protocol):
    def get_by_external_id(self, external: ExternalID) -> ConfigItem | None: ...

    def owned_by(self, scraper_id: UUID) -> Sequence[ConfigItem]:
        """Non-deleted items whose owner is ``scraper_id``."""
        ...

    def detach(self, item_ids: Collection[UUID]) -> int: ...

    def soft_delete(self, item_ids: Collection[UUID], *, at: datetime) -> int: ...


@runtime_checkable
class RelationshipRepository(Repository["ConfigRelationship"], Protocol):
    def get(self, config_id: UUID, related_id: UUID, relation: str) -> ConfigRelationship | None: ...

    def for_item(self, config_id: UUID) -> Sequence[ConfigRelationship]: ...


@runtime_checkable
class ReferenceRepository(Protocol):
    """Lookups across retained tables holding foreign keys to config items."""

    def referenced_ids(self, item_ids: Collection[UUID]) -> set[UUID]: ...


@runtime_checkable
class EvidenceRepository(Repository["Evidence"], Protocol):
    def for_item(self, config_id: UUID) -> Sequence[Evidence]: ...
