"""Persisted inventory records: config items, their edges and annotations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .base import Entity, SoftDeletable, utcnow
from .results import ExternalID

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID


@dataclass(eq=False, kw_only=True)
class ConfigItem(Entity, SoftDeletable):
    """Durable record for one external resource, keyed by ``(external_id, type)``."""

    external_id: str
    type: str
    config_class: str = ""
    name: str = ""
    config: object = None
    scraper_id: UUID | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    last_scraped_at: datetime | None = None

    @property
    def external(self) -> ExternalID:
        return ExternalID(self.external_id, self.type)


@dataclass(eq=False, kw_only=True)
class ConfigRelationship:
    """Directed edge between two config items."""

    config_id: UUID
    related_id: UUID
    relation: str
    scraper_id: UUID | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


@dataclass(eq=False, kw_only=True)
class Evidence(Entity):
    """Operator annotation attached to a config item; keeps the item alive on cleanup."""

    config_id: UUID
    description: str = ""
    created_at: datetime = field(default_factory=utcnow)
