"""Domain port definitions for adapters."""

from __future__ import annotations

from .fetching import Connection, ConnectionResolver, Pager, ProviderScraper
from .persistence import (
    ConfigItemRepository,
    EvidenceRepository,
    ReferenceRepository,
    RelationshipRepository,
    Repository,
    ScrapeConfigRepository,
)
from .unit_of_work import (
    InventoryRepositories,
    InventoryUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "ConfigItemRepository",
    "Connection",
    "ConnectionResolver",
    "EvidenceRepository",
    "InventoryRepositories",
    "InventoryUnitOfWork",
    "Pager",
    "ProviderScraper",
    "ReferenceRepository",
    "RelationshipRepository",
    "Repository",
    "RepositoryCollection",
    "ScrapeConfigRepository",
    "UnitOfWork",
]
