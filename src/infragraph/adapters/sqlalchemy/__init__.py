"""SQLAlchemy adapter package for infragraph."""

from __future__ import annotations

from .mappings import (
    JSONPayload,
    UTCDateTime,
    create_all_tables,
    mapper_registry,
    reference_columns,
    start_mappers,
)
from .repositories import (
    SqlAlchemyConfigItemRepository,
    SqlAlchemyEvidenceRepository,
    SqlAlchemyReferenceRepository,
    SqlAlchemyRelationshipRepository,
    SqlAlchemyScrapeConfigRepository,
)
from .unit_of_work import (
    SqlAlchemyStore,
    SqlAlchemyUnitOfWork,
    StartupError,
    shutdown,
    startup,
)

__all__ = [
    "JSONPayload",
    "SqlAlchemyConfigItemRepository",
    "SqlAlchemyEvidenceRepository",
    "SqlAlchemyReferenceRepository",
    "SqlAlchemyRelationshipRepository",
    "SqlAlchemyScrapeConfigRepository",
    "SqlAlchemyStore",
    "SqlAlchemyUnitOfWork",
    "StartupError",
    "create_all_tables",
    "mapper_registry",
    "reference_columns",
    "start_mappers",
    "startup",
    "shutdown",
]
