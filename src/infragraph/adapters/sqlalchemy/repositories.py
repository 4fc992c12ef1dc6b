"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from itertools import batched
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import or_, select, update

from infragraph.adapters.sqlalchemy.mappings import (
    config_item_table,
    config_relationship_table,
    evidence_table,
    scrape_config_table,
)
from infragraph.domain.model import (
    ConfigItem,
    ConfigRelationship,
    Evidence,
    ScrapeConfig,
)

if TYPE_CHECKING:
    import uuid
    from collections.abc import Collection, Sequence
    from datetime import datetime

    from sqlalchemy import Column
    from sqlalchemy.engine import CursorResult
    from sqlalchemy.orm import Session

    from infragraph.domain.model import ExternalID

_IN_CLAUSE_BATCH = 500


class SqlAlchemyScrapeConfigRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: ScrapeConfig) -> None:
        self.session.add(entity)

    def get(self, scraper_id: uuid.UUID) -> ScrapeConfig | None:
        return self.session.get(ScrapeConfig, scraper_id)

    def lock(self, scraper_id: uuid.UUID) -> ScrapeConfig | None:
        stmt = (
            select(ScrapeConfig)
            .where(scrape_config_table.c.id == scraper_id)
            .with_for_update()
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def find_by_spec(self, spec: str) -> ScrapeConfig | None:
        stmt = (
            select(ScrapeConfig)
            .where(scrape_config_table.c.spec == spec)
            .where(scrape_config_table.c.deleted_at.is_(None))
            .order_by(scrape_config_table.c.created_at)
            .limit(1)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def list_active(self) -> Sequence[ScrapeConfig]:
        stmt = (
            select(ScrapeConfig)
            .where(scrape_config_table.c.deleted_at.is_(None))
            .order_by(scrape_config_table.c.created_at)
        )
        return self.session.execute(stmt).scalars().all()


class SqlAlchemyConfigItemRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: ConfigItem) -> None:
        self.session.add(entity)

    def get_by_external_id(self, external: ExternalID) -> ConfigItem | None:
        stmt = (
            select(ConfigItem)
            .where(config_item_table.c.external_id == external.external_id)
            .where(config_item_table.c.type == external.config_type)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def owned_by(self, scraper_id: uuid.UUID) -> Sequence[ConfigItem]:
        stmt = (
            select(ConfigItem)
            .where(config_item_table.c.scraper_id == scraper_id)
            .where(config_item_table.c.deleted_at.is_(None))
        )
        return self.session.execute(stmt).scalars().all()

    def detach(self, item_ids: Collection[uuid.UUID]) -> int:
        return self._update(item_ids, {"scraper_id": None})

    def soft_delete(self, item_ids: Collection[uuid.UUID], *, at: datetime) -> int:
        return self._update(item_ids, {"deleted_at": at})

    def _update(self, item_ids: Collection[uuid.UUID], values: dict[str, Any]) -> int:
        changed = 0
        for batch in batched(item_ids, _IN_CLAUSE_BATCH):
            stmt = (
                update(ConfigItem)
                .where(config_item_table.c.id.in_(batch))
                .values(**values)
                .execution_options(synchronize_session="fetch")
            )
            result = cast("CursorResult[Any]", self.session.execute(stmt))
            changed += result.rowcount
        return changed


class SqlAlchemyRelationshipRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: ConfigRelationship) -> None:
        self.session.add(entity)

    def get(
        self, config_id: uuid.UUID, related_id: uuid.UUID, relation: str
    ) -> ConfigRelationship | None:
        return self.session.get(ConfigRelationship, (config_id, related_id, relation))

    def for_item(self, config_id: uuid.UUID) -> Sequence[ConfigRelationship]:
        stmt = select(ConfigRelationship).where(
            or_(
                config_relationship_table.c.config_id == config_id,
                config_relationship_table.c.related_id == config_id,
            )
        )
        return self.session.execute(stmt).scalars().all()


class SqlAlchemyEvidenceRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Evidence) -> None:
        self.session.add(entity)

    def for_item(self, config_id: uuid.UUID) -> Sequence[Evidence]:
        stmt = (
            select(Evidence)
            .where(evidence_table.c.config_id == config_id)
            .order_by(evidence_table.c.created_at)
        )
        return self.session.execute(stmt).scalars().all()


class SqlAlchemyReferenceRepository:
    """Finds config items referenced from any of ``columns``."""

    def __init__(self, session: Session, columns: Sequence[Column[uuid.UUID]]) -> None:
        self.session = session
        self.columns = tuple(columns)

    def referenced_ids(self, item_ids: Collection[uuid.UUID]) -> set[uuid.UUID]:
        referenced: set[uuid.UUID] = set()
        for batch in batched(item_ids, _IN_CLAUSE_BATCH):
            for column in self.columns:
                stmt = select(column).where(column.in_(batch)).distinct()
                referenced.update(self.session.execute(stmt).scalars())
        return referenced
