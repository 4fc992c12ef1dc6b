"""SQLAlchemy mapping metadata for the inventory model."""

from __future__ import annotations

import json
import logging
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING

from sqlalchemy import (
    Column,
    DateTime,
    Dialect,
    Enum,
    ForeignKey,
    Index,
    MetaData,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)
from sqlalchemy.orm import configure_mappers

from infragraph.config import ConfigurationError
from infragraph.domain.model import (
    ConfigItem,
    ConfigRelationship,
    Evidence,
    ScrapeConfig,
    ScraperSource,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class JSONPayload(TypeDecorator[object]):
    """Provider payload stored as JSON text; key order is preserved."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: object, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return json.dumps(value, default=str)

    def process_result_value(self, value: str | None, dialect: Dialect) -> object:
        _ = dialect
        if value is None:
            return None
        return json.loads(value)


def _enum_values(enum_cls: type[ScraperSource]) -> list[str]:
    return [member.value for member in enum_cls]


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

CONFIG_ITEMS_TABLE = "config_items"
RELATIONSHIPS_TABLE = "config_relationships"

scrape_config_table = Table(
    "config_scrapers",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String(255), nullable=False),
    Column(
        "source",
        Enum(ScraperSource, native_enum=False, values_callable=_enum_values, length=16),
        nullable=False,
    ),
    Column("spec", Text, nullable=False),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("deleted_at", UTCDateTime(), nullable=True),
)

config_item_table = Table(
    CONFIG_ITEMS_TABLE,
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("external_id", String(1024), nullable=False),
    Column("type", String(255), nullable=False),
    Column("config_class", String(255), nullable=False, default=""),
    Column("name", String(1024), nullable=False, default=""),
    Column("config", JSONPayload(), nullable=True),
    Column("scraper_id", UUIDColumnType, ForeignKey("config_scrapers.id"), nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("updated_at", UTCDateTime(), nullable=False),
    Column("last_scraped_at", UTCDateTime(), nullable=True),
    Column("deleted_at", UTCDateTime(), nullable=True),
    UniqueConstraint("external_id", "type", name="uq_config_items_external"),
    Index("ix_config_items_scraper", "scraper_id"),
)

config_relationship_table = Table(
    RELATIONSHIPS_TABLE,
    mapper_registry.metadata,
    Column(
        "config_id",
        UUIDColumnType,
        ForeignKey("config_items.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "related_id",
        UUIDColumnType,
        ForeignKey("config_items.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("relation", String(255), primary_key=True),
    Column("scraper_id", UUIDColumnType, ForeignKey("config_scrapers.id"), nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("updated_at", UTCDateTime(), nullable=False),
    Index("ix_config_relationships_related", "related_id"),
)

evidence_table = Table(
    "evidences",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("config_id", UUIDColumnType, ForeignKey("config_items.id"), nullable=False),
    Column("description", Text, nullable=False, default=""),
    Column("created_at", UTCDateTime(), nullable=False),
    Index("ix_evidences_config", "config_id"),
)


def reference_columns(
    metadata: MetaData,
    tables: tuple[str, ...] | None = None,
) -> tuple[Column[uuid.UUID], ...]:
    """Columns holding a foreign key to ``config_items.id`` in retained tables.

    ``tables`` restricts the search to the named tables; by default every table
    except the relationship table is considered.
    """

    if tables is None:
        candidates = [
            table for name, table in metadata.tables.items() if name != RELATIONSHIPS_TABLE
        ]
    else:
        unknown = [name for name in tables if name not in metadata.tables]
        if unknown:
            raise ConfigurationError(f"unknown reference tables: {', '.join(unknown)}")
        candidates = [metadata.tables[name] for name in tables]

    columns: list[Column[uuid.UUID]] = []
    for table in candidates:
        for foreign_key in table.foreign_keys:
            target = foreign_key.column
            if target.table.name == CONFIG_ITEMS_TABLE and target.name == "id":
                columns.append(foreign_key.parent)  # pyright: ignore[reportArgumentType]
    return tuple(columns)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(ScrapeConfig, scrape_config_table)
    mapper_registry.map_imperatively(ConfigItem, config_item_table)
    mapper_registry.map_imperatively(ConfigRelationship, config_relationship_table)
    mapper_registry.map_imperatively(Evidence, evidence_table)

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
