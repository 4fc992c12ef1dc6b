"""Initial inventory schema.

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

from infragraph.adapters.sqlalchemy.mappings import JSONPayload, UTCDateTime

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "config_scrapers",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column(
            "source",
            sa.Enum("declarative", "file", "ui", name="scrapersource", native_enum=False, length=16),
            nullable=False,
        ),
        sa.Column("spec", sa.Text(), nullable=False),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.Column("deleted_at", UTCDateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_config_scrapers")),
    )
    op.create_table(
        "config_items",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("external_id", sa.String(length=1024), nullable=False),
        sa.Column("type", sa.String(length=255), nullable=False),
        sa.Column("config_class", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=1024), nullable=False),
        sa.Column("config", JSONPayload(), nullable=True),
        sa.Column("scraper_id", sa.Uuid(), nullable=True),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.Column("updated_at", UTCDateTime(), nullable=False),
        sa.Column("last_scraped_at", UTCDateTime(), nullable=True),
        sa.Column("deleted_at", UTCDateTime(), nullable=True),
        sa.ForeignKeyConstraint(
            ["scraper_id"],
            ["config_scrapers.id"],
            name=op.f("fk_config_items_scraper_id_config_scrapers"),
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_config_items")),
        sa.UniqueConstraint("external_id", "type", name="uq_config_items_external"),
    )
    op.create_index("ix_config_items_scraper", "config_items", ["scraper_id"])
    op.create_table(
        "config_relationships",
        sa.Column("config_id", sa.Uuid(), nullable=False),
        sa.Column("related_id", sa.Uuid(), nullable=False),
        sa.Column("relation", sa.String(length=255), nullable=False),
        sa.Column("scraper_id", sa.Uuid(), nullable=True),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.Column("updated_at", UTCDateTime(), nullable=False),
        sa.ForeignKeyConstraint(
            ["config_id"],
            ["config_items.id"],
            name=op.f("fk_config_relationships_config_id_config_items"),
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["related_id"],
            ["config_items.id"],
            name=op.f("fk_config_relationships_related_id_config_items"),
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["scraper_id"],
            ["config_scrapers.id"],
            name=op.f("fk_config_relationships_scraper_id_config_scrapers"),
        ),
        sa.PrimaryKeyConstraint(
            "config_id", "related_id", "relation", name=op.f("pk_config_relationships")
        ),
    )
    op.create_index("ix_config_relationships_related", "config_relationships", ["related_id"])
    op.create_table(
        "evidences",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("config_id", sa.Uuid(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.ForeignKeyConstraint(
            ["config_id"],
            ["config_items.id"],
            name=op.f("fk_evidences_config_id_config_items"),
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_evidences")),
    )
    op.create_index("ix_evidences_config", "evidences", ["config_id"])


def downgrade() -> None:
    op.drop_index("ix_evidences_config", table_name="evidences")
    op.drop_table("evidences")
    op.drop_index("ix_config_relationships_related", table_name="config_relationships")
    op.drop_table("config_relationships")
    op.drop_index("ix_config_items_scraper", table_name="config_items")
    op.drop_table("config_items")
    op.drop_table("config_scrapers")
