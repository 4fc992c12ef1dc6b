"""Scrape config lifecycle: upsert, declarative update, deletion cascade."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from infragraph.domain.errors import ImmutableScrapeConfigError, ScrapeConfigNotFoundError
from infragraph.domain.model import ScrapeConfig, ScraperSource, utcnow

from .plan import apply_orphan_plan

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from infragraph.domain.model import ScraperSpec
    from infragraph.domain.ports import InventoryUnitOfWork

    from .plan import OrphanPlan

log = logging.getLogger(__name__)


def upsert_scrape_config(uow: InventoryUnitOfWork, config: ScrapeConfig) -> ScrapeConfig:
    """Return the active row with the same spec, inserting ``config`` if there is none.

    Spec equality is exact string equality of the canonical serialization, so
    calling this twice with the same spec stores a single row. The stored name
    always carries the spec digest, so two specs given the same name stay
    distinguishable.
    """

    with uow:
        repositories = uow.repositories
        existing = repositories.scrapers.find_by_spec(config.spec)
        if existing is not None:
            log.debug("Scrape config %s already stored for this spec", existing.id)
            return existing
        config.name = config.parsed_spec.generate_name(config.name)
        config.created_at = utcnow()
        repositories.scrapers.add(config)
        uow.commit()
        log.info("Stored scrape config %s (%s)", config.name, config.id)
        return config


def persist_declarative_scrape_config(
    uow: InventoryUnitOfWork,
    uid: UUID,
    name: str,
    spec: ScraperSpec,
) -> bool:
    """Insert or update a declarative scrape config keyed by its resource UID.

    Returns whether anything was written.
    """

    serialized = spec.serialize()
    with uow:
        uow.lock_scraper(uid)
        repositories = uow.repositories
        existing = repositories.scrapers.get(uid)
        if existing is None:
            config = ScrapeConfig(
                id=uid,
                name=name,
                source=ScraperSource.DECLARATIVE,
                spec=serialized,
                created_at=utcnow(),
            )
            repositories.scrapers.add(config)
            uow.commit()
            log.info("Stored declarative scrape config %s (%s)", name, uid)
            return True

        if not existing.source.is_mutable:
            raise ImmutableScrapeConfigError(
                f"scrape config {uid} comes from {existing.source} and cannot be updated"
            )
        if existing.is_deleted:
            raise ImmutableScrapeConfigError(f"scrape config {uid} has been deleted")
        if existing.name == name and existing.spec == serialized:
            return False

        existing.name = name
        existing.spec = serialized
        uow.commit()
        log.info("Updated declarative scrape config %s (%s)", name, uid)
        return True


def delete_scrape_config(
    uow: InventoryUnitOfWork,
    scraper_id: UUID,
    now: datetime | None = None,
) -> OrphanPlan:
    """Soft-delete a scrape config and release the items it owns.

    Owned items still referenced from a retained table are detached; the rest
    are soft-deleted. Everything happens in one transaction.
    """

    now = now or utcnow()
    with uow:
        uow.lock_scraper(scraper_id)
        repositories = uow.repositories
        config = repositories.scrapers.get(scraper_id)
        if config is None:
            raise ScrapeConfigNotFoundError(scraper_id)
        if config.deleted_at is None:
            config.deleted_at = now

        owned = repositories.config_items.owned_by(scraper_id)
        plan = apply_orphan_plan(repositories, (item.id for item in owned), now=now)
        uow.commit()

    log.info(
        "Deleted scrape config %s: %d items detached, %d deleted",
        scraper_id,
        len(plan.detach),
        len(plan.delete),
    )
    return plan
