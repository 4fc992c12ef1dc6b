"""Merge one run's results into the stored inventory."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from infragraph.domain.errors import ScrapeConfigNotFoundError
from infragraph.domain.model import (
    ConfigItem,
    ConfigRelationship,
    ScrapeResults,
    in_protected_scope,
    utcnow,
)

from .plan import OrphanPlan, apply_orphan_plan

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime
    from uuid import UUID

    from infragraph.domain.model import ConfigResult, ExternalID, RelationshipResult
    from infragraph.domain.ports import InventoryRepositories, InventoryUnitOfWork

log = logging.getLogger(__name__)


@dataclass(slots=True)
class MergeResult:
    """Counters describing what a merge wrote."""

    created: int = 0
    updated: int = 0
    unchanged: int = 0
    revived: int = 0
    relationships_created: int = 0
    relationships_updated: int = 0
    unresolved_relationships: int = 0
    orphans: OrphanPlan = field(default_factory=OrphanPlan)

    @property
    def observed(self) -> int:
        return self.created + self.updated + self.unchanged


class _RunMerger:
    def __init__(
        self,
        repositories: InventoryRepositories,
        scraper_id: UUID,
        now: datetime,
    ) -> None:
        self.repositories = repositories
        self.scraper_id = scraper_id
        self.now = now
        self.result = MergeResult()
        self.observed: dict[ExternalID, ConfigItem] = {}
        self._edges: set[tuple[UUID, UUID, str]] = set()

    def upsert_item(self, config: ConfigResult) -> None:
        external = config.external
        item = self.observed.get(external)
        first_sighting = item is None
        if item is None:
            item = self.repositories.config_items.get_by_external_id(external)

        if item is None:
            item = ConfigItem(
                external_id=config.id,
                type=config.type,
                config_class=config.config_class,
                name=config.name,
                config=config.config,
                scraper_id=self.scraper_id,
                created_at=self.now,
                updated_at=self.now,
                last_scraped_at=self.now,
            )
            self.repositories.config_items.add(item)
            self.observed[external] = item
            self.result.created += 1
            return

        changed = (
            item.name != config.name
            or item.config_class != config.config_class
            or item.config != config.config
        )
        if item.is_deleted:
            item.deleted_at = None
            changed = True
            self.result.revived += 1
        item.name = config.name
        item.config_class = config.config_class
        item.config = config.config
        item.scraper_id = self.scraper_id
        item.last_scraped_at = self.now
        if changed:
            item.updated_at = self.now
        self.observed[external] = item
        if not first_sighting:
            return
        if changed:
            self.result.updated += 1
        else:
            self.result.unchanged += 1

    def _lookup(self, external: ExternalID) -> ConfigItem | None:
        item = self.observed.get(external)
        if item is not None:
            return item
        item = self.repositories.config_items.get_by_external_id(external)
        if item is None or item.is_deleted:
            return None
        return item

    def upsert_relationship(self, edge: RelationshipResult) -> None:
        source = self._lookup(edge.config)
        target = self._lookup(edge.related)
        if source is None or target is None:
            self.result.unresolved_relationships += 1
            log.debug(
                "Skipping %s edge %s -> %s: endpoint not stored",
                edge.relation,
                edge.config.external_id,
                edge.related.external_id,
            )
            return
        key = (source.id, target.id, edge.relation)
        if key in self._edges:
            return
        self._edges.add(key)

        stored = self.repositories.relationships.get(*key)
        if stored is None:
            self.repositories.relationships.add(
                ConfigRelationship(
                    config_id=source.id,
                    related_id=target.id,
                    relation=edge.relation,
                    scraper_id=self.scraper_id,
                    created_at=self.now,
                    updated_at=self.now,
                )
            )
            self.result.relationships_created += 1
            return
        stored.scraper_id = self.scraper_id
        stored.updated_at = self.now
        self.result.relationships_updated += 1

    def stale_item_ids(self, results: list[ConfigResult]) -> list[UUID]:
        scopes = ScrapeResults(results).protected_scopes()
        observed_ids = {item.id for item in self.observed.values()}
        return [
            item.id
            for item in self.repositories.config_items.owned_by(self.scraper_id)
            if item.id not in observed_ids
            and not in_protected_scope(item.type, item.config_class, scopes)
        ]


def merge_run_results(
    uow: InventoryUnitOfWork,
    scraper_id: UUID,
    results: Iterable[ConfigResult],
    now: datetime | None = None,
) -> MergeResult:
    """Upsert observed items and edges, then release items this run no longer saw.

    Items inside a scope whose fetch failed in this run are left untouched.
    The whole merge is one transaction.
    """

    now = now or utcnow()
    materialized = list(results)
    with uow:
        uow.lock_scraper(scraper_id)
        repositories = uow.repositories
        config = repositories.scrapers.get(scraper_id)
        if config is None or config.is_deleted:
            raise ScrapeConfigNotFoundError(scraper_id)

        merger = _RunMerger(repositories, scraper_id, now)
        for result in materialized:
            if not result.is_error and result.id:
                merger.upsert_item(result)
        for result in materialized:
            if result.is_error or not result.id:
                continue
            for edge in result.relationships:
                merger.upsert_relationship(edge)

        merger.result.orphans = apply_orphan_plan(
            repositories, merger.stale_item_ids(materialized), now=now
        )
        uow.commit()

    summary = merger.result
    log.info(
        "Merged run for %s: %d created, %d updated, %d unchanged, %d stale detached, "
        "%d stale deleted, %d unresolved edges",
        scraper_id,
        summary.created,
        summary.updated,
        summary.unchanged,
        len(summary.orphans.detach),
        len(summary.orphans.delete),
        summary.unresolved_relationships,
    )
    return summary
