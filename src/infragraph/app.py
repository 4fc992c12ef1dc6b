"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from dotenv import load_dotenv
from sqlalchemy.exc import SQLAlchemyError

from infragraph.adapters import config_files
from infragraph.adapters.aws import AwsScraper
from infragraph.adapters.azure import AzureScraper
from infragraph.adapters.connections import EnvironmentConnectionResolver
from infragraph.adapters.sqlalchemy import startup
from infragraph.config import configure_logging, get_reconciliation_config, get_scrape_run_config
from infragraph.domain import reconciliation
from infragraph.domain.errors import PersistenceError, ScrapeConfigNotFoundError
from infragraph.domain.model import RunStatus, utcnow
from infragraph.domain.scraping import ScrapeContext, ScraperRegistry

if TYPE_CHECKING:
    import uuid
    from collections.abc import Iterable
    from datetime import datetime
    from pathlib import Path

    from sqlalchemy.engine import Engine

    from infragraph.adapters.sqlalchemy import SqlAlchemyStore
    from infragraph.config import ScrapeRunConfig
    from infragraph.domain.model import ConfigResult, ScrapeConfig, ScraperSpec
    from infragraph.domain.ports import ConnectionResolver
    from infragraph.domain.reconciliation import MergeResult, OrphanPlan

log = getLogger(__name__)


def bootstrap(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    env_file: str | Path | None = None,
    log_level: int = logging.INFO,
) -> SqlAlchemyStore:
    """Load ``.env``, configure logging and open the store."""

    load_dotenv(env_file)
    configure_logging(level=log_level)
    return startup(
        engine=engine,
        database_uri=database_uri,
        reconciliation=get_reconciliation_config(),
    )


def default_registry() -> ScraperRegistry:
    return ScraperRegistry([AzureScraper(), AwsScraper()])


@dataclass(slots=True)
class ScrapeRunSummary:
    """Outcome of one run: overall status plus the per-category errors for triage."""

    scraper_id: uuid.UUID
    status: RunStatus
    started_at: datetime
    finished_at: datetime
    observed: int = 0
    errors: list[ConfigResult] = field(default_factory=list["ConfigResult"])
    merge: MergeResult | None = None
    failure: PersistenceError | None = None

    @property
    def succeeded(self) -> bool:
        return self.status is RunStatus.SUCCEEDED


def upsert_scrape_config(store: SqlAlchemyStore, config: ScrapeConfig) -> ScrapeConfig:
    return reconciliation.upsert_scrape_config(store.unit_of_work(), config)


def persist_declarative_scrape_config(
    store: SqlAlchemyStore,
    uid: uuid.UUID,
    name: str,
    spec: ScraperSpec,
) -> bool:
    return reconciliation.persist_declarative_scrape_config(store.unit_of_work(), uid, name, spec)


def delete_scrape_config(store: SqlAlchemyStore, scraper_id: uuid.UUID) -> OrphanPlan:
    return reconciliation.delete_scrape_config(store.unit_of_work(), scraper_id)


def load_scrape_config_files(
    store: SqlAlchemyStore,
    paths: Iterable[str | Path],
) -> list[ScrapeConfig]:
    """Upsert every scrape config found in ``paths``; identical specs collapse to one row."""

    return [
        upsert_scrape_config(store, config)
        for config in config_files.load_scrape_config_files(paths)
    ]


def run_scraper(
    store: SqlAlchemyStore,
    scraper_id: uuid.UUID,
    *,
    registry: ScraperRegistry | None = None,
    connections: ConnectionResolver | None = None,
    run_config: ScrapeRunConfig | None = None,
) -> ScrapeRunSummary:
    """Scrape, normalize, resolve and merge for one scrape config.

    Provider and category failures are reported in ``errors`` of a successful
    run; only a storage failure marks the run as failed.
    """

    effective_run_config = run_config or get_scrape_run_config()
    with store.unit_of_work() as uow:
        config = uow.repositories.scrapers.get(scraper_id)
    if config is None or config.is_deleted:
        raise ScrapeConfigNotFoundError(scraper_id)

    ctx = ScrapeContext(
        scrape_config=config,
        connections=connections or EnvironmentConnectionResolver(),
        trace=effective_run_config.trace,
        volatile_keys=effective_run_config.volatile_keys,
    )
    effective_registry = registry or default_registry()
    started_at = utcnow()
    log.info("Starting run for scrape config %s (%s)", config.name, scraper_id)

    results = asyncio.run(
        effective_registry.scrape(ctx, timeout_seconds=effective_run_config.timeout_seconds)
    )
    errors = results.errors()
    observed = len(results.items())

    try:
        merge = reconciliation.merge_run_results(store.unit_of_work(), scraper_id, results)
    except (SQLAlchemyError, PersistenceError) as exc:
        failure = (
            exc if isinstance(exc, PersistenceError) else PersistenceError(f"merge failed: {exc}")
        )
        if failure is not exc:
            failure.__cause__ = exc
        log.error("Run for scrape config %s failed: %s", scraper_id, failure)
        return ScrapeRunSummary(
            scraper_id=scraper_id,
            status=RunStatus.FAILED,
            started_at=started_at,
            finished_at=utcnow(),
            observed=observed,
            errors=errors,
            failure=failure,
        )

    log.info(
        "Finished run for scrape config %s: observed=%d, errors=%d",
        scraper_id,
        observed,
        len(errors),
    )
    return ScrapeRunSummary(
        scraper_id=scraper_id,
        status=RunStatus.SUCCEEDED,
        started_at=started_at,
        finished_at=utcnow(),
        observed=observed,
        errors=errors,
        merge=merge,
    )


def run_all_scrapers(
    store: SqlAlchemyStore,
    *,
    registry: ScraperRegistry | None = None,
    connections: ConnectionResolver | None = None,
    run_config: ScrapeRunConfig | None = None,
) -> list[ScrapeRunSummary]:
    with store.unit_of_work() as uow:
        scraper_ids = [config.id for config in uow.repositories.scrapers.list_active()]
    return [
        run_scraper(
            store,
            scraper_id,
            registry=registry,
            connections=connections,
            run_config=run_config,
        )
        for scraper_id in scraper_ids
    ]
