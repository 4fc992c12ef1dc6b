"""Closed registry of provider scrapers."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from infragraph.domain.errors import InventoryError
from infragraph.domain.model import ScrapeResults

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from infragraph.domain.model import ScraperSpec
    from infragraph.domain.ports import ProviderScraper
    from infragraph.domain.scraping.context import ScrapeContext

log = logging.getLogger(__name__)


class ScraperRegistry:
    """Holds provider scrapers in declaration order and fans a run out to them."""

    def __init__(self, scrapers: Sequence[ProviderScraper]) -> None:
        self._scrapers = tuple(scrapers)

    def __iter__(self) -> Iterator[ProviderScraper]:
        return iter(self._scrapers)

    def __len__(self) -> int:
        return len(self._scrapers)

    def matching(self, spec: ScraperSpec) -> tuple[ProviderScraper, ...]:
        return tuple(scraper for scraper in self._scrapers if scraper.can_scrape(spec))

    async def scrape(
        self,
        ctx: ScrapeContext,
        *,
        timeout_seconds: float | None = None,
    ) -> ScrapeResults:
        """Run every matching scraper concurrently; results keep registry order."""

        scrapers = self.matching(ctx.spec)
        if not scrapers:
            log.info("Scrape config %s has no configured providers", ctx.scrape_config.name)
            return ScrapeResults()

        timer = None
        if timeout_seconds is not None:
            timer = asyncio.get_running_loop().call_later(timeout_seconds, ctx.cancel)
        try:
            outcomes = await asyncio.gather(*(self._run(scraper, ctx) for scraper in scrapers))
        finally:
            if timer is not None:
                timer.cancel()

        merged = ScrapeResults()
        for outcome in outcomes:
            merged.extend(outcome)
        return merged

    @staticmethod
    async def _run(scraper: ProviderScraper, ctx: ScrapeContext) -> ScrapeResults:
        log.info("Scraping %s for %s", scraper.name, ctx.scrape_config.name)
        try:
            results = await scraper.scrape(ctx)
        except Exception as exc:  # noqa: BLE001
            log.exception("%s scraper failed unexpectedly", scraper.name)
            results = ScrapeResults()
            error = InventoryError(f"{scraper.name} scraper failed: {exc}")
            error.__cause__ = exc
            results.add_error(error, type=scraper.type_prefix)
            return results
        log.info("Finished %s scrape: %r", scraper.name, results)
        return results
