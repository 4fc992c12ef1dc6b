from __future__ import annotations

import asyncio
import time

from infragraph.domain.errors import InventoryError, ScrapeCancelledError
from infragraph.domain.model import ConfigResult, ScrapeResults
from infragraph.domain.scraping import Category, ScrapeContext, ScraperRegistry, scrape_category
from tests.helpers.inventory import FakeScraper, ListPager, make_context, make_result


def test_registry_merges_in_declaration_order() -> None:
    first = FakeScraper([make_result("a1"), make_result("a2")], name="first")
    second = FakeScraper([make_result("b1")], name="second")
    registry = ScraperRegistry([first, second])

    results = asyncio.run(registry.scrape(make_context()))

    assert [result.id for result in results] == ["a1", "a2", "b1"]


def test_registry_skips_scrapers_that_cannot_scrape() -> None:
    enabled = FakeScraper([make_result("a")], name="enabled")
    disabled = FakeScraper([make_result("b")], name="disabled", enabled=False)
    registry = ScraperRegistry([enabled, disabled])

    results = asyncio.run(registry.scrape(make_context()))

    assert [result.id for result in results] == ["a"]
    assert disabled.calls == 0
    assert registry.matching(make_context().spec) == (enabled,)


def test_unexpected_scraper_exception_becomes_error_result() -> None:
    broken = FakeScraper(name="broken", type_prefix="Broken::", raises=KeyError("boom"))
    healthy = FakeScraper([make_result("ok")], name="healthy")
    registry = ScraperRegistry([broken, healthy])

    results = asyncio.run(registry.scrape(make_context()))

    errors = results.errors()
    assert len(errors) == 1
    assert isinstance(errors[0].error, InventoryError)
    assert errors[0].type == "Broken::"
    assert [result.id for result in results.items()] == ["ok"]


class _SlowScraper:
    name = "slow"
    type_prefix = "Slow::"

    def can_scrape(self, spec: object) -> bool:
        _ = spec
        return True

    async def scrape(self, ctx: ScrapeContext) -> ScrapeResults:
        pages = ListPager([["a"], ["b"], ["c"]])

        return await scrape_category(
            ctx,
            Category("things", "Thing"),
            type_prefix=self.type_prefix,
            open_pager=lambda: _DelayedPager(pages),
            translate=lambda item: ConfigResult(id=item, type="Slow::THING"),
        )


class _DelayedPager:
    def __init__(self, inner: ListPager[str]) -> None:
        self._inner = inner

    def has_more(self) -> bool:
        return self._inner.has_more()

    async def next_page(self) -> list[str]:
        await asyncio.sleep(0.05)
        return list(await self._inner.next_page())


def test_timeout_cancels_pagination_with_one_error() -> None:
    registry = ScraperRegistry([_SlowScraper()])
    ctx = make_context()

    results = asyncio.run(registry.scrape(ctx, timeout_seconds=0.07))

    assert ctx.is_cancelled
    errors = results.errors()
    assert len(errors) == 1
    assert isinstance(errors[0].error, ScrapeCancelledError)
    assert 1 <= len(results.items()) < 3


class _StalledPager:
    def __init__(self) -> None:
        self._served = False

    def has_more(self) -> bool:
        return not self._served

    async def next_page(self) -> list[str]:
        await asyncio.sleep(3)
        self._served = True
        return ["late"]


class _StalledScraper(_SlowScraper):
    async def scrape(self, ctx: ScrapeContext) -> ScrapeResults:
        return await scrape_category(
            ctx,
            Category("things", "Thing"),
            type_prefix=self.type_prefix,
            open_pager=_StalledPager,
            translate=lambda item: ConfigResult(id=item, type="Slow::THING"),
        )


def test_timeout_aborts_last_page_still_in_flight() -> None:
    registry = ScraperRegistry([_StalledScraper()])
    ctx = make_context()

    started = time.monotonic()
    results = asyncio.run(registry.scrape(ctx, timeout_seconds=0.1))
    elapsed = time.monotonic() - started

    assert elapsed < 1.0
    assert results.items() == []
    errors = results.errors()
    assert len(errors) == 1
    assert isinstance(errors[0].error, ScrapeCancelledError)
