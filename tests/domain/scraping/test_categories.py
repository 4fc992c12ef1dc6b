from __future__ import annotations

import asyncio

from infragraph.domain.errors import CategoryFetchError, ScrapeCancelledError
from infragraph.domain.model import ConfigResult
from infragraph.domain.scraping import Category, join_categories, scrape_category
from tests.helpers.inventory import ListPager, make_context

PREFIX = "Test::"


def _translate(item: str) -> ConfigResult:
    if item == "bad":
        raise ValueError("cannot translate")
    return ConfigResult(id=item, name=item, config_class="Thing", type=PREFIX + "THING")


def _run(pager: ListPager[str], category: Category | None = None) -> list[ConfigResult]:
    ctx = make_context()
    results = asyncio.run(
        scrape_category(
            ctx,
            category or Category("things", "Thing"),
            type_prefix=PREFIX,
            open_pager=lambda: pager,
            translate=_translate,
        )
    )
    return list(results)


def test_reads_every_page_in_order() -> None:
    pager = ListPager([["a", "b"], ["c"], []])

    results = _run(pager)

    assert [result.id for result in results] == ["a", "b", "c"]
    assert pager.requests == 3


def test_page_failure_keeps_earlier_items_and_adds_one_error() -> None:
    pager = ListPager([["a", "b"]], fail_at=1)

    results = _run(pager, Category("load_balancers", "LoadBalancer"))

    assert [result.id for result in results[:2]] == ["a", "b"]
    assert len(results) == 3
    error = results[2].error
    assert isinstance(error, CategoryFetchError)
    assert error.category == "load_balancers"
    assert "failed to read load balancers page" in str(error)
    assert results[2].config_class == "LoadBalancer"
    assert results[2].type == PREFIX


def test_client_construction_failure_is_one_error() -> None:
    def open_pager() -> ListPager[str]:
        raise RuntimeError("no credentials")

    results = asyncio.run(
        scrape_category(
            make_context(),
            Category("firewalls", "Firewall"),
            type_prefix=PREFIX,
            open_pager=open_pager,
            translate=_translate,
        )
    )

    assert len(results) == 1
    assert "failed to initiate firewalls client" in str(results[0].error)
    assert isinstance(results[0].error.__cause__, RuntimeError)


def test_translation_failure_does_not_stop_the_category() -> None:
    results = _run(ListPager([["a", "bad", "c"]]))

    assert [result.id for result in results if not result.is_error] == ["a", "c"]
    assert len([result for result in results if result.is_error]) == 1


def test_cancelled_run_stops_before_next_page() -> None:
    ctx = make_context()
    pager = ListPager([["a"], ["b"]])

    async def scenario() -> list[ConfigResult]:
        ctx.cancel()
        return list(
            await scrape_category(
                ctx,
                Category("things", "Thing"),
                type_prefix=PREFIX,
                open_pager=lambda: pager,
                translate=_translate,
            )
        )

    results = asyncio.run(scenario())

    assert len(results) == 1
    assert isinstance(results[0].error, ScrapeCancelledError)
    assert pager.requests == 0


class _HangingPager:
    def __init__(self) -> None:
        self.interrupted = False
        self._served = False

    def has_more(self) -> bool:
        return not self._served

    async def next_page(self) -> list[str]:
        try:
            await asyncio.sleep(3)
        except asyncio.CancelledError:
            self.interrupted = True
            raise
        self._served = True
        return ["late"]


def test_cancel_interrupts_page_in_flight() -> None:
    ctx = make_context()
    pager = _HangingPager()

    async def scenario() -> list[ConfigResult]:
        asyncio.get_running_loop().call_later(0.05, ctx.cancel)
        return list(
            await scrape_category(
                ctx,
                Category("things", "Thing"),
                type_prefix=PREFIX,
                open_pager=lambda: pager,
                translate=_translate,
            )
        )

    results = asyncio.run(scenario())

    assert pager.interrupted
    assert len(results) == 1
    assert isinstance(results[0].error, ScrapeCancelledError)
    assert "after 0 page(s)" in str(results[0].error)


def test_three_categories_with_middle_failure() -> None:
    ctx = make_context()
    categories = [Category("first", "A"), Category("second", "B"), Category("third", "C")]
    pagers = {
        "first": ListPager([["a1", "a2"]]),
        "second": ListPager([], fail_at=0),
        "third": ListPager([["c1"], ["c2"]]),
    }

    async def scenario() -> list[ConfigResult]:
        merged = await join_categories(
            scrape_category(
                ctx,
                category,
                type_prefix=PREFIX,
                open_pager=lambda name=category.name: pagers[name],
                translate=_translate,
            )
            for category in categories
        )
        return list(merged)

    results = asyncio.run(scenario())

    assert [result.id for result in results if not result.is_error] == ["a1", "a2", "c1", "c2"]
    errors = [result for result in results if result.is_error]
    assert len(errors) == 1
    assert isinstance(errors[0].error, CategoryFetchError)
    assert errors[0].error.category == "second"
    assert errors[0].config_class == "B"
    assert [result.id or "error" for result in results] == ["a1", "a2", "error", "c1", "c2"]
