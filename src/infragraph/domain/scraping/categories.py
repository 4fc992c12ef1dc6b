"""Shared driver for fetching one resource category through a pager."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from infragraph.domain.errors import CategoryFetchError, ScrapeCancelledError
from infragraph.domain.model import ScrapeResults

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable, Sequence

    from infragraph.domain.model import ConfigResult
    from infragraph.domain.ports import Pager
    from infragraph.domain.scraping.context import ScrapeContext

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Category:
    """A resource kind fetched within a provider scrape."""

    name: str
    config_class: str
    label: str = ""

    @property
    def display_name(self) -> str:
        return self.label or self.name.replace("_", " ")


def _failure(
    results: ScrapeResults,
    category: Category,
    type_prefix: str,
    error: CategoryFetchError,
    cause: BaseException | None = None,
) -> None:
    error.__cause__ = cause
    log.warning("%s", error)
    results.add_error(error, config_class=category.config_class, type=type_prefix)


def _cancelled(results: ScrapeResults, category: Category, type_prefix: str, pages: int) -> None:
    error = ScrapeCancelledError(
        f"scrape cancelled while reading {category.display_name} after {pages} page(s)",
        category=category.name,
    )
    _failure(results, category, type_prefix, error)


async def _next_page[TItem](ctx: ScrapeContext, pager: Pager[TItem]) -> Sequence[TItem] | None:
    """Await one page, or return None as soon as the run is cancelled."""

    fetch = asyncio.ensure_future(pager.next_page())
    stop = asyncio.ensure_future(ctx.wait_cancelled())
    try:
        await asyncio.wait({fetch, stop}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for task in (fetch, stop):
            if not task.done():
                task.cancel()
        await asyncio.gather(fetch, stop, return_exceptions=True)
    if stop.done() and not stop.cancelled():
        return None
    return fetch.result()


async def scrape_category[TItem](
    ctx: ScrapeContext,
    category: Category,
    *,
    type_prefix: str,
    open_pager: Callable[[], Pager[TItem]],
    translate: Callable[[TItem], ConfigResult],
) -> ScrapeResults:
    """Drain one category into its own result buffer.

    A failure to build the client or read a page ends the category with one
    error result; items read from earlier pages are kept. Cancellation, even
    mid-page, ends it with one ``ScrapeCancelledError``.
    """

    results = ScrapeResults()
    name = category.display_name
    try:
        pager = open_pager()
    except Exception as exc:  # noqa: BLE001
        error = CategoryFetchError(
            f"failed to initiate {name} client: {exc}", category=category.name
        )
        _failure(results, category, type_prefix, error, exc)
        return results

    pages = 0
    while pager.has_more():
        if ctx.is_cancelled:
            _cancelled(results, category, type_prefix, pages)
            return results
        try:
            page = await _next_page(ctx, pager)
        except Exception as exc:  # noqa: BLE001
            error = CategoryFetchError(f"failed to read {name} page: {exc}", category=category.name)
            _failure(results, category, type_prefix, error, exc)
            return results
        if page is None:
            _cancelled(results, category, type_prefix, pages)
            return results
        pages += 1
        for native in page:
            try:
                results.append(translate(native))
            except Exception as exc:  # noqa: BLE001
                error = CategoryFetchError(
                    f"failed to translate {name} item: {exc}", category=category.name
                )
                _failure(results, category, type_prefix, error, exc)

    if ctx.is_cancelled:
        _cancelled(results, category, type_prefix, pages)
        return results
    log.debug("fetched %d %s over %d page(s)", len(results), name, pages)
    return results


async def join_categories(jobs: Iterable[Awaitable[ScrapeResults]]) -> ScrapeResults:
    """Run category fetches concurrently and merge their buffers in declared order."""

    buffers = await asyncio.gather(*jobs)
    merged = ScrapeResults()
    for buffer in buffers:
        merged.extend(buffer)
    return merged
