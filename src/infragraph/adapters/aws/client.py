"""Paging over boto3 paginators off the event loop."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterator, Mapping
from logging import getLogger
from typing import Any

log = getLogger(__name__)

type PageExtractor = Callable[[Mapping[str, Any]], list[dict[str, Any]]]


def result_key(key: str) -> PageExtractor:
    def extract(page: Mapping[str, Any]) -> list[dict[str, Any]]:
        return list(page.get(key, []))

    return extract


def reservation_instances(page: Mapping[str, Any]) -> list[dict[str, Any]]:
    return [
        instance
        for reservation in page.get("Reservations", [])
        for instance in reservation.get("Instances", [])
    ]


class Boto3Pager:
    """Wraps ``client.get_paginator(operation)``; each page is read in a worker thread."""

    def __init__(
        self,
        client: Any,  # noqa: ANN401
        operation: str,
        extract: PageExtractor,
        **params: Any,  # noqa: ANN401
    ) -> None:
        self._paginator = client.get_paginator(operation)
        self._operation = operation
        self._extract = extract
        self._params = params
        self._pages: Iterator[Mapping[str, Any]] | None = None
        self._exhausted = False

    def has_more(self) -> bool:
        return not self._exhausted

    async def next_page(self) -> list[dict[str, Any]]:
        page = await asyncio.to_thread(self._next)
        if page is None:
            self._exhausted = True
            return []
        items = self._extract(page)
        log.debug("%s page: %d item(s)", self._operation, len(items))
        return items

    def _next(self) -> Mapping[str, Any] | None:
        if self._pages is None:
            self._pages = iter(self._paginator.paginate(**self._params))
        return next(self._pages, None)
