"""Ports for fetching provider data."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from infragraph.domain.model import EnvVar, ScraperSpec, ScrapeResults
    from infragraph.domain.scraping.context import ScrapeContext


@runtime_checkable
class Pager[TItem](Protocol):
    """Minimal page-cursor contract over a provider list call."""

    def has_more(self) -> bool: ...

    async def next_page(self) -> Sequence[TItem]: ...


@runtime_checkable
class ProviderScraper(Protocol):
    """One implementation per provider; failures are returned as error results."""

    name: str
    type_prefix: str

    def can_scrape(self, spec: ScraperSpec) -> bool: ...

    async def scrape(self, ctx: ScrapeContext) -> ScrapeResults: ...


@dataclass(frozen=True, slots=True)
class Connection:
    """Resolved secret material for a named connection."""

    name: str
    username: str = ""
    password: str = ""
    url: str | None = None
    properties: dict[str, str] = field(default_factory=dict[str, str])


@runtime_checkable
class ConnectionResolver(Protocol):
    """Resolves named connections and inline credential placeholders."""

    def get_connection(self, name: str) -> Connection | None: ...

    def get_env_value(self, var: EnvVar) -> str: ...


__all__ = ["Connection", "ConnectionResolver", "Pager", "ProviderScraper"]
