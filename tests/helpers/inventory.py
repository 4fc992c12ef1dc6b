"""Reusable fakes and factories for scraping and reconciliation tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from infragraph.domain.errors import ConnectionResolutionError
from infragraph.domain.model import (
    ConfigResult,
    ExternalID,
    RelationshipResult,
    ScrapeConfig,
    ScrapeResults,
    ScraperSource,
    ScraperSpec,
)
from infragraph.domain.ports import Connection
from infragraph.domain.scraping import ScrapeContext

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from infragraph.domain.model import EnvVar

AZURE_SPEC: dict[str, object] = {
    "azure": [
        {
            "subscriptionID": "sub-1",
            "tenantID": "tenant-1",
            "clientID": {"value": "client"},
            "clientSecret": {"value": "secret"},
        }
    ]
}


def make_spec(document: Mapping[str, object] | None = None) -> ScraperSpec:
    return ScraperSpec.model_validate(document if document is not None else AZURE_SPEC)


def make_scrape_config(
    document: Mapping[str, object] | None = None,
    *,
    name: str = "",
    source: ScraperSource = ScraperSource.FILE,
) -> ScrapeConfig:
    return ScrapeConfig.from_spec(make_spec(document), name=name, source=source)


def make_result(
    external_id: str,
    *,
    type: str = "Test::Thing",  # noqa: A002
    config_class: str = "Thing",
    name: str | None = None,
    config: object = None,
    relationships: Iterable[RelationshipResult] = (),
) -> ConfigResult:
    return ConfigResult(
        id=external_id,
        name=name if name is not None else external_id,
        config_class=config_class,
        type=type,
        config=config if config is not None else {"id": external_id},
        relationships=list(relationships),
    )


def edge(
    source: ConfigResult, target: ConfigResult, relation: str = "Contains"
) -> RelationshipResult:
    return RelationshipResult(
        config=ExternalID(source.id, source.type),
        related=ExternalID(target.id, target.type),
        relation=relation,
    )


@dataclass(slots=True)
class FakeConnectionResolver:
    """In-memory implementation of the connection resolver port."""

    connections: dict[str, Connection] = field(default_factory=dict[str, Connection])
    env: dict[str, str] = field(default_factory=dict[str, str])

    def get_connection(self, name: str) -> Connection | None:
        return self.connections.get(name)

    def get_env_value(self, var: EnvVar) -> str:
        if var.value is not None:
            return var.value
        if var.from_env is None:
            return ""
        try:
            return self.env[var.from_env]
        except KeyError as exc:
            raise ConnectionResolutionError(f"{var.from_env} is not set") from exc


def make_context(
    config: ScrapeConfig | None = None,
    *,
    connections: FakeConnectionResolver | None = None,
    trace: bool = False,
) -> ScrapeContext:
    return ScrapeContext(
        scrape_config=config or make_scrape_config(),
        connections=connections or FakeConnectionResolver(),
        trace=trace,
    )


class ListPager[TItem]:
    """Serves pre-built pages; ``fail_at`` raises when that page index is requested."""

    def __init__(
        self,
        pages: Sequence[Sequence[TItem]],
        *,
        fail_at: int | None = None,
        error: Exception | None = None,
    ) -> None:
        self._pages = list(pages)
        self._index = 0
        self._fail_at = fail_at
        self._error = error or RuntimeError("page read failed")
        self.requests = 0

    def has_more(self) -> bool:
        if self._fail_at is not None and self._index == self._fail_at:
            return True
        return self._index < len(self._pages)

    async def next_page(self) -> Sequence[TItem]:
        self.requests += 1
        if self._fail_at is not None and self._index == self._fail_at:
            raise self._error
        page = self._pages[self._index]
        self._index += 1
        return page


@dataclass(slots=True)
class FakeScraper:
    """Provider scraper returning canned results."""

    results: Sequence[ConfigResult] = ()
    name: str = "fake"
    type_prefix: str = "Test::"
    enabled: bool = True
    raises: Exception | None = None
    calls: int = 0

    def can_scrape(self, spec: ScraperSpec) -> bool:
        _ = spec
        return self.enabled

    async def scrape(self, ctx: ScrapeContext) -> ScrapeResults:
        _ = ctx
        self.calls += 1
        if self.raises is not None:
            raise self.raises
        return ScrapeResults(self.results)
