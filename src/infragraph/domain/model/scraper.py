"""Scrape config rows."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .base import Entity, SoftDeletable, utcnow
from .enums import ScraperSource
from .spec import ScraperSpec

if TYPE_CHECKING:
    from datetime import datetime


@dataclass(eq=False, kw_only=True)
class ScrapeConfig(Entity, SoftDeletable):
    """A named specification of what to scrape.

    ``spec`` holds the canonical serialization produced by
    :meth:`ScraperSpec.serialize`; equality of that string is what collapses
    file and UI configs into a single row.
    """

    name: str = ""
    source: ScraperSource = ScraperSource.FILE
    spec: str = "{}"
    created_at: datetime = field(default_factory=utcnow)

    @classmethod
    def from_spec(
        cls,
        spec: ScraperSpec,
        *,
        name: str = "",
        source: ScraperSource = ScraperSource.FILE,
    ) -> ScrapeConfig:
        return cls(name=name, source=source, spec=spec.serialize())

    @property
    def parsed_spec(self) -> ScraperSpec:
        return ScraperSpec.from_serialized(self.spec)
