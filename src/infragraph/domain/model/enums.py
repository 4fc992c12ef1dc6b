"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class ScraperSource(StrEnum):
    """Where a scrape config row originates from."""

    DECLARATIVE = "declarative"
    FILE = "file"
    UI = "ui"

    @property
    def is_mutable(self) -> bool:
        return self is ScraperSource.DECLARATIVE


class RunStatus(StrEnum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
