"""Scrape orchestration: run context, category driver and provider registry."""

from __future__ import annotations

from .categories import Category, join_categories, scrape_category
from .context import ScrapeContext
from .registry import ScraperRegistry

__all__ = [
    "Category",
    "ScrapeContext",
    "ScraperRegistry",
    "join_categories",
    "scrape_category",
]
