"""Error taxonomy for scraping and reconciliation.

Connection and category failures are carried inside scrape results rather than
raised out of a run; only :class:`PersistenceError` fails a run.
"""

from __future__ import annotations


class InventoryError(RuntimeError):
    """Base class for infragraph domain errors."""


class ProviderConnectionError(InventoryError):
    """Credentials could not be resolved or a provider session could not be built."""


class ConnectionResolutionError(ProviderConnectionError):
    """A named connection or credential placeholder could not be resolved."""


class CategoryFetchError(InventoryError):
    """Fetching one resource category failed."""

    def __init__(self, message: str, *, category: str) -> None:
        super().__init__(message)
        self.category = category


class ScrapeCancelledError(CategoryFetchError):
    """The run was cancelled while a category was being fetched."""


class NormalizationError(InventoryError):
    """A payload could not be walked as a structured tree."""


class PersistenceError(InventoryError):
    """A storage operation failed."""


class ScrapeConfigNotFoundError(PersistenceError):
    def __init__(self, scraper_id: object) -> None:
        super().__init__(f"scrape config {scraper_id} not found")
        self.scraper_id = scraper_id


class ImmutableScrapeConfigError(InventoryError):
    """Raised when an in-place update targets a file or UI scrape config."""
