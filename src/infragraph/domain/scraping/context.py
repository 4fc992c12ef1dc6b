"""Per-run context shared read-only by every provider scraper."""

from __future__ import annotations

import asyncio
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from infragraph.domain.errors import ConnectionResolutionError
from infragraph.domain.normalization import DEFAULT_VOLATILE_KEYS

if TYPE_CHECKING:
    from infragraph.domain.model import EnvVar, ScrapeConfig, ScraperSpec
    from infragraph.domain.ports import Connection, ConnectionResolver


@dataclass(frozen=True, slots=True)
class ScrapeContext:
    """Scrape config, credential capability and run flags for one run.

    The only mutable state is the cancellation token. Scrapers poll it between
    page fetches and race in-flight fetches against `wait_cancelled`.
    """

    scrape_config: ScrapeConfig
    connections: ConnectionResolver
    trace: bool = False
    volatile_keys: tuple[str, ...] = DEFAULT_VOLATILE_KEYS
    spec: ScraperSpec = field(init=False)
    _cancelled: threading.Event = field(default_factory=threading.Event, repr=False)
    _waiters: set[asyncio.Future[None]] = field(default_factory=set, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "spec", self.scrape_config.parsed_spec)

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        with self._lock:
            self._cancelled.set()
            waiters = tuple(self._waiters)
        for waiter in waiters:
            waiter.get_loop().call_soon_threadsafe(_wake, waiter)

    async def wait_cancelled(self) -> None:
        """Return once `cancel` has been called, from any thread."""

        waiter = asyncio.get_running_loop().create_future()
        with self._lock:
            if self._cancelled.is_set():
                return
            self._waiters.add(waiter)
        try:
            await waiter
        finally:
            with self._lock:
                self._waiters.discard(waiter)

    def hydrate_connection(self, name: str) -> Connection:
        try:
            connection = self.connections.get_connection(name)
        except ConnectionResolutionError:
            raise
        except Exception as exc:
            raise ConnectionResolutionError(f"could not hydrate connection: {exc}") from exc
        if connection is None:
            raise ConnectionResolutionError(f"connection {name} not found")
        return connection

    def get_env_value(self, var: EnvVar, *, label: str) -> str:
        try:
            return self.connections.get_env_value(var)
        except Exception as exc:
            raise ConnectionResolutionError(f"failed to get {label}: {exc}") from exc


def _wake(waiter: asyncio.Future[None]) -> None:
    if not waiter.done():
        waiter.set_result(None)
