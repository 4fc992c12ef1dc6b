"""Defaults for scrape runs and reconciliation."""

from __future__ import annotations

from dataclasses import dataclass

from infragraph.domain.normalization import DEFAULT_VOLATILE_KEYS

from .env import env_flag, env_float, env_list


@dataclass(frozen=True, slots=True)
class ScrapeRunConfig:
    volatile_keys: tuple[str, ...] = DEFAULT_VOLATILE_KEYS
    timeout_seconds: float | None = None
    trace: bool = False


@dataclass(frozen=True, slots=True)
class ReconciliationConfig:
    # None derives the list from foreign keys declared against config_items
    reference_tables: tuple[str, ...] | None = None


def get_scrape_run_config() -> ScrapeRunConfig:
    return ScrapeRunConfig(
        volatile_keys=env_list("INFRAGRAPH_VOLATILE_KEYS") or DEFAULT_VOLATILE_KEYS,
        timeout_seconds=env_float("INFRAGRAPH_RUN_TIMEOUT_SECONDS"),
        trace=env_flag("INFRAGRAPH_TRACE"),
    )


def get_reconciliation_config() -> ReconciliationConfig:
    return ReconciliationConfig(reference_tables=env_list("INFRAGRAPH_REFERENCE_TABLES"))
