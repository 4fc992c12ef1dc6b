"""Reconciliation of scrape configs and run results against the store."""

from __future__ import annotations

from .merge import MergeResult, merge_run_results
from .plan import OrphanPlan, apply_orphan_plan, plan_orphans
from .scrapers import (
    delete_scrape_config,
    persist_declarative_scrape_config,
    upsert_scrape_config,
)

__all__ = [
    "MergeResult",
    "OrphanPlan",
    "apply_orphan_plan",
    "delete_scrape_config",
    "merge_run_results",
    "persist_declarative_scrape_config",
    "plan_orphans",
    "upsert_scrape_config",
]
