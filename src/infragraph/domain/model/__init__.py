"""Domain model for the infrastructure inventory."""

from __future__ import annotations

from .base import Entity, SoftDeletable, new_id, utcnow
from .enums import RunStatus, ScraperSource
from .inventory import ConfigItem, ConfigRelationship, Evidence
from .results import (
    ConfigResult,
    ExternalID,
    ProtectedScope,
    RelationshipResult,
    ScrapeResults,
    in_protected_scope,
)
from .scraper import ScrapeConfig
from .spec import AWSSpec, AzureSpec, CategoryFilter, EnvVar, ScraperSpec

__all__ = [
    "AWSSpec",
    "AzureSpec",
    "CategoryFilter",
    "ConfigItem",
    "ConfigRelationship",
    "ConfigResult",
    "Entity",
    "EnvVar",
    "Evidence",
    "ExternalID",
    "ProtectedScope",
    "RelationshipResult",
    "RunStatus",
    "ScrapeConfig",
    "ScrapeResults",
    "ScraperSource",
    "ScraperSpec",
    "SoftDeletable",
    "in_protected_scope",
    "new_id",
    "utcnow",
]
