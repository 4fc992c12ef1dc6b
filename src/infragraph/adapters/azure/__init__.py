"""Public interface for the Azure adapter."""

from __future__ import annotations

from .auth import AzureCredentials, acquire_token, hydrate_credentials
from .client import ArmPager, ArmRequestError
from .scraper import CATEGORIES, ArmCategory, AzureScraper
from .translator import (
    RESOURCE_GROUP_TYPE,
    SUBSCRIPTION_TYPE,
    TYPE_PREFIX,
    get_arm_id,
    get_arm_type,
    subscription_hierarchy,
    translate_resource,
)

__all__ = [
    "CATEGORIES",
    "RESOURCE_GROUP_TYPE",
    "SUBSCRIPTION_TYPE",
    "TYPE_PREFIX",
    "ArmCategory",
    "ArmPager",
    "ArmRequestError",
    "AzureCredentials",
    "AzureScraper",
    "acquire_token",
    "get_arm_id",
    "get_arm_type",
    "hydrate_credentials",
    "subscription_hierarchy",
    "translate_resource",
]
