"""Public interface for the AWS adapter."""

from __future__ import annotations

from .client import Boto3Pager, reservation_instances, result_key
from .scraper import CATEGORIES, AwsCategory, AwsScraper
from .session import AwsSession, StaticCredentials, new_session, resolve_credentials
from .translator import (
    ACCOUNT_TYPE,
    TYPE_PREFIX,
    VPC_TYPE,
    ItemShape,
    account_hierarchy,
    account_result,
    translate_item,
)

__all__ = [
    "ACCOUNT_TYPE",
    "CATEGORIES",
    "TYPE_PREFIX",
    "VPC_TYPE",
    "AwsCategory",
    "AwsScraper",
    "AwsSession",
    "Boto3Pager",
    "ItemShape",
    "StaticCredentials",
    "account_hierarchy",
    "account_result",
    "new_session",
    "reservation_instances",
    "resolve_credentials",
    "result_key",
    "translate_item",
]
