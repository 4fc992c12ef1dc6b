"""Application configuration helpers."""

from __future__ import annotations

from .aws import AwsConfig, get_aws_config
from .azure import AzureConfig, get_azure_config
from .env import env_flag, env_float, env_list, require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError, ScrapeConfigDocumentError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .scrape import (
    DEFAULT_VOLATILE_KEYS,
    ReconciliationConfig,
    ScrapeRunConfig,
    get_reconciliation_config,
    get_scrape_run_config,
)
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "DEFAULT_VOLATILE_KEYS",
    "AwsConfig",
    "AzureConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ReconciliationConfig",
    "ResilienceConfig",
    "RetryPolicy",
    "ScrapeConfigDocumentError",
    "ScrapeRunConfig",
    "StorageConfig",
    "configure_logging",
    "env_flag",
    "env_float",
    "env_list",
    "get_aws_config",
    "get_azure_config",
    "get_database_config",
    "get_reconciliation_config",
    "get_scrape_run_config",
    "get_storage_config",
    "require_env_var",
    "require_env_vars",
]
