"""Azure Resource Manager configuration values."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

DEFAULT_AUTHORITY_HOST = "https://login.microsoftonline.com"
DEFAULT_RESOURCE_MANAGER_ENDPOINT = "https://management.azure.com"
ARM_TIMEOUT_SECONDS = 30.0


def _default_resilience() -> ResilienceConfig:
    return ResilienceConfig(
        name="azure",
        timeout_seconds=ARM_TIMEOUT_SECONDS,
        retry=RetryPolicy(total=4),
        ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
    )


@dataclass(frozen=True, slots=True)
class AzureConfig:
    authority_host: str = DEFAULT_AUTHORITY_HOST
    resource_manager_endpoint: str = DEFAULT_RESOURCE_MANAGER_ENDPOINT
    resilience: ResilienceConfig = field(default_factory=_default_resilience)

    @property
    def token_scope(self) -> str:
        return f"{self.resource_manager_endpoint.rstrip('/')}/.default"

    def token_url(self, tenant_id: str) -> str:
        return f"{self.authority_host.rstrip('/')}/{tenant_id}/oauth2/v2.0/token"


def get_azure_config(*, resilience: ResilienceConfig | None = None) -> AzureConfig:
    return AzureConfig(
        authority_host=os.getenv("AZURE_AUTHORITY_HOST") or DEFAULT_AUTHORITY_HOST,
        resource_manager_endpoint=(
            os.getenv("AZURE_RESOURCE_MANAGER_ENDPOINT") or DEFAULT_RESOURCE_MANAGER_ENDPOINT
        ),
        resilience=resilience or _default_resilience(),
    )
