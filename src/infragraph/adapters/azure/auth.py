"""Client-credentials token exchange against the Microsoft identity platform."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from infragraph.domain.errors import ProviderConnectionError

from .schema import TokenResponse

if TYPE_CHECKING:
    from infragraph.adapters.http_resilience import ResilientClient
    from infragraph.config import AzureConfig
    from infragraph.domain.model import AzureSpec
    from infragraph.domain.scraping import ScrapeContext


@dataclass(frozen=True, slots=True)
class AzureCredentials:
    tenant_id: str
    client_id: str
    client_secret: str = ""

    def __repr__(self) -> str:
        return f"AzureCredentials(tenant_id={self.tenant_id!r}, client_id={self.client_id!r})"


def hydrate_credentials(ctx: ScrapeContext, spec: AzureSpec) -> AzureCredentials:
    """Resolve credentials from the named connection or the inline placeholders."""

    if spec.connection:
        connection = ctx.hydrate_connection(spec.connection)
        tenant_id = connection.properties.get("tenant") or spec.tenant_id or ""
        client_id = connection.username
        client_secret = connection.password
    else:
        tenant_id = spec.tenant_id or ""
        client_id = ctx.get_env_value(spec.client_id, label="client id")
        client_secret = ctx.get_env_value(spec.client_secret, label="client secret")

    if not tenant_id:
        raise ProviderConnectionError("azure tenant id is required")
    if not client_id:
        raise ProviderConnectionError("azure client id is required")
    return AzureCredentials(tenant_id=tenant_id, client_id=client_id, client_secret=client_secret)


async def acquire_token(
    client: ResilientClient,
    config: AzureConfig,
    credentials: AzureCredentials,
) -> str:
    try:
        response = await client.post(
            config.token_url(credentials.tenant_id),
            data={
                "grant_type": "client_credentials",
                "client_id": credentials.client_id,
                "client_secret": credentials.client_secret,
                "scope": config.token_scope,
            },
        )
        response.raise_for_status()
        token = TokenResponse.model_validate(response.json())
    except (httpx.HTTPError, ValidationError, ValueError) as exc:
        raise ProviderConnectionError(f"failed to get credentials for azure: {exc}") from exc
    return token.access_token
