"""Azure provider scraper over the Resource Manager REST API."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from infragraph.adapters.http_resilience import ResilientClient
from infragraph.config import AzureConfig, get_azure_config
from infragraph.domain.errors import ProviderConnectionError
from infragraph.domain.model import ScrapeResults
from infragraph.domain.relationships import resolve_relationships
from infragraph.domain.scraping import Category, join_categories, scrape_category

from .auth import acquire_token, hydrate_credentials
from .client import ArmPager
from .translator import TYPE_PREFIX, subscription_hierarchy, translate_resource

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    import httpx

    from infragraph.domain.model import AzureSpec, ConfigResult, ScraperSpec
    from infragraph.domain.scraping import ScrapeContext

log = getLogger(__name__)

_DATABASE_FILTER = (
    "resourceType eq 'Microsoft.DBforPostgreSQL/servers' or "
    "resourceType eq 'Microsoft.Sql/servers/databases'"
)


@dataclass(frozen=True, slots=True)
class ArmCategory:
    """One ARM list call and how its items are typed."""

    category: Category
    path: str
    api_version: str
    filter: str | None = None
    resource_type: str | None = None

    def url(self, endpoint: str, subscription_id: str) -> str:
        return endpoint.rstrip("/") + self.path.format(subscription=subscription_id)

    def params(self) -> dict[str, str]:
        params = {"api-version": self.api_version}
        if self.filter is not None:
            params["$filter"] = self.filter
        return params


def _provider(namespace: str, resource: str) -> str:
    return f"/subscriptions/{{subscription}}/providers/{namespace}/{resource}"


CATEGORIES: tuple[ArmCategory, ...] = (
    ArmCategory(
        Category("resourcegroups", "ResourceGroup", "resource groups"),
        "/subscriptions/{subscription}/resourcegroups",
        "2021-04-01",
    ),
    ArmCategory(
        Category("virtualmachines", "VirtualMachine", "virtual machines"),
        _provider("Microsoft.Compute", "virtualMachines"),
        "2023-03-01",
    ),
    ArmCategory(
        Category("loadbalancers", "LoadBalancer", "load balancers"),
        _provider("Microsoft.Network", "loadBalancers"),
        "2023-04-01",
    ),
    ArmCategory(
        Category("virtualnetworks", "VirtualNetwork", "virtual networks"),
        _provider("Microsoft.Network", "virtualNetworks"),
        "2023-04-01",
    ),
    ArmCategory(
        Category("containerregistries", "ContainerRegistry", "container registries"),
        _provider("Microsoft.ContainerRegistry", "registries"),
        "2023-07-01",
    ),
    ArmCategory(
        Category("firewalls", "Firewall"),
        _provider("Microsoft.Network", "azureFirewalls"),
        "2023-04-01",
    ),
    ArmCategory(
        Category("databases", "RelationalDatabase"),
        "/subscriptions/{subscription}/resources",
        "2021-04-01",
        filter=_DATABASE_FILTER,
    ),
    ArmCategory(
        Category("kubernetes", "KubernetesCluster", "managed clusters"),
        _provider("Microsoft.ContainerService", "managedClusters"),
        "2023-08-01",
    ),
    ArmCategory(
        Category("subscriptions", "Subscription"),
        "/subscriptions",
        "2020-01-01",
        resource_type="SUBSCRIPTION",
    ),
    ArmCategory(
        Category("storageaccounts", "StorageAccount", "storage accounts"),
        _provider("Microsoft.Storage", "storageAccounts"),
        "2023-01-01",
    ),
    ArmCategory(
        Category("appservices", "AppService", "app services"),
        _provider("Microsoft.Web", "sites"),
        "2022-09-01",
    ),
    ArmCategory(
        Category("dns", "DNSZone", "DNS zones"),
        _provider("Microsoft.Network", "dnszones"),
        "2018-05-01",
    ),
    ArmCategory(
        Category("privatedns", "PrivateDNSZone", "private DNS zones"),
        _provider("Microsoft.Network", "privateDnsZones"),
        "2020-06-01",
    ),
    ArmCategory(
        Category("trafficmanager", "TrafficManagerProfile", "traffic manager profiles"),
        _provider("Microsoft.Network", "trafficmanagerprofiles"),
        "2022-04-01",
    ),
    ArmCategory(
        Category("securitygroups", "SecurityGroup", "network security groups"),
        _provider("Microsoft.Network", "networkSecurityGroups"),
        "2023-04-01",
    ),
    ArmCategory(
        Category("publicips", "PublicIPAddress", "public IP addresses"),
        _provider("Microsoft.Network", "publicIPAddresses"),
        "2023-04-01",
    ),
)


async def _trace_response(response: httpx.Response) -> None:
    request = response.request
    log.debug("%s %s -> %d", request.method, request.url, response.status_code)


@dataclass(slots=True)
class AzureScraper:
    config: AzureConfig = field(default_factory=get_azure_config)
    transport: httpx.AsyncBaseTransport | None = None
    categories: tuple[ArmCategory, ...] = CATEGORIES
    name: str = "azure"
    type_prefix: str = TYPE_PREFIX

    def can_scrape(self, spec: ScraperSpec) -> bool:
        return bool(spec.azure)

    async def scrape(self, ctx: ScrapeContext) -> ScrapeResults:
        results = ScrapeResults()
        for spec in ctx.spec.azure:
            results.extend(await self._scrape_subscription(ctx, spec))
        return results

    async def _scrape_subscription(self, ctx: ScrapeContext, spec: AzureSpec) -> ScrapeResults:
        results = ScrapeResults()
        try:
            credentials = hydrate_credentials(ctx, spec)
        except ProviderConnectionError as exc:
            log.warning("Azure subscription %s: %s", spec.subscription_id, exc)
            results.add_error(
                ProviderConnectionError(f"failed to populate connection: {exc}"),
                type=TYPE_PREFIX,
            )
            return results

        hooks = (_trace_response,) if ctx.trace else ()
        async with ResilientClient(
            self.config.resilience, transport=self.transport, extra_hooks=hooks
        ) as client:
            try:
                token = await acquire_token(client, self.config, credentials)
            except ProviderConnectionError as exc:
                log.warning("Azure subscription %s: %s", spec.subscription_id, exc)
                results.add_error(exc, type=TYPE_PREFIX)
                return results

            log.info("Scraping Azure subscription %s", spec.subscription_id)
            jobs = [
                scrape_category(
                    ctx,
                    arm.category,
                    type_prefix=TYPE_PREFIX,
                    open_pager=self._pager_factory(client, arm, spec.subscription_id, token),
                    translate=self._translator(arm),
                )
                for arm in self.categories
                if spec.allows(arm.category.name)
            ]
            results.extend(await join_categories(jobs))

        return resolve_relationships(
            results,
            subscription_hierarchy(spec.subscription_id),
            volatile_keys=ctx.volatile_keys,
        )

    def _pager_factory(
        self,
        client: ResilientClient,
        arm: ArmCategory,
        subscription_id: str,
        token: str,
    ) -> Callable[[], ArmPager]:
        def open_pager() -> ArmPager:
            return ArmPager(
                client,
                arm.url(self.config.resource_manager_endpoint, subscription_id),
                token=token,
                params=arm.params(),
            )

        return open_pager

    @staticmethod
    def _translator(arm: ArmCategory) -> Callable[[Mapping[str, object]], ConfigResult]:
        def translate(raw: Mapping[str, object]) -> ConfigResult:
            return translate_resource(
                raw,
                config_class=arm.category.config_class,
                resource_type=arm.resource_type,
            )

        return translate
