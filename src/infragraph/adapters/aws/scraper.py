"""AWS provider scraper over boto3 paginators."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field, replace
from logging import getLogger
from typing import TYPE_CHECKING, Any

import boto3

from infragraph.config import AwsConfig, get_aws_config
from infragraph.domain.errors import ProviderConnectionError
from infragraph.domain.model import ScrapeResults
from infragraph.domain.relationships import resolve_relationships
from infragraph.domain.scraping import Category, join_categories, scrape_category

from .client import Boto3Pager, PageExtractor, reservation_instances, result_key
from .session import AwsSession, SessionFactory, new_session
from .translator import TYPE_PREFIX, ItemShape, account_hierarchy, account_result, translate_item

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from infragraph.domain.model import AWSSpec, ConfigResult, ScraperSpec
    from infragraph.domain.scraping import ScrapeContext

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AwsCategory:
    category: Category
    service: str
    operation: str
    extract: PageExtractor
    shape: ItemShape


CATEGORIES: tuple[AwsCategory, ...] = (
    AwsCategory(
        Category("instances", "VirtualMachine", "EC2 instances"),
        "ec2",
        "describe_instances",
        reservation_instances,
        ItemShape("AWS::EC2::Instance", "InstanceId"),
    ),
    AwsCategory(
        Category("vpcs", "VPC", "VPCs"),
        "ec2",
        "describe_vpcs",
        result_key("Vpcs"),
        ItemShape("AWS::EC2::VPC", "VpcId"),
    ),
    AwsCategory(
        Category("subnets", "Subnet"),
        "ec2",
        "describe_subnets",
        result_key("Subnets"),
        ItemShape("AWS::EC2::Subnet", "SubnetId"),
    ),
    AwsCategory(
        Category("securitygroups", "SecurityGroup", "security groups"),
        "ec2",
        "describe_security_groups",
        result_key("SecurityGroups"),
        ItemShape("AWS::EC2::SecurityGroup", "GroupId", "GroupName"),
    ),
    AwsCategory(
        Category("loadbalancers", "LoadBalancer", "load balancers"),
        "elbv2",
        "describe_load_balancers",
        result_key("LoadBalancers"),
        ItemShape(
            "AWS::ElasticLoadBalancingV2::LoadBalancer", "LoadBalancerArn", "LoadBalancerName"
        ),
    ),
    AwsCategory(
        Category("rds", "RelationalDatabase", "RDS instances"),
        "rds",
        "describe_db_instances",
        result_key("DBInstances"),
        ItemShape("AWS::RDS::DBInstance", "DBInstanceArn", "DBInstanceIdentifier"),
    ),
)


@dataclass(slots=True)
class AwsScraper:
    config: AwsConfig = field(default_factory=get_aws_config)
    session_factory: SessionFactory = boto3.Session
    categories: tuple[AwsCategory, ...] = CATEGORIES
    name: str = "aws"
    type_prefix: str = TYPE_PREFIX

    def can_scrape(self, spec: ScraperSpec) -> bool:
        return bool(spec.aws)

    async def scrape(self, ctx: ScrapeContext) -> ScrapeResults:
        results = ScrapeResults()
        for spec in ctx.spec.aws:
            results.extend(await self._scrape_account(ctx, spec))
        return results

    async def _scrape_account(self, ctx: ScrapeContext, spec: AWSSpec) -> ScrapeResults:
        results = ScrapeResults()
        sessions: list[AwsSession] = []
        try:
            for region in spec.regions:
                sessions.append(
                    await asyncio.to_thread(
                        new_session,
                        ctx,
                        spec,
                        region,
                        self.config,
                        session_factory=self.session_factory,
                    )
                )
            if not sessions:
                raise ProviderConnectionError("no AWS region configured")
            identity = await asyncio.to_thread(sessions[0].caller_identity)
        except ProviderConnectionError as exc:
            log.warning("AWS %s: %s", spec.connection or "inline credentials", exc)
            results.add_error(exc, type=TYPE_PREFIX)
            return results

        account = account_result(identity)
        log.info("Scraping AWS account %s in %s", account.id, ", ".join(spec.regions))
        results.append(account)

        jobs = [
            scrape_category(
                ctx,
                replace(
                    aws.category,
                    label=f"{aws.category.display_name} in {session.region}",
                ),
                type_prefix=TYPE_PREFIX,
                open_pager=self._pager_factory(session, aws),
                translate=self._translator(aws),
            )
            for session in sessions
            for aws in self.categories
            if spec.allows(aws.category.name)
        ]
        results.extend(await join_categories(jobs))
        return resolve_relationships(
            results, account_hierarchy(account.id), volatile_keys=ctx.volatile_keys
        )

    @staticmethod
    def _pager_factory(session: AwsSession, aws: AwsCategory) -> Callable[[], Boto3Pager]:
        def open_pager() -> Boto3Pager:
            return Boto3Pager(session.client(aws.service), aws.operation, aws.extract)

        return open_pager

    @staticmethod
    def _translator(aws: AwsCategory) -> Callable[[Mapping[str, Any]], ConfigResult]:
        def translate(item: Mapping[str, Any]) -> ConfigResult:
            return translate_item(item, aws.shape, config_class=aws.category.config_class)

        return translate
