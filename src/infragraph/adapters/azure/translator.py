"""Translate ARM resources into config results."""

from __future__ import annotations

from typing import TYPE_CHECKING

from infragraph.domain.model import ConfigResult, ExternalID
from infragraph.domain.relationships import ContainerRule, Hierarchy

from .schema import ArmResource

if TYPE_CHECKING:
    from collections.abc import Mapping

TYPE_PREFIX = "Azure::"
SUBSCRIPTION_TYPE = TYPE_PREFIX + "SUBSCRIPTION"
RESOURCE_GROUP_TYPE = TYPE_PREFIX + "MICROSOFT.RESOURCES/RESOURCEGROUPS"


def get_arm_id(resource_id: str | None) -> str:
    # ARM echoes IDs in inconsistent case; lower-case them so they join across APIs
    return (resource_id or "").lower()


def get_arm_type(resource_type: str | None) -> str:
    return TYPE_PREFIX + (resource_type or "").upper()


def translate_resource(
    raw: Mapping[str, object],
    *,
    config_class: str,
    resource_type: str | None = None,
) -> ConfigResult:
    """Build a result from one ARM list item; ``resource_type`` overrides the payload's type."""

    resource = ArmResource.model_validate(raw)
    if not resource.id:
        raise ValueError("ARM resource has no id")
    if resource_type is not None:
        name = resource.display_name or resource.name or ""
    else:
        name = resource.name or ""
    return ConfigResult(
        id=get_arm_id(resource.id),
        name=name,
        config_class=config_class,
        type=get_arm_type(resource_type or resource.type),
        config=dict(raw),
    )


def subscription_hierarchy(subscription_id: str) -> Hierarchy:
    return Hierarchy(
        type_prefix=TYPE_PREFIX,
        root=ExternalID(f"/subscriptions/{subscription_id}", SUBSCRIPTION_TYPE),
        root_kind="Subscription",
        container=ContainerRule(
            marker="resourcegroups",
            config_type=RESOURCE_GROUP_TYPE,
            kind="Resourcegroup",
        ),
    )
