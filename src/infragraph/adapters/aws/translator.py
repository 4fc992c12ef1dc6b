"""Translate boto3 response items into config results."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from infragraph.domain.model import ConfigResult, ExternalID, RelationshipResult
from infragraph.domain.relationships import Hierarchy, relationship_label

if TYPE_CHECKING:
    from collections.abc import Mapping

TYPE_PREFIX = "AWS::"
ACCOUNT_TYPE = TYPE_PREFIX + "::Account"
VPC_TYPE = TYPE_PREFIX + "EC2::VPC"


@dataclass(frozen=True, slots=True)
class ItemShape:
    """Where a service's item keeps its identifier and display name."""

    config_type: str
    id_key: str
    name_key: str | None = None


def _tag_name(item: Mapping[str, Any]) -> str | None:
    for tag in item.get("Tags") or ():
        if tag.get("Key") == "Name" and tag.get("Value"):
            return str(tag["Value"])
    return None


def _vpc_id(item: Mapping[str, Any]) -> str | None:
    vpc_id = item.get("VpcId")
    if vpc_id is None:
        subnet_group = item.get("DBSubnetGroup") or {}
        vpc_id = subnet_group.get("VpcId")
    return str(vpc_id) if vpc_id else None


def translate_item(item: Mapping[str, Any], shape: ItemShape, *, config_class: str) -> ConfigResult:
    raw_id = item.get(shape.id_key)
    if not raw_id:
        raise ValueError(f"item has no {shape.id_key}")
    external_id = str(raw_id)
    name = _tag_name(item)
    if name is None and shape.name_key and item.get(shape.name_key):
        name = str(item[shape.name_key])

    relationships: list[RelationshipResult] = []
    vpc_id = _vpc_id(item)
    if vpc_id and shape.config_type != VPC_TYPE:
        relationships.append(
            RelationshipResult(
                config=ExternalID(external_id, shape.config_type),
                related=ExternalID(vpc_id, VPC_TYPE),
                relation=relationship_label("VPC", shape.config_type, TYPE_PREFIX),
            )
        )
    return ConfigResult(
        id=external_id,
        name=name or external_id,
        config_class=config_class,
        type=shape.config_type,
        config=dict(item),
        relationships=relationships,
    )


def account_result(identity: Mapping[str, Any]) -> ConfigResult:
    account_id = str(identity["Account"])
    return ConfigResult(
        id=account_id,
        name=account_id,
        config_class="Account",
        type=ACCOUNT_TYPE,
        config=dict(identity),
    )


def account_hierarchy(account_id: str) -> Hierarchy:
    return Hierarchy(
        type_prefix=TYPE_PREFIX,
        root=ExternalID(account_id, ACCOUNT_TYPE),
        root_kind="Account",
    )
