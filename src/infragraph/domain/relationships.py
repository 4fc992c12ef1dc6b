"""Derive ownership and containment edges over a completed provider result set."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from infragraph.domain.model import ExternalID, RelationshipResult, ScrapeResults
from infragraph.domain.normalization import DEFAULT_VOLATILE_KEYS, normalize_payload

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from infragraph.domain.model import ConfigResult


def _lower(value: str) -> str:
    return value.lower()


@dataclass(frozen=True, slots=True)
class ContainerRule:
    """Locates an item's structural parent from a path-shaped ID.

    ``/<root>/<root id>/<marker>/<name>/...`` names the parent ``<name>``.
    """

    marker: str
    config_type: str
    kind: str
    canonicalize: Callable[[str], str] = _lower


@dataclass(frozen=True, slots=True)
class Hierarchy:
    """A provider's root node and optional container rule."""

    type_prefix: str
    root: ExternalID
    root_kind: str
    container: ContainerRule | None = None

    def container_id(self, local_name: str) -> ExternalID:
        if self.container is None:
            raise ValueError("hierarchy has no container rule")
        rule = self.container
        return ExternalID(
            f"{self.root.external_id}/{rule.marker}/{rule.canonicalize(local_name)}",
            rule.config_type,
        )


def relationship_label(kind: str, child_type: str, type_prefix: str) -> str:
    return kind + child_type.removeprefix(type_prefix)


def extract_container_name(resource_id: str, marker: str) -> str | None:
    """Return the segment following ``marker``, or ``None`` when the ID has no parent."""

    segments = resource_id.strip().removeprefix("/").split("/")
    if len(segments) < 4:
        return None
    if segments[2].lower() != marker.lower():
        return None
    return segments[3] or None


def derive_relationships(
    result: ConfigResult, hierarchy: Hierarchy
) -> list[RelationshipResult]:
    if result.is_error or not result.id:
        return []
    item = result.external
    if result.type == hierarchy.root.config_type or item == hierarchy.root:
        return []

    edges = [
        RelationshipResult(
            config=item,
            related=hierarchy.root,
            relation=relationship_label(hierarchy.root_kind, result.type, hierarchy.type_prefix),
        )
    ]

    rule = hierarchy.container
    if rule is None or result.type == rule.config_type:
        return edges
    local_name = extract_container_name(result.id, rule.marker)
    if local_name is None:
        return edges
    parent = hierarchy.container_id(local_name)
    if parent != item:
        edges.append(
            RelationshipResult(
                config=item,
                related=parent,
                relation=relationship_label(rule.kind, result.type, hierarchy.type_prefix),
            )
        )
    return edges


def _unique(edges: Iterable[RelationshipResult]) -> list[RelationshipResult]:
    return list(dict.fromkeys(edges))


def resolve_relationships(
    results: Iterable[ConfigResult],
    hierarchy: Hierarchy,
    *,
    volatile_keys: Iterable[str] = DEFAULT_VOLATILE_KEYS,
) -> ScrapeResults:
    """Normalize payloads and attach derived edges, returning a new result set.

    Each item's edges depend only on that item, so the output edge set is the
    same for any ordering of ``results`` and for repeated application.
    """

    patterns = tuple(volatile_keys)
    resolved = ScrapeResults()
    for result in results:
        if result.is_error or not result.id:
            resolved.append(result)
            continue
        resolved.append(
            replace(
                result,
                config=normalize_payload(result.config, patterns),
                relationships=_unique(
                    [*result.relationships, *derive_relationships(result, hierarchy)]
                ),
            )
        )
    return resolved


def edge_set(results: Iterable[ConfigResult]) -> frozenset[RelationshipResult]:
    return frozenset(edge for result in results for edge in result.relationships)
