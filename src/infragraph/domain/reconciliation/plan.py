"""Detach-or-delete planning for items losing their owner."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable
    from datetime import datetime
    from uuid import UUID

    from infragraph.domain.ports import InventoryRepositories


@dataclass(frozen=True, slots=True)
class OrphanPlan:
    """Partition of orphaned item IDs.

    ``detach`` holds items still referenced from a retained table; they keep
    living without an owner. ``delete`` holds the rest. The two sets are
    disjoint and together cover every orphan.
    """

    detach: frozenset[UUID] = field(default_factory=frozenset["UUID"])
    delete: frozenset[UUID] = field(default_factory=frozenset["UUID"])

    def __bool__(self) -> bool:
        return bool(self.detach or self.delete)


def plan_orphans(owned: Iterable[UUID], referenced: Collection[UUID]) -> OrphanPlan:
    owned_ids = frozenset(owned)
    return OrphanPlan(
        detach=owned_ids & frozenset(referenced),
        delete=owned_ids - frozenset(referenced),
    )


def apply_orphan_plan(
    repositories: InventoryRepositories,
    orphans: Iterable[UUID],
    *,
    now: datetime,
) -> OrphanPlan:
    """Plan ``orphans`` against the reference tables and apply the result."""

    orphan_ids = frozenset(orphans)
    if not orphan_ids:
        return OrphanPlan()
    plan = plan_orphans(orphan_ids, repositories.references.referenced_ids(orphan_ids))
    if plan.detach:
        repositories.config_items.detach(plan.detach)
    if plan.delete:
        repositories.config_items.soft_delete(plan.delete, at=now)
    return plan
