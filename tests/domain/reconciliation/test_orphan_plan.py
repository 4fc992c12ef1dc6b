from __future__ import annotations

from uuid import uuid4

from infragraph.domain.reconciliation import OrphanPlan, plan_orphans


def test_plan_partitions_owned_items() -> None:
    kept, dropped, unrelated = uuid4(), uuid4(), uuid4()

    plan = plan_orphans([kept, dropped], {kept, unrelated})

    assert plan.detach == {kept}
    assert plan.delete == {dropped}
    assert plan.detach.isdisjoint(plan.delete)


def test_empty_plan_is_falsy() -> None:
    assert not OrphanPlan()
    assert not plan_orphans([], set())
    assert plan_orphans([uuid4()], set())
