"""Tests for application layer DTOs."""

from __future__ import annotations

import dataclasses

import pytest

from bagkeeper.application.dto import (
    InspectCommand,
    InspectResult,
    RebalanceCommand,
    RebalanceResult,
)
from bagkeeper.domain.bags.entities import BagView, Entry, RankLocation
from bagkeeper.domain.bags.value_objects import Bucket
from bagkeeper.domain.migration.value_objects import MigrationInstruction
from bagkeeper.domain.reordering.value_objects import (
    ReorderInstruction,
    ReorderPlan,
)
from bagkeeper.shared.constants import DEFAULT_TARGET_RANK
from bagkeeper.shared.types import AccountId, PivotStrategy, SortStrategy, Weight


@pytest.fixture
def location() -> RankLocation:
    entry = Entry(
        id=AccountId("A"),
        bag_upper=Weight(1_000),
        cached_weight=Weight(900),
        true_weight=Weight(900),
    )
    return RankLocation(
        rank=1,
        bucket=Bucket(ceiling=Weight(1_000), head=entry.id, tail=entry.id),
        local_index=0,
        entry=entry,
    )


@pytest.fixture
def view(location: RankLocation) -> BagView:
    return BagView.from_entries(Weight(1_000), [location.entry])


# =============================================================================
# Commands
# =============================================================================


def test_rebalance_command_defaults() -> None:
    cmd = RebalanceCommand()
    assert cmd.target_rank == DEFAULT_TARGET_RANK
    assert cmd.sort_strategy == SortStrategy.SEMI
    assert cmd.pivot_strategy == PivotStrategy.LOCATED
    assert not cmd.dry_run


def test_commands_are_frozen() -> None:
    with pytest.raises(dataclasses.FrozenInstanceError):
        RebalanceCommand().target_rank = 5  # type: ignore[misc]
    with pytest.raises(dataclasses.FrozenInstanceError):
        InspectCommand().target_rank = 5  # type: ignore[misc]


# =============================================================================
# RebalanceResult
# =============================================================================


def test_result_without_work_is_nothing_to_do(
    location: RankLocation, view: BagView
) -> None:
    result = RebalanceResult(
        location=location,
        working_view=view,
        pivot_index=0,
        migrations=[],
        plan=ReorderPlan(
            strategy=SortStrategy.SEMI, instructions=[], resulting_order=view.ids()
        ),
    )
    assert result.nothing_to_do
    assert result.clean


def test_result_with_migrations_has_work(
    location: RankLocation, view: BagView
) -> None:
    migration = MigrationInstruction(
        entry_id=AccountId("A"), from_ceiling=Weight(1_000), to_ceiling=Weight(100)
    )
    result = RebalanceResult(
        location=location,
        working_view=view,
        pivot_index=0,
        migrations=[migration],
        plan=None,
    )
    assert not result.nothing_to_do


def test_result_with_plan_has_work(location: RankLocation, view: BagView) -> None:
    plan = ReorderPlan(
        strategy=SortStrategy.FULL,
        instructions=[ReorderInstruction(AccountId("B"), AccountId("A"))],
        resulting_order=[AccountId("B"), AccountId("A")],
    )
    result = RebalanceResult(
        location=location,
        working_view=view,
        pivot_index=0,
        migrations=[],
        plan=plan,
    )
    assert not result.nothing_to_do


def test_anomalies_make_result_unclean(location: RankLocation, view: BagView) -> None:
    result = RebalanceResult(
        location=location,
        working_view=view,
        pivot_index=0,
        migrations=[],
        plan=None,
        anomalies=["A still in bag 1000 (expected 100)"],
    )
    assert not result.clean


# =============================================================================
# InspectResult
# =============================================================================


def test_inspect_result_health(location: RankLocation, view: BagView) -> None:
    healthy = InspectResult(
        location=location,
        working_view=view,
        pivot_index=0,
        misplaced=[],
        order_violations=[],
    )
    sick = dataclasses.replace(healthy, order_violations=["A is ahead of B"])

    assert healthy.healthy
    assert not sick.healthy
