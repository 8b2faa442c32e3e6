"""Fixtures shared by all domain tests."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

import pytest

from bagkeeper.domain.bags.entities import BagView, Entry
from bagkeeper.domain.bags.value_objects import Bucket, ListNode, ThresholdList
from bagkeeper.shared.types import AccountId, Weight

THRESHOLDS = [10, 100, 1_000, 10_000]


@dataclass
class FakeBagState:
    """In-test state provider and weight oracle over plain dictionaries."""

    thresholds: list[int]
    buckets: list[Bucket] = field(default_factory=list[Bucket])
    nodes: dict[AccountId, ListNode] = field(default_factory=dict[AccountId, ListNode])
    weights: dict[AccountId, Weight] = field(default_factory=dict[AccountId, Weight])
    node_reads: int = 0
    weight_reads: int = 0

    async def list_buckets(self) -> list[Bucket]:
        return list(self.buckets)

    async def recognized_thresholds(self) -> list[Weight]:
        return [Weight(t) for t in self.thresholds]

    async def list_node(self, entry_id: AccountId) -> ListNode | None:
        self.node_reads += 1
        return self.nodes.get(entry_id)

    async def authoritative_weight(self, entry_id: AccountId) -> Weight:
        self.weight_reads += 1
        return self.weights[entry_id]


StateFactory = Callable[[dict[int, list[tuple[str, int, int]]]], FakeBagState]


@pytest.fixture
def make_state() -> StateFactory:
    """Build a well-linked state from ``{ceiling: [(id, score, weight)]}``."""

    def _make(bags: dict[int, list[tuple[str, int, int]]]) -> FakeBagState:
        state = FakeBagState(thresholds=list(THRESHOLDS))
        for ceiling, members in bags.items():
            ids = [AccountId(m[0]) for m in members]
            for index, (entry_id, score, weight) in enumerate(members):
                state.nodes[AccountId(entry_id)] = ListNode(
                    id=AccountId(entry_id),
                    bag_upper=Weight(ceiling),
                    score=Weight(score),
                    prev=ids[index - 1] if index > 0 else None,
                    next=ids[index + 1] if index + 1 < len(ids) else None,
                )
                state.weights[AccountId(entry_id)] = Weight(weight)
            state.buckets.append(
                Bucket(
                    ceiling=Weight(ceiling),
                    head=ids[0] if ids else None,
                    tail=ids[-1] if ids else None,
                )
            )
        return state

    return _make


ViewFactory = Callable[..., BagView]


@pytest.fixture
def make_view() -> ViewFactory:
    """Build a bag view from ``("A", 3), ("B", 9), ...`` pairs."""

    def _make(*pairs: tuple[str, int], ceiling: int = 1_000) -> BagView:
        entries = [
            Entry(
                id=AccountId(entry_id),
                bag_upper=Weight(ceiling),
                cached_weight=Weight(weight),
                true_weight=Weight(weight),
            )
            for entry_id, weight in pairs
        ]
        return BagView.from_entries(Weight(ceiling), entries)

    return _make


@pytest.fixture
def thresholds() -> ThresholdList:
    return ThresholdList.of(THRESHOLDS)
