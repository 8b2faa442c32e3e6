"""In-memory ledger: state provider, weight oracle and submitter in one.

Holds a complete bags-list snapshot and applies instruction batches to it with
the same preconditions the live ledger enforces. Used for offline planning
from snapshot files and as the collaborator in use-case tests.
"""

from __future__ import annotations

import itertools
import logging

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field, replace

from bagkeeper.domain.bags.value_objects import Bucket, ListNode, ThresholdList
from bagkeeper.domain.migration.value_objects import MigrationInstruction
from bagkeeper.domain.reordering.value_objects import ReorderInstruction
from bagkeeper.domain.submission.value_objects import BatchOutcome, InstructionOutcome
from bagkeeper.shared.exceptions import (
    ProviderError,
    UnclassifiableWeightError,
)
from bagkeeper.shared.types import AccountId, Weight

logger = logging.getLogger(__name__)


class InstructionRejected(Exception):
    """One instruction failed a ledger precondition."""


@dataclass
class BagEnds:
    """Mutable head/tail pointers of one bag."""

    head: AccountId | None = None
    tail: AccountId | None = None


# =============================================================================
# LEDGER
# =============================================================================


@dataclass
class InMemoryLedger:
    """Doubly linked bags held in dictionaries.

    ``nodes`` carries each account's cached score and links; ``weights``
    carries the authoritative weights. Linkage is stored as given, so a
    deliberately inconsistent snapshot can be loaded and walked. Batch
    references (``memory-1``, ``memory-2``, ...) are numbered per ledger.
    """

    thresholds: list[Weight]
    bags: dict[Weight, BagEnds] = field(default_factory=dict[Weight, BagEnds])
    nodes: dict[AccountId, ListNode] = field(
        default_factory=dict[AccountId, ListNode]
    )
    weights: dict[AccountId, Weight] = field(
        default_factory=dict[AccountId, Weight]
    )
    batches: itertools.count[int] = field(
        default_factory=lambda: itertools.count(1), repr=False, compare=False
    )

    @classmethod
    def from_bags(
        cls,
        thresholds: Iterable[int],
        bags: Mapping[int, Iterable[tuple[str, int, int]]],
    ) -> InMemoryLedger:
        """Build a well-linked ledger.

        Args:
            thresholds: Ascending bag ceilings.
            bags: For each ceiling, ``(id, cached score, true weight)`` tuples
                in list order.
        """
        ledger = cls(thresholds=[Weight(t) for t in thresholds])
        for ceiling, members in bags.items():
            ledger.bags.setdefault(Weight(ceiling), BagEnds())
            for entry_id, score, weight in members:
                account = AccountId(entry_id)
                ledger.nodes[account] = ListNode(
                    id=account, bag_upper=Weight(ceiling), score=Weight(score)
                )
                ledger.weights[account] = Weight(weight)
                ledger._append(account, Weight(ceiling))
        return ledger

    # =================================================================
    # State provider / weight oracle
    # =================================================================

    async def list_buckets(self) -> list[Bucket]:
        return [
            Bucket(ceiling=ceiling, head=ends.head, tail=ends.tail)
            for ceiling, ends in self.bags.items()
        ]

    async def recognized_thresholds(self) -> list[Weight]:
        return list(self.thresholds)

    async def list_node(self, entry_id: AccountId) -> ListNode | None:
        return self.nodes.get(entry_id)

    async def authoritative_weight(self, entry_id: AccountId) -> Weight:
        try:
            return self.weights[entry_id]
        except KeyError:
            raise ProviderError(f"no weight recorded for {entry_id}") from None

    # =================================================================
    # Submitter
    # =================================================================

    async def submit_migrations(
        self, instructions: list[MigrationInstruction]
    ) -> BatchOutcome:
        outcome = self._batch(
            self._attempt(index, self.rebag, i.entry_id, i.to_ceiling)
            for index, i in enumerate(instructions)
        )
        logger.info(
            "Applied %d/%d migration(s)", outcome.succeeded, len(instructions)
        )
        return outcome

    async def submit_reorders(
        self, instructions: list[ReorderInstruction]
    ) -> BatchOutcome:
        outcome = self._batch(
            self._attempt(index, self.put_in_front_of, i.heavier, i.lighter)
            for index, i in enumerate(instructions)
        )
        logger.info(
            "Applied %d/%d reordering instruction(s)",
            outcome.succeeded,
            len(instructions),
        )
        return outcome

    @staticmethod
    def _attempt(
        index: int, operation: Callable[..., None], *args: object
    ) -> InstructionOutcome:
        try:
            operation(*args)
        except InstructionRejected as e:
            logger.warning("Instruction %d rejected: %s", index, e)
            return InstructionOutcome(index=index, succeeded=False, error=str(e))
        return InstructionOutcome(index=index, succeeded=True)

    def _batch(self, outcomes: Iterable[InstructionOutcome]) -> BatchOutcome:
        return BatchOutcome(
            outcomes=list(outcomes), reference=f"memory-{next(self.batches)}"
        )

    # =================================================================
    # Ledger operations
    # =================================================================

    def rebag(self, entry_id: AccountId, expected: Weight | None = None) -> None:
        """Move an account to the bag matching its true weight.

        The account is appended at the tail of the new bag and its cached
        score is refreshed.

        Raises:
            InstructionRejected: If the account is unknown, unclassifiable, or
                ``expected`` disagrees with the ledger's own classification.
        """
        node = self.nodes.get(entry_id)
        if node is None or entry_id not in self.weights:
            raise InstructionRejected(f"{entry_id} is not in the bags list")
        weight = self.weights[entry_id]
        try:
            target = ThresholdList.of(self.thresholds).canonical_ceiling(weight)
        except UnclassifiableWeightError as e:
            raise InstructionRejected(str(e)) from e
        if expected is not None and expected != target:
            raise InstructionRejected(
                f"{entry_id} belongs in bag {target}, not {expected}"
            )

        if target != node.bag_upper:
            self._unlink(entry_id)
            self._append(entry_id, target)
        self.nodes[entry_id] = replace(self.nodes[entry_id], score=weight)

    def put_in_front_of(self, heavier: AccountId, lighter: AccountId) -> None:
        """Place ``heavier`` immediately ahead of ``lighter``.

        Raises:
            InstructionRejected: If either account is unknown, they sit in
                different bags, or ``heavier`` does not strictly outweigh
                ``lighter``.
        """
        for entry_id in (heavier, lighter):
            if entry_id not in self.nodes or entry_id not in self.weights:
                raise InstructionRejected(f"{entry_id} is not in the bags list")
        if heavier == lighter:
            raise InstructionRejected(f"{heavier} cannot be placed ahead of itself")

        ahead, behind = self.nodes[heavier], self.nodes[lighter]
        if ahead.bag_upper != behind.bag_upper:
            raise InstructionRejected(
                f"{heavier} (bag {ahead.bag_upper}) and {lighter} "
                f"(bag {behind.bag_upper}) are in different bags"
            )
        if self.weights[heavier] <= self.weights[lighter]:
            raise InstructionRejected(
                f"{heavier} ({self.weights[heavier]}) does not outweigh "
                f"{lighter} ({self.weights[lighter]})"
            )
        if ahead.next == lighter:
            return
        self._unlink(heavier)
        self._insert_before(heavier, lighter)

    def set_weight(self, entry_id: AccountId, weight: int) -> None:
        """Change an account's authoritative weight without touching the list."""
        self.weights[entry_id] = Weight(weight)

    def bag_order(self, ceiling: int) -> list[AccountId]:
        """Ids in a bag from head to tail. Assumes well-formed links."""
        order: list[AccountId] = []
        ends = self.bags.get(Weight(ceiling))
        current = ends.head if ends else None
        while current is not None and len(order) <= len(self.nodes):
            order.append(current)
            current = self.nodes[current].next
        return order

    # =================================================================
    # Link maintenance
    # =================================================================

    def _unlink(self, entry_id: AccountId) -> None:
        node = self.nodes[entry_id]
        ends = self.bags[node.bag_upper]
        if node.prev is None:
            ends.head = node.next
        else:
            self.nodes[node.prev] = replace(self.nodes[node.prev], next=node.next)
        if node.next is None:
            ends.tail = node.prev
        else:
            self.nodes[node.next] = replace(self.nodes[node.next], prev=node.prev)
        self.nodes[entry_id] = replace(node, prev=None, next=None)

    def _append(self, entry_id: AccountId, ceiling: Weight) -> None:
        ends = self.bags.setdefault(ceiling, BagEnds())
        tail = ends.tail
        self.nodes[entry_id] = replace(
            self.nodes[entry_id], bag_upper=ceiling, prev=tail, next=None
        )
        if tail is None:
            ends.head = entry_id
        else:
            self.nodes[tail] = replace(self.nodes[tail], next=entry_id)
        ends.tail = entry_id

    def _insert_before(self, entry_id: AccountId, anchor_id: AccountId) -> None:
        anchor = self.nodes[anchor_id]
        ends = self.bags[anchor.bag_upper]
        prev = anchor.prev
        self.nodes[entry_id] = replace(
            self.nodes[entry_id],
            bag_upper=anchor.bag_upper,
            prev=prev,
            next=anchor_id,
        )
        self.nodes[anchor_id] = replace(anchor, prev=entry_id)
        if prev is None:
            ends.head = entry_id
        else:
            self.nodes[prev] = replace(self.nodes[prev], next=entry_id)
