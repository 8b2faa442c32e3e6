"""Reordering planner: minimal "place ahead of" instruction lists.

Both algorithms work on scratch copies of a :class:`BagView` and never
mutate the sequence they are scanning. Every plan is checked against its
post-condition before it is returned.
"""

from __future__ import annotations

import logging

from dataclasses import dataclass

from bagkeeper.domain.bags.entities import BagView, Entry
from bagkeeper.domain.reordering.value_objects import ReorderInstruction, ReorderPlan
from bagkeeper.shared.exceptions import PlannerInvariantViolation
from bagkeeper.shared.types import AccountId, SortStrategy

logger = logging.getLogger(__name__)

# =============================================================================
# SIMULATION & VERIFICATION
# =============================================================================


def apply_instructions(
    view: BagView, instructions: list[ReorderInstruction]
) -> BagView:
    """Apply instructions in order to a copy of ``view``."""
    result = view.copy()
    for instruction in instructions:
        result.move_ahead_of(instruction.heavier, instruction.lighter)
    return result


def full_order_violations(view: BagView) -> list[str]:
    """Adjacent pairs where a lighter entry sits ahead of a heavier one."""
    entries = view.entries()
    return [
        f"{ahead.id} ({ahead.weight}) is ahead of heavier {behind.id} ({behind.weight})"
        for ahead, behind in zip(entries, entries[1:])
        if ahead.weight < behind.weight
    ]


def pivot_order_violations(view: BagView, pivot_id: AccountId) -> list[str]:
    """Entries on the wrong side of the pivot.

    Raises:
        KeyError: If the pivot is not in the view.
    """
    pivot = view.get(pivot_id)
    position = view.index_of(pivot_id)
    violations: list[str] = []
    for index, entry in enumerate(view):
        if index < position and entry.weight < pivot.weight:
            violations.append(
                f"lighter {entry.id} ({entry.weight}) is ahead of "
                f"pivot {pivot.id} ({pivot.weight})"
            )
        elif index > position and entry.weight > pivot.weight:
            violations.append(
                f"heavier {entry.id} ({entry.weight}) is behind "
                f"pivot {pivot.id} ({pivot.weight})"
            )
    return violations


def sorted_entries(view: BagView) -> list[Entry]:
    """Stable descending order by true weight."""
    return sorted(view.entries(), key=lambda e: e.weight, reverse=True)


def settled_pivot(view: BagView, index: int) -> Entry:
    """The entry that would sit at ``index`` if the bag were fully sorted.

    Raises:
        IndexError: If ``index`` is outside the bag.
    """
    return sorted_entries(view)[index]


# =============================================================================
# PLANNER
# =============================================================================


@dataclass
class ReorderingPlanner:
    """Plans full sorts and pivot-relative semi-sorts of a single bag."""

    def full_sort(self, view: BagView) -> ReorderPlan:
        """Plan a complete descending sort with one move per misplaced slot.

        Walks the target order and the working order in lockstep. When the
        target entry at a position is heavier than the working entry there,
        the target entry is moved ahead of it.

        Raises:
            PlannerInvariantViolation: If the simulated result is not
                non-increasing.
        """
        working = view.copy()
        instructions: list[ReorderInstruction] = []

        for position, target in enumerate(sorted_entries(view)):
            current = working[position]
            if target.weight > current.weight:
                instructions.append(
                    ReorderInstruction(heavier=target.id, lighter=current.id)
                )
                working.move_ahead_of(target.id, current.id)

        self._check(SortStrategy.FULL, full_order_violations(working))
        logger.info(
            "Full sort of bag %s: %d instruction(s) for %d entries",
            view.ceiling,
            len(instructions),
            len(view),
        )
        return ReorderPlan(
            strategy=SortStrategy.FULL,
            instructions=instructions,
            resulting_order=working.ids(),
        )

    def semi_sort(
        self,
        view: BagView,
        pivot_index: int,
        pivot_id: AccountId | None = None,
        *,
        settle: bool = False,
    ) -> ReorderPlan:
        """Plan the fewest moves that put the pivot between heavier and lighter.

        The pivot defaults to the entry at ``pivot_index``; ``pivot_id``
        overrides it. Entries on either side are left unsorted.

        With ``settle`` the pivot defaults to the entry a full sort would put
        at ``pivot_index``, and entries of equal weight that precede it in
        walk order keep their lead, so the pivot lands exactly on
        ``pivot_index``.

        Raises:
            IndexError: If ``pivot_index`` is outside the bag.
            KeyError: If ``pivot_id`` is not in the bag.
            PlannerInvariantViolation: If the simulated result leaves an entry
                on the wrong side of the pivot, or a settled pivot off its slot.
        """
        if not 0 <= pivot_index < len(view):
            msg = f"pivot index {pivot_index} outside bag of {len(view)} entries"
            raise IndexError(msg)
        if pivot_id is not None:
            pivot = view.get(pivot_id)
        elif settle:
            pivot = settled_pivot(view, pivot_index)
        else:
            pivot = view[pivot_index]

        instructions: list[ReorderInstruction] = []
        working = view.copy()

        # Phase 1: seat the pivot ahead of the first lighter entry in front of it.
        seat = working.index_of(pivot.id)
        for position in range(seat):
            candidate = working[position]
            if candidate.weight < pivot.weight:
                if settle:
                    for tied in working.entries()[position + 1 : seat]:
                        if tied.weight == pivot.weight:
                            instructions.append(
                                ReorderInstruction(
                                    heavier=tied.id, lighter=candidate.id
                                )
                            )
                            working.move_ahead_of(tied.id, candidate.id)
                instructions.append(
                    ReorderInstruction(heavier=pivot.id, lighter=candidate.id)
                )
                working.move_ahead_of(pivot.id, candidate.id)
                seat = working.index_of(pivot.id)
                break

        # Phase 2: pull every heavier entry behind the pivot ahead of it.
        for candidate in working.entries()[seat + 1 :]:
            if candidate.weight > pivot.weight:
                instructions.append(
                    ReorderInstruction(heavier=candidate.id, lighter=pivot.id)
                )

        result = apply_instructions(view, instructions)
        violations = pivot_order_violations(result, pivot.id)
        landed = result.index_of(pivot.id)
        if settle and landed != pivot_index:
            violations.append(
                f"settled pivot {pivot.id} lands at {landed}, expected {pivot_index}"
            )
        self._check(SortStrategy.SEMI, violations)
        logger.info(
            "Semi-sort of bag %s around %s: %d instruction(s), pivot lands at %d",
            view.ceiling,
            pivot.id,
            len(instructions),
            landed,
        )
        return ReorderPlan(
            strategy=SortStrategy.SEMI,
            instructions=instructions,
            resulting_order=result.ids(),
            pivot=pivot.id,
        )

    def plan(
        self,
        view: BagView,
        strategy: SortStrategy,
        pivot_index: int,
        pivot_id: AccountId | None = None,
        *,
        settle: bool = False,
    ) -> ReorderPlan:
        """Dispatch to the planner for ``strategy``."""
        if strategy == SortStrategy.FULL:
            return self.full_sort(view)
        return self.semi_sort(view, pivot_index, pivot_id, settle=settle)

    @staticmethod
    def _check(strategy: SortStrategy, violations: list[str]) -> None:
        if not violations:
            return
        for violation in violations:
            logger.warning("%s sort post-condition: %s", strategy.value, violation)
        raise PlannerInvariantViolation(violations)
