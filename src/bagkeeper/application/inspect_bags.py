"""Inspect Bags use case."""

from __future__ import annotations

import logging

from dataclasses import dataclass

from bagkeeper.application.dto import InspectCommand, InspectResult
from bagkeeper.application.pivot_bag import read_pivot_bag
from bagkeeper.domain.bags.repositories import BagStateProvider, WeightOracle
from bagkeeper.domain.bags.services import BagDirectory, ListWalker, RankLocator
from bagkeeper.domain.migration.services import (
    MigrationDetector,
    MigrationInstructionBuilder,
)
from bagkeeper.domain.reordering.planner import (
    full_order_violations,
    pivot_order_violations,
)
from bagkeeper.shared.types import SortStrategy

logger = logging.getLogger(__name__)

# =============================================================================
# USE CASE
# =============================================================================


@dataclass
class InspectBags:
    """Reports misplaced and out-of-order entries without planning anything."""

    provider: BagStateProvider
    oracle: WeightOracle

    async def execute(self, cmd: InspectCommand) -> InspectResult:
        """Execute the inspection.

        Args:
            cmd: Target rank and the ordering the bag is checked against.

        Returns:
            The pivot bag's misplaced entries and order violations.
        """
        directory = BagDirectory(self.provider)
        walker = ListWalker(self.provider, self.oracle)
        thresholds = await directory.thresholds()
        detector = MigrationDetector(thresholds)

        bag = await read_pivot_bag(
            RankLocator(directory, walker), walker, detector, cmd.target_rank
        )
        misplaced = MigrationInstructionBuilder(thresholds).build(bag.report.flagged)

        working = bag.working_view
        if not len(working):
            violations: list[str] = []
        elif cmd.sort_strategy == SortStrategy.FULL:
            violations = full_order_violations(working)
        else:
            pivot = working[bag.pivot_index]
            violations = pivot_order_violations(working, pivot.id)

        stale = sum(1 for entry in bag.view if entry.is_stale)
        logger.info(
            "Bag %s: %d misplaced, %d order violation(s), %d stale",
            bag.view.ceiling,
            len(misplaced),
            len(violations),
            stale,
        )
        return InspectResult(
            location=bag.location,
            working_view=working,
            pivot_index=bag.pivot_index,
            misplaced=misplaced,
            order_violations=violations,
            stale_entries=stale,
        )
