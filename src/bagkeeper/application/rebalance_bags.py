"""Rebalance Bags use case."""

from __future__ import annotations

import logging

from dataclasses import dataclass, field

from bagkeeper.application.dto import RebalanceCommand, RebalanceResult
from bagkeeper.application.pivot_bag import PivotBag, read_pivot_bag
from bagkeeper.domain.bags.repositories import BagStateProvider, WeightOracle
from bagkeeper.domain.bags.services import BagDirectory, ListWalker, RankLocator
from bagkeeper.domain.migration.services import (
    MigrationDetector,
    MigrationInstructionBuilder,
)
from bagkeeper.domain.migration.value_objects import MigrationInstruction
from bagkeeper.domain.reordering.planner import (
    ReorderingPlanner,
    full_order_violations,
    pivot_order_violations,
)
from bagkeeper.domain.reordering.value_objects import ReorderPlan
from bagkeeper.domain.submission.repositories import InstructionSubmitter
from bagkeeper.domain.submission.value_objects import BatchOutcome
from bagkeeper.shared.constants import MAX_REPORTED_VIOLATIONS
from bagkeeper.shared.types import PivotStrategy, SortStrategy

logger = logging.getLogger(__name__)

# =============================================================================
# USE CASE
# =============================================================================


@dataclass
class RebalanceBags:
    """Runs one read-act-reread pass over the bag holding the target rank.

    Steps:
    1. Locate the target rank and walk its bag
    2. Flag entries whose true weight belongs to another bag
    3. Submit migrations, then re-read the state from scratch
    4. Plan reordering of the remaining entries
    5. Submit the plan, then re-walk the bag and verify the order

    Residual work after a submission is reported in ``anomalies``; the pass
    never loops on its own.
    """

    provider: BagStateProvider
    oracle: WeightOracle
    submitter: InstructionSubmitter
    planner: ReorderingPlanner = field(default_factory=ReorderingPlanner)

    async def execute(self, cmd: RebalanceCommand) -> RebalanceResult:
        """Execute the rebalance workflow."""
        directory = BagDirectory(self.provider)
        walker = ListWalker(self.provider, self.oracle)
        locator = RankLocator(directory, walker)
        thresholds = await directory.thresholds()
        detector = MigrationDetector(thresholds)
        builder = MigrationInstructionBuilder(thresholds)
        anomalies: list[str] = []

        # 1-2. Locate, walk, detect.
        bag = await read_pivot_bag(locator, walker, detector, cmd.target_rank)
        migrations = builder.build(bag.report.flagged)
        migration_outcome: BatchOutcome | None = None

        # 3. Migrate and re-read.
        if migrations and not cmd.dry_run:
            logger.info("Submitting %d migration(s)", len(migrations))
            migration_outcome = await self.submitter.submit_migrations(migrations)
            anomalies.extend(_batch_anomalies("migration", migration_outcome))
            anomalies.extend(
                await self._recheck_migrations(walker, detector, migrations)
            )

            bag = await read_pivot_bag(locator, walker, detector, cmd.target_rank)
            if bag.report.needs_migration:
                anomalies.append(
                    f"{len(bag.report.flagged)} entries in bag "
                    f"{bag.view.ceiling} still need migration after rebagging"
                )
        elif not migrations:
            logger.info("No entries need migration")

        # 4. Plan.
        plan = self._plan(bag, cmd)
        reorder_outcome: BatchOutcome | None = None

        # 5. Reorder and verify.
        if plan is not None and not plan.is_empty and not cmd.dry_run:
            logger.info("Submitting %d reordering instruction(s)", len(plan))
            reorder_outcome = await self.submitter.submit_reorders(plan.instructions)
            anomalies.extend(_batch_anomalies("reordering", reorder_outcome))
            anomalies.extend(
                await self._verify_order(directory, walker, detector, bag, plan)
            )
        elif plan is None or plan.is_empty:
            logger.info("No entries need repositioning")

        for anomaly in anomalies:
            logger.error("Residual work after correction pass: %s", anomaly)

        return RebalanceResult(
            location=bag.location,
            working_view=bag.working_view,
            pivot_index=bag.pivot_index,
            migrations=migrations,
            plan=plan,
            dry_run=cmd.dry_run,
            migration_outcome=migration_outcome,
            reorder_outcome=reorder_outcome,
            anomalies=anomalies,
        )

    def _plan(self, bag: PivotBag, cmd: RebalanceCommand) -> ReorderPlan | None:
        working = bag.working_view
        if not len(working):
            logger.info("Bag %s has no entries left to order", working.ceiling)
            return None
        return self.planner.plan(
            working,
            cmd.sort_strategy,
            bag.pivot_index,
            bag.pivot_id(cmd.pivot_strategy),
            settle=cmd.pivot_strategy == PivotStrategy.SETTLED,
        )

    async def _recheck_migrations(
        self,
        walker: ListWalker,
        detector: MigrationDetector,
        migrations: list[MigrationInstruction],
    ) -> list[str]:
        """Re-read every migrated entry and report any still misplaced."""
        residual: list[str] = []
        for instruction in migrations:
            node = await self.provider.list_node(instruction.entry_id)
            if node is None:
                logger.info("%s left the bags list", instruction.entry_id)
                continue
            entry = await walker.reconcile(node)
            if detector.is_misplaced(entry):
                residual.append(
                    f"{entry.id} still in bag {entry.bag_upper} "
                    f"(expected {instruction.to_ceiling})"
                )
        return residual

    async def _verify_order(
        self,
        directory: BagDirectory,
        walker: ListWalker,
        detector: MigrationDetector,
        bag: PivotBag,
        plan: ReorderPlan,
    ) -> list[str]:
        """Re-walk the bag after reordering and check the post-condition."""
        ceiling = bag.view.ceiling
        bucket = await directory.bucket(ceiling)
        if bucket is None:
            return [f"bag {ceiling} is empty after reordering"]

        fresh = detector.detect(await walker.materialize(bucket)).remaining
        if plan.strategy == SortStrategy.FULL:
            violations = full_order_violations(fresh)
        elif plan.pivot is None or plan.pivot not in fresh:
            return [f"pivot {plan.pivot} is no longer in bag {ceiling}"]
        else:
            violations = pivot_order_violations(fresh, plan.pivot)

        if len(violations) > MAX_REPORTED_VIOLATIONS:
            hidden = len(violations) - MAX_REPORTED_VIOLATIONS
            violations = violations[:MAX_REPORTED_VIOLATIONS]
            violations.append(f"... and {hidden} more order violation(s)")
        return violations


def _batch_anomalies(kind: str, outcome: BatchOutcome) -> list[str]:
    return [
        f"{kind} instruction {failure.index} failed: "
        f"{failure.error or 'unknown error'}"
        for failure in outcome.failures
    ]
