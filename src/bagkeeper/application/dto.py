"""Application-layer command and result DTOs."""

from __future__ import annotations

from dataclasses import dataclass, field

from bagkeeper.domain.bags.entities import BagView, RankLocation
from bagkeeper.domain.migration.value_objects import MigrationInstruction
from bagkeeper.domain.reordering.value_objects import ReorderPlan
from bagkeeper.domain.submission.value_objects import BatchOutcome
from bagkeeper.shared.constants import DEFAULT_TARGET_RANK
from bagkeeper.shared.types import PivotStrategy, SortStrategy

# =============================================================================
# REBALANCE
# =============================================================================


@dataclass(frozen=True)
class RebalanceCommand:
    """Command to migrate and reorder the bag holding the target rank."""

    target_rank: int = DEFAULT_TARGET_RANK
    sort_strategy: SortStrategy = SortStrategy.SEMI
    pivot_strategy: PivotStrategy = PivotStrategy.LOCATED
    dry_run: bool = False


@dataclass(frozen=True)
class RebalanceResult:
    """What a rebalance pass found, planned and (unless dry) submitted.

    ``anomalies`` lists residual work or failures seen on the post-submission
    re-read. They are reported, never retried.
    """

    location: RankLocation
    working_view: BagView
    pivot_index: int
    migrations: list[MigrationInstruction]
    plan: ReorderPlan | None
    dry_run: bool = False
    migration_outcome: BatchOutcome | None = None
    reorder_outcome: BatchOutcome | None = None
    anomalies: list[str] = field(default_factory=list[str])

    @property
    def nothing_to_do(self) -> bool:
        return not self.migrations and (self.plan is None or self.plan.is_empty)

    @property
    def clean(self) -> bool:
        return not self.anomalies


# =============================================================================
# INSPECT
# =============================================================================


@dataclass(frozen=True)
class InspectCommand:
    """Command to check the target bag without planning or submitting."""

    target_rank: int = DEFAULT_TARGET_RANK
    sort_strategy: SortStrategy = SortStrategy.SEMI


@dataclass(frozen=True)
class InspectResult:
    """Health of the bag holding the target rank."""

    location: RankLocation
    working_view: BagView
    pivot_index: int
    misplaced: list[MigrationInstruction]
    order_violations: list[str]
    stale_entries: int = 0

    @property
    def healthy(self) -> bool:
        return not self.misplaced and not self.order_violations
