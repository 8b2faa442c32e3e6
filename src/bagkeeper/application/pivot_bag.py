"""Read the bag that holds a target rank and prepare its working view."""

from __future__ import annotations

from dataclasses import dataclass

from bagkeeper.domain.bags.entities import BagView, RankLocation
from bagkeeper.domain.bags.services import ListWalker, RankLocator
from bagkeeper.domain.migration.services import MigrationDetector
from bagkeeper.domain.migration.value_objects import MigrationReport
from bagkeeper.domain.reordering.planner import settled_pivot
from bagkeeper.shared.types import AccountId, PivotStrategy

# =============================================================================
# PIVOT BAG
# =============================================================================


@dataclass(frozen=True)
class PivotBag:
    """The located pivot, its walked bag and the migration split."""

    location: RankLocation
    view: BagView
    report: MigrationReport

    @property
    def working_view(self) -> BagView:
        return self.report.remaining

    @property
    def pivot_index(self) -> int:
        """Index of the target slot inside the working view."""
        return working_index(
            self.view, self.report.flagged_ids(), self.location.local_index
        )

    def pivot_id(self, strategy: PivotStrategy) -> AccountId | None:
        """The entry the semi-sort should pivot on, or None for the slot default.

        Returns None when the working view is empty, or when the located entry
        is itself being migrated out of the bag.
        """
        working = self.working_view
        if not len(working):
            return None
        if strategy == PivotStrategy.SETTLED:
            return settled_pivot(working, self.pivot_index).id
        located = self.location.entry.id
        return located if located in working else None


def working_index(view: BagView, removed: list[AccountId], index: int) -> int:
    """Translate a slot index in ``view`` to the view without ``removed``.

    Removed entries ahead of the slot shift it forward; the result is clamped
    to the last remaining position.
    """
    dropped = set(removed)
    ahead = sum(1 for entry_id in view.ids()[:index] if entry_id in dropped)
    remaining = len(view) - len(dropped & set(view.ids()))
    return max(0, min(index - ahead, remaining - 1))


async def read_pivot_bag(
    locator: RankLocator,
    walker: ListWalker,
    detector: MigrationDetector,
    rank: int,
) -> PivotBag:
    """Locate ``rank``, walk its bag and split out misplaced entries.

    Raises:
        RankExceedsPopulationError: If fewer than ``rank`` entries exist.
        BrokenChainError: If the bag's list is inconsistent.
    """
    location = await locator.locate(rank)
    view = await walker.materialize(location.bucket)
    report = detector.detect(view)
    return PivotBag(location=location, view=view, report=report)
