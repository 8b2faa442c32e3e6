"""Plain-text run reports for rebalance and inspect results."""

from __future__ import annotations

from bagkeeper.application.dto import InspectResult, RebalanceResult
from bagkeeper.domain.bags.entities import BagView, RankLocation
from bagkeeper.domain.migration.value_objects import MigrationInstruction
from bagkeeper.domain.submission.value_objects import BatchOutcome
from bagkeeper.shared.constants import REPORT_SEPARATOR

# =============================================================================
# SECTIONS
# =============================================================================


def render_bag(view: BagView, pivot_index: int | None = None) -> list[str]:
    """One line per entry; a separator is drawn above the pivot slot."""
    lines: list[str] = []
    for index, entry in enumerate(view):
        if index == pivot_index:
            lines.append(REPORT_SEPARATOR)
        marker = "*" if entry.is_stale else " "
        lines.append(
            f"{index:>6} {marker} {entry.id}  {entry.weight} "
            f"(cached {entry.cached_weight})"
        )
    return lines


def _render_location(location: RankLocation) -> list[str]:
    return [
        f"Rank {location.rank}: {location.entry.id} "
        f"({location.entry.weight}) in bag {location.bucket.ceiling} "
        f"at index {location.local_index}",
    ]


def _render_migrations(migrations: list[MigrationInstruction]) -> list[str]:
    lines = [f"Migrations: {len(migrations)}"]
    lines.extend(
        f"  {m.entry_id}: {m.from_ceiling} -> {m.to_ceiling}" for m in migrations
    )
    return lines


def _render_outcome(label: str, outcome: BatchOutcome | None) -> list[str]:
    if outcome is None:
        return []
    line = f"{label}: {outcome.succeeded}/{len(outcome.outcomes)} applied"
    if outcome.reference:
        line += f" ({outcome.reference})"
    return [line]


# =============================================================================
# REPORTS
# =============================================================================


def render_rebalance(result: RebalanceResult) -> str:
    """Render a rebalance result for the run log."""
    lines = _render_location(result.location)
    lines.append(REPORT_SEPARATOR)
    lines.extend(_render_migrations(result.migrations))
    lines.extend(_render_outcome("Migration batch", result.migration_outcome))

    plan = result.plan
    if plan is None:
        lines.append("Reordering: bag is empty")
    else:
        pivot = f" around {plan.pivot}" if plan.pivot else ""
        lines.append(f"Reordering ({plan.strategy.value}{pivot}): {len(plan)}")
        lines.extend(f"  {i.heavier} ahead of {i.lighter}" for i in plan.instructions)
    lines.extend(_render_outcome("Reordering batch", result.reorder_outcome))

    lines.append(REPORT_SEPARATOR)
    lines.append(f"Bag {result.working_view.ceiling} (working view)")
    lines.extend(render_bag(result.working_view, result.pivot_index))

    if result.dry_run:
        lines.append("Dry run: nothing was submitted")
    elif result.nothing_to_do:
        lines.append("Nothing to do")
    for anomaly in result.anomalies:
        lines.append(f"ANOMALY: {anomaly}")
    return "\n".join(lines)


def render_inspection(result: InspectResult) -> str:
    """Render an inspection result."""
    lines = _render_location(result.location)
    lines.append(REPORT_SEPARATOR)
    lines.extend(_render_migrations(result.misplaced))
    lines.append(f"Order violations: {len(result.order_violations)}")
    lines.extend(f"  {v}" for v in result.order_violations)
    lines.append(f"Stale cached weights: {result.stale_entries}")
    lines.append(REPORT_SEPARATOR)
    lines.extend(render_bag(result.working_view, result.pivot_index))
    lines.append("Healthy" if result.healthy else "Needs rebalancing")
    return "\n".join(lines)
