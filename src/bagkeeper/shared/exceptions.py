"""Typed exception hierarchy for bagkeeper."""

from __future__ import annotations

from bagkeeper.shared.types import AccountId, Weight

# =============================================================================
# BASE
# =============================================================================


class BagkeeperError(Exception):
    """Base exception for all bagkeeper errors."""


# =============================================================================
# BAG STRUCTURE
# =============================================================================


class BrokenChainError(BagkeeperError):
    """A bag's linked list is inconsistent in the snapshot."""

    def __init__(self, entry_id: AccountId | str, reason: str) -> None:
        self.entry_id = entry_id
        super().__init__(f"Broken chain at {entry_id}: {reason}")


class UnrecognizedThresholdError(BagkeeperError):
    """A bag ceiling is not part of the configured threshold list."""

    def __init__(self, ceiling: Weight | int) -> None:
        self.ceiling = ceiling
        super().__init__(
            f"Bag ceiling {ceiling} not found in recognized thresholds; "
            "threshold configuration is stale"
        )


class UnclassifiableWeightError(BagkeeperError):
    """No threshold is strictly greater than the weight."""

    def __init__(self, weight: Weight | int, highest: Weight | int) -> None:
        self.weight = weight
        self.highest = highest
        super().__init__(
            f"Weight {weight} is not below any threshold (highest is {highest})"
        )


# =============================================================================
# RANKING
# =============================================================================


class RankExceedsPopulationError(BagkeeperError):
    """Requested global rank is larger than the number of entries."""

    def __init__(self, rank: int, population: int) -> None:
        self.rank = rank
        self.population = population
        super().__init__(
            f"Rank {rank} exceeds population: only {population} entries in bags"
        )


# =============================================================================
# PLANNING
# =============================================================================


class PlannerInvariantViolation(BagkeeperError):
    """A reordering plan failed its post-condition check."""

    def __init__(self, violations: list[str]) -> None:
        self.violations = violations
        super().__init__(
            f"Planner post-condition failed with {len(violations)} violation(s): "
            + "; ".join(violations[:3])
        )


# =============================================================================
# COLLABORATORS
# =============================================================================


class ProviderError(BagkeeperError):
    """Reading bag state or weights from the state provider failed."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"State provider error: {reason}")


class SubmissionError(BagkeeperError):
    """Submitting an instruction batch failed as a whole."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Submission failed: {reason}")


class SnapshotError(BagkeeperError):
    """A snapshot file could not be read or written."""


# =============================================================================
# CONFIGURATION
# =============================================================================


class ConfigurationError(BagkeeperError):
    """Invalid or missing configuration."""
