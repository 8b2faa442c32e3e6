"""Domain-specific types that prevent primitive obsession."""

from __future__ import annotations

from enum import StrEnum

# =============================================================================
# NEWTYPES
# =============================================================================


class AccountId(str):
    """Identifier of an account held in a bag."""


class Weight(int):
    """An exact, base-unit weight (never a float approximation)."""

    def __add__(self, other: object) -> Weight:
        if isinstance(other, int):
            return Weight(int.__add__(self, other))
        return NotImplemented

    def __sub__(self, other: object) -> Weight:
        if isinstance(other, int):
            return Weight(int.__sub__(self, other))
        return NotImplemented


# =============================================================================
# ENUMS
# =============================================================================


class SortStrategy(StrEnum):
    """Which reordering algorithm to plan with."""

    SEMI = "semi"
    FULL = "full"


class PivotStrategy(StrEnum):
    """How the semi-sort pivot is chosen inside the located bag.

    ``LOCATED`` pivots on the entry found at the target rank in walk order.
    ``SETTLED`` pivots on the entry that would sit at that index if the bag
    were fully sorted, so it lands exactly on the index once applied.
    """

    LOCATED = "located"
    SETTLED = "settled"
