"""Value objects for the Bags bounded context."""

from __future__ import annotations

from bisect import bisect_right
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from bagkeeper.shared.exceptions import (
    UnclassifiableWeightError,
    UnrecognizedThresholdError,
)
from bagkeeper.shared.types import AccountId, Weight

# =============================================================================
# THRESHOLDS
# =============================================================================


@dataclass(frozen=True)
class ThresholdList:
    """Ascending bag ceilings, fixed for the duration of a run.

    Ceilings are exclusive: a weight belongs to the bag whose ceiling is the
    smallest threshold strictly greater than it.
    """

    ceilings: tuple[Weight, ...]

    def __post_init__(self) -> None:
        if not self.ceilings:
            msg = "threshold list must not be empty"
            raise ValueError(msg)
        for lower, upper in zip(self.ceilings, self.ceilings[1:]):
            if lower >= upper:
                msg = f"thresholds must be strictly ascending ({lower} >= {upper})"
                raise ValueError(msg)

    @classmethod
    def of(cls, values: Iterable[int]) -> ThresholdList:
        return cls(ceilings=tuple(Weight(v) for v in values))

    @property
    def highest(self) -> Weight:
        return self.ceilings[-1]

    def canonical_ceiling(self, weight: int) -> Weight:
        """Return the ceiling of the bag a weight belongs to.

        Raises:
            UnclassifiableWeightError: If no threshold exceeds the weight.
        """
        index = bisect_right(self.ceilings, weight)
        if index == len(self.ceilings):
            raise UnclassifiableWeightError(weight, self.highest)
        return self.ceilings[index]

    def validate(self, ceiling: int) -> None:
        """Fail fast on a ceiling outside the configuration.

        Raises:
            UnrecognizedThresholdError: If the ceiling is not a threshold.
        """
        if ceiling not in self:
            raise UnrecognizedThresholdError(ceiling)

    def __contains__(self, ceiling: object) -> bool:
        if not isinstance(ceiling, int):
            return False
        index = bisect_right(self.ceilings, ceiling)
        return index > 0 and self.ceilings[index - 1] == ceiling

    def __iter__(self) -> Iterator[Weight]:
        return iter(self.ceilings)

    def __len__(self) -> int:
        return len(self.ceilings)


# =============================================================================
# SNAPSHOT RECORDS
# =============================================================================


@dataclass(frozen=True)
class Bucket:
    """A bag as recorded in the snapshot: its ceiling and list ends."""

    ceiling: Weight
    head: AccountId | None = None
    tail: AccountId | None = None

    @property
    def is_empty(self) -> bool:
        return self.head is None or self.tail is None


@dataclass(frozen=True)
class ListNode:
    """A raw list node with its cached (possibly stale) weight."""

    id: AccountId
    bag_upper: Weight
    score: Weight
    prev: AccountId | None = None
    next: AccountId | None = None
