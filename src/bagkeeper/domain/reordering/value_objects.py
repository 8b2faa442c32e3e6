"""Value objects for the Reordering bounded context."""

from __future__ import annotations

from dataclasses import dataclass

from bagkeeper.shared.types import AccountId, SortStrategy

# =============================================================================
# VALUE OBJECTS
# =============================================================================


@dataclass(frozen=True)
class ReorderInstruction:
    """Place ``heavier`` immediately ahead of ``lighter`` in their bag."""

    heavier: AccountId
    lighter: AccountId

    def __post_init__(self) -> None:
        if self.heavier == self.lighter:
            msg = f"instruction must name two different entries, got {self.heavier}"
            raise ValueError(msg)


@dataclass(frozen=True)
class ReorderPlan:
    """An ordered instruction list and the bag order it produces.

    Instructions must be applied strictly in sequence: later ones assume the
    earlier ones have already taken effect.
    """

    strategy: SortStrategy
    instructions: list[ReorderInstruction]
    resulting_order: list[AccountId]
    pivot: AccountId | None = None

    @property
    def is_empty(self) -> bool:
        return not self.instructions

    def __len__(self) -> int:
        return len(self.instructions)
