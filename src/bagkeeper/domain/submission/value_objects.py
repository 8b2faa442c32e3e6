"""Value objects describing the result of an instruction batch."""

from __future__ import annotations

from dataclasses import dataclass, field

# =============================================================================
# VALUE OBJECTS
# =============================================================================


@dataclass(frozen=True)
class InstructionOutcome:
    """Result of one instruction inside a batch."""

    index: int
    succeeded: bool
    error: str | None = None


@dataclass(frozen=True)
class BatchOutcome:
    """Result of submitting a batch of instructions.

    ``atomic`` batches either apply entirely or not at all; otherwise each
    instruction reports its own result.
    """

    outcomes: list[InstructionOutcome] = field(
        default_factory=list[InstructionOutcome]
    )
    atomic: bool = False
    reference: str | None = None

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if o.succeeded)

    @property
    def failures(self) -> list[InstructionOutcome]:
        return [o for o in self.outcomes if not o.succeeded]

    @property
    def all_succeeded(self) -> bool:
        return not self.failures
