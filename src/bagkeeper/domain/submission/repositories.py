"""Port for handing instruction batches to an external executor."""

from __future__ import annotations

from typing import Protocol

from bagkeeper.domain.migration.value_objects import MigrationInstruction
from bagkeeper.domain.reordering.value_objects import ReorderInstruction
from bagkeeper.domain.submission.value_objects import BatchOutcome

# =============================================================================
# PROTOCOLS
# =============================================================================


class InstructionSubmitter(Protocol):
    """Applies instruction batches to the live bags list."""

    async def submit_migrations(
        self, instructions: list[MigrationInstruction]
    ) -> BatchOutcome:
        """Submit independent migration instructions as one batch.

        Raises:
            SubmissionError: If the batch could not be submitted at all.
        """
        ...

    async def submit_reorders(
        self, instructions: list[ReorderInstruction]
    ) -> BatchOutcome:
        """Submit reordering instructions, applied strictly in sequence.

        Raises:
            SubmissionError: If the batch could not be submitted at all.
        """
        ...
