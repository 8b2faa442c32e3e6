"""Instruction submitter backed by the ledger batch endpoints."""

from __future__ import annotations

import logging

from dataclasses import dataclass

from pydantic import ValidationError

from bagkeeper.domain.migration.value_objects import MigrationInstruction
from bagkeeper.domain.reordering.value_objects import ReorderInstruction
from bagkeeper.domain.submission.value_objects import BatchOutcome, InstructionOutcome
from bagkeeper.infrastructure.ledger.client import LedgerClient
from bagkeeper.infrastructure.ledger.payloads import BatchResultPayload
from bagkeeper.shared.exceptions import SubmissionError

logger = logging.getLogger(__name__)

# =============================================================================
# SUBMITTER
# =============================================================================


@dataclass
class LedgerSubmitter:
    """Implements ``InstructionSubmitter`` against the ledger batch API.

    Reordering batches are sent with ``ordered: true``; the ledger applies
    them one after another in list order.
    """

    client: LedgerClient

    async def submit_migrations(
        self, instructions: list[MigrationInstruction]
    ) -> BatchOutcome:
        if not instructions:
            return BatchOutcome()
        payload: dict[str, object] = {
            "instructions": [
                {
                    "account": str(i.entry_id),
                    "from": str(i.from_ceiling),
                    "to": str(i.to_ceiling),
                }
                for i in instructions
            ],
        }
        data = await self.client.post_rebag_batch(payload)
        return self._outcome(data, len(instructions), "rebag")

    async def submit_reorders(
        self, instructions: list[ReorderInstruction]
    ) -> BatchOutcome:
        if not instructions:
            return BatchOutcome()
        payload: dict[str, object] = {
            "ordered": True,
            "instructions": [
                {"heavier": str(i.heavier), "lighter": str(i.lighter)}
                for i in instructions
            ],
        }
        data = await self.client.post_reposition_batch(payload)
        return self._outcome(data, len(instructions), "reposition")

    @staticmethod
    def _outcome(data: object, expected: int, kind: str) -> BatchOutcome:
        try:
            result = BatchResultPayload.model_validate(data)
        except ValidationError as e:
            raise SubmissionError(f"malformed {kind} batch response: {e}") from e

        indices = sorted(r.index for r in result.results)
        if indices != list(range(expected)):
            msg = (
                f"{kind} batch response covers {len(indices)} of "
                f"{expected} instruction(s)"
            )
            raise SubmissionError(msg)

        outcomes = [
            InstructionOutcome(index=r.index, succeeded=r.ok, error=r.error)
            for r in sorted(result.results, key=lambda r: r.index)
        ]
        outcome = BatchOutcome(
            outcomes=outcomes, atomic=result.atomic, reference=result.reference
        )
        logger.info(
            "%s batch %s: %d/%d applied",
            kind,
            result.reference or "(no reference)",
            outcome.succeeded,
            expected,
        )
        return outcome
