"""Pydantic models for ledger JSON payloads.

Weights travel as integers or decimal strings (ledger balances routinely
exceed 2**53). Floats are rejected outright.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

# =============================================================================
# WEIGHTS
# =============================================================================


def _exact_weight(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int | str):
        msg = f"weight must be an integer or decimal string, got {value!r}"
        raise ValueError(msg)
    if isinstance(value, str):
        if not (value.isascii() and value.isdigit()):
            msg = f"weight string must be decimal digits, got {value!r}"
            raise ValueError(msg)
        value = int(value)
    if value < 0:
        msg = f"weight must not be negative, got {value}"
        raise ValueError(msg)
    return int(value)


WireWeight = Annotated[int, BeforeValidator(_exact_weight)]


class WirePayload(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


# =============================================================================
# STATE
# =============================================================================


class ThresholdsPayload(WirePayload):
    thresholds: list[WireWeight] = Field(min_length=1)


class BagPayload(WirePayload):
    upper: WireWeight
    head: str | None = None
    tail: str | None = None


class BagsPayload(WirePayload):
    bags: list[BagPayload]


class NodePayload(WirePayload):
    id: str
    bag_upper: WireWeight
    score: WireWeight
    prev: str | None = None
    next: str | None = None


class WeightPayload(WirePayload):
    id: str
    weight: WireWeight


# =============================================================================
# SUBMISSION
# =============================================================================


class InstructionResultPayload(WirePayload):
    index: int
    ok: bool
    error: str | None = None


class BatchResultPayload(WirePayload):
    reference: str | None = None
    atomic: bool = False
    results: list[InstructionResultPayload] = Field(default_factory=list)
