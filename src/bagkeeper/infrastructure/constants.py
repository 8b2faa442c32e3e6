"""Infrastructure-layer constants and enums.

Eliminates magic strings across all infrastructure modules.
"""

from __future__ import annotations

from enum import StrEnum

# =============================================================================
# LEDGER API
# =============================================================================


class LedgerAPI(StrEnum):
    """Ledger state and submission endpoint paths."""

    BAGS = "/bags"
    THRESHOLDS = "/thresholds"
    NODES = "/nodes"
    WEIGHTS = "/weights"
    REBAG_BATCH = "/batches/rebag"
    REPOSITION_BATCH = "/batches/reposition"
    ACCEPT_JSON = "application/json"


SNAPSHOT_VERSION = 1
"""Format version written into snapshot files."""

HTTP_NOT_FOUND = 404
