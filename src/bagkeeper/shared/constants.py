"""Centralized defaults for bagkeeper. Overridable via configuration."""

from __future__ import annotations

# =============================================================================
# RANKING
# =============================================================================

DEFAULT_TARGET_RANK = 22_500
"""Population cutoff: the last slot of the electable voter set."""

# =============================================================================
# STATE PROVIDER
# =============================================================================

DEFAULT_STATE_URL = "http://127.0.0.1:8080"
DEFAULT_TIMEOUT_SECONDS = 60.0

# =============================================================================
# REPORTING
# =============================================================================

MAX_REPORTED_VIOLATIONS = 20
REPORT_SEPARATOR = "-" * 46
