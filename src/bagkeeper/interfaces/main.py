"""Unified entry point. Dispatches to the appropriate mode.

Reads ``BAGKEEPER_MODE`` from the environment and runs the corresponding
pass:

- ``rebalance`` (default): migrate and reorder the bag holding the target rank
- ``plan``: compute and report the same instructions without submitting them
- ``inspect``: report misplaced and out-of-order entries only
"""

from __future__ import annotations

import logging
import os
import sys

from bagkeeper.interfaces.env_utils import ENV_MODE

logger = logging.getLogger(__name__)

_VALID_MODES = {"rebalance", "plan", "inspect"}


def main() -> None:
    """Dispatch to the runner based on BAGKEEPER_MODE."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    mode = os.environ.get(ENV_MODE, "rebalance").strip().lower()

    if mode not in _VALID_MODES:
        valid = ", ".join(sorted(_VALID_MODES))
        logger.error("Unknown mode: %r (valid: %s)", mode, valid)
        sys.exit(1)

    from bagkeeper.interfaces.runner import run

    run(mode)


if __name__ == "__main__":
    main()
