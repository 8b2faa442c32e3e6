"""Command-line runner and composition root."""

from __future__ import annotations

import asyncio
import logging
import sys

from datetime import date
from pathlib import Path

from bagkeeper.application.inspect_bags import InspectBags
from bagkeeper.application.rebalance_bags import RebalanceBags
from bagkeeper.application.report import render_inspection, render_rebalance
from bagkeeper.domain.bags.repositories import BagStateProvider, WeightOracle
from bagkeeper.domain.submission.repositories import InstructionSubmitter
from bagkeeper.infrastructure.ledger.client import LedgerClient
from bagkeeper.infrastructure.ledger.state_provider import LedgerBagState
from bagkeeper.infrastructure.ledger.submitter import LedgerSubmitter
from bagkeeper.infrastructure.storage.memory_ledger import InMemoryLedger
from bagkeeper.infrastructure.storage.snapshot_serializer import (
    load_snapshot,
    save_snapshot,
)
from bagkeeper.interfaces.config import RunConfig
from bagkeeper.shared.exceptions import BagkeeperError

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def run(mode: str = "rebalance") -> None:
    """Execute one bagkeeper pass in ``mode``.

    Exits with status 1 on any error, when a rebalance leaves anomalies
    behind, or when an inspection finds the bag unhealthy.
    """
    logging.basicConfig(level=logging.INFO, format=_LOG_FORMAT)

    try:
        config = RunConfig.from_toml()
        if config.log_dir:
            _attach_run_log(Path(config.log_dir))
        ok = asyncio.run(_execute(config, mode))
    except BagkeeperError as e:
        logger.error("bagkeeper failed: %s", e)
        sys.exit(1)
    except Exception:
        logger.exception("Unexpected error")
        sys.exit(1)

    if not ok:
        sys.exit(1)


def _attach_run_log(log_dir: Path) -> None:
    """Append this run's log records to ``<log_dir>/<date>-bagkeeper.log``."""
    log_dir.mkdir(parents=True, exist_ok=True)
    path = log_dir / f"{date.today().isoformat()}-bagkeeper.log"
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    logging.getLogger().addHandler(handler)
    logger.info("Writing run log to %s", path)


async def _execute(config: RunConfig, mode: str) -> bool:
    """Wire infrastructure, build the use case, and execute."""
    snapshot: InMemoryLedger | None = None
    provider: BagStateProvider
    oracle: WeightOracle
    submitter: InstructionSubmitter
    client: LedgerClient | None = None

    if config.uses_snapshot:
        snapshot = load_snapshot(Path(config.snapshot_path))
        provider = oracle = submitter = snapshot
    else:
        client = LedgerClient(
            base_url=config.state_url,
            token=config.api_token,
            timeout=config.timeout_seconds,
        )
        provider = oracle = LedgerBagState(client=client)
        submitter = LedgerSubmitter(client=client)

    try:
        return await _dispatch(config, mode, provider, oracle, submitter, snapshot)
    finally:
        if client is not None:
            await client.aclose()


async def _dispatch(
    config: RunConfig,
    mode: str,
    provider: BagStateProvider,
    oracle: WeightOracle,
    submitter: InstructionSubmitter,
    snapshot: InMemoryLedger | None,
) -> bool:
    if mode == "inspect":
        inspection = await InspectBags(provider, oracle).execute(
            config.inspect_command()
        )
        logger.info("Inspection report:\n%s", render_inspection(inspection))
        return inspection.healthy

    cmd = config.rebalance_command(force_dry_run=mode == "plan")
    result = await RebalanceBags(provider, oracle, submitter).execute(cmd)
    logger.info("Run report:\n%s", render_rebalance(result))

    if snapshot is not None and not cmd.dry_run and not result.nothing_to_do:
        save_snapshot(snapshot, Path(config.snapshot_path))
    return result.clean
