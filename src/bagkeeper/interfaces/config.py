"""Configuration assembly from ``pyproject.toml`` and environment variables."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from bagkeeper.application.dto import InspectCommand, RebalanceCommand
from bagkeeper.interfaces.env_utils import (
    ENV_API_TOKEN,
    ENV_DRY_RUN,
    ENV_STATE_URL,
    ENV_TARGET_RANK,
    optional_env,
    parse_bool,
    parse_int,
)
from bagkeeper.interfaces.toml_config import load_bagkeeper_config
from bagkeeper.shared.constants import (
    DEFAULT_STATE_URL,
    DEFAULT_TARGET_RANK,
    DEFAULT_TIMEOUT_SECONDS,
)
from bagkeeper.shared.exceptions import ConfigurationError
from bagkeeper.shared.types import PivotStrategy, SortStrategy


@dataclass(frozen=True)
class RunConfig:
    """Typed configuration for one bagkeeper run."""

    state_url: str = DEFAULT_STATE_URL
    api_token: str | None = None
    target_rank: int = DEFAULT_TARGET_RANK
    sort_strategy: SortStrategy = SortStrategy.SEMI
    pivot_strategy: PivotStrategy = PivotStrategy.LOCATED
    dry_run: bool = False
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    log_dir: str = ""
    snapshot_path: str = ""

    @classmethod
    def from_toml(cls, project_root: Path | None = None) -> RunConfig:
        """Build config from ``[tool.bagkeeper]`` with environment overrides.

        Optional overrides:
            BAGKEEPER_STATE_URL, BAGKEEPER_API_TOKEN, BAGKEEPER_TARGET_RANK,
            BAGKEEPER_DRY_RUN

        Raises:
            ConfigurationError: On invalid values, or when neither a state
                URL nor a snapshot path is configured.
        """
        toml = load_bagkeeper_config(project_root)

        target_rank = toml.target_rank
        raw_rank = optional_env(ENV_TARGET_RANK)
        if raw_rank is not None:
            target_rank = parse_int(ENV_TARGET_RANK, raw_rank)
            if target_rank < 1:
                msg = f"{ENV_TARGET_RANK} must be at least 1, got {target_rank}"
                raise ConfigurationError(msg)

        raw_dry_run = optional_env(ENV_DRY_RUN)
        dry_run = (
            parse_bool(ENV_DRY_RUN, raw_dry_run)
            if raw_dry_run is not None
            else toml.dry_run
        )

        config = cls(
            state_url=optional_env(ENV_STATE_URL) or toml.state_url,
            api_token=optional_env(ENV_API_TOKEN),
            target_rank=target_rank,
            sort_strategy=toml.sort_strategy,
            pivot_strategy=toml.pivot_strategy,
            dry_run=dry_run,
            timeout_seconds=toml.timeout_seconds,
            log_dir=toml.log_dir,
            snapshot_path=toml.snapshot_path,
        )
        if not config.state_url and not config.snapshot_path:
            msg = "Either state_url or snapshot_path must be configured"
            raise ConfigurationError(msg)
        return config

    @property
    def uses_snapshot(self) -> bool:
        return bool(self.snapshot_path)

    def rebalance_command(self, *, force_dry_run: bool = False) -> RebalanceCommand:
        return RebalanceCommand(
            target_rank=self.target_rank,
            sort_strategy=self.sort_strategy,
            pivot_strategy=self.pivot_strategy,
            dry_run=self.dry_run or force_dry_run,
        )

    def inspect_command(self) -> InspectCommand:
        return InspectCommand(
            target_rank=self.target_rank, sort_strategy=self.sort_strategy
        )
