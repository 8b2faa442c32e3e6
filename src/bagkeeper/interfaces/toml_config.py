"""TOML-based configuration loader.

Reads ``[tool.bagkeeper]`` from ``pyproject.toml`` and produces a typed
``BagkeeperConfig`` dataclass.  Missing file or missing section → all
defaults apply.
"""

from __future__ import annotations

import logging
import tomllib

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Any, TypeVar

from bagkeeper.shared.constants import (
    DEFAULT_STATE_URL,
    DEFAULT_TARGET_RANK,
    DEFAULT_TIMEOUT_SECONDS,
)
from bagkeeper.shared.exceptions import ConfigurationError
from bagkeeper.shared.types import PivotStrategy, SortStrategy

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=StrEnum)

# ── defaults ────────────────────────────────────────────────────────────
_DEFAULTS: dict[str, Any] = {
    "target_rank": DEFAULT_TARGET_RANK,
    "sort_strategy": "semi",
    "pivot_strategy": "located",
    "dry_run": False,
    "state_url": DEFAULT_STATE_URL,
    "timeout_seconds": DEFAULT_TIMEOUT_SECONDS,
    "log_dir": "",
    "snapshot_path": "",
}

_ALL_KNOWN_KEYS = set(_DEFAULTS)


@dataclass(frozen=True)
class BagkeeperConfig:
    """Typed configuration produced by the TOML loader."""

    target_rank: int = DEFAULT_TARGET_RANK
    sort_strategy: SortStrategy = SortStrategy.SEMI
    pivot_strategy: PivotStrategy = PivotStrategy.LOCATED
    dry_run: bool = False
    state_url: str = DEFAULT_STATE_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    log_dir: str = ""
    snapshot_path: str = ""


def load_bagkeeper_config(project_root: Path | None = None) -> BagkeeperConfig:
    """Load bagkeeper configuration from ``pyproject.toml``.

    Merge order (later wins): defaults → ``[tool.bagkeeper]``.

    Args:
        project_root: Directory containing ``pyproject.toml``.
            Defaults to ``Path.cwd()``.

    Returns:
        A frozen ``BagkeeperConfig`` dataclass.

    Raises:
        ConfigurationError: On TOML parse errors or invalid values.
    """
    if project_root is None:
        project_root = Path.cwd()

    merged: dict[str, Any] = dict(_DEFAULTS)
    tool_section = _read_tool_section(project_root / "pyproject.toml")
    if tool_section is not None:
        _warn_unknown_keys(tool_section)
        merged.update(tool_section)

    _validate_types(merged)
    _validate_ranges(merged)

    return BagkeeperConfig(
        target_rank=int(merged["target_rank"]),
        sort_strategy=_validate_choice(SortStrategy, "sort_strategy", merged),
        pivot_strategy=_validate_choice(PivotStrategy, "pivot_strategy", merged),
        dry_run=bool(merged["dry_run"]),
        state_url=str(merged["state_url"]),
        timeout_seconds=float(merged["timeout_seconds"]),
        log_dir=str(merged["log_dir"]),
        snapshot_path=str(merged["snapshot_path"]),
    )


# ── internal helpers ────────────────────────────────────────────────────


def _read_tool_section(toml_path: Path) -> dict[str, Any] | None:
    """Read ``[tool.bagkeeper]`` from *toml_path*, or ``None`` if absent."""
    if not toml_path.is_file():
        return None
    try:
        with toml_path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as exc:
        msg = f"Failed to parse {toml_path}: {exc}"
        raise ConfigurationError(msg) from exc
    tool: dict[str, Any] | None = data.get("tool")
    if not isinstance(tool, dict):
        return None
    section: dict[str, Any] | None = tool.get("bagkeeper")
    if not isinstance(section, dict):
        return None
    return section


def _warn_unknown_keys(section: dict[str, Any]) -> None:
    """Log a warning for any keys not in the known set."""
    for key in section:
        if key not in _ALL_KNOWN_KEYS:
            logger.warning("Unknown key in [tool.bagkeeper]: %r", key)


def _validate_types(merged: dict[str, Any]) -> None:
    """Reject values of the wrong TOML type."""
    rank = merged["target_rank"]
    if isinstance(rank, bool) or not isinstance(rank, int):
        msg = f"target_rank must be an integer, got {rank!r}"
        raise ConfigurationError(msg)
    if not isinstance(merged["dry_run"], bool):
        msg = f"dry_run must be true or false, got {merged['dry_run']!r}"
        raise ConfigurationError(msg)
    for key in ("state_url", "log_dir", "snapshot_path"):
        if not isinstance(merged[key], str):
            msg = f"{key} must be a string, got {merged[key]!r}"
            raise ConfigurationError(msg)


def _validate_choice(enum: type[E], key: str, merged: dict[str, Any]) -> E:
    """Convert a string to an enum member or raise."""
    raw = merged.get(key)
    try:
        return enum(str(raw))
    except ValueError:
        valid = ", ".join(m.value for m in enum)
        msg = f"Invalid {key} {raw!r} (valid: {valid})"
        raise ConfigurationError(msg) from None


def _validate_ranges(merged: dict[str, Any]) -> None:
    """Validate numeric ranges."""
    rank = int(merged["target_rank"])
    if rank < 1:
        msg = f"target_rank must be at least 1, got {rank}"
        raise ConfigurationError(msg)

    try:
        timeout = float(merged["timeout_seconds"])
    except (TypeError, ValueError):
        msg = f"timeout_seconds must be a number, got {merged['timeout_seconds']!r}"
        raise ConfigurationError(msg) from None
    if timeout <= 0:
        msg = f"timeout_seconds must be positive, got {timeout}"
        raise ConfigurationError(msg)
