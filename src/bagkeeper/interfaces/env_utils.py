"""Shared environment variable helpers for interfaces."""

from __future__ import annotations

import os

from bagkeeper.shared.exceptions import ConfigurationError

ENV_STATE_URL = "BAGKEEPER_STATE_URL"
ENV_API_TOKEN = "BAGKEEPER_API_TOKEN"
ENV_TARGET_RANK = "BAGKEEPER_TARGET_RANK"
ENV_DRY_RUN = "BAGKEEPER_DRY_RUN"
ENV_MODE = "BAGKEEPER_MODE"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def optional_env(name: str) -> str | None:
    """Read an environment variable, treating blank values as unset."""
    value = os.environ.get(name, "").strip()
    return value or None


def parse_int(name: str, raw: str) -> int:
    """Parse an integer env var or raise with a clear message."""
    try:
        return int(raw.replace("_", ""))
    except ValueError:
        msg = f"Invalid integer for {name}: {raw!r}"
        raise ConfigurationError(msg) from None


def parse_bool(name: str, raw: str) -> bool:
    """Parse a boolean env var (``true``/``false``, ``1``/``0``, ...)."""
    lowered = raw.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    msg = f"Invalid boolean for {name}: {raw!r}"
    raise ConfigurationError(msg)
