"""Tests for env_utils shared helpers."""

from __future__ import annotations

import pytest

from bagkeeper.interfaces.env_utils import optional_env, parse_bool, parse_int
from bagkeeper.shared.exceptions import ConfigurationError


def test_optional_env_returns_stripped_value(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TEST_VAR", "  hello ")
    assert optional_env("TEST_VAR") == "hello"


def test_optional_env_treats_blank_as_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TEST_VAR_BLANK", "   ")
    monkeypatch.delenv("TEST_VAR_MISSING", raising=False)
    assert optional_env("TEST_VAR_BLANK") is None
    assert optional_env("TEST_VAR_MISSING") is None


def test_parse_int_accepts_underscores() -> None:
    assert parse_int("RANK", "22_500") == 22_500


def test_parse_int_raises_with_name() -> None:
    with pytest.raises(ConfigurationError, match="RANK"):
        parse_int("RANK", "many")


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("1", True), ("TRUE", True), (" yes", True), ("off", False), ("0", False)],
)
def test_parse_bool(raw: str, expected: bool) -> None:
    assert parse_bool("DRY", raw) is expected


def test_parse_bool_rejects_other_values() -> None:
    with pytest.raises(ConfigurationError, match="DRY"):
        parse_bool("DRY", "maybe")
