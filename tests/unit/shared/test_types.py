"""Tests for shared type definitions."""

from __future__ import annotations

import pytest

from bagkeeper.shared.types import AccountId, PivotStrategy, SortStrategy, Weight

# =============================================================================
# AccountId
# =============================================================================


def test_account_id_preserves_value(account_id: AccountId) -> None:
    assert str(account_id).startswith("15oF4")


def test_account_id_hashable_deduplicates() -> None:
    ids = {AccountId("a"), AccountId("b"), AccountId("a")}
    assert len(ids) == 2


# =============================================================================
# Weight
# =============================================================================


def test_weight_is_exact_beyond_float_precision() -> None:
    big = Weight(2**64 + 1)
    assert big - Weight(1) == 2**64
    assert float(big) == float(2**64)


def test_weight_arithmetic_keeps_type(weight: Weight) -> None:
    assert isinstance(weight + 1, Weight)
    assert isinstance(weight - 1, Weight)


def test_weight_ordering() -> None:
    assert Weight(5) > Weight(3)
    assert sorted([Weight(3), Weight(9), Weight(5)]) == [3, 5, 9]


# =============================================================================
# Enums
# =============================================================================


@pytest.mark.parametrize("raw", ["semi", "full"])
def test_sort_strategy_from_string(raw: str) -> None:
    assert SortStrategy(raw).value == raw


def test_pivot_strategy_values() -> None:
    assert {s.value for s in PivotStrategy} == {"located", "settled"}


def test_invalid_strategy_raises() -> None:
    with pytest.raises(ValueError):
        SortStrategy("partial")
