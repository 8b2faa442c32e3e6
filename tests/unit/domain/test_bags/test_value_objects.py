"""Tests for Bags value objects."""

from __future__ import annotations

import pytest

from bagkeeper.domain.bags.value_objects import Bucket, ThresholdList
from bagkeeper.shared.exceptions import (
    UnclassifiableWeightError,
    UnrecognizedThresholdError,
)
from bagkeeper.shared.types import AccountId, Weight

# =============================================================================
# ThresholdList construction
# =============================================================================


def test_thresholds_must_not_be_empty() -> None:
    with pytest.raises(ValueError, match="empty"):
        ThresholdList.of([])


def test_thresholds_must_be_strictly_ascending() -> None:
    with pytest.raises(ValueError, match="ascending"):
        ThresholdList.of([10, 10, 20])


def test_highest_is_last_threshold(thresholds: ThresholdList) -> None:
    assert thresholds.highest == 10_000


# =============================================================================
# Canonical ceiling
# =============================================================================


@pytest.mark.parametrize(
    ("weight", "expected"),
    [
        (0, 10),
        (9, 10),
        (50, 100),
        (999, 1_000),
        (9_999, 10_000),
    ],
)
def test_canonical_ceiling_is_smallest_threshold_above_weight(
    thresholds: ThresholdList, weight: int, expected: int
) -> None:
    assert thresholds.canonical_ceiling(weight) == expected


def test_weight_equal_to_threshold_belongs_to_next_bag(
    thresholds: ThresholdList,
) -> None:
    assert thresholds.canonical_ceiling(100) == 1_000


def test_weight_at_or_above_highest_is_unclassifiable(
    thresholds: ThresholdList,
) -> None:
    with pytest.raises(UnclassifiableWeightError) as exc_info:
        thresholds.canonical_ceiling(10_000)
    assert exc_info.value.highest == 10_000


def test_canonical_ceiling_exact_for_large_weights() -> None:
    big = ThresholdList.of([2**64, 2**64 + 1])
    assert big.canonical_ceiling(2**64) == 2**64 + 1
    assert big.canonical_ceiling(2**64 - 1) == 2**64


# =============================================================================
# Membership
# =============================================================================


def test_validate_accepts_known_ceiling(thresholds: ThresholdList) -> None:
    thresholds.validate(100)


def test_validate_rejects_unknown_ceiling(thresholds: ThresholdList) -> None:
    with pytest.raises(UnrecognizedThresholdError) as exc_info:
        thresholds.validate(150)
    assert exc_info.value.ceiling == 150


def test_contains_ignores_non_integers(thresholds: ThresholdList) -> None:
    assert 100 in thresholds
    assert "100" not in thresholds
    assert 5 not in thresholds


def test_iteration_is_ascending(thresholds: ThresholdList) -> None:
    assert list(thresholds) == [10, 100, 1_000, 10_000]
    assert len(thresholds) == 4


# =============================================================================
# Bucket
# =============================================================================


def test_bucket_without_head_is_empty() -> None:
    assert Bucket(ceiling=Weight(10)).is_empty


def test_bucket_with_ends_is_not_empty() -> None:
    bucket = Bucket(ceiling=Weight(10), head=AccountId("A"), tail=AccountId("A"))
    assert not bucket.is_empty
