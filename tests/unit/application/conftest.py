"""Fixtures for application-layer tests."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from bagkeeper.infrastructure.storage.memory_ledger import InMemoryLedger

THRESHOLDS = [10, 100, 1_000, 10_000]

LedgerFactory = Callable[[list[tuple[str, int, int]]], InMemoryLedger]


@pytest.fixture
def make_ledger() -> LedgerFactory:
    """A ledger with one heavy account ahead of the given bag-1000 members.

    Global rank ``n`` therefore sits at index ``n - 2`` of bag 1000.
    """

    def _make(members: list[tuple[str, int, int]]) -> InMemoryLedger:
        return InMemoryLedger.from_bags(
            THRESHOLDS,
            {10_000: [("X", 5_000, 5_000)], 1_000: members, 100: []},
        )

    return _make
