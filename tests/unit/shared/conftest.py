"""Fixtures for shared kernel tests."""

from __future__ import annotations

import pytest

from bagkeeper.shared.types import AccountId, Weight


@pytest.fixture
def account_id() -> AccountId:
    return AccountId("15oF4uVJwmo4TdGW7VfQxNLavjCXviqxT9S1MgbjMNHr6Sp5")


@pytest.fixture
def weight() -> Weight:
    return Weight(1_000_000_000_000)
