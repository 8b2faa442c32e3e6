"""Ports for reading bag state from external collaborators."""

from __future__ import annotations

from typing import Protocol

from bagkeeper.domain.bags.value_objects import Bucket, ListNode
from bagkeeper.shared.types import AccountId, Weight

# =============================================================================
# PROTOCOLS
# =============================================================================


class BagStateProvider(Protocol):
    """Read-only access to a snapshot of the bags list."""

    async def list_buckets(self) -> list[Bucket]:
        """All bags with their ceilings and list ends.

        Raises:
            ProviderError: If the state cannot be read.
        """
        ...

    async def recognized_thresholds(self) -> list[Weight]:
        """The configured bag ceilings, ascending.

        Raises:
            ProviderError: If the state cannot be read.
        """
        ...

    async def list_node(self, entry_id: AccountId) -> ListNode | None:
        """The list node for an account, or None if it is not in any bag.

        Raises:
            ProviderError: If the state cannot be read.
        """
        ...


class WeightOracle(Protocol):
    """Source of authoritative, current weights."""

    async def authoritative_weight(self, entry_id: AccountId) -> Weight:
        """Exact integer weight of an account.

        Raises:
            ProviderError: If the weight cannot be read.
        """
        ...
