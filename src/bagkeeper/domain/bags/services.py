"""Domain services for traversing bags and locating global ranks."""

from __future__ import annotations

import logging

from collections.abc import AsyncIterator
from contextlib import aclosing
from dataclasses import dataclass

from bagkeeper.domain.bags.entities import BagView, Entry, RankLocation
from bagkeeper.domain.bags.repositories import BagStateProvider, WeightOracle
from bagkeeper.domain.bags.value_objects import Bucket, ListNode, ThresholdList
from bagkeeper.shared.exceptions import BrokenChainError, RankExceedsPopulationError
from bagkeeper.shared.types import AccountId

logger = logging.getLogger(__name__)

# =============================================================================
# NAVIGATION
# =============================================================================


async def next_in_list(
    provider: BagStateProvider, entry_id: AccountId
) -> AccountId | None:
    """Successor of an entry in its bag.

    Raises:
        BrokenChainError: If the entry is not a known list node.
    """
    node = await provider.list_node(entry_id)
    if node is None:
        raise BrokenChainError(entry_id, "not a known list node")
    return node.next


async def prev_in_list(
    provider: BagStateProvider, entry_id: AccountId
) -> AccountId | None:
    """Predecessor of an entry in its bag.

    Raises:
        BrokenChainError: If the entry is not a known list node.
    """
    node = await provider.list_node(entry_id)
    if node is None:
        raise BrokenChainError(entry_id, "not a known list node")
    return node.prev


# =============================================================================
# BAG DIRECTORY
# =============================================================================


@dataclass
class BagDirectory:
    """Enumerates non-empty bags in descending ceiling order."""

    provider: BagStateProvider

    async def thresholds(self) -> ThresholdList:
        return ThresholdList.of(await self.provider.recognized_thresholds())

    async def buckets(self, thresholds: ThresholdList | None = None) -> list[Bucket]:
        """Validated, non-empty bags, heaviest first.

        Raises:
            UnrecognizedThresholdError: If a bag ceiling is not configured.
        """
        if thresholds is None:
            thresholds = await self.thresholds()

        buckets: list[Bucket] = []
        for bucket in await self.provider.list_buckets():
            thresholds.validate(bucket.ceiling)
            if bucket.is_empty:
                continue
            buckets.append(bucket)

        buckets.sort(key=lambda b: b.ceiling, reverse=True)
        return buckets

    async def bucket(self, ceiling: int) -> Bucket | None:
        """The non-empty bag with the given ceiling, if any."""
        for bucket in await self.buckets():
            if bucket.ceiling == ceiling:
                return bucket
        return None


# =============================================================================
# LIST WALKER
# =============================================================================


@dataclass
class ListWalker:
    """Follows a bag's ``next`` links from its head.

    Every call to :meth:`nodes` or :meth:`walk` starts a fresh traversal.
    Linkage is only read, never written.
    """

    provider: BagStateProvider
    oracle: WeightOracle

    async def nodes(self, bucket: Bucket) -> AsyncIterator[ListNode]:
        """Yield raw nodes in list order, validating the chain.

        Raises:
            BrokenChainError: On a dangling ``next``, a cycle, a node that
                claims another bag or disagrees about its predecessor, or a
                walk that does not end at the bag's tail.
        """
        seen: set[AccountId] = set()
        previous: AccountId | None = None
        current = bucket.head

        while current is not None:
            if current in seen:
                raise BrokenChainError(current, "cycle in next links")
            node = await self.provider.list_node(current)
            if node is None:
                referrer = previous if previous is not None else "bag head"
                raise BrokenChainError(
                    current, f"referenced by {referrer} but not a known node"
                )
            if node.bag_upper != bucket.ceiling:
                raise BrokenChainError(
                    current,
                    f"listed in bag {bucket.ceiling} but records bag {node.bag_upper}",
                )
            if node.prev != previous:
                raise BrokenChainError(
                    current, f"prev is {node.prev}, expected {previous}"
                )
            seen.add(current)
            yield node
            previous = current
            current = node.next

        if previous != bucket.tail:
            raise BrokenChainError(
                previous or f"bag {bucket.ceiling}",
                f"walk ended at {previous}, bag tail is {bucket.tail}",
            )

    async def reconcile(self, node: ListNode) -> Entry:
        """Attach the authoritative weight to a node."""
        true_weight = await self.oracle.authoritative_weight(node.id)
        return Entry(
            id=node.id,
            bag_upper=node.bag_upper,
            cached_weight=node.score,
            true_weight=true_weight,
            prev=node.prev,
            next=node.next,
        )

    async def walk(self, bucket: Bucket) -> AsyncIterator[Entry]:
        """Yield reconciled entries in list order."""
        async with aclosing(self.nodes(bucket)) as nodes:
            async for node in nodes:
                yield await self.reconcile(node)

    async def materialize(self, bucket: Bucket) -> BagView:
        """Walk a whole bag into an ordered view."""
        entries = [entry async for entry in self.walk(bucket)]
        stale = sum(1 for e in entries if e.is_stale)
        logger.info(
            "Walked bag %s: %d entries (%d with stale cached weight)",
            bucket.ceiling,
            len(entries),
            stale,
        )
        return BagView.from_entries(bucket.ceiling, entries)


# =============================================================================
# RANK LOCATOR
# =============================================================================


@dataclass
class RankLocator:
    """Finds the entry holding a 1-based global rank.

    Bags are counted heaviest first and within a bag in walk order, so the
    answer is deterministic for a given snapshot.
    """

    directory: BagDirectory
    walker: ListWalker

    async def locate(self, rank: int) -> RankLocation:
        """Locate the entry at ``rank``.

        Raises:
            ValueError: If ``rank`` is below 1.
            RankExceedsPopulationError: If fewer than ``rank`` entries exist.
        """
        if rank < 1:
            msg = f"rank must be at least 1, got {rank}"
            raise ValueError(msg)

        total = 0
        for bucket in await self.directory.buckets():
            local = 0
            async with aclosing(self.walker.nodes(bucket)) as nodes:
                async for node in nodes:
                    local += 1
                    total += 1
                    if total == rank:
                        entry = await self.walker.reconcile(node)
                        logger.info(
                            "Rank %d is %s at index %d of bag %s",
                            rank,
                            entry.id,
                            local - 1,
                            bucket.ceiling,
                        )
                        return RankLocation(
                            rank=rank,
                            bucket=bucket,
                            local_index=local - 1,
                            entry=entry,
                        )

        raise RankExceedsPopulationError(rank, total)
