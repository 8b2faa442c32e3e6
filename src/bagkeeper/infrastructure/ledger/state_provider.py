"""Bag state provider and weight oracle backed by the ledger API."""

from __future__ import annotations

import logging

from dataclasses import dataclass
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from bagkeeper.domain.bags.value_objects import Bucket, ListNode
from bagkeeper.infrastructure.ledger.client import LedgerClient
from bagkeeper.infrastructure.ledger.payloads import (
    BagsPayload,
    NodePayload,
    ThresholdsPayload,
    WeightPayload,
)
from bagkeeper.shared.exceptions import ProviderError
from bagkeeper.shared.types import AccountId, Weight

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def _parse(model: type[M], data: object, what: str) -> M:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ProviderError(f"malformed {what} payload: {e}") from e


def to_list_node(payload: NodePayload) -> ListNode:
    return ListNode(
        id=AccountId(payload.id),
        bag_upper=Weight(payload.bag_upper),
        score=Weight(payload.score),
        prev=AccountId(payload.prev) if payload.prev is not None else None,
        next=AccountId(payload.next) if payload.next is not None else None,
    )


# =============================================================================
# PROVIDER
# =============================================================================


@dataclass
class LedgerBagState:
    """Implements ``BagStateProvider`` and ``WeightOracle`` over HTTP.

    Every call reads the ledger afresh; nothing is cached between calls.
    """

    client: LedgerClient

    async def list_buckets(self) -> list[Bucket]:
        payload = _parse(BagsPayload, await self.client.get_bags(), "bags")
        buckets = [
            Bucket(
                ceiling=Weight(bag.upper),
                head=AccountId(bag.head) if bag.head is not None else None,
                tail=AccountId(bag.tail) if bag.tail is not None else None,
            )
            for bag in payload.bags
        ]
        logger.debug("Ledger reported %d bag(s)", len(buckets))
        return buckets

    async def recognized_thresholds(self) -> list[Weight]:
        data = await self.client.get_thresholds()
        payload = _parse(ThresholdsPayload, data, "thresholds")
        return [Weight(t) for t in payload.thresholds]

    async def list_node(self, entry_id: AccountId) -> ListNode | None:
        data = await self.client.get_node(entry_id)
        if data is None:
            return None
        payload = _parse(NodePayload, data, f"node {entry_id}")
        if payload.id != entry_id:
            msg = f"asked for node {entry_id}, ledger returned {payload.id}"
            raise ProviderError(msg)
        return to_list_node(payload)

    async def authoritative_weight(self, entry_id: AccountId) -> Weight:
        data = await self.client.get_weight(entry_id)
        payload = _parse(WeightPayload, data, f"weight of {entry_id}")
        if payload.id != entry_id:
            msg = f"asked for weight of {entry_id}, ledger returned {payload.id}"
            raise ProviderError(msg)
        return Weight(payload.weight)
