"""JSON snapshot files for offline planning.

A snapshot holds everything a run reads: thresholds, bag ends, list nodes
and authoritative weights. Loading one yields an :class:`InMemoryLedger`.
"""

from __future__ import annotations

import logging

from pathlib import Path

from pydantic import Field, ValidationError

from bagkeeper.infrastructure.constants import SNAPSHOT_VERSION
from bagkeeper.infrastructure.ledger.payloads import (
    BagPayload,
    NodePayload,
    WirePayload,
    WireWeight,
)
from bagkeeper.infrastructure.ledger.state_provider import to_list_node
from bagkeeper.infrastructure.storage.memory_ledger import BagEnds, InMemoryLedger
from bagkeeper.shared.exceptions import SnapshotError
from bagkeeper.shared.types import AccountId, Weight

logger = logging.getLogger(__name__)

# =============================================================================
# SCHEMA
# =============================================================================


class SnapshotPayload(WirePayload):
    version: int = SNAPSHOT_VERSION
    thresholds: list[WireWeight] = Field(min_length=1)
    bags: list[BagPayload] = Field(default_factory=list)
    nodes: list[NodePayload] = Field(default_factory=list)
    weights: dict[str, WireWeight] = Field(default_factory=dict)


# =============================================================================
# SERIALIZE
# =============================================================================


def _plain(entry_id: AccountId | None) -> str | None:
    return str(entry_id) if entry_id is not None else None


def serialize(ledger: InMemoryLedger) -> str:
    """Serialize a ledger's full state to a JSON string."""
    payload = SnapshotPayload(
        thresholds=[int(t) for t in ledger.thresholds],
        bags=[
            BagPayload(
                upper=int(ceiling),
                head=_plain(ends.head),
                tail=_plain(ends.tail),
            )
            for ceiling, ends in sorted(ledger.bags.items(), reverse=True)
        ],
        nodes=[
            NodePayload(
                id=str(node.id),
                bag_upper=int(node.bag_upper),
                score=int(node.score),
                prev=_plain(node.prev),
                next=_plain(node.next),
            )
            for node in ledger.nodes.values()
        ],
        weights={str(k): int(v) for k, v in ledger.weights.items()},
    )
    return payload.model_dump_json(indent=2)


def save_snapshot(ledger: InMemoryLedger, path: Path) -> None:
    """Write a snapshot file, creating parent directories.

    Raises:
        SnapshotError: If the file cannot be written.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(serialize(ledger))
    except OSError as e:
        raise SnapshotError(f"cannot write snapshot {path}: {e}") from e
    logger.info("Saved snapshot with %d node(s) to %s", len(ledger.nodes), path)


# =============================================================================
# DESERIALIZE
# =============================================================================


def deserialize(data: str) -> InMemoryLedger:
    """Deserialize a JSON snapshot into an in-memory ledger.

    Raises:
        SnapshotError: If the JSON is malformed, has an unsupported version,
            or lists a node twice.
    """
    try:
        payload = SnapshotPayload.model_validate_json(data)
    except ValidationError as e:
        raise SnapshotError(f"invalid snapshot: {e}") from e
    if payload.version != SNAPSHOT_VERSION:
        msg = f"unsupported snapshot version {payload.version}"
        raise SnapshotError(msg)

    ledger = InMemoryLedger(thresholds=[Weight(t) for t in payload.thresholds])
    for bag in payload.bags:
        ledger.bags[Weight(bag.upper)] = BagEnds(
            head=AccountId(bag.head) if bag.head is not None else None,
            tail=AccountId(bag.tail) if bag.tail is not None else None,
        )
    for node_payload in payload.nodes:
        node = to_list_node(node_payload)
        if node.id in ledger.nodes:
            msg = f"node {node.id} listed twice"
            raise SnapshotError(msg)
        ledger.nodes[node.id] = node
    for entry_id, weight in payload.weights.items():
        ledger.weights[AccountId(entry_id)] = Weight(weight)
    return ledger


def load_snapshot(path: Path) -> InMemoryLedger:
    """Read a snapshot file.

    Raises:
        SnapshotError: If the file is missing or unreadable.
    """
    try:
        data = path.read_text()
    except OSError as e:
        raise SnapshotError(f"cannot read snapshot {path}: {e}") from e
    ledger = deserialize(data)
    logger.info(
        "Loaded snapshot %s: %d bag(s), %d node(s)",
        path,
        len(ledger.bags),
        len(ledger.nodes),
    )
    return ledger
