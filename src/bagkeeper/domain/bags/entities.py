"""Entities for the Bags bounded context."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from bagkeeper.domain.bags.value_objects import Bucket
from bagkeeper.shared.types import AccountId, Weight

# =============================================================================
# ENTITIES
# =============================================================================


@dataclass(frozen=True)
class Entry:
    """A reconciled list member.

    ``prev`` and ``next`` are identifiers into the arena, not references.
    """

    id: AccountId
    bag_upper: Weight
    cached_weight: Weight
    true_weight: Weight
    prev: AccountId | None = None
    next: AccountId | None = None

    @property
    def weight(self) -> Weight:
        """The authoritative weight used for all ordering decisions."""
        return self.true_weight

    @property
    def is_stale(self) -> bool:
        return self.cached_weight != self.true_weight


@dataclass
class BagView:
    """Aggregate root: the materialized, ordered contents of one bag.

    Not frozen: planners mutate scratch copies of the order. Entries live in
    an arena keyed by id and are shared between copies, which is safe because
    entries themselves are frozen.
    """

    ceiling: Weight
    _order: list[AccountId] = field(default_factory=list[AccountId])
    _arena: dict[AccountId, Entry] = field(default_factory=dict[AccountId, Entry])

    @classmethod
    def from_entries(cls, ceiling: Weight, entries: Iterable[Entry]) -> BagView:
        """Build a view from entries already in list order.

        Raises:
            ValueError: If an id appears twice.
        """
        view = cls(ceiling=ceiling)
        for entry in entries:
            if entry.id in view._arena:
                msg = f"duplicate entry {entry.id} in bag {ceiling}"
                raise ValueError(msg)
            view._arena[entry.id] = entry
            view._order.append(entry.id)
        return view

    def ids(self) -> list[AccountId]:
        return list(self._order)

    def entries(self) -> list[Entry]:
        return [self._arena[entry_id] for entry_id in self._order]

    def get(self, entry_id: AccountId) -> Entry:
        """Get an entry by id.

        Raises:
            KeyError: If the entry is not in the view.
        """
        return self._arena[entry_id]

    def index_of(self, entry_id: AccountId) -> int:
        """Current position of an entry.

        Raises:
            ValueError: If the entry is not in the view.
        """
        return self._order.index(entry_id)

    def copy(self) -> BagView:
        """A scratch copy with an independent order."""
        return BagView(
            ceiling=self.ceiling,
            _order=list(self._order),
            _arena=self._arena,
        )

    def without(self, entry_ids: Iterable[AccountId]) -> BagView:
        """A new view with the given entries removed."""
        dropped = set(entry_ids)
        kept = [e for e in self.entries() if e.id not in dropped]
        return BagView.from_entries(self.ceiling, kept)

    def move_ahead_of(self, heavier: AccountId, lighter: AccountId) -> None:
        """Splice ``heavier`` so it sits immediately ahead of ``lighter``.

        Raises:
            ValueError: If the ids are equal or not in the view.
        """
        if heavier == lighter:
            msg = f"cannot place {heavier} ahead of itself"
            raise ValueError(msg)
        if lighter not in self._order:
            msg = f"{lighter} is not in bag {self.ceiling}"
            raise ValueError(msg)
        self._order.remove(heavier)
        self._order.insert(self._order.index(lighter), heavier)

    def __getitem__(self, index: int) -> Entry:
        return self._arena[self._order[index]]

    def __iter__(self) -> Iterator[Entry]:
        return iter(self.entries())

    def __contains__(self, entry_id: object) -> bool:
        return entry_id in self._arena and entry_id in self._order

    def __len__(self) -> int:
        return len(self._order)


# =============================================================================
# RANK LOCATION
# =============================================================================


@dataclass(frozen=True)
class RankLocation:
    """Where the entry at a global rank currently sits."""

    rank: int
    bucket: Bucket
    local_index: int
    entry: Entry
