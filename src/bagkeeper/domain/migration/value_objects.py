"""Value objects for the Migration bounded context."""

from __future__ import annotations

from dataclasses import dataclass

from bagkeeper.domain.bags.entities import BagView, Entry
from bagkeeper.shared.types import AccountId, Weight

# =============================================================================
# VALUE OBJECTS
# =============================================================================


@dataclass(frozen=True)
class MigrationInstruction:
    """Move one account to the bag matching its true weight.

    Instructions are independent of each other and may be applied in any
    order.
    """

    entry_id: AccountId
    from_ceiling: Weight
    to_ceiling: Weight


@dataclass(frozen=True)
class MigrationReport:
    """Outcome of scanning one bag for misplaced entries."""

    flagged: list[Entry]
    remaining: BagView

    @property
    def needs_migration(self) -> bool:
        return bool(self.flagged)

    def flagged_ids(self) -> list[AccountId]:
        return [entry.id for entry in self.flagged]
