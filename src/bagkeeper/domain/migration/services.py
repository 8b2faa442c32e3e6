"""Domain services for detecting and describing bag migrations."""

from __future__ import annotations

import logging

from dataclasses import dataclass

from bagkeeper.domain.bags.entities import BagView, Entry
from bagkeeper.domain.bags.value_objects import ThresholdList
from bagkeeper.domain.migration.value_objects import (
    MigrationInstruction,
    MigrationReport,
)

logger = logging.getLogger(__name__)

# =============================================================================
# DETECTOR
# =============================================================================


@dataclass
class MigrationDetector:
    """Flags entries whose true weight belongs to a different bag."""

    thresholds: ThresholdList

    def is_misplaced(self, entry: Entry) -> bool:
        """True when the entry's canonical ceiling differs from its bag.

        Raises:
            UnclassifiableWeightError: If no threshold exceeds the weight.
        """
        return self.thresholds.canonical_ceiling(entry.weight) != entry.bag_upper

    def detect(self, view: BagView) -> MigrationReport:
        """Split a bag into misplaced entries and the working view.

        The input view is left untouched; flagged entries are excluded from
        the returned ``remaining`` view so they are not reordered in a bag
        they are about to leave.
        """
        flagged = [entry for entry in view if self.is_misplaced(entry)]
        remaining = view.without(e.id for e in flagged)

        if flagged:
            logger.info(
                "%d of %d entries in bag %s need migration",
                len(flagged),
                len(view),
                view.ceiling,
            )
        return MigrationReport(flagged=flagged, remaining=remaining)


# =============================================================================
# INSTRUCTION BUILDER
# =============================================================================


@dataclass
class MigrationInstructionBuilder:
    """Turns flagged entries into external migration instructions."""

    thresholds: ThresholdList

    def build(self, flagged: list[Entry]) -> list[MigrationInstruction]:
        return [
            MigrationInstruction(
                entry_id=entry.id,
                from_ceiling=entry.bag_upper,
                to_ceiling=self.thresholds.canonical_ceiling(entry.weight),
            )
            for entry in flagged
        ]
