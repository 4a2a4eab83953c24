import dataclasses
import logging
import threading
from typing import Any, Dict, List, Optional

from errors import DuplicateError, Result
from models.pick import Pick
from parlay import CombinedOdds, combine

logger = logging.getLogger("slip")

_UNSET = object()


def _check_index(index: int) -> None:
    # Legs are addressed from the front only; a negative index is a caller bug.
    if index < 0:
        raise IndexError(f"leg index must be non-negative, got {index}")


class PickSlip:
    """Ordered, de-duplicated legs of one wager.

    The slip is the single writer for its picks: every mutation and every read
    takes the same lock, and the combined price is recomputed from the current
    legs on each read.
    """

    def __init__(self):
        self._legs: List[Pick] = []
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._legs)

    def add(self, pick: Pick) -> Result[Pick]:
        if pick is None:
            raise TypeError("pick is required")
        with self._lock:
            if any(leg.key == pick.key for leg in self._legs):
                logger.info(f"Duplicate leg ignored: {pick.display_text}")
                return Result.failure(DuplicateError(pick.key))
            self._legs.append(pick)
            logger.debug(f"Added leg {pick.id}: {pick.display_text} ({len(self._legs)} legs)")
            return Result.success(pick)

    def remove(self, index: int) -> Pick:
        """Remove the leg at a position counted from the front of the slip."""
        _check_index(index)
        with self._lock:
            pick = self._legs.pop(index)
            logger.debug(f"Removed leg {pick.id}")
            return pick

    def clear(self) -> None:
        with self._lock:
            self._legs.clear()

    def annotate(self, index: int, stake: Any = _UNSET, note: Any = _UNSET) -> Pick:
        """Update stake and/or note on one leg; the only fields a leg may change."""
        changes: Dict[str, Any] = {}
        if stake is not _UNSET:
            changes["stake"] = stake
        if note is not _UNSET:
            changes["note"] = note
        _check_index(index)
        with self._lock:
            updated = dataclasses.replace(self._legs[index], **changes)
            self._legs[index] = updated
            return updated

    def legs(self) -> List[Pick]:
        with self._lock:
            return list(self._legs)

    def aggregate(self) -> Result[CombinedOdds]:
        with self._lock:
            return combine(self._legs)

    def combined_odds(self) -> Optional[CombinedOdds]:
        res = self.aggregate()
        return res.value if res.ok else None

    @property
    def is_parlay(self) -> bool:
        return len(self) > 1

    @property
    def total_stake(self) -> float:
        with self._lock:
            return sum(leg.stake or 0.0 for leg in self._legs)

    def potential_payout(self, stake: float) -> Optional[float]:
        odds = self.combined_odds()
        return odds.payout(stake) if odds else None

    def to_dict(self) -> Dict[str, Any]:
        with self._lock:
            odds = self.combined_odds()
            return {
                "legs": [leg.to_dict() for leg in self._legs],
                "is_parlay": len(self._legs) > 1,
                "combined_odds": None if odds is None else {
                    "decimal": odds.decimal_value,
                    "american": odds.american_display,
                },
            }
