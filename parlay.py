import logging
import math
from dataclasses import dataclass
from typing import List, Sequence

from errors import AggregationError, AggregationKind, Result
from models.pick import Pick
from odds import to_american, to_decimal

logger = logging.getLogger("parlay")


@dataclass(frozen=True)
class CombinedOdds:
    decimal_value: float

    @property
    def american_display(self) -> str:
        return to_american(self.decimal_value)

    def payout(self, stake: float) -> float:
        """Total return (stake included) if every leg wins."""
        return round(stake * self.decimal_value, 2)


def combine(picks: Sequence[Pick]) -> Result[CombinedOdds]:
    if not picks:
        return Result.failure(AggregationError(AggregationKind.EMPTY))

    decimals: List[float] = []
    for pick in picks:
        res = to_decimal(pick.price_american)
        if not res.ok:
            logger.debug(f"Leg {pick.id} rejected: {res.error}")
            return Result.failure(AggregationError(AggregationKind.INVALID_LEG, pick_id=pick.id, cause=res.error))
        decimals.append(res.value)

    if len(decimals) == 1:
        return Result.success(CombinedOdds(decimal_value=decimals[0]))
    return Result.success(CombinedOdds(decimal_value=math.prod(decimals)))
