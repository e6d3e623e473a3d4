"""
Average Declared Rate Strategy

Simple mean of the published declared rate over the months preceding the
end date. Markdown and discount are not applied.
"""

from decimal import Decimal
from typing import FrozenSet
import logging

from ..currency import ZERO, divide
from ..models import CalculationInput, CalculationResult, RateType
from .base import InterestRateStrategy

logger = logging.getLogger(__name__)

DECLARED_LOOKUP_TYPE = "5"


class AvgDeclaredRateStrategy(InterestRateStrategy):
    """Trailing average of the declared rate"""

    def supported_rate_types(self) -> FrozenSet[RateType]:
        return frozenset({RateType.AVG_DECLARED_RATE})

    def _calculate(self, calc_input: CalculationInput, precision: int) -> CalculationResult:
        months = self.config.avg_declared_months
        current = self.day_count.to_month_start(calc_input.end_date)

        total_rate = ZERO
        for index in range(1, months + 1):
            current = self.day_count.add_months(current, -1)
            lookup = self.rate_lookup.lookup_for(calc_input, DECLARED_LOOKUP_TYPE, current)
            total_rate += self._floor_rate(lookup.published_rate)
            logger.debug(f"Declared rate month {index}: date={current}, rate={lookup.published_rate}")

        actual_rate = divide(total_rate, Decimal(months), self.config.rate_scale)

        logger.debug(f"Avg declared rate calculated: total={total_rate}, rate={actual_rate}")
        return CalculationResult(actual_rate=actual_rate,
                                 interest_amount=self._round_interest(ZERO, precision))
