"""
Last Month Rate Strategy

Policy loan interest for the final, partial month: a single rate applied to
the whole day span.
"""

from typing import FrozenSet
import logging

from ..currency import ZERO
from ..models import CalculationInput, CalculationResult, RateType
from .base import InterestRateStrategy

logger = logging.getLogger(__name__)

LOAN_LOOKUP_TYPE = "2"


class LastMonthRateStrategy(InterestRateStrategy):
    """Single-rate loan interest over the last month"""

    def supported_rate_types(self) -> FrozenSet[RateType]:
        return frozenset({RateType.LOAN_RATE_LAST_MONTH})

    def _calculate(self, calc_input: CalculationInput, precision: int) -> CalculationResult:
        begin, end = calc_input.begin_date, calc_input.end_date
        total_days = self.day_count.days_between(begin, end)

        if calc_input.principal == ZERO or total_days <= 0:
            return CalculationResult(
                actual_rate=self._floor_rate(calc_input.pre_resolved_rate),
                interest_amount=self._round_interest(ZERO, precision)
            )

        if calc_input.has_pre_resolved_rate:
            rate = calc_input.pre_resolved_rate
        else:
            rate = self.rate_lookup.lookup_for(
                calc_input, LOAN_LOOKUP_TYPE, self.day_count.to_month_start(end)
            ).adjusted_rate
        rate = self._floor_rate(rate)

        year_days = self.day_count.year_day_count(begin)
        interest = self._round_interest(
            self._interest(calc_input.principal, rate, total_days, year_days), precision
        )

        logger.debug(
            f"Last month rate calculated: days={total_days}, year_days={year_days}, "
            f"rate={rate}, interest={interest}"
        )
        return CalculationResult(actual_rate=rate, interest_amount=interest)
