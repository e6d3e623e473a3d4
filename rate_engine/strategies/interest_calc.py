"""
Interest Calculation Rate Strategy

Day-weighted rate over calendar months; interest is derived once from the
average rate and the total day count.
"""

from typing import FrozenSet, List
import logging

from ..currency import ZERO
from ..models import CalculationInput, CalculationResult, MonthlyDetail, RateType
from .base import InterestRateStrategy

logger = logging.getLogger(__name__)

INTEREST_LOOKUP_TYPE = "0"


class InterestCalcRateStrategy(InterestRateStrategy):
    """Day-weighted interest calculation rate"""

    def supported_rate_types(self) -> FrozenSet[RateType]:
        return frozenset({RateType.INTEREST_CALC_RATE})

    def _calculate(self, calc_input: CalculationInput, precision: int) -> CalculationResult:
        begin, end = calc_input.begin_date, calc_input.end_date
        months = self.day_count.months_between(begin, end) + 1
        year_days = self.day_count.year_day_count(begin)

        weighted_rate = ZERO
        total_days = 0
        details: List[MonthlyDetail] = []

        current = begin
        for _ in range(months):
            if current >= end:
                break
            rate_date = self.day_count.to_month_start(current)
            period_end = min(self.day_count.add_months(rate_date, 1), end)
            days = self.day_count.days_between(current, period_end)

            if calc_input.has_pre_resolved_rate:
                rate = original_rate = calc_input.pre_resolved_rate
            else:
                lookup = self.rate_lookup.lookup_for(calc_input, INTEREST_LOOKUP_TYPE, rate_date)
                rate, original_rate = lookup.adjusted_rate, lookup.published_rate
            rate = self._floor_rate(rate)

            weighted_rate += rate * days
            total_days += days
            details.append(MonthlyDetail(
                month_label=self.day_count.format_month(rate_date),
                day_count=days,
                rate_factor=rate,
                interest_amount=ZERO,
                period_start=current,
                period_end=period_end,
                original_rate=original_rate,
                principal=calc_input.principal
            ))
            current = period_end

        actual_rate = self._weighted_average(weighted_rate, total_days)
        interest = self._round_interest(
            self._interest(calc_input.principal, actual_rate, total_days, year_days), precision
        )

        logger.debug(
            f"Interest calc rate calculated: months={months}, days={total_days}, "
            f"rate={actual_rate}, interest={interest}"
        )
        return CalculationResult(actual_rate=actual_rate, interest_amount=interest,
                                 monthly_details=details)
