"""
Four Bank Rate Strategy

Interest at the policy loan rate, reported alongside the day-weighted
four-bank reference rate.
"""

from typing import FrozenSet, List
import logging

from ..currency import ZERO, calc_round
from ..models import CalculationInput, CalculationResult, MonthlyDetail, RateType
from .base import InterestRateStrategy

logger = logging.getLogger(__name__)

LOAN_LOOKUP_TYPE = "2"
REFERENCE_LOOKUP_TYPE = "0"


class FourBankRateStrategy(InterestRateStrategy):
    """
    Four-bank reference rate

    The interest rate is the pre-resolved rate or, failing that, the loan rate
    at the first month. The reported rate is the reference rate looked up for
    each month.
    """

    def supported_rate_types(self) -> FrozenSet[RateType]:
        return frozenset({RateType.FOUR_BANK_RATE})

    def _calculate(self, calc_input: CalculationInput, precision: int) -> CalculationResult:
        begin, end = calc_input.begin_date, calc_input.end_date
        months = min(self.day_count.months_between(begin, end) + 1,
                     self.config.four_bank_max_months)
        year_days = self.day_count.year_day_count(begin)

        if calc_input.has_pre_resolved_rate:
            interest_rate = calc_input.pre_resolved_rate
        else:
            interest_rate = self.rate_lookup.lookup_for(
                calc_input, LOAN_LOOKUP_TYPE, self.day_count.to_month_start(begin)
            ).adjusted_rate
        interest_rate = self._floor_rate(interest_rate)

        total_interest = self._round_interest(ZERO, precision)
        weighted_rate = ZERO
        total_days = 0
        details: List[MonthlyDetail] = []

        for period_start, period_end, days in self._month_end_periods(begin, end, months):
            rate_date = self.day_count.to_month_start(period_start)
            reference = self.rate_lookup.lookup_for(calc_input, REFERENCE_LOOKUP_TYPE, rate_date)
            reference_rate = self._floor_rate(reference.adjusted_rate)

            interest = self._round_interest(
                self._interest(calc_input.principal, interest_rate, days, year_days), precision
            )
            total_interest += interest
            weighted_rate += reference_rate * days
            total_days += days

            details.append(MonthlyDetail(
                month_label=self.day_count.format_month(rate_date),
                day_count=days,
                rate_factor=interest_rate,
                interest_amount=interest,
                period_start=period_start,
                period_end=period_end,
                original_rate=reference.published_rate,
                principal=calc_input.principal
            ))

        actual_rate = calc_round(
            self._weighted_average(weighted_rate, total_days), self.config.rate_round_scale
        )

        logger.debug(
            f"Four bank rate calculated: months={months}, days={total_days}, "
            f"interest_rate={interest_rate}, rate={actual_rate}, interest={total_interest}"
        )
        return CalculationResult(actual_rate=actual_rate, interest_amount=total_interest,
                                 monthly_details=details)
