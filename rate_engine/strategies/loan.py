"""
Loan Rate Strategy

Policy loan interest accrued month by month. Interest is accumulated
unrounded and rounded once at the end.
"""

from typing import FrozenSet, List
import logging

from ..currency import ZERO, calc_round
from ..models import CalculationInput, CalculationResult, MonthlyDetail, RateType
from ..rate_lookup import RateLookupResult
from .base import InterestRateStrategy

logger = logging.getLogger(__name__)

LOAN_LOOKUP_TYPE = "2"


class LoanRateStrategy(InterestRateStrategy):
    """Monthly policy loan rate"""

    def supported_rate_types(self) -> FrozenSet[RateType]:
        return frozenset({RateType.LOAN_RATE_MONTHLY, RateType.LOAN_RATE_MONTHLY_V2})

    def _pre_resolved(self, calc_input: CalculationInput) -> RateLookupResult:
        rate = calc_input.pre_resolved_rate
        adjusted = rate
        if calc_input.has_adjustments:
            adjusted = self.rate_lookup.apply_discounts(
                rate, calc_input.rate_markdown, calc_input.rate_discount_percent
            )
        return RateLookupResult(published_rate=rate, adjusted_rate=adjusted)

    def _calculate(self, calc_input: CalculationInput, precision: int) -> CalculationResult:
        begin, end = calc_input.begin_date, calc_input.end_date
        months = self.day_count.months_between(begin, end) + 1
        year_days = self.day_count.year_day_count(begin)

        pre_resolved = (self._pre_resolved(calc_input)
                        if calc_input.has_pre_resolved_rate else None)

        accrued = ZERO
        weighted_rate = ZERO
        total_days = 0
        details: List[MonthlyDetail] = []

        for period_start, period_end, days in self._month_end_periods(begin, end, months):
            rate_date = self.day_count.to_month_start(period_start)
            lookup = pre_resolved or self.rate_lookup.lookup_for(
                calc_input, LOAN_LOOKUP_TYPE, rate_date
            )
            rate = self._floor_rate(lookup.adjusted_rate)
            interest = self._interest(calc_input.principal, rate, days, year_days)
            accrued += interest
            weighted_rate += rate * days
            total_days += days

            details.append(MonthlyDetail(
                month_label=self.day_count.format_month(rate_date),
                day_count=days,
                rate_factor=rate,
                interest_amount=self._detail_amount(interest),
                period_start=period_start,
                period_end=period_end,
                original_rate=lookup.published_rate,
                principal=calc_input.principal
            ))

        interest_amount = self._round_interest(accrued, precision)
        actual_rate = calc_round(
            self._weighted_average(weighted_rate, total_days), self.config.rate_round_scale
        )

        logger.debug(
            f"Loan rate calculated: months={months}, days={total_days}, "
            f"rate={actual_rate}, interest={interest_amount}, accrued={accrued}"
        )
        return CalculationResult(actual_rate=actual_rate, interest_amount=interest_amount,
                                 monthly_details=details)
