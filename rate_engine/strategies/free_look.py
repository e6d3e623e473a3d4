"""
Free Look Rate Strategy

Interest refunded when a policy is cancelled within the free-look period.
The rate in effect at the start month applies to the whole span.
"""

from datetime import date
from typing import FrozenSet, Iterator, List
import logging

from ..currency import ZERO
from ..models import CalculationInput, CalculationResult, MonthlyDetail, RateType
from .base import InterestRateStrategy, Period

logger = logging.getLogger(__name__)

FREE_LOOK_LOOKUP_TYPE = "1"
INVESTMENT_RETURN_LOOKUP_TYPE = "9"


class FreeLookRateStrategy(InterestRateStrategy):
    """Free-look refund rate, one lookup for the whole span"""

    def supported_rate_types(self) -> FrozenSet[RateType]:
        return frozenset({RateType.FREE_LOOK_A, RateType.FREE_LOOK_B, RateType.FREE_LOOK_E})

    @staticmethod
    def lookup_type_for(rate_type: RateType) -> str:
        if rate_type is RateType.FREE_LOOK_E:
            return INVESTMENT_RETURN_LOOKUP_TYPE
        return FREE_LOOK_LOOKUP_TYPE

    def _free_look_periods(self, begin: date, end: date, months: int) -> Iterator[Period]:
        """
        Exactly `months` monthly periods from `begin`, each capped at `end`

        The month count is always one more than the month difference, so the
        last period may start after `end` and count negative days. Those days
        are deducted from the total.
        """
        current = begin
        for _ in range(months):
            next_date = self.day_count.add_months(current, 1)
            period_end = min(next_date, end)
            yield current, period_end, self.day_count.days_between(current, period_end)
            current = next_date

    def _calculate(self, calc_input: CalculationInput, precision: int) -> CalculationResult:
        account_key = calc_input.account_key
        if not account_key and calc_input.plan_attributes is not None:
            account_key = calc_input.plan_attributes.free_look_rate_code
        if not account_key:
            logger.debug("No account key or free-look rate code available")
            return CalculationResult.zero(precision)

        calc_input = calc_input.with_account_key(account_key)
        begin, end = calc_input.begin_date, calc_input.end_date
        type_code = self.lookup_type_for(calc_input.rate_purpose)

        lookup = self.rate_lookup.lookup_for(
            calc_input, type_code, self.day_count.to_month_start(begin)
        )
        if lookup.adjusted_rate == ZERO:
            logger.debug(f"Free-look rate not found: key={account_key}, type={type_code}")
            return CalculationResult.zero(precision)

        rate = self._floor_rate(lookup.adjusted_rate)
        months = self.day_count.months_between(begin, end) + 1
        year_days = self.day_count.year_day_count(begin)

        weighted_rate = ZERO
        total_days = 0
        details: List[MonthlyDetail] = []

        for period_start, period_end, days in self._free_look_periods(begin, end, months):
            weighted_rate += rate * days
            total_days += days
            details.append(MonthlyDetail(
                month_label=self.day_count.format_month(period_start),
                day_count=days,
                rate_factor=rate,
                interest_amount=ZERO,
                period_start=period_start,
                period_end=period_end,
                original_rate=lookup.published_rate,
                principal=calc_input.principal
            ))

        actual_rate = self._weighted_average(weighted_rate, total_days)
        interest = self._round_interest(
            self._interest(calc_input.principal, actual_rate, total_days, year_days), precision
        )

        logger.debug(
            f"Free-look interest calculated: type={type_code}, months={months}, "
            f"days={total_days}, rate={actual_rate}, interest={interest}"
        )
        return CalculationResult(actual_rate=actual_rate, interest_amount=interest,
                                 monthly_details=details)
