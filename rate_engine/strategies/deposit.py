"""
Deposit Rate Strategy

Cash value rate of deposit-type plans. Enterprise annuity plans are handed to
the annuity strategy unchanged.
"""

from typing import FrozenSet, List, Optional
import logging

from ..config import RateEngineConfig
from ..currency import ZERO, calc_round
from ..day_count import DayCountHelper
from ..models import CalculationInput, CalculationResult, MonthlyDetail, RateType
from ..rate_lookup import RateLookup
from .annuity import AnnuityRateStrategy
from .base import InterestRateStrategy

logger = logging.getLogger(__name__)

DEPOSIT_LOOKUP_TYPE = "5"


class DepositRateStrategy(InterestRateStrategy):
    """Deposit cash value rate, interest rounded per month"""

    def __init__(
        self,
        rate_lookup: RateLookup,
        annuity_strategy: AnnuityRateStrategy,
        day_count: Optional[DayCountHelper] = None,
        config: Optional[RateEngineConfig] = None
    ):
        super().__init__(rate_lookup, day_count, config)
        self.annuity_strategy = annuity_strategy

    def supported_rate_types(self) -> FrozenSet[RateType]:
        return frozenset({RateType.DEPOSIT_RATE})

    def _calculate(self, calc_input: CalculationInput, precision: int) -> CalculationResult:
        if calc_input.insurance_type in self.config.enterprise_annuity_types:
            logger.debug(
                f"Deposit rate for insurance type {calc_input.insurance_type} "
                f"delegated to annuity strategy"
            )
            return self.annuity_strategy.calculate(calc_input, precision)

        begin, end = calc_input.begin_date, calc_input.end_date
        months = self._adjusted_month_count(begin, end)
        year_days = self.day_count.year_day_count(begin)

        total_interest = self._round_interest(ZERO, precision)
        weighted_rate = ZERO
        total_days = 0
        details: List[MonthlyDetail] = []

        for period_start, period_end, days in self._rolling_periods(begin, end, months):
            lookup = self.rate_lookup.lookup_for(
                calc_input, DEPOSIT_LOOKUP_TYPE, self.day_count.to_month_start(period_start)
            )
            rate = self._floor_rate(lookup.adjusted_rate)
            interest = self._round_interest(
                self._interest(calc_input.principal, rate, days, year_days), precision
            )
            total_interest += interest
            weighted_rate += rate * days
            total_days += days

            details.append(MonthlyDetail(
                month_label=self.day_count.format_month(period_start),
                day_count=days,
                rate_factor=rate,
                interest_amount=interest,
                period_start=period_start,
                period_end=period_end,
                original_rate=lookup.published_rate,
                principal=calc_input.principal
            ))

        actual_rate = calc_round(
            self._weighted_average(weighted_rate, total_days), self.config.rate_round_scale
        )

        logger.debug(
            f"Deposit rate calculated: months={months}, days={total_days}, "
            f"rate={actual_rate}, interest={total_interest}"
        )
        return CalculationResult(actual_rate=actual_rate, interest_amount=total_interest,
                                 monthly_details=details)
