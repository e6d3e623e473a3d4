"""
Dividend Rate Strategy

Month-weighted average of the dividend rate. No interest is computed.
"""

from decimal import Decimal
from typing import FrozenSet
import logging

from ..currency import ZERO, divide
from ..models import CalculationInput, CalculationResult, RateType
from .base import InterestRateStrategy

logger = logging.getLogger(__name__)

DIVIDEND_LOOKUP_TYPE = "0"
ANNUITY_DIVIDEND_LOOKUP_TYPE = "5"


class DividendRateStrategy(InterestRateStrategy):
    """Dividend rate averaged over the months of the range"""

    def supported_rate_types(self) -> FrozenSet[RateType]:
        return frozenset({RateType.DIVIDEND_RATE})

    def lookup_type_for(self, calc_input: CalculationInput) -> str:
        if calc_input.insurance_type in self.config.dividend_annuity_types:
            return ANNUITY_DIVIDEND_LOOKUP_TYPE
        return DIVIDEND_LOOKUP_TYPE

    def _calculate(self, calc_input: CalculationInput, precision: int) -> CalculationResult:
        zero_interest = self._round_interest(ZERO, precision)

        if calc_input.has_pre_resolved_rate:
            return CalculationResult(
                actual_rate=self._floor_rate(calc_input.pre_resolved_rate),
                interest_amount=zero_interest
            )

        begin, end = calc_input.begin_date, calc_input.end_date
        months = self._adjusted_month_count(begin, end)
        type_code = self.lookup_type_for(calc_input)

        total_rate = ZERO
        current = begin
        for _ in range(months):
            lookup = self.rate_lookup.lookup_for(
                calc_input, type_code, self.day_count.to_month_start(current)
            )
            total_rate += self._floor_rate(lookup.adjusted_rate)
            current = self.day_count.add_months(current, 1)

        actual_rate = divide(total_rate, Decimal(months), self.config.rate_scale)

        logger.debug(
            f"Dividend rate calculated: type={type_code}, months={months}, rate={actual_rate}"
        )
        return CalculationResult(actual_rate=actual_rate, interest_amount=zero_interest)
