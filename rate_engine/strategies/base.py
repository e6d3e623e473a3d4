"""
Strategy Base Module

Shared contract of every rate strategy: the date-range guard, month stepping
and the day-weighted arithmetic the strategies have in common.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from datetime import date
from typing import FrozenSet, Iterator, Optional, Tuple
import logging

from ..config import RateEngineConfig, get_config
from ..currency import ZERO, TEN_THOUSAND, divide, round_amount, round_scale
from ..day_count import DayCountHelper
from ..models import CalculationInput, CalculationResult, RateType
from ..rate_lookup import RateLookup

logger = logging.getLogger(__name__)

# (period start, period end, day count)
Period = Tuple[date, date, int]


class InterestRateStrategy(ABC):
    """
    Base class of the rate strategies

    Subclasses implement `_calculate`; `calculate` rejects missing or inverted
    date ranges and purposes the strategy does not handle, returning a zero
    result instead of raising.
    """

    def __init__(
        self,
        rate_lookup: RateLookup,
        day_count: Optional[DayCountHelper] = None,
        config: Optional[RateEngineConfig] = None
    ):
        self.rate_lookup = rate_lookup
        self.day_count = day_count or DayCountHelper()
        self.config = config or get_config()

    @abstractmethod
    def supported_rate_types(self) -> FrozenSet[RateType]:
        """Rate purposes registered with the dispatcher for this strategy"""
        pass

    def accepted_rate_types(self) -> FrozenSet[RateType]:
        """Rate purposes `calculate` will compute (defaults to the supported ones)"""
        return self.supported_rate_types()

    def calculate(self, calc_input: CalculationInput, precision: int = 0) -> CalculationResult:
        """
        Calculate the actual rate and interest for one input

        Args:
            calc_input: Calculation input
            precision: Fractional digits of the interest amount

        Returns:
            CalculationResult; zero when the date range is missing or inverted
        """
        if not calc_input.has_valid_range:
            logger.debug(
                f"{type(self).__name__}: invalid range "
                f"begin={calc_input.begin_date}, end={calc_input.end_date}"
            )
            return CalculationResult.zero(precision)

        if calc_input.rate_purpose not in self.accepted_rate_types():
            logger.warning(
                f"{type(self).__name__}: unexpected rate purpose {calc_input.rate_purpose}"
            )
            return CalculationResult.zero(precision)

        return self._calculate(calc_input, precision)

    @abstractmethod
    def _calculate(self, calc_input: CalculationInput, precision: int) -> CalculationResult:
        """Strategy body, called with a valid date range"""
        pass

    # Month stepping

    def _rolling_periods(self, begin: date, end: date, months: int) -> Iterator[Period]:
        """
        Periods of one calendar month from `begin`, the last one capped at `end`

        Stepping stops once a period would start on or after `end`.
        """
        current = begin
        for _ in range(months):
            if current >= end:
                break
            next_date = self.day_count.add_months(current, 1)
            period_end = min(next_date, end)
            yield current, period_end, self.day_count.days_between(current, period_end)
            current = next_date

    def _month_end_periods(self, begin: date, end: date, months: int) -> Iterator[Period]:
        """
        Periods running to the last day of each month

        Every period but the last counts its end day too. After the first
        period the next one starts on the first of the following month.
        """
        current = begin
        for index in range(1, months + 1):
            if current >= end:
                break
            period_end = min(self.day_count.with_day(current, 31), end)
            days = self.day_count.days_between(current, period_end)
            if index != months:
                days += 1
            yield current, period_end, days
            current = self.day_count.to_month_start(self.day_count.add_months(begin, index))

    def _adjusted_month_count(self, begin: date, end: date) -> int:
        """
        Calendar months touched by the range

        The month difference, plus one for a trailing partial month left after
        stepping whole months from `begin`. A range inside one month counts one.
        """
        months = self.day_count.months_between(begin, end)
        if months <= 0:
            return 1
        current = begin
        for _ in range(months):
            current = self.day_count.add_months(current, 1)
        if current < end:
            months += 1
        return months

    # Arithmetic

    @staticmethod
    def _floor_rate(rate: Decimal) -> Decimal:
        """Negative rates are treated as zero"""
        return rate if rate > ZERO else ZERO

    def _weighted_average(self, weighted_total: Decimal, weight: int) -> Decimal:
        if weight <= 0:
            return ZERO
        return divide(weighted_total, Decimal(weight), self.config.rate_scale)

    def _interest(self, principal: Decimal, rate: Decimal, days: int, year_days: int) -> Decimal:
        """principal x rate/10000 x days/yearDays, unrounded"""
        scale = self.config.amount_scale
        return (principal
                * divide(rate, TEN_THOUSAND, scale)
                * divide(Decimal(days), Decimal(year_days), scale))

    def _round_interest(self, amount: Decimal, precision: int) -> Decimal:
        return round_amount(amount, precision)

    def _detail_amount(self, amount: Decimal) -> Decimal:
        return round_scale(amount, self.config.amount_scale)
