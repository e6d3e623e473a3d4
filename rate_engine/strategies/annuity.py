"""
Annuity Rate Strategy

Cash value rates of enterprise annuity plans. COMPOUND_RATE compounds the
monthly growth factors; ANNUITY_RATE_D (and DEPOSIT_RATE when a deposit plan
is routed here) accrues simple interest rounded month by month.
"""

from decimal import Decimal, localcontext
from datetime import date
from typing import FrozenSet, List, Optional
import logging

from ..currency import ZERO, ONE, TEN_THOUSAND, divide, round_scale
from ..models import CalculationInput, CalculationResult, MonthlyDetail, RateType
from ..rate_lookup import RateLookupResult
from .base import InterestRateStrategy

logger = logging.getLogger(__name__)

COMPOUND_LOOKUP_TYPE = "5"
LINEAR_LOOKUP_TYPE = "8"


class AnnuityRateStrategy(InterestRateStrategy):
    """Enterprise annuity cash value rate (compound or linear)"""

    def supported_rate_types(self) -> FrozenSet[RateType]:
        return frozenset({RateType.ANNUITY_RATE_D, RateType.COMPOUND_RATE})

    def accepted_rate_types(self) -> FrozenSet[RateType]:
        return self.supported_rate_types() | {RateType.DEPOSIT_RATE}

    def _calculate(self, calc_input: CalculationInput, precision: int) -> CalculationResult:
        if calc_input.rate_purpose is RateType.COMPOUND_RATE:
            return self._calculate_compound(calc_input, precision)
        return self._calculate_linear(calc_input, precision)

    def is_enterprise_annuity(self, calc_input: CalculationInput) -> bool:
        return calc_input.insurance_type in self.config.enterprise_annuity_types

    # Rate resolution

    def _anniversary_on_or_before(self, issue_date: date, day: date) -> date:
        """Latest policy anniversary not after `day`, never before the issue date"""
        years = day.year - issue_date.year
        anniversary = self.day_count.add_months(issue_date, 12 * years)
        if anniversary > day:
            years -= 1
            anniversary = self.day_count.add_months(issue_date, 12 * years)
        return anniversary if anniversary > issue_date else issue_date

    def _is_pinned(self, calc_input: CalculationInput, rate_date: date) -> bool:
        """Whether `rate_date` falls within the plan's pinned issue-rate years"""
        plan = calc_input.plan_attributes
        if plan is None or not plan.pins_issue_rate:
            return False
        policy_years = self.day_count.months_between(calc_input.policy_issue_date, rate_date) // 12
        return policy_years < plan.issue_rate_apply_years

    def _pinned_issue_rate(self, calc_input: CalculationInput,
                           type_code: str) -> Optional[RateLookupResult]:
        """
        Rate in effect on the issue date, when the first period is still pinned

        Policy years only grow over the range, so when the first period is past
        the pinned years no later period needs the issue-date rate either.
        """
        issue_date = calc_input.policy_issue_date
        if not self.is_enterprise_annuity(calc_input) or issue_date is None:
            return None
        rate_date = self._anniversary_on_or_before(issue_date, calc_input.begin_date)
        if not self._is_pinned(calc_input, rate_date):
            return None
        return self.rate_lookup.lookup_for(calc_input, type_code, issue_date)

    def _resolve_rate(self, calc_input: CalculationInput, type_code: str, period_start: date,
                      pinned: Optional[RateLookupResult]) -> RateLookupResult:
        """
        Look up the rate applying to a period

        Enterprise annuity plans with an issue date read the rate at the latest
        policy anniversary; while the plan pins its issue rate, the `pinned`
        issue-date rate is used instead. Other plans read the rate at the
        month start.
        """
        issue_date = calc_input.policy_issue_date
        if not self.is_enterprise_annuity(calc_input) or issue_date is None:
            return self.rate_lookup.lookup_for(
                calc_input, type_code, self.day_count.to_month_start(period_start)
            )

        rate_date = self._anniversary_on_or_before(issue_date, period_start)
        if pinned is not None and self._is_pinned(calc_input, rate_date):
            return pinned
        return self.rate_lookup.lookup_for(calc_input, type_code, rate_date)

    # Compound path

    def _growth_factor(self, rate: Decimal, days: int, year_days: int) -> Decimal:
        """(1 + rate/10000) ** (days/yearDays) at the configured power scale"""
        scale = self.config.power_scale
        base = ONE + divide(rate, TEN_THOUSAND, scale)
        exponent = divide(Decimal(days), Decimal(year_days), scale)
        with localcontext() as ctx:
            ctx.prec = scale + 20
            factor = base ** exponent
        return round_scale(factor, scale)

    def _calculate_compound(self, calc_input: CalculationInput, precision: int) -> CalculationResult:
        begin, end = calc_input.begin_date, calc_input.end_date
        months = self._adjusted_month_count(begin, end)
        scale = self.config.power_scale

        product = ONE
        total_days = 0
        pinned = self._pinned_issue_rate(calc_input, COMPOUND_LOOKUP_TYPE)
        details: List[MonthlyDetail] = []

        for period_start, period_end, days in self._rolling_periods(begin, end, months):
            lookup = self._resolve_rate(calc_input, COMPOUND_LOOKUP_TYPE, period_start, pinned)
            rate = self._floor_rate(lookup.adjusted_rate)
            year_days = self.day_count.year_day_count(period_start)
            factor = self._growth_factor(rate, days, year_days)
            product = round_scale(product * factor, scale)
            total_days += days

            details.append(MonthlyDetail(
                month_label=self.day_count.format_month(period_start),
                day_count=days,
                rate_factor=rate,
                interest_amount=ZERO,
                period_start=period_start,
                period_end=period_end,
                original_rate=lookup.published_rate,
                principal=calc_input.principal,
                growth_factor=factor,
                description="Compound"
            ))

        growth = product - ONE
        actual_rate = round_scale(growth * TEN_THOUSAND, self.config.rate_scale)
        interest = self._round_interest(calc_input.principal * growth, precision)

        logger.debug(
            f"Compound interest calculated: months={months}, days={total_days}, "
            f"factor={product}, rate={actual_rate}, interest={interest}"
        )
        return CalculationResult(actual_rate=actual_rate, interest_amount=interest,
                                 monthly_details=details)

    # Linear path

    def _calculate_linear(self, calc_input: CalculationInput, precision: int) -> CalculationResult:
        begin, end = calc_input.begin_date, calc_input.end_date
        months = self._adjusted_month_count(begin, end)
        year_days = self.day_count.year_day_count(begin)

        total_interest = self._round_interest(ZERO, precision)
        weighted_rate = ZERO
        total_days = 0
        pinned = self._pinned_issue_rate(calc_input, LINEAR_LOOKUP_TYPE)
        details: List[MonthlyDetail] = []

        for period_start, period_end, days in self._rolling_periods(begin, end, months):
            lookup = self._resolve_rate(calc_input, LINEAR_LOOKUP_TYPE, period_start, pinned)
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
                principal=calc_input.principal,
                description="Linear"
            ))

        actual_rate = self._weighted_average(weighted_rate, total_days)

        logger.debug(
            f"Linear interest calculated: months={months}, days={total_days}, "
            f"rate={actual_rate}, interest={total_interest}"
        )
        return CalculationResult(actual_rate=actual_rate, interest_amount=total_interest,
                                 monthly_details=details)
