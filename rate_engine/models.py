"""
Rate Engine Data Model

Immutable value objects exchanged between callers and the rate strategies:
rate-purpose codes, plan attributes, calculation inputs, monthly details and
calculation results. Rates are Decimal ten-thousandths (250 = 2.5%).
"""

from decimal import Decimal
from datetime import date
from dataclasses import dataclass, field, replace
from typing import FrozenSet, Optional, Tuple
from enum import Enum

from .currency import ZERO, HUNDRED, round_amount


class RateType(Enum):
    """Rate-purpose codes with their legacy single-character code"""
    DIVIDEND_RATE = ("0", "Dividend rate (month-weighted)")
    INTEREST_CALC_RATE = ("1", "Interest calculation rate (day-weighted)")
    LOAN_RATE_MONTHLY = ("2", "Policy loan rate (per month)")
    LOAN_RATE_MONTHLY_V2 = ("3", "Policy loan rate (per month, variant)")
    LOAN_RATE_LAST_MONTH = ("4", "Policy loan rate (last month)")
    FOUR_BANK_RATE = ("5", "Four-bank reference rate")
    AVG_DECLARED_RATE = ("8", "Declared rate, 12-month average")
    FREE_LOOK_A = ("A", "Free-look refund interest")
    FREE_LOOK_B = ("B", "Free-look refund interest (variant)")
    DEPOSIT_RATE = ("C", "Cash value rate (deposit)")
    ANNUITY_RATE_D = ("D", "Cash value rate (enterprise annuity)")
    FREE_LOOK_E = ("E", "Investment return rate")
    COMPOUND_RATE = ("F", "Compound rate (enterprise annuity)")

    def __init__(self, code: str, description: str):
        self.code = code
        self.description = description

    @classmethod
    def from_code(cls, code: Optional[str]) -> Optional['RateType']:
        """Resolve a legacy code; unknown or missing codes return None"""
        if code is None:
            return None
        for rate_type in cls:
            if rate_type.code == code:
                return rate_type
        return None


FREE_LOOK_TYPES: FrozenSet[RateType] = frozenset({
    RateType.FREE_LOOK_A, RateType.FREE_LOOK_B, RateType.FREE_LOOK_E
})

# Purposes only meaningful for investment-linked plans
INVESTMENT_ONLY_TYPES: FrozenSet[RateType] = frozenset({
    RateType.FREE_LOOK_A, RateType.FREE_LOOK_B, RateType.DEPOSIT_RATE,
    RateType.ANNUITY_RATE_D, RateType.FREE_LOOK_E, RateType.COMPOUND_RATE
})


@dataclass(frozen=True)
class PlanAttributes:
    """Read-only plan reference data used for strategy routing"""
    plan_code: str
    version: str = "1"
    insurance_type: Optional[str] = None         # Classification letter (F, G, H, I, ...)
    free_look_rate_code: Optional[str] = None    # Rate table key for free-look refunds
    issue_rate_apply_indicator: str = "0"        # "1" pins the issue-date rate
    issue_rate_apply_years: int = 0              # Policy years the pinned rate applies

    @property
    def pins_issue_rate(self) -> bool:
        return self.issue_rate_apply_indicator == "1" and self.issue_rate_apply_years > 0


@dataclass(frozen=True)
class CalculationInput:
    """Input of a single rate calculation"""
    rate_purpose: Optional[RateType] = None
    begin_date: Optional[date] = None
    end_date: Optional[date] = None
    principal: Decimal = ZERO
    account_key: Optional[str] = None
    pre_resolved_rate: Decimal = ZERO            # Zero means "not supplied"
    rate_markdown: Decimal = ZERO                # Subtracted first
    rate_discount_percent: Decimal = HUNDRED     # Applied second, 100 = no discount
    policy_issue_date: Optional[date] = None
    plan_attributes: Optional[PlanAttributes] = None

    def __post_init__(self):
        for name in ('principal', 'pre_resolved_rate', 'rate_markdown', 'rate_discount_percent'):
            value = getattr(self, name)
            if not isinstance(value, Decimal):
                object.__setattr__(self, name, Decimal(str(value)))

    @property
    def has_valid_range(self) -> bool:
        return (self.begin_date is not None and self.end_date is not None
                and self.begin_date < self.end_date)

    @property
    def has_pre_resolved_rate(self) -> bool:
        return self.pre_resolved_rate != ZERO

    @property
    def has_adjustments(self) -> bool:
        return self.rate_markdown != ZERO or self.rate_discount_percent != HUNDRED

    @property
    def insurance_type(self) -> Optional[str]:
        return self.plan_attributes.insurance_type if self.plan_attributes else None

    def with_account_key(self, account_key: str) -> 'CalculationInput':
        return replace(self, account_key=account_key)

    def with_rate_purpose(self, rate_purpose: RateType) -> 'CalculationInput':
        return replace(self, rate_purpose=rate_purpose)


@dataclass(frozen=True)
class MonthlyDetail:
    """One calendar period of a multi-month calculation"""
    month_label: str
    day_count: int
    rate_factor: Decimal                  # Rate applied for the period
    interest_amount: Decimal = ZERO
    period_start: Optional[date] = None
    period_end: Optional[date] = None
    original_rate: Decimal = ZERO         # Published rate before markdown/discount
    principal: Decimal = ZERO
    growth_factor: Optional[Decimal] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class CalculationResult:
    """Outcome of a rate calculation"""
    actual_rate: Decimal
    interest_amount: Decimal
    monthly_details: Tuple[MonthlyDetail, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if not isinstance(self.monthly_details, tuple):
            object.__setattr__(self, 'monthly_details', tuple(self.monthly_details))

    @classmethod
    def zero(cls, precision: int = 0) -> 'CalculationResult':
        """Zero rate, zero interest at `precision`, no details"""
        return cls(
            actual_rate=ZERO,
            interest_amount=round_amount(ZERO, precision),
            monthly_details=()
        )

    @property
    def is_zero(self) -> bool:
        return self.actual_rate == ZERO and self.interest_amount == ZERO

    @property
    def total_days(self) -> int:
        return sum(detail.day_count for detail in self.monthly_details)
