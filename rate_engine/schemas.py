"""
Pydantic schemas for rate calculation requests and responses
"""

from datetime import date
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from .currency import Currency, decimal_from_string, precision_for
from .models import CalculationInput, CalculationResult, MonthlyDetail, PlanAttributes, RateType


class PlanAttributesModel(BaseModel):
    plan_code: str
    version: str = "1"
    insurance_type: Optional[str] = Field(None, description="Plan classification letter (F, G, H, ...)")
    free_look_rate_code: Optional[str] = None
    issue_rate_apply_indicator: str = "0"
    issue_rate_apply_years: int = Field(0, ge=0)

    def to_plan_attributes(self) -> PlanAttributes:
        return PlanAttributes(
            plan_code=self.plan_code,
            version=self.version,
            insurance_type=self.insurance_type,
            free_look_rate_code=self.free_look_rate_code,
            issue_rate_apply_indicator=self.issue_rate_apply_indicator,
            issue_rate_apply_years=self.issue_rate_apply_years
        )


class InterestRateRequest(BaseModel):
    rate_type: str = Field(..., description="Rate purpose code (0-5, 8, A-F)")
    begin_date: Optional[date] = None
    end_date: Optional[date] = None
    principal: str = Field("0", description="Decimal amount as string")
    account_key: Optional[str] = None
    pre_resolved_rate: str = Field("0", description="Known rate in ten-thousandths, 0 if unknown")
    rate_markdown: str = Field("0", description="Ten-thousandths subtracted from the rate")
    rate_discount_percent: str = Field("100", description="Discount percentage, 100 = none")
    policy_issue_date: Optional[date] = None
    plan: Optional[PlanAttributesModel] = None
    precision: int = Field(0, ge=0, le=10, description="Fractional digits of the interest amount")
    currency: Optional[str] = Field(None, description="Currency code; overrides precision when set")

    @field_validator('rate_type')
    @classmethod
    def validate_rate_type(cls, value: str) -> str:
        if RateType.from_code(value) is None:
            raise ValueError(f"Unknown rate type code: {value}")
        return value

    @field_validator('principal', 'pre_resolved_rate', 'rate_markdown', 'rate_discount_percent')
    @classmethod
    def validate_decimal(cls, value: str) -> str:
        decimal_from_string(value)
        return value

    @field_validator('currency')
    @classmethod
    def validate_currency(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and value not in Currency.__members__:
            raise ValueError(f"Unsupported currency: {value}")
        return value

    def resolve_precision(self) -> int:
        if self.currency:
            return precision_for(Currency[self.currency])
        return self.precision

    def to_input(self) -> CalculationInput:
        return CalculationInput(
            rate_purpose=RateType.from_code(self.rate_type),
            begin_date=self.begin_date,
            end_date=self.end_date,
            principal=decimal_from_string(self.principal),
            account_key=self.account_key,
            pre_resolved_rate=decimal_from_string(self.pre_resolved_rate),
            rate_markdown=decimal_from_string(self.rate_markdown),
            rate_discount_percent=decimal_from_string(self.rate_discount_percent),
            policy_issue_date=self.policy_issue_date,
            plan_attributes=self.plan.to_plan_attributes() if self.plan else None
        )


class InterestRateBatchRequest(BaseModel):
    requests: List[InterestRateRequest] = Field(..., min_length=1)


class MonthlyDetailModel(BaseModel):
    month: str
    days: int
    rate: str
    interest_amount: str
    period_start: Optional[date] = None
    period_end: Optional[date] = None
    original_rate: str
    growth_factor: Optional[str] = None
    description: Optional[str] = None

    @classmethod
    def from_detail(cls, detail: MonthlyDetail) -> 'MonthlyDetailModel':
        return cls(
            month=detail.month_label,
            days=detail.day_count,
            rate=str(detail.rate_factor),
            interest_amount=str(detail.interest_amount),
            period_start=detail.period_start,
            period_end=detail.period_end,
            original_rate=str(detail.original_rate),
            growth_factor=str(detail.growth_factor) if detail.growth_factor is not None else None,
            description=detail.description
        )


class InterestRateResponse(BaseModel):
    actual_rate: str
    interest_amount: str
    monthly_details: List[MonthlyDetailModel] = []

    @classmethod
    def from_result(cls, result: CalculationResult) -> 'InterestRateResponse':
        return cls(
            actual_rate=str(result.actual_rate),
            interest_amount=str(result.interest_amount),
            monthly_details=[MonthlyDetailModel.from_detail(d) for d in result.monthly_details]
        )
