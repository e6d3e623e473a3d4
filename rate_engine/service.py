"""
Interest Rate Service Module

Entry point for callers: applies the investment product gate, dispatches to
the strategy registered for the rate purpose and logs each calculation.
"""

from typing import FrozenSet, Iterable, List, Optional
import logging

from .config import RateEngineConfig, get_config
from .day_count import DayCountHelper
from .dispatcher import RateStrategyDispatcher
from .logging_config import log_calculation
from .models import CalculationInput, CalculationResult, RateType, INVESTMENT_ONLY_TYPES
from .rate_lookup import RateLookup
from .rate_table import RateTable
from .strategies import (
    AnnuityRateStrategy,
    AvgDeclaredRateStrategy,
    DepositRateStrategy,
    DividendRateStrategy,
    FourBankRateStrategy,
    FreeLookRateStrategy,
    InterestCalcRateStrategy,
    LastMonthRateStrategy,
    LoanRateStrategy,
)

logger = logging.getLogger(__name__)


class InterestRateService:
    """
    Rate calculation service

    Business anomalies (missing purpose, missing or inverted dates, missing
    rates) resolve to a zero result; only wiring errors raise.
    """

    def __init__(self, dispatcher: RateStrategyDispatcher,
                 config: Optional[RateEngineConfig] = None):
        self.dispatcher = dispatcher
        self.config = config or get_config()

    def calculate(
        self,
        calc_input: CalculationInput,
        precision: int = 0,
        correlation_id: Optional[str] = None
    ) -> CalculationResult:
        """
        Calculate the actual rate and interest for one input

        Args:
            calc_input: Calculation input
            precision: Fractional digits of the interest amount (0 domestic, 2 foreign)
            correlation_id: Optional ID carried into the structured log

        Returns:
            CalculationResult
        """
        rate_type = calc_input.rate_purpose
        if rate_type is None:
            logger.debug("Rate purpose missing, returning zero result")
            return CalculationResult.zero(precision)

        effective_type = self.resolve_investment_gate(calc_input)
        if effective_type is not rate_type:
            log_calculation(
                logger, "info",
                f"Investment gate: rate type {rate_type.code} not applicable to insurance "
                f"type {calc_input.insurance_type}, using {effective_type.code}",
                rate_type=rate_type.code,
                account_key=calc_input.account_key,
                correlation_id=correlation_id
            )
            calc_input = calc_input.with_rate_purpose(effective_type)

        strategy = self.dispatcher.dispatch(effective_type)
        result = strategy.calculate(calc_input, precision)

        log_calculation(
            logger, "debug",
            f"Rate calculated by {type(strategy).__name__}",
            rate_type=effective_type.code,
            account_key=calc_input.account_key,
            correlation_id=correlation_id,
            extra={
                "actual_rate": str(result.actual_rate),
                "interest_amount": str(result.interest_amount),
                "months": len(result.monthly_details)
            }
        )
        return result

    def calculate_batch(
        self,
        inputs: Iterable[CalculationInput],
        precision: int = 0,
        correlation_id: Optional[str] = None
    ) -> List[CalculationResult]:
        """
        Calculate every input in order

        A failing input is logged and yields a zero result; the rest of the
        batch still runs.
        """
        results = []
        for index, calc_input in enumerate(inputs):
            try:
                results.append(self.calculate(calc_input, precision, correlation_id))
            except Exception as e:
                log_calculation(
                    logger, "warning",
                    f"Batch item {index} failed: {e}",
                    rate_type=calc_input.rate_purpose.code if calc_input.rate_purpose else None,
                    account_key=calc_input.account_key,
                    correlation_id=correlation_id
                )
                results.append(CalculationResult.zero(precision))
        return results

    def resolve_investment_gate(self, calc_input: CalculationInput) -> RateType:
        """
        Rate purpose to use after the investment product gate

        Investment-only purposes on a plan whose classification is known and
        is not an investment classification fall back to LOAN_RATE_MONTHLY.
        """
        rate_type = calc_input.rate_purpose
        if not self.config.enable_investment_gate or rate_type not in INVESTMENT_ONLY_TYPES:
            return rate_type

        insurance_type = calc_input.insurance_type
        if insurance_type is None or insurance_type in self.config.investment_types:
            return rate_type

        return RateType.LOAN_RATE_MONTHLY

    def supports_rate_type(self, rate_type: RateType) -> bool:
        return self.dispatcher.supports(rate_type)

    def supported_rate_types(self) -> FrozenSet[RateType]:
        return self.dispatcher.supported_rate_types()


def create_interest_rate_service(
    rate_table: RateTable,
    config: Optional[RateEngineConfig] = None
) -> InterestRateService:
    """
    Wire the engine around a rate table

    Args:
        rate_table: Rate table backend the lookups read from
        config: Engine configuration (defaults to the global configuration)

    Returns:
        InterestRateService with all nine strategies registered
    """
    config = config or get_config()
    day_count = DayCountHelper()
    rate_lookup = RateLookup(rate_table, rate_scale=config.rate_scale)

    annuity = AnnuityRateStrategy(rate_lookup, day_count, config)
    strategies = [
        annuity,
        DepositRateStrategy(rate_lookup, annuity, day_count, config),
        LoanRateStrategy(rate_lookup, day_count, config),
        LastMonthRateStrategy(rate_lookup, day_count, config),
        FourBankRateStrategy(rate_lookup, day_count, config),
        FreeLookRateStrategy(rate_lookup, day_count, config),
        DividendRateStrategy(rate_lookup, day_count, config),
        AvgDeclaredRateStrategy(rate_lookup, day_count, config),
        InterestCalcRateStrategy(rate_lookup, day_count, config),
    ]
    return InterestRateService(RateStrategyDispatcher(strategies), config)
