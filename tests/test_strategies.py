"""
Test suite for the rate strategies

Tests each strategy's rate resolution, stepping and rounding against a real
in-memory rate table.
"""

import pytest
from decimal import Decimal
from datetime import date

from rate_engine.config import RateEngineConfig
from rate_engine.models import CalculationInput, PlanAttributes, RateType
from rate_engine.rate_lookup import RateLookup
from rate_engine.rate_table import InMemoryRateTable, InterestRateRecord
from rate_engine.strategies import (
    AnnuityRateStrategy, DepositRateStrategy, LoanRateStrategy, LastMonthRateStrategy,
    FourBankRateStrategy, FreeLookRateStrategy, DividendRateStrategy,
    AvgDeclaredRateStrategy, InterestCalcRateStrategy
)


class CountingRateTable(InMemoryRateTable):
    """In-memory rate table recording every lookup"""

    def __init__(self, records=None):
        self.calls = []
        super().__init__(records)

    def find_effective_rate(self, account_key, type_code, as_of):
        self.calls.append((account_key, type_code, as_of))
        return super().find_effective_rate(account_key, type_code, as_of)


PRINCIPAL = Decimal('1000000')


def rate(key, type_code, start, value):
    return InterestRateRecord(key, type_code, start, Decimal(value))


def make_input(rate_type, begin, end, **kwargs):
    kwargs.setdefault('principal', PRINCIPAL)
    return CalculationInput(rate_purpose=rate_type, begin_date=begin, end_date=end, **kwargs)


def build(strategy_class, table, config=None):
    return strategy_class(RateLookup(table), config=config or RateEngineConfig())


class TestCommonGuard:
    """Test the date guard on every strategy"""

    CASES = [
        (LoanRateStrategy, RateType.LOAN_RATE_MONTHLY),
        (LastMonthRateStrategy, RateType.LOAN_RATE_LAST_MONTH),
        (FourBankRateStrategy, RateType.FOUR_BANK_RATE),
        (FreeLookRateStrategy, RateType.FREE_LOOK_A),
        (DividendRateStrategy, RateType.DIVIDEND_RATE),
        (AvgDeclaredRateStrategy, RateType.AVG_DECLARED_RATE),
        (InterestCalcRateStrategy, RateType.INTEREST_CALC_RATE),
    ]

    @pytest.mark.parametrize("strategy_class,rate_type", CASES)
    @pytest.mark.parametrize("begin,end", [
        (None, date(2024, 3, 1)),
        (date(2024, 1, 1), None),
        (date(2024, 3, 1), date(2024, 3, 1)),
        (date(2024, 3, 1), date(2024, 1, 1)),
    ])
    @pytest.mark.parametrize("precision", [0, 2])
    def test_invalid_range_returns_zero(self, strategy_class, rate_type, begin, end, precision):
        """Test missing or inverted dates give a zero result at the requested precision"""
        table = CountingRateTable([rate("KEY1", code, date(2020, 1, 1), '250')
                                   for code in ("0", "1", "2", "5", "8")])
        strategy = build(strategy_class, table)
        calc_input = make_input(rate_type, begin, end, account_key="KEY1",
                                pre_resolved_rate=Decimal('250'))

        result = strategy.calculate(calc_input, precision)

        assert result.actual_rate == Decimal('0')
        assert result.interest_amount == Decimal('0')
        assert result.interest_amount.as_tuple().exponent == -precision
        assert result.monthly_details == ()
        assert table.calls == []

    def test_deposit_guard(self):
        """Test the deposit strategy guard"""
        table = InMemoryRateTable()
        lookup = RateLookup(table)
        annuity = AnnuityRateStrategy(lookup, config=RateEngineConfig())
        strategy = DepositRateStrategy(lookup, annuity, config=RateEngineConfig())
        result = strategy.calculate(make_input(RateType.DEPOSIT_RATE, date(2024, 2, 1), date(2024, 1, 1)))
        assert result.is_zero


class TestDepositRateStrategy:
    """Test deposit cash value rates"""

    def setup_method(self):
        """Set up test fixtures"""
        self.table = CountingRateTable([
            rate("DEP1", "5", date(2023, 1, 1), '250'),
            rate("DEP1", "5", date(2024, 2, 1), '200'),
            rate("DEP1", "8", date(2023, 1, 1), '300'),
        ])
        lookup = RateLookup(self.table)
        config = RateEngineConfig()
        self.annuity = AnnuityRateStrategy(lookup, config=config)
        self.strategy = DepositRateStrategy(lookup, self.annuity, config=config)

    def test_supported_rate_types(self):
        """Test the strategy registers DEPOSIT_RATE"""
        assert self.strategy.supported_rate_types() == {RateType.DEPOSIT_RATE}

    def test_single_rate(self):
        """Test a constant rate reports itself"""
        result = self.strategy.calculate(
            make_input(RateType.DEPOSIT_RATE, date(2023, 3, 1), date(2023, 4, 1), account_key="DEP1")
        )
        assert result.actual_rate == Decimal('250')
        assert str(result.actual_rate) == '250'
        assert {call[1] for call in self.table.calls} == {"5"}

    def test_bulk_rounded_average(self):
        """Test the day-weighted average is bulk rounded"""
        result = self.strategy.calculate(
            make_input(RateType.DEPOSIT_RATE, date(2024, 1, 1), date(2024, 3, 1), account_key="DEP1")
        )
        # (250 x 31 + 200 x 29) / 60
        assert result.actual_rate == Decimal('225.833333')

    def test_details_sum_to_total(self):
        """Test per-month rounded interest adds up to the total"""
        result = self.strategy.calculate(
            make_input(RateType.DEPOSIT_RATE, date(2024, 1, 1), date(2024, 3, 1), account_key="DEP1"),
            precision=0
        )
        # 1,000,000 x 2.5% x 31/366 and 1,000,000 x 2.0% x 29/366
        assert [d.interest_amount for d in result.monthly_details] == [Decimal('2117'), Decimal('1585')]
        assert result.interest_amount == Decimal('3702')
        assert sum(d.interest_amount for d in result.monthly_details) == result.interest_amount

    def test_full_year_ending_on_month_end(self):
        """Test Jan 1 to Dec 31 covers December"""
        result = self.strategy.calculate(
            make_input(RateType.DEPOSIT_RATE, date(2024, 1, 1), date(2024, 12, 31), account_key="DEP1")
        )
        assert len(result.monthly_details) == 12
        assert result.total_days == 365
        assert result.monthly_details[-1].month_label == "2024/12"
        # (250 x 31 + 200 x 334) / 365
        assert result.actual_rate == Decimal('204.246575')

    def test_quarter_ending_on_month_end(self):
        """Test Jan 1 to Mar 31 covers March"""
        result = self.strategy.calculate(
            make_input(RateType.DEPOSIT_RATE, date(2024, 1, 1), date(2024, 3, 31), account_key="DEP1")
        )
        assert [d.day_count for d in result.monthly_details] == [31, 29, 30]

    @pytest.mark.parametrize("insurance_type", ["G", "H"])
    def test_enterprise_annuity_delegated(self, insurance_type):
        """Test enterprise annuity plans are computed by the annuity strategy"""
        calc_input = make_input(
            RateType.DEPOSIT_RATE, date(2024, 1, 1), date(2024, 3, 1), account_key="DEP1",
            plan_attributes=PlanAttributes("ENT1", insurance_type=insurance_type)
        )
        result = self.strategy.calculate(calc_input)

        assert result.actual_rate == Decimal('300')
        assert result == self.annuity.calculate(calc_input)


class TestLoanRateStrategy:
    """Test monthly policy loan rates"""

    def setup_method(self):
        """Set up test fixtures"""
        self.table = CountingRateTable([
            rate("LOAN1", "2", date(2023, 1, 1), '250'),
        ])
        self.strategy = build(LoanRateStrategy, self.table)

    def test_supported_rate_types(self):
        """Test both monthly loan purposes are registered"""
        assert self.strategy.supported_rate_types() == {
            RateType.LOAN_RATE_MONTHLY, RateType.LOAN_RATE_MONTHLY_V2
        }

    def test_month_end_stepping(self):
        """Test non-final periods count their last day"""
        result = self.strategy.calculate(
            make_input(RateType.LOAN_RATE_MONTHLY, date(2024, 1, 15), date(2024, 3, 10),
                       account_key="LOAN1")
        )
        assert [d.day_count for d in result.monthly_details] == [17, 29, 9]
        assert result.total_days == 55
        assert [d.period_end for d in result.monthly_details] == [
            date(2024, 1, 31), date(2024, 2, 29), date(2024, 3, 10)
        ]
        assert result.actual_rate == Decimal('250')
        assert [call[2] for call in self.table.calls] == [
            date(2024, 1, 1), date(2024, 2, 1), date(2024, 3, 1)
        ]

    def test_rounded_once(self):
        """Test interest accumulates unrounded and is rounded at the end"""
        strategy = build(LoanRateStrategy, InMemoryRateTable([rate("LOAN1", "2", date(2023, 1, 1), '250')]))
        result = strategy.calculate(
            make_input(RateType.LOAN_RATE_MONTHLY_V2, date(2024, 1, 24), date(2024, 2, 6),
                       account_key="LOAN1", principal=Decimal('10000'))
        )
        # 5.46 + 3.42 would round to 5 + 3 month by month
        assert [d.day_count for d in result.monthly_details] == [8, 5]
        assert result.interest_amount == Decimal('9')

    def test_range_ending_on_month_start(self):
        """Test a range ending on the first of a month"""
        result = self.strategy.calculate(
            make_input(RateType.LOAN_RATE_MONTHLY, date(2024, 1, 1), date(2024, 2, 1), account_key="LOAN1")
        )
        assert result.total_days == 31
        assert len(result.monthly_details) == 1

    def test_pre_resolved_rate_with_adjustments(self):
        """Test a known rate is adjusted and no lookup happens"""
        result = self.strategy.calculate(
            make_input(RateType.LOAN_RATE_MONTHLY, date(2024, 1, 1), date(2024, 3, 1),
                       account_key="LOAN1", pre_resolved_rate=Decimal('300'),
                       rate_markdown=Decimal('50'))
        )
        assert result.actual_rate == Decimal('250')
        assert all(d.original_rate == Decimal('300') for d in result.monthly_details)
        assert self.table.calls == []

    def test_negative_rate_floored(self):
        """Test a looked-up rate of -50 reports zero"""
        strategy = build(LoanRateStrategy, InMemoryRateTable([rate("LOAN1", "2", date(2023, 1, 1), '-50')]))
        result = strategy.calculate(
            make_input(RateType.LOAN_RATE_MONTHLY, date(2024, 1, 1), date(2024, 3, 1), account_key="LOAN1")
        )
        assert result.actual_rate == Decimal('0')
        assert result.interest_amount == Decimal('0')

    def test_precision_two(self):
        """Test the interest exponent follows the precision"""
        result = self.strategy.calculate(
            make_input(RateType.LOAN_RATE_MONTHLY, date(2024, 1, 1), date(2024, 3, 1), account_key="LOAN1"),
            precision=2
        )
        assert result.interest_amount.as_tuple().exponent == -2


class TestLastMonthRateStrategy:
    """Test last-month loan rates"""

    def setup_method(self):
        """Set up test fixtures"""
        self.table = CountingRateTable([
            rate("LOAN1", "2", date(2024, 1, 1), '250'),
            rate("LOAN1", "2", date(2024, 3, 1), '300'),
        ])
        self.strategy = build(LastMonthRateStrategy, self.table)

    def test_rate_at_end_month(self):
        """Test the rate is read at the month start of the end date"""
        result = self.strategy.calculate(
            make_input(RateType.LOAN_RATE_LAST_MONTH, date(2024, 2, 15), date(2024, 3, 10),
                       account_key="LOAN1")
        )
        assert result.actual_rate == Decimal('300')
        # 1,000,000 x 3% x 24/366
        assert result.interest_amount == Decimal('1967')
        assert result.monthly_details == ()
        assert self.table.calls == [("LOAN1", "2", date(2024, 3, 1))]

    def test_pre_resolved_rate(self):
        """Test a known rate skips the lookup"""
        result = self.strategy.calculate(
            make_input(RateType.LOAN_RATE_LAST_MONTH, date(2024, 2, 15), date(2024, 3, 10),
                       account_key="LOAN1", pre_resolved_rate=Decimal('200'))
        )
        assert result.actual_rate == Decimal('200')
        assert self.table.calls == []

    def test_zero_principal(self):
        """Test zero principal gives zero interest without a lookup"""
        result = self.strategy.calculate(
            make_input(RateType.LOAN_RATE_LAST_MONTH, date(2024, 2, 15), date(2024, 3, 10),
                       account_key="LOAN1", principal=Decimal('0')),
            precision=2
        )
        assert result.interest_amount == Decimal('0')
        assert result.interest_amount.as_tuple().exponent == -2
        assert self.table.calls == []


class TestFourBankRateStrategy:
    """Test four-bank reference rates"""

    def setup_method(self):
        """Set up test fixtures"""
        self.table = CountingRateTable([
            rate("FB1", "2", date(2023, 1, 1), '250'),
            rate("FB1", "0", date(2024, 1, 1), '180'),
            rate("FB1", "0", date(2024, 2, 1), '200'),
        ])
        self.strategy = build(FourBankRateStrategy, self.table)

    def test_reported_and_interest_rates(self):
        """Test interest uses the loan rate while the reference rate is reported"""
        result = self.strategy.calculate(
            make_input(RateType.FOUR_BANK_RATE, date(2024, 1, 1), date(2024, 3, 1), account_key="FB1")
        )
        # (180 x 31 + 200 x 29) / 60
        assert result.actual_rate == Decimal('189.666667')
        assert [d.interest_amount for d in result.monthly_details] == [Decimal('2117'), Decimal('1981')]
        assert result.interest_amount == Decimal('4098')

    def test_pre_resolved_interest_rate(self):
        """Test a known rate replaces the loan rate lookup"""
        result = self.strategy.calculate(
            make_input(RateType.FOUR_BANK_RATE, date(2024, 1, 1), date(2024, 3, 1),
                       account_key="FB1", pre_resolved_rate=Decimal('300'))
        )
        assert result.interest_amount == Decimal('4918')
        assert result.actual_rate == Decimal('189.666667')
        assert {call[1] for call in self.table.calls} == {"0"}

    def test_month_cap(self):
        """Test the month count is capped"""
        strategy = build(FourBankRateStrategy, self.table, RateEngineConfig(four_bank_max_months=2))
        result = strategy.calculate(
            make_input(RateType.FOUR_BANK_RATE, date(2024, 1, 1), date(2024, 6, 1), account_key="FB1")
        )
        assert len(result.monthly_details) == 2


class TestFreeLookRateStrategy:
    """Test free-look refund rates"""

    def setup_method(self):
        """Set up test fixtures"""
        self.table = CountingRateTable([
            rate("FL1", "1", date(2024, 1, 1), '150'),
            rate("FL1", "1", date(2024, 2, 1), '400'),
            rate("FL1", "9", date(2024, 1, 1), '120'),
        ])
        self.strategy = build(FreeLookRateStrategy, self.table)

    def test_single_lookup_for_span(self):
        """Test the start-month rate applies to every period"""
        result = self.strategy.calculate(
            make_input(RateType.FREE_LOOK_A, date(2024, 1, 10), date(2024, 3, 5), account_key="FL1")
        )
        assert result.actual_rate == Decimal('150')
        # Month difference 2, plus one; the third period starts after the end date
        assert [d.day_count for d in result.monthly_details] == [31, 24, -5]
        # 1,000,000 x 1.5% x 50/366
        assert result.interest_amount == Decimal('2049')
        assert all(d.interest_amount == Decimal('0') for d in result.monthly_details)
        assert self.table.calls == [("FL1", "1", date(2024, 1, 1))]

    def test_overshoot_period_deducted(self):
        """Test the period starting after the end date reduces the day total"""
        table = InMemoryRateTable([rate("FL2", "1", date(2024, 1, 1), '250')])
        strategy = build(FreeLookRateStrategy, table)
        result = strategy.calculate(
            make_input(RateType.FREE_LOOK_A, date(2024, 1, 15), date(2024, 2, 10), account_key="FL2")
        )

        assert [d.day_count for d in result.monthly_details] == [26, -5]
        assert result.monthly_details[-1].period_start == date(2024, 2, 15)
        assert result.total_days == 21
        assert result.actual_rate == Decimal('250')
        # 1,000,000 x 2.5% x 21/366
        assert result.interest_amount == Decimal('1434')

    def test_range_ending_on_month_step(self):
        """Test a range of exactly one month adds an empty second period"""
        result = self.strategy.calculate(
            make_input(RateType.FREE_LOOK_A, date(2024, 1, 10), date(2024, 2, 10), account_key="FL1")
        )
        assert [d.day_count for d in result.monthly_details] == [31, 0]
        # 1,000,000 x 1.5% x 31/366
        assert result.interest_amount == Decimal('1270')

    def test_investment_return_type(self):
        """Test FREE_LOOK_E reads lookup type 9"""
        result = self.strategy.calculate(
            make_input(RateType.FREE_LOOK_E, date(2024, 1, 10), date(2024, 2, 10), account_key="FL1")
        )
        assert result.actual_rate == Decimal('120')
        assert self.table.calls == [("FL1", "9", date(2024, 1, 1))]

    def test_plan_rate_code_fallback(self):
        """Test the plan's free-look rate code is used without an account key"""
        result = self.strategy.calculate(
            make_input(RateType.FREE_LOOK_B, date(2024, 1, 10), date(2024, 2, 10),
                       plan_attributes=PlanAttributes("P1", free_look_rate_code="FL1"))
        )
        assert result.actual_rate == Decimal('150')

    def test_no_key(self):
        """Test a missing key gives zero without a lookup"""
        result = self.strategy.calculate(
            make_input(RateType.FREE_LOOK_A, date(2024, 1, 10), date(2024, 2, 10))
        )
        assert result.is_zero
        assert self.table.calls == []

    def test_zero_sentinel_single_lookup(self):
        """Test a failed lookup short-circuits after exactly one call"""
        table = CountingRateTable()
        strategy = build(FreeLookRateStrategy, table)
        result = strategy.calculate(
            make_input(RateType.FREE_LOOK_A, date(2024, 1, 10), date(2024, 6, 10), account_key="FL9")
        )
        assert result.actual_rate == Decimal('0')
        assert result.interest_amount == Decimal('0')
        assert result.monthly_details == ()
        assert len(table.calls) == 1


class TestDividendRateStrategy:
    """Test month-weighted dividend rates"""

    def setup_method(self):
        """Set up test fixtures"""
        self.table = CountingRateTable([
            rate("DIV1", "0", date(2024, 1, 1), '200'),
            rate("DIV1", "0", date(2024, 2, 1), '300'),
            rate("DIV1", "5", date(2024, 1, 1), '400'),
        ])
        self.strategy = build(DividendRateStrategy, self.table)

    def test_month_weighted_average(self):
        """Test each month counts once regardless of its length"""
        result = self.strategy.calculate(
            make_input(RateType.DIVIDEND_RATE, date(2024, 1, 1), date(2024, 3, 1), account_key="DIV1")
        )
        assert result.actual_rate == Decimal('250')
        assert result.interest_amount == Decimal('0')
        assert result.monthly_details == ()

    def test_same_month(self):
        """Test a range inside one month averages one month"""
        result = self.strategy.calculate(
            make_input(RateType.DIVIDEND_RATE, date(2024, 1, 5), date(2024, 1, 20), account_key="DIV1")
        )
        assert result.actual_rate == Decimal('200')

    def test_full_year_ending_on_month_end(self):
        """Test Jan 1 to Dec 31 averages twelve months"""
        result = self.strategy.calculate(
            make_input(RateType.DIVIDEND_RATE, date(2024, 1, 1), date(2024, 12, 31), account_key="DIV1")
        )
        # (200 + 300 x 11) / 12
        assert result.actual_rate == Decimal('291.6666666667')
        assert len(self.table.calls) == 12
        assert self.table.calls[-1][2] == date(2024, 12, 1)

    def test_quarter_ending_on_month_end(self):
        """Test Jan 1 to Mar 31 averages three months"""
        result = self.strategy.calculate(
            make_input(RateType.DIVIDEND_RATE, date(2024, 1, 1), date(2024, 3, 31), account_key="DIV1")
        )
        # (200 + 300 + 300) / 3
        assert result.actual_rate == Decimal('266.6666666667')
        assert len(self.table.calls) == 3

    def test_annuity_dividend_type(self):
        """Test the dividend annuity classification reads type 5"""
        result = self.strategy.calculate(
            make_input(RateType.DIVIDEND_RATE, date(2024, 1, 1), date(2024, 3, 1), account_key="DIV1",
                       plan_attributes=PlanAttributes("ANN1", insurance_type="G"))
        )
        assert result.actual_rate == Decimal('400')
        assert {call[1] for call in self.table.calls} == {"5"}

    def test_pre_resolved_rate(self):
        """Test a known rate is returned directly"""
        result = self.strategy.calculate(
            make_input(RateType.DIVIDEND_RATE, date(2024, 1, 1), date(2024, 3, 1), account_key="DIV1",
                       pre_resolved_rate=Decimal('275')),
            precision=2
        )
        assert result.actual_rate == Decimal('275')
        assert result.interest_amount.as_tuple().exponent == -2
        assert self.table.calls == []


class TestAvgDeclaredRateStrategy:
    """Test the trailing declared rate average"""

    def setup_method(self):
        """Set up test fixtures"""
        self.table = CountingRateTable([
            rate("AD1", "5", date(2023, 7, 1), '300'),
            rate("AD1", "5", date(2024, 1, 1), '200'),
        ])
        self.strategy = build(AvgDeclaredRateStrategy, self.table)

    def test_twelve_month_mean(self):
        """Test six months at 300 and six at 200 average to 250"""
        result = self.strategy.calculate(
            make_input(RateType.AVG_DECLARED_RATE, date(2024, 7, 1), date(2024, 7, 15), account_key="AD1")
        )
        assert result.actual_rate == Decimal('250')
        assert result.interest_amount == Decimal('0')
        assert len(self.table.calls) == 12
        assert self.table.calls[0][2] == date(2024, 6, 1)
        assert self.table.calls[-1][2] == date(2023, 7, 1)

    def test_published_rate_unadjusted(self):
        """Test markdown and discount are ignored"""
        result = self.strategy.calculate(
            make_input(RateType.AVG_DECLARED_RATE, date(2024, 7, 1), date(2024, 7, 15), account_key="AD1",
                       rate_markdown=Decimal('50'), rate_discount_percent=Decimal('80'))
        )
        assert result.actual_rate == Decimal('250')


class TestInterestCalcRateStrategy:
    """Test day-weighted interest calculation rates"""

    def setup_method(self):
        """Set up test fixtures"""
        self.table = CountingRateTable([
            rate("IC1", "0", date(2024, 1, 1), '200'),
            rate("IC1", "0", date(2024, 2, 1), '300'),
        ])
        self.strategy = build(InterestCalcRateStrategy, self.table)

    def test_day_weighted_rate(self):
        """Test periods run to the next month start"""
        result = self.strategy.calculate(
            make_input(RateType.INTEREST_CALC_RATE, date(2024, 1, 10), date(2024, 2, 20), account_key="IC1")
        )
        assert [d.day_count for d in result.monthly_details] == [22, 19]
        # (200 x 22 + 300 x 19) / 41
        assert result.actual_rate == Decimal('246.3414634146')
        assert all(d.interest_amount == Decimal('0') for d in result.monthly_details)

    def test_rounded_once(self):
        """Test interest is derived once from the average"""
        result = self.strategy.calculate(
            make_input(RateType.INTEREST_CALC_RATE, date(2024, 1, 10), date(2024, 2, 20), account_key="IC1")
        )
        # Month by month this would be 1202 + 1557
        assert result.interest_amount == Decimal('2760')

    def test_constant_rate_single_month(self):
        """Test a constant rate reports itself"""
        result = self.strategy.calculate(
            make_input(RateType.INTEREST_CALC_RATE, date(2024, 1, 1), date(2024, 1, 31),
                       account_key="IC1", pre_resolved_rate=Decimal('250'))
        )
        assert result.actual_rate == Decimal('250')
        assert self.table.calls == []
