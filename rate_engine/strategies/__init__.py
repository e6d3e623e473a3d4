"""
Rate Calculation Strategies
"""

from .base import InterestRateStrategy
from .annuity import AnnuityRateStrategy
from .deposit import DepositRateStrategy
from .loan import LoanRateStrategy
from .last_month import LastMonthRateStrategy
from .four_bank import FourBankRateStrategy
from .free_look import FreeLookRateStrategy
from .dividend import DividendRateStrategy
from .avg_declared import AvgDeclaredRateStrategy
from .interest_calc import InterestCalcRateStrategy

__all__ = [
    "InterestRateStrategy",
    "AnnuityRateStrategy",
    "DepositRateStrategy",
    "LoanRateStrategy",
    "LastMonthRateStrategy",
    "FourBankRateStrategy",
    "FreeLookRateStrategy",
    "DividendRateStrategy",
    "AvgDeclaredRateStrategy",
    "InterestCalcRateStrategy",
]
