"""
Currency Precision Module

Handles ISO 4217 currency codes, their rounding precision and the Decimal
rounding helpers shared by every rate calculation. NEVER uses float for
monetary values or rates.
"""

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation, getcontext
from enum import Enum
import re

# Set global decimal context for financial precision
getcontext().prec = 28


class Currency(Enum):
    """ISO 4217 Currency Codes with precision info"""
    TWD = ("TWD", 0)  # Domestic currency, whole units
    USD = ("USD", 2)  # US Dollar, 2 decimal places
    EUR = ("EUR", 2)  # Euro, 2 decimal places
    GBP = ("GBP", 2)  # British Pound, 2 decimal places
    AUD = ("AUD", 2)  # Australian Dollar, 2 decimal places
    CNY = ("CNY", 2)  # Chinese Yuan, 2 decimal places
    JPY = ("JPY", 0)  # Japanese Yen, 0 decimal places

    def __init__(self, code: str, precision: int):
        self.code = code
        self.precision = precision

    @property
    def is_domestic(self) -> bool:
        return self is DOMESTIC_CURRENCY


DOMESTIC_CURRENCY = Currency.TWD

ZERO = Decimal('0')
ONE = Decimal('1')
HUNDRED = Decimal('100')
TEN_THOUSAND = Decimal('10000')


def _exponent(places: int) -> Decimal:
    return Decimal('0.1') ** places if places > 0 else ONE


def round_amount(value: Decimal, precision: int) -> Decimal:
    """
    Round an amount to currency precision

    Args:
        value: Amount to round
        precision: Fractional digits (0 for the domestic currency, 2 for most foreign ones)

    Returns:
        Decimal whose exponent is exactly -precision
    """
    return value.quantize(_exponent(precision), rounding=ROUND_HALF_UP)


def round_scale(value: Decimal, scale: int) -> Decimal:
    """Round an intermediate rate or amount to a fixed number of places"""
    return value.quantize(_exponent(scale), rounding=ROUND_HALF_UP)


def divide(dividend: Decimal, divisor: Decimal, scale: int) -> Decimal:
    """Divide and round the quotient to `scale` places (HALF_UP)"""
    return round_scale(dividend / divisor, scale)


def calc_round(rate: Decimal, scale: int) -> Decimal:
    """
    Bulk rounding applied to an averaged rate before it is reported.

    Trailing zeros are dropped so that whole-number rates come back as
    whole numbers (250.000000 -> 250).
    """
    rounded = round_scale(rate, scale)
    if rounded == rounded.to_integral_value():
        return rounded.quantize(ONE)
    return rounded.normalize()


def precision_for(currency: Currency) -> int:
    """Rounding precision used for interest amounts in `currency`"""
    return currency.precision


def decimal_from_string(value: str) -> Decimal:
    """
    Safely convert string to Decimal, handling common formats

    Args:
        value: String representation of number

    Returns:
        Decimal value

    Raises:
        ValueError: If string cannot be converted to valid Decimal
    """
    if not value or not isinstance(value, str):
        raise ValueError("Value must be a non-empty string")

    # Remove currency symbols, thousands separators and whitespace
    clean_value = re.sub(r'[^\d.\-+]', '', value.strip())

    try:
        return Decimal(clean_value)
    except InvalidOperation:
        raise ValueError(f"Cannot convert '{value}' to Decimal")
