"""
Rate Lookup Module

Resolves published rates from the rate table and applies the caller's
markdown and discount. A missing row is reported as the zero sentinel, which
callers must treat as "rate unavailable" rather than as a published zero.
"""

from decimal import Decimal
from datetime import date
from dataclasses import dataclass
from typing import Optional
import logging

from .currency import ZERO, HUNDRED, divide
from .models import CalculationInput
from .rate_table import RateTable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLookupResult:
    """Published rate and the rate after markdown/discount"""
    published_rate: Decimal
    adjusted_rate: Decimal

    @classmethod
    def zero(cls) -> 'RateLookupResult':
        """Sentinel returned when no rate row matches"""
        return cls(published_rate=ZERO, adjusted_rate=ZERO)

    @property
    def is_found(self) -> bool:
        return self.adjusted_rate != ZERO or self.published_rate != ZERO


class RateLookup:
    """Rate table lookup with markdown and discount adjustment"""

    def __init__(self, rate_table: RateTable, rate_scale: int = 10):
        self.rate_table = rate_table
        self.rate_scale = rate_scale

    def lookup(
        self,
        account_key: Optional[str],
        type_code: str,
        as_of: date,
        rate_markdown: Decimal = ZERO,
        rate_discount_percent: Decimal = HUNDRED
    ) -> RateLookupResult:
        """
        Look up the rate in effect on `as_of` and adjust it

        Args:
            account_key: Rate table key (plan or sub-account code)
            type_code: Lookup type code ("0", "1", "2", "5", "8", "9")
            as_of: Date the rate must be in effect on
            rate_markdown: Ten-thousandths subtracted from the published rate
            rate_discount_percent: Percentage applied after the markdown (100 = none)

        Returns:
            RateLookupResult, or the zero sentinel when no row matches
        """
        if not account_key:
            return RateLookupResult.zero()

        record = self.rate_table.find_effective_rate(account_key, type_code, as_of)
        if record is None:
            logger.debug(f"Rate not found: key={account_key}, type={type_code}, date={as_of}")
            return RateLookupResult.zero()

        logger.debug(
            f"Rate found: key={account_key}, type={type_code}, date={as_of}, rate={record.rate}"
        )
        return RateLookupResult(
            published_rate=record.rate,
            adjusted_rate=self.apply_discounts(record.rate, rate_markdown, rate_discount_percent)
        )

    def lookup_for(self, calc_input: CalculationInput, type_code: str,
                   as_of: date) -> RateLookupResult:
        """Look up using the key and adjustments carried by a calculation input"""
        return self.lookup(
            calc_input.account_key,
            type_code,
            as_of,
            calc_input.rate_markdown,
            calc_input.rate_discount_percent
        )

    def apply_discounts(self, rate: Decimal, rate_markdown: Decimal,
                        rate_discount_percent: Decimal) -> Decimal:
        """
        Apply markdown then discount to a raw rate

        The order is fixed: the markdown is subtracted first and the discount
        percentage is applied to the result. A discount of 0 or 100 leaves the
        rate unchanged.
        """
        adjusted = rate
        if rate_markdown != ZERO:
            adjusted = adjusted - rate_markdown
        if rate_discount_percent != ZERO and rate_discount_percent != HUNDRED:
            adjusted = divide(adjusted * rate_discount_percent, HUNDRED, self.rate_scale)
        return adjusted
