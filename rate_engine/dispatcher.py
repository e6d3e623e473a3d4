"""
Strategy Dispatcher Module

Maps each rate purpose to the strategy that computes it.
"""

from typing import Dict, FrozenSet, Iterable
import logging

from .models import RateType
from .strategies.base import InterestRateStrategy

logger = logging.getLogger(__name__)


class RateStrategyDispatcher:
    """Routes rate purposes to their registered strategy"""

    def __init__(self, strategies: Iterable[InterestRateStrategy]):
        self._strategies: Dict[RateType, InterestRateStrategy] = {}
        for strategy in strategies:
            for rate_type in strategy.supported_rate_types():
                if rate_type in self._strategies:
                    raise ValueError(
                        f"Rate type {rate_type.name} registered by both "
                        f"{type(self._strategies[rate_type]).__name__} and {type(strategy).__name__}"
                    )
                self._strategies[rate_type] = strategy

        logger.debug(f"Dispatcher initialized with {len(self._strategies)} rate types")

    def dispatch(self, rate_type: RateType) -> InterestRateStrategy:
        """
        Get the strategy for a rate purpose

        Raises:
            ValueError: If no strategy is registered for the rate purpose
        """
        strategy = self._strategies.get(rate_type)
        if strategy is None:
            raise ValueError(f"No strategy registered for rate type: {rate_type}")
        return strategy

    def supports(self, rate_type: RateType) -> bool:
        return rate_type in self._strategies

    def supported_rate_types(self) -> FrozenSet[RateType]:
        return frozenset(self._strategies)
