"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class RateEngineConfig(BaseSettings):
    """Rate engine configuration"""

    model_config = SettingsConfigDict(
        env_prefix="RATE_ENGINE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text

    # Decimal precision
    rate_scale: int = 10        # Places kept on averaged rates
    amount_scale: int = 10      # Places kept on intermediate amounts
    power_scale: int = 20       # Places kept on compound growth factors
    rate_round_scale: int = 6   # Bulk rounding applied to reported averages

    # Calculation limits
    four_bank_max_months: int = 120
    avg_declared_months: int = 12

    # Plan classifications (insurance type letters)
    enterprise_annuity_types: List[str] = ["G", "H"]
    dividend_annuity_types: List[str] = ["G"]
    investment_types: List[str] = ["F", "G", "H"]

    # Feature flags
    enable_investment_gate: bool = True


# Global configuration instance
config = RateEngineConfig()


def get_config() -> RateEngineConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> RateEngineConfig:
    """Reload configuration from environment"""
    global config
    config = RateEngineConfig()
    return config
