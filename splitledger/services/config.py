"""Engine configuration from environment variables and .env file.

All variables use the ``SPLITLEDGER_`` prefix, e.g. ``SPLITLEDGER_LOCALE=de_DE``.
"""

from decimal import Decimal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SPLITLEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Money
    locale: str = Field(default="en_US", description="Locale for amount formatting and parsing")
    currency: str = Field(default="USD", description="ISO 4217 currency code for display amounts")

    # Split calculator
    percent_tolerance: Decimal = Field(
        default=Decimal("0.001"),
        ge=0,
        description="Allowed distance of a percent split total from 100",
    )

    # Balance aggregator
    settle_tolerance: int = Field(
        default=0,
        ge=0,
        description="Minor units a balance may stay off zero and still count as settled",
    )

    # Logging
    log_level: str | None = Field(
        default=None,
        description="Logging level (unset: LOG_LEVEL env var, then INFO)",
    )
    log_file: str | None = Field(default=None, description="Optional log file path")

    @field_validator("currency")
    @classmethod
    def _upper_currency(cls, value: str) -> str:
        return value.strip().upper()

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip().upper() or None


def get_settings() -> Settings:
    """Build settings from the current environment."""
    return Settings()


# Global settings instance
settings = Settings()
