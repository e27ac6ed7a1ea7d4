"""
Application settings.

Loads configuration from environment variables using pydantic-settings.
"""

from decimal import Decimal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str
    database_echo: bool = False
    database_pool_size: int = Field(default=10, ge=1)
    database_max_overflow: int = Field(default=20, ge=0)

    # Redis (for Dramatiq)
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: str | None = None
    redis_db: int = 0

    # Environment
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"
    log_dir: str = "logs"

    # HTTP API
    api_host: str = "0.0.0.0"
    api_port: int = Field(default=8080, gt=0, lt=65536)

    # Rate resolution
    default_monthly_rate: Decimal = Field(
        default=Decimal("0.02"),
        gt=0,
        lt=1,
        description="Monthly rate used when no rate table entry matches (fraction)"
    )

    # Accrual
    accrual_start_days: int = Field(
        default=60,
        ge=0,
        description="Days after payment date before dividends start accruing (D+60)"
    )
    accrual_month_days: int = Field(
        default=30,
        gt=0,
        description="Length of one accrual month in days"
    )

    # Periodic checks
    renewal_window_days_before: int = Field(
        default=35,
        ge=0,
        description="Days before expiry when an investment enters the renewal window"
    )
    renewal_window_days_after: int = Field(
        default=5,
        ge=0,
        description="Days after expiry when an investment stays in the renewal window"
    )
    accrual_gate_lookback_days: int = Field(
        default=7,
        ge=0,
        description="Look-back window for investments that just crossed D+60"
    )
    payout_business_day: int = Field(
        default=5,
        ge=1,
        le=23,
        description="Business day of the month on which fixed payouts happen"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode='after')
    def validate_production(self) -> 'Settings':
        """Refuse debug mode in production."""
        if self.environment == "production" and self.debug:
            raise ValueError("DEBUG must be disabled in production")
        return self

    @field_validator('database_url')
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Validate database URL."""
        if not v.startswith(('postgresql://', 'postgresql+asyncpg://')):
            raise ValueError(
                'DATABASE_URL must start with postgresql:// or postgresql+asyncpg://'
            )
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize log level name."""
        level = v.upper()
        if level not in {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


# Global settings instance
settings = Settings()
