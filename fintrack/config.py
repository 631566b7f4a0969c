from dataclasses import dataclass
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


@dataclass(frozen=True)
class AnalyticsThresholds:
    """Tunable constants used by the recommendation rules and completeness score."""

    high_expense_ratio: float = 0.8
    category_concentration: float = 0.4
    min_transactions: int = 10
    transactions_per_day: int = 2  # "complete" data baseline

    def __post_init__(self):
        if self.high_expense_ratio < 0 or self.category_concentration < 0:
            raise ValueError("Analytics ratios must be non-negative")
        if self.min_transactions < 1 or self.transactions_per_day < 1:
            raise ValueError("Analytics counts must be positive")


class Settings(BaseSettings):
    # App
    APP_NAME: str = "FinTrack Backend"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "postgresql+asyncpg://localhost:5432/fintrack"
    DATABASE_POOL_SIZE: int = 5
    DATABASE_MAX_OVERFLOW: int = 10

    # Analytics
    ANALYTICS_HIGH_EXPENSE_RATIO: float = Field(default=0.8, ge=0)
    ANALYTICS_CATEGORY_CONCENTRATION: float = Field(default=0.4, ge=0)
    ANALYTICS_MIN_TRANSACTIONS: int = Field(default=10, gt=0)
    ANALYTICS_TRANSACTIONS_PER_DAY: int = Field(default=2, gt=0)

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def convert_database_url(cls, v: str) -> str:
        """Convert postgresql:// to postgresql+asyncpg:// for async support."""
        if v and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    def analytics_thresholds(self) -> AnalyticsThresholds:
        return AnalyticsThresholds(
            high_expense_ratio=self.ANALYTICS_HIGH_EXPENSE_RATIO,
            category_concentration=self.ANALYTICS_CATEGORY_CONCENTRATION,
            min_transactions=self.ANALYTICS_MIN_TRANSACTIONS,
            transactions_per_day=self.ANALYTICS_TRANSACTIONS_PER_DAY,
        )

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Allow extra env variables to be ignored


@lru_cache()
def get_settings() -> Settings:
    return Settings()
