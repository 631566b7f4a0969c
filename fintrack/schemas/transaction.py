from datetime import date as date_type
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from fintrack.core.categories import CATEGORIES, DEFAULT_CATEGORY, is_valid_category
from fintrack.models.enums import TransactionType


def _check_category(value: Optional[str]) -> Optional[str]:
    if value is not None and not is_valid_category(value):
        raise ValueError(f"Unknown category '{value}'. Expected one of: {', '.join(CATEGORIES)}")
    return value


class TransactionCreate(BaseModel):
    type: TransactionType
    amount: float = Field(..., ge=0)
    category: str = DEFAULT_CATEGORY
    description: str = ""
    date: date_type = Field(default_factory=date_type.today)

    @field_validator("category")
    @classmethod
    def validate_category(cls, v: str) -> str:
        return _check_category(v)


class TransactionUpdate(BaseModel):
    type: Optional[TransactionType] = None
    amount: Optional[float] = Field(None, ge=0)
    category: Optional[str] = None
    description: Optional[str] = None
    date: Optional[date_type] = None

    @field_validator("category")
    @classmethod
    def validate_category(cls, v: Optional[str]) -> Optional[str]:
        return _check_category(v)


class TransactionSummary(BaseModel):
    """All-time totals for a user."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_income: float
    total_expense: float
    balance: float
