from typing import List

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for analytics payloads; serializes with camelCase keys (by_alias=True)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CategoryAmount(CamelModel):
    category: str
    amount: float
    percentage: float  # Share of total expenses, 0-1


class DaySpending(CamelModel):
    day: str  # "Sunday" .. "Saturday"
    amount: float
    count: int


class MonthTrend(CamelModel):
    month: str  # e.g. "Jan 2025"
    income: float
    expenses: float


class HeatmapDay(CamelModel):
    date: str  # e.g. "19 Oct"
    amount: float


class AnalyticsResult(CamelModel):
    total_income: float
    total_expenses: float
    balance: float
    category_breakdown: List[CategoryAmount]
    top_categories: List[CategoryAmount]
    weekly_pattern: List[DaySpending]
    monthly_trend: List[MonthTrend]
    heatmap_data: List[HeatmapDay]
    average_daily_spending: float
    largest_transaction: float  # Across both income and expenses
    largest_expense: float
    largest_income: float
    expense_to_income_ratio: float
    max_daily_spending: float
    data_completeness: float
    savings_rate: float
    transaction_count: int
    days_analyzed: int
    recommendations: List[str]


class WeekendSplit(CamelModel):
    weekend_spending: float
    weekday_spending: float


class CategoryAnalysis(CamelModel):
    period: str
    total_expenses: float
    category_breakdown: List[CategoryAmount]
    top_categories: List[CategoryAmount]
    insights: str


class SpendingPatterns(CamelModel):
    period: str
    weekly_pattern: List[DaySpending]
    monthly_trend: List[MonthTrend]
    heatmap_data: List[HeatmapDay]
    average_daily_spending: float
    max_daily_spending: float
    weekend_spending: float
    weekday_spending: float
