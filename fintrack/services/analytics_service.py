"""
Spending analytics over a user's transactions.

compute_analytics() is a pure aggregation over a transaction snapshot that the
caller has already scoped to one user and one trailing window. AnalyticsService
fetches that snapshot through TransactionRepository and builds the views on top.
"""

import logging
from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from fintrack.config import AnalyticsThresholds, get_settings
from fintrack.db.repositories.transaction_repo import TransactionRepository
from fintrack.models.enums import TransactionType
from fintrack.schemas.analytics import (
    AnalyticsResult,
    CategoryAmount,
    CategoryAnalysis,
    DaySpending,
    HeatmapDay,
    MonthTrend,
    SpendingPatterns,
    WeekendSplit,
)
from fintrack.schemas.transaction import TransactionSummary

logger = logging.getLogger(__name__)

PERIOD_DAYS = {
    "7d": 7,
    "30d": 30,
    "90d": 90,
    "6m": 180,
    "1y": 365,
}
DEFAULT_PERIOD = "30d"

# Sunday-first, matching the weekly pattern layout
DAYS_OF_WEEK = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

NO_CATEGORY_DATA = "No transaction data available for category analysis"

# Income is compared per day on a 30-day month basis
DAYS_PER_MONTH = 30

TOP_CATEGORIES = 5
HEATMAP_DAYS = 30
TREND_MONTHS = 6


class TransactionLike(Protocol):
    type: str
    amount: float
    category: str
    date: date


def normalize_period(period: Optional[str]) -> str:
    """Return the period token, or the 30-day default for unknown tokens."""
    return period if period in PERIOD_DAYS else DEFAULT_PERIOD


def get_period_days(period: Optional[str]) -> int:
    """Convert a period token ("7d", "30d", "90d", "6m", "1y") to days. Unknown tokens mean 30."""
    return PERIOD_DAYS[normalize_period(period)]


def _is_expense(t: TransactionLike) -> bool:
    return t.type == TransactionType.EXPENSE


def _is_income(t: TransactionLike) -> bool:
    return t.type == TransactionType.INCOME


def _as_date(value) -> date:
    # Time of day is not significant
    if isinstance(value, datetime):
        return value.date()
    return value


def _day_index(d: date) -> int:
    """Sunday=0 .. Saturday=6."""
    return (d.weekday() + 1) % 7


def _safe_ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator > 0 else 0.0


def build_category_breakdown(
    transactions: List[TransactionLike], total_expenses: float
) -> List[CategoryAmount]:
    """Expense totals per category, largest first.

    Ties keep first-seen order (dict insertion order + stable sort).
    """
    totals: dict[str, float] = {}
    for t in transactions:
        if _is_expense(t):
            totals[t.category] = totals.get(t.category, 0.0) + t.amount

    breakdown = [
        CategoryAmount(
            category=category,
            amount=amount,
            percentage=_safe_ratio(amount, total_expenses),
        )
        for category, amount in totals.items()
    ]
    breakdown.sort(key=lambda c: c.amount, reverse=True)
    return breakdown


def build_weekly_pattern(transactions: List[TransactionLike]) -> List[DaySpending]:
    amounts = [0.0] * 7
    counts = [0] * 7
    for t in transactions:
        if _is_expense(t):
            idx = _day_index(_as_date(t.date))
            amounts[idx] += t.amount
            counts[idx] += 1

    return [
        DaySpending(day=day, amount=amounts[i], count=counts[i])
        for i, day in enumerate(DAYS_OF_WEEK)
    ]


def build_monthly_trend(
    transactions: List[TransactionLike], months: int = TREND_MONTHS
) -> List[MonthTrend]:
    """Income/expense totals per calendar month, oldest first, last `months` kept."""
    buckets = defaultdict(lambda: {"income": 0.0, "expenses": 0.0})
    for t in transactions:
        day = _as_date(t.date)
        key = (day.year, day.month)
        if _is_income(t):
            buckets[key]["income"] += t.amount
        else:
            buckets[key]["expenses"] += t.amount

    keys = sorted(buckets)[-months:] if months > 0 else []
    return [
        MonthTrend(
            month=date(year, month, 1).strftime("%b %Y"),
            income=buckets[(year, month)]["income"],
            expenses=buckets[(year, month)]["expenses"],
        )
        for year, month in keys
    ]


def build_heatmap(
    transactions: List[TransactionLike], today: date, days: int = HEATMAP_DAYS
) -> List[HeatmapDay]:
    """Daily expense totals for the `days` days ending today (today last)."""
    daily: dict[date, float] = defaultdict(float)
    for t in transactions:
        if _is_expense(t):
            daily[_as_date(t.date)] += t.amount

    heatmap = []
    for i in range(days - 1, -1, -1):
        day = today - timedelta(days=i)
        heatmap.append(
            HeatmapDay(date=f"{day.day} {day.strftime('%b')}", amount=daily.get(day, 0.0))
        )
    return heatmap


def build_recommendations(
    *,
    expense_to_income_ratio: float,
    top_categories: List[CategoryAmount],
    average_daily_spending: float,
    total_income: float,
    transaction_count: int,
    thresholds: AnalyticsThresholds,
) -> List[str]:
    recommendations = []

    if expense_to_income_ratio > thresholds.high_expense_ratio:
        recommendations.append(
            "Your expenses are high relative to income. "
            "Consider reducing discretionary spending."
        )

    if top_categories and top_categories[0].percentage > thresholds.category_concentration:
        top = top_categories[0]
        recommendations.append(
            f"Consider reducing {top.category} expenses, which make up "
            f"{top.percentage * 100:.1f}% of your budget."
        )

    daily_income = total_income / DAYS_PER_MONTH
    if average_daily_spending > daily_income:
        recommendations.append(
            f"Your average daily spending ({average_daily_spending:.2f}) exceeds your "
            f"daily income ({daily_income:.2f}). Look for recurring costs you can cut."
        )

    if transaction_count < thresholds.min_transactions:
        recommendations.append(
            "Track more transactions to get better insights and recommendations."
        )

    return recommendations


def compute_analytics(
    transactions: Optional[Iterable[TransactionLike]],
    window_days: int,
    today: Optional[date] = None,
    thresholds: Optional[AnalyticsThresholds] = None,
) -> AnalyticsResult:
    """Aggregate one user's transactions over a trailing window.

    The input must already be filtered to the user and to the window; nothing
    is filtered here. An empty (or None) input gives an all-zero result.

    Args:
        transactions: Objects exposing type, amount, category and date
        window_days: Length of the requested period in days (never 0)
        today: Reference date for the heatmap; defaults to date.today()
        thresholds: Recommendation/heuristic constants; defaults to AnalyticsThresholds()
    """
    transactions = list(transactions or [])
    today = today or date.today()
    thresholds = thresholds or AnalyticsThresholds()

    total_income = sum(t.amount for t in transactions if _is_income(t))
    total_expenses = sum(t.amount for t in transactions if _is_expense(t))
    transaction_count = len(transactions)

    category_breakdown = build_category_breakdown(transactions, total_expenses)
    top_categories = category_breakdown[:TOP_CATEGORIES]

    heatmap_data = build_heatmap(transactions, today, HEATMAP_DAYS)

    average_daily_spending = total_expenses / window_days
    expense_to_income_ratio = _safe_ratio(total_expenses, total_income)

    return AnalyticsResult(
        total_income=total_income,
        total_expenses=total_expenses,
        balance=total_income - total_expenses,
        category_breakdown=category_breakdown,
        top_categories=top_categories,
        weekly_pattern=build_weekly_pattern(transactions),
        monthly_trend=build_monthly_trend(transactions, TREND_MONTHS),
        heatmap_data=heatmap_data,
        average_daily_spending=average_daily_spending,
        largest_transaction=max((t.amount for t in transactions), default=0.0),
        largest_expense=max((t.amount for t in transactions if _is_expense(t)), default=0.0),
        largest_income=max((t.amount for t in transactions if _is_income(t)), default=0.0),
        expense_to_income_ratio=expense_to_income_ratio,
        max_daily_spending=max((d.amount for d in heatmap_data), default=0.0),
        data_completeness=min(
            1.0, transaction_count / (window_days * thresholds.transactions_per_day)
        ),
        savings_rate=_safe_ratio(total_income - total_expenses, total_income),
        transaction_count=transaction_count,
        days_analyzed=window_days,
        recommendations=build_recommendations(
            expense_to_income_ratio=expense_to_income_ratio,
            top_categories=top_categories,
            average_daily_spending=average_daily_spending,
            total_income=total_income,
            transaction_count=transaction_count,
            thresholds=thresholds,
        ),
    )


def build_category_insight(result: AnalyticsResult, thresholds: Optional[AnalyticsThresholds] = None) -> str:
    """One-paragraph summary of the top spending category."""
    thresholds = thresholds or AnalyticsThresholds()
    if not result.top_categories:
        return ""

    top = result.top_categories[0]
    insight = (
        f"Your highest spending category is **{top.category}** at {top.amount:.2f} "
        f"({top.percentage * 100:.1f}% of expenses)."
    )
    if top.percentage > thresholds.category_concentration:
        insight += " This category dominates your expenses - consider if this aligns with your priorities."
    elif len(result.category_breakdown) > TOP_CATEGORIES:
        insight += " Your expenses are well-distributed across categories, showing balanced spending habits."
    return insight


def split_weekend_spending(transactions: Iterable[TransactionLike]) -> WeekendSplit:
    """Expense totals on Saturday/Sunday vs Monday-Friday."""
    weekend = 0.0
    weekday = 0.0
    for t in transactions:
        if not _is_expense(t):
            continue
        if _as_date(t.date).weekday() >= 5:
            weekend += t.amount
        else:
            weekday += t.amount
    return WeekendSplit(weekend_spending=weekend, weekday_spending=weekday)


class AnalyticsService:
    def __init__(self, db: AsyncSession, thresholds: Optional[AnalyticsThresholds] = None):
        self.db = db
        self.transaction_repo = TransactionRepository(db)
        self.thresholds = thresholds or get_settings().analytics_thresholds()

    async def _load(
        self, user_id: str, period: Optional[str], today: Optional[date]
    ) -> tuple[list, int, date]:
        window_days = get_period_days(period)
        today = today or date.today()
        transactions = await self.transaction_repo.get_in_window(
            user_id=user_id, window_days=window_days, today=today
        )
        logger.info(
            f"Analytics request: user_id={user_id}, period={period}, "
            f"window_days={window_days}, transaction_count={len(transactions)}"
        )
        return transactions, window_days, today

    async def get_user_analytics(
        self,
        user_id: str,
        period: Optional[str] = "30d",
        today: Optional[date] = None,
    ) -> AnalyticsResult:
        """Full analytics for a user over the trailing period."""
        transactions, window_days, today = await self._load(user_id, period, today)
        return compute_analytics(transactions, window_days, today, self.thresholds)

    async def get_category_analysis(
        self,
        user_id: str,
        period: Optional[str] = "30d",
        today: Optional[date] = None,
    ) -> CategoryAnalysis:
        """Category breakdown with a short narrative insight."""
        transactions, window_days, today = await self._load(user_id, period, today)
        result = compute_analytics(transactions, window_days, today, self.thresholds)

        if not transactions:
            insights = NO_CATEGORY_DATA
        else:
            insights = build_category_insight(result, self.thresholds)

        return CategoryAnalysis(
            period=normalize_period(period),
            total_expenses=result.total_expenses,
            category_breakdown=result.category_breakdown,
            top_categories=result.top_categories,
            insights=insights,
        )

    async def get_spending_patterns(
        self,
        user_id: str,
        period: Optional[str] = "30d",
        today: Optional[date] = None,
    ) -> SpendingPatterns:
        """Weekly/monthly/daily spending patterns plus the weekend split."""
        transactions, window_days, today = await self._load(user_id, period, today)
        result = compute_analytics(transactions, window_days, today, self.thresholds)
        split = split_weekend_spending(transactions)

        return SpendingPatterns(
            period=normalize_period(period),
            weekly_pattern=result.weekly_pattern,
            monthly_trend=result.monthly_trend,
            heatmap_data=result.heatmap_data,
            average_daily_spending=result.average_daily_spending,
            max_daily_spending=result.max_daily_spending,
            weekend_spending=split.weekend_spending,
            weekday_spending=split.weekday_spending,
        )

    async def get_summary(self, user_id: str) -> TransactionSummary:
        """All-time totals, independent of any period."""
        return await self.transaction_repo.get_summary(user_id)
