"""Aggregation of classified transactions into dashboard figures."""

from calendar import month_abbr
from datetime import datetime, UTC
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Sequence

from deductit.database.base import Database
from deductit.domain.entities import (
    CategoryBreakdown,
    ClassifiedTransaction,
    DashboardReport,
    DashboardStats,
    MonthlyTrend,
)
from deductit.domain.errors import ValidationError
from deductit.domain.preferences import PreferenceService
from deductit.utils.date_parser import (
    financial_year_bounds,
    financial_year_for,
    parse_financial_year,
)

ZERO = Decimal("0")
CENT = Decimal("0.01")
TENTH = Decimal("0.1")
TREND_MONTHS = 6

# (upper bound of income, marginal rate %), checked in order
TAX_BRACKETS: tuple[tuple[Decimal, Decimal], ...] = (
    (Decimal("18200"), Decimal("0")),
    (Decimal("45000"), Decimal("19")),
    (Decimal("120000"), Decimal("32.5")),
    (Decimal("180000"), Decimal("37")),
)
TOP_MARGINAL_RATE = Decimal("45")


def marginal_tax_rate(income: Decimal) -> Decimal:
    """Return the marginal tax rate (percent) for an annual income.

    The rate of the income's bracket is applied to every deduction; this is
    not a blended progressive calculation.
    """
    for upper_bound, rate in TAX_BRACKETS:
        if income <= upper_bound:
            return rate
    return TOP_MARGINAL_RATE


def estimate_tax_savings(deductions: Decimal, rate: Decimal) -> Decimal:
    """Return the tax saved by claiming deductions at a marginal rate."""
    return (deductions * rate / 100).quantize(CENT, rounding=ROUND_HALF_UP)


def effective_deduction(transaction: ClassifiedTransaction) -> Decimal:
    """Deduction to count for a transaction.

    Records flagged deductible but carrying no deduction amount count their
    full magnitude.
    """
    if not transaction.is_business_expense:
        return ZERO
    if transaction.deduction_amount:
        return transaction.deduction_amount
    return abs(transaction.amount)


def calculate_dashboard_stats(
    transactions: Sequence[ClassifiedTransaction],
    annual_income: Decimal,
    last_sync: Optional[datetime] = None,
) -> DashboardStats:
    """Compute headline figures.

    Args:
        transactions: Classified transactions
        annual_income: The user's income, which sets the marginal rate
        last_sync: When the transactions were fetched; defaults to now

    Returns:
        DashboardStats
    """
    rate = marginal_tax_rate(annual_income)
    total_deductions = sum((effective_deduction(t) for t in transactions), ZERO)
    return DashboardStats(
        total_transactions=len(transactions),
        total_income=annual_income,
        total_expenses=sum((abs(t.amount) for t in transactions if t.amount < 0), ZERO),
        total_deductions=total_deductions,
        tax_savings=estimate_tax_savings(total_deductions, rate),
        marginal_rate=rate,
        accounts_connected=len({t.account_id for t in transactions if t.account_id}),
        last_sync=last_sync or datetime.now(UTC),
    )


def calculate_monthly_trends(
    transactions: Iterable[ClassifiedTransaction],
    annual_income: Decimal,
    months: int = TREND_MONTHS,
) -> list[MonthlyTrend]:
    """Total income, expenses and deductions per calendar month.

    Returns:
        The most recent ``months`` months that have transactions, oldest first
    """
    rate = marginal_tax_rate(annual_income)
    buckets: dict[tuple[int, int], dict] = {}
    for t in transactions:
        bucket = buckets.setdefault(
            (t.date.year, t.date.month),
            {"income": ZERO, "expenses": ZERO, "deductions": ZERO, "count": 0},
        )
        if t.amount > 0:
            bucket["income"] += t.amount
        else:
            bucket["expenses"] += abs(t.amount)
        bucket["deductions"] += effective_deduction(t)
        bucket["count"] += 1

    trends = [
        MonthlyTrend(
            month=f"{month_abbr[month]} {year}",
            year=year,
            month_number=month,
            income=bucket["income"],
            expenses=bucket["expenses"],
            deductions=bucket["deductions"],
            savings=estimate_tax_savings(bucket["deductions"], rate),
            transaction_count=bucket["count"],
        )
        for (year, month), bucket in sorted(buckets.items())
    ]
    return trends[-months:] if months else trends


def calculate_category_breakdown(
    transactions: Iterable[ClassifiedTransaction],
) -> list[CategoryBreakdown]:
    """Group deductions by category with each category's share of the total.

    Percentages are rounded to one decimal place.

    Returns:
        Categories ordered by amount, largest first
    """
    totals: dict[str, Decimal] = {}
    counts: dict[str, int] = {}
    for t in transactions:
        amount = effective_deduction(t)
        if amount <= 0:
            continue
        totals[t.ato_category] = totals.get(t.ato_category, ZERO) + amount
        counts[t.ato_category] = counts.get(t.ato_category, 0) + 1

    grand_total = sum(totals.values(), ZERO)
    breakdown = [
        CategoryBreakdown(
            category=category,
            amount=amount,
            count=counts[category],
            percentage=(amount / grand_total * 100).quantize(TENTH, rounding=ROUND_HALF_UP),
        )
        for category, amount in totals.items()
    ]
    breakdown.sort(key=lambda item: (-item.amount, item.category))
    return breakdown


def filter_by_financial_year(
    transactions: Iterable[ClassifiedTransaction], financial_year: str | int
) -> list[ClassifiedTransaction]:
    """Keep transactions dated inside a financial year, boundaries included.

    Args:
        transactions: Transactions to filter
        financial_year: "FY2025", "2025" or 2025 for 1 Jul 2024 to 30 Jun 2025
    """
    start, end = financial_year_bounds(parse_financial_year(financial_year))
    return [t for t in transactions if start <= t.date <= end]


def available_financial_years(transactions: Iterable[ClassifiedTransaction]) -> list[int]:
    """Return the financial years that have transactions, most recent first."""
    return sorted({financial_year_for(t.date) for t in transactions}, reverse=True)


class SummaryService:
    """Service for building a user's deduction dashboard."""

    def __init__(self, db: Database, user_id: str):
        """Initialize summary service.

        Args:
            db: Database instance
            user_id: User whose income sets the tax rate
        """
        self.db = db
        self.preferences = PreferenceService(db, user_id)

    def build_dashboard(
        self,
        transactions: Sequence[ClassifiedTransaction],
        financial_year: Optional[str | int] = None,
        last_sync: Optional[datetime] = None,
    ) -> DashboardReport:
        """Build dashboard figures, optionally for one financial year only.

        Raises:
            ValidationError: If financial_year cannot be parsed
        """
        fy = None
        if financial_year is not None:
            try:
                fy = parse_financial_year(financial_year)
            except ValueError as e:
                raise ValidationError(str(e)) from e
            transactions = filter_by_financial_year(transactions, fy)

        income = self.preferences.get_annual_income()
        return DashboardReport(
            stats=calculate_dashboard_stats(transactions, income, last_sync=last_sync),
            monthly_trends=calculate_monthly_trends(transactions, income),
            category_breakdown=calculate_category_breakdown(transactions),
            financial_year=fy,
        )
