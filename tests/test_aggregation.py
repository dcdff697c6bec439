"""Tests for dashboard aggregation."""

from datetime import date, datetime, UTC
from decimal import Decimal

import pytest

from deductit.domain.aggregation import (
    SummaryService,
    available_financial_years,
    calculate_category_breakdown,
    calculate_dashboard_stats,
    calculate_monthly_trends,
    effective_deduction,
    estimate_tax_savings,
    filter_by_financial_year,
    marginal_tax_rate,
)
from deductit.domain.categories import MEALS, OTHER, VEHICLES
from deductit.domain.entities import ClassificationSource, ClassifiedTransaction, TransactionType
from deductit.domain.errors import ValidationError


def _classified(
    txn_id="t1",
    amount="-50",
    category=VEHICLES,
    deductible=True,
    day=date(2024, 7, 15),
    account_id="acc-1",
    deduction=None,
):
    amount = Decimal(amount)
    if deduction is None:
        deduction = abs(amount) if deductible and amount < 0 else Decimal("0")
    return ClassifiedTransaction(
        id=txn_id,
        date=day,
        description="TEST",
        amount=amount,
        type=TransactionType.DEBIT if amount < 0 else TransactionType.CREDIT,
        merchant_name="Test",
        anzsic_code="9999",
        ato_category=category,
        is_business_expense=deductible,
        deduction_amount=Decimal(deduction),
        classification_source=ClassificationSource.PATTERN,
        confidence=90,
        auto_classified=True,
        account_id=account_id,
    )


@pytest.mark.parametrize(
    "income,rate",
    [
        ("0", "0"),
        ("18200", "0"),
        ("18201", "19"),
        ("45000", "19"),
        ("100000", "32.5"),
        ("120000", "32.5"),
        ("180000", "37"),
        ("180001", "45"),
    ],
)
def test_marginal_tax_rate(income, rate):
    assert marginal_tax_rate(Decimal(income)) == Decimal(rate)


def test_tax_savings_example():
    rate = marginal_tax_rate(Decimal("100000"))

    assert estimate_tax_savings(Decimal("1000"), rate) == Decimal("325.00")


def test_effective_deduction_falls_back_to_amount():
    txn = _classified(amount="-80", deduction="0")

    assert effective_deduction(txn) == Decimal("80")
    assert effective_deduction(_classified(deductible=False)) == Decimal("0")


def test_category_breakdown_percentages():
    transactions = [
        _classified("a", "-50", VEHICLES),
        _classified("b", "-150", VEHICLES),
        _classified("c", "-100", MEALS),
        _classified("d", "-999", OTHER, deductible=False),
    ]

    breakdown = calculate_category_breakdown(transactions)

    assert [(b.category, b.amount, b.count, b.percentage) for b in breakdown] == [
        (VEHICLES, Decimal("200"), 2, Decimal("66.7")),
        (MEALS, Decimal("100"), 1, Decimal("33.3")),
    ]


def test_category_breakdown_empty():
    assert calculate_category_breakdown([]) == []


def test_dashboard_stats():
    sync = datetime(2024, 8, 1, tzinfo=UTC)
    transactions = [
        _classified("a", "-50", VEHICLES),
        _classified("b", "-100", OTHER, deductible=False, account_id="acc-2"),
        _classified("c", "2500", OTHER, deductible=False),
    ]

    stats = calculate_dashboard_stats(transactions, Decimal("100000"), last_sync=sync)

    assert stats.total_transactions == 3
    assert stats.total_income == Decimal("100000")
    assert stats.total_expenses == Decimal("150")
    assert stats.total_deductions == Decimal("50")
    assert stats.marginal_rate == Decimal("32.5")
    assert stats.tax_savings == Decimal("16.25")
    assert stats.accounts_connected == 2
    assert stats.last_sync == sync


def test_monthly_trends_keep_recent_months_in_order():
    transactions = [
        _classified(str(month), "-100", day=date(2024, month, 10)) for month in range(1, 9)
    ]
    transactions.append(_classified("salary", "3000", OTHER, deductible=False, day=date(2024, 8, 1)))

    trends = calculate_monthly_trends(transactions, Decimal("100000"))

    assert [t.month for t in trends] == [
        "Mar 2024", "Apr 2024", "May 2024", "Jun 2024", "Jul 2024", "Aug 2024"
    ]
    august = trends[-1]
    assert august.income == Decimal("3000")
    assert august.expenses == Decimal("100")
    assert august.deductions == Decimal("100")
    assert august.savings == Decimal("32.50")
    assert august.transaction_count == 2


def test_financial_year_filter_boundaries():
    july = _classified("july", day=date(2024, 7, 1))
    june = _classified("june", day=date(2024, 6, 30))

    assert filter_by_financial_year([july, june], "FY2025") == [july]
    assert filter_by_financial_year([july, june], 2024) == [june]
    assert available_financial_years([june, july]) == [2025, 2024]


class TestSummaryService:
    def test_build_dashboard_for_financial_year(self, temp_db):
        service = SummaryService(temp_db, "user-1")
        service.preferences.set_annual_income(Decimal("100000"))
        transactions = [
            _classified("a", "-1000", day=date(2024, 7, 1)),
            _classified("b", "-500", day=date(2024, 6, 30)),
        ]

        report = service.build_dashboard(transactions, financial_year="FY2025")

        assert report.financial_year == 2025
        assert report.stats.total_transactions == 1
        assert report.stats.tax_savings == Decimal("325.00")
        assert [b.category for b in report.category_breakdown] == [VEHICLES]

    def test_default_income_applies(self, temp_db):
        report = SummaryService(temp_db, "user-1").build_dashboard([_classified()])

        assert report.stats.marginal_rate == Decimal("32.5")
        assert report.financial_year is None

    def test_invalid_financial_year(self, temp_db):
        with pytest.raises(ValidationError):
            SummaryService(temp_db, "user-1").build_dashboard([], financial_year="last year")
