"""Tests for dashboard aggregate functions."""

from __future__ import annotations

from datetime import datetime, timezone

from expensemanager.core import analytics
from expensemanager.core.models import Category, ExpenseWithCategory, PaymentMethod

_SUPPLIES = Category(id=1, name="Office Supplies", color="#1A73E8", user_id=1)
_TRAVEL = Category(id=2, name="Travel", color="#34A853", user_id=1)


def _expense(
    id_: int,
    amount: float,
    category: Category = _SUPPLIES,
    method: PaymentMethod = PaymentMethod.CASH,
    when: datetime = datetime(2024, 3, 1, tzinfo=timezone.utc),
    receipt: str | None = None,
) -> ExpenseWithCategory:
    return ExpenseWithCategory(
        id=id_,
        date=when,
        category_id=category.id,
        material_name="Item",
        vendor_name="Vendor",
        amount=amount,
        payment_method=method,
        receipt_path=receipt,
        user_id=1,
        category=category,
    )


class TestSummary:
    def test_empty(self):
        summary = analytics.summarize([])
        assert summary.total_amount == 0
        assert summary.highest_category is None
        assert summary.most_used_payment_method is None

    def test_totals_and_highest_category(self):
        expenses = [
            _expense(1, 100),
            _expense(2, 200, _TRAVEL),
            _expense(3, 50, _TRAVEL, receipt="r.pdf"),
        ]
        summary = analytics.summarize(expenses)
        assert summary.total_amount == 350
        assert summary.highest_category.name == "Travel"
        assert summary.highest_category.percentage == 71.4
        assert summary.pending_receipts == 2

    def test_most_used_payment_method(self):
        expenses = [
            _expense(1, 10, method=PaymentMethod.UPI),
            _expense(2, 10, method=PaymentMethod.UPI),
            _expense(3, 500, method=PaymentMethod.CARD),
        ]
        method = analytics.summarize(expenses).most_used_payment_method
        assert method.method == "UPI"
        assert method.count == 2


class TestDistributions:
    def test_category_distribution_sorted_by_amount(self):
        result = analytics.category_distribution(
            [_expense(1, 30), _expense(2, 70, _TRAVEL)]
        )
        assert [d.category_name for d in result] == ["Travel", "Office Supplies"]
        assert [d.percentage for d in result] == [70.0, 30.0]
        assert result[0].color == "#34A853"

    def test_payment_distribution(self):
        result = analytics.payment_method_distribution(
            [
                _expense(1, 10, method=PaymentMethod.UPI),
                _expense(2, 90, method=PaymentMethod.BANK_TRANSFER),
                _expense(3, 20, method=PaymentMethod.UPI),
            ]
        )
        assert result[0].method == "Bank Transfer"
        assert result[1].method == "UPI"
        assert result[1].count == 2
        assert result[1].amount == 30

    def test_empty_distributions(self):
        assert analytics.category_distribution([]) == []
        assert analytics.payment_method_distribution([]) == []


class TestMonthlyTrend:
    def test_months_oldest_first(self):
        now = datetime(2024, 2, 10, tzinfo=timezone.utc)
        result = analytics.monthly_trend([], months=3, now=now)
        assert [m.month for m in result] == ["Dec 2023", "Jan 2024", "Feb 2024"]
        assert all(m.amount == 0 for m in result)

    def test_amounts_bucketed_by_month(self):
        now = datetime(2024, 3, 31, tzinfo=timezone.utc)
        expenses = [
            _expense(1, 10, when=datetime(2024, 3, 1, tzinfo=timezone.utc)),
            _expense(2, 15, when=datetime(2024, 3, 20, tzinfo=timezone.utc)),
            _expense(3, 99, when=datetime(2023, 3, 20, tzinfo=timezone.utc)),
        ]
        result = analytics.monthly_trend(expenses, months=12, now=now)
        assert len(result) == 12
        assert result[-1].month == "Mar 2024"
        assert result[-1].amount == 25
        assert sum(m.amount for m in result) == 25


class TestRecent:
    def test_newest_first_and_limited(self):
        expenses = [
            _expense(i, i, when=datetime(2024, 1, i, tzinfo=timezone.utc)) for i in range(1, 8)
        ]
        assert [e.id for e in analytics.recent(expenses, limit=3)] == [7, 6, 5]
