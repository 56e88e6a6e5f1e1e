"""Dashboard aggregates computed from a user's expenses.

All functions are pure: they take already-fetched expenses and return
pydantic models.  Percentages are rounded to one decimal place.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from collections.abc import Sequence
from datetime import datetime, timezone

from expensemanager.core.models import (
    CategoryDistribution,
    ExpenseSummary,
    ExpenseWithCategory,
    HighestCategory,
    MonthlyExpense,
    MostUsedPaymentMethod,
    PaymentMethodDistribution,
)


def _percentage(part: float, total: float) -> float:
    if total == 0:
        return 0.0
    return round(part / total * 100, 1)


def summarize(expenses: Sequence[ExpenseWithCategory]) -> ExpenseSummary:
    if not expenses:
        return ExpenseSummary()

    total = sum(e.amount for e in expenses)

    by_category: dict[int, float] = defaultdict(float)
    names: dict[int, str] = {}
    for e in expenses:
        by_category[e.category_id] += e.amount
        names[e.category_id] = e.category.name
    top_id = max(by_category, key=by_category.__getitem__)
    highest = HighestCategory(
        name=names[top_id],
        amount=by_category[top_id],
        percentage=_percentage(by_category[top_id], total),
    )

    method, count = Counter(e.payment_method.value for e in expenses).most_common(1)[0]

    return ExpenseSummary(
        total_amount=total,
        highest_category=highest,
        most_used_payment_method=MostUsedPaymentMethod(method=method, count=count),
        pending_receipts=sum(1 for e in expenses if not e.receipt_path),
    )


def category_distribution(expenses: Sequence[ExpenseWithCategory]) -> list[CategoryDistribution]:
    if not expenses:
        return []
    total = sum(e.amount for e in expenses)
    grouped: dict[int, list[ExpenseWithCategory]] = defaultdict(list)
    for e in expenses:
        grouped[e.category_id].append(e)

    result = []
    for category_id, items in grouped.items():
        amount = sum(e.amount for e in items)
        result.append(
            CategoryDistribution(
                category_id=category_id,
                category_name=items[0].category.name,
                color=items[0].category.color,
                amount=amount,
                percentage=_percentage(amount, total),
            )
        )
    return sorted(result, key=lambda d: d.amount, reverse=True)


def payment_method_distribution(
    expenses: Sequence[ExpenseWithCategory],
) -> list[PaymentMethodDistribution]:
    if not expenses:
        return []
    total = sum(e.amount for e in expenses)
    amounts: dict[str, float] = defaultdict(float)
    counts: Counter[str] = Counter()
    for e in expenses:
        amounts[e.payment_method.value] += e.amount
        counts[e.payment_method.value] += 1

    result = [
        PaymentMethodDistribution(
            method=method,
            amount=amount,
            count=counts[method],
            percentage=_percentage(amount, total),
        )
        for method, amount in amounts.items()
    ]
    return sorted(result, key=lambda d: d.amount, reverse=True)


def _shift_month(year: int, month: int, back: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) - back
    return index // 12, index % 12 + 1


def monthly_trend(
    expenses: Sequence[ExpenseWithCategory],
    months: int = 12,
    now: datetime | None = None,
) -> list[MonthlyExpense]:
    """Totals for the last *months* calendar months, oldest first."""
    now = now or datetime.now(timezone.utc)
    totals: dict[tuple[int, int], float] = defaultdict(float)
    for e in expenses:
        totals[(e.date.year, e.date.month)] += e.amount

    result = []
    for back in range(months - 1, -1, -1):
        year, month = _shift_month(now.year, now.month, back)
        label = datetime(year, month, 1).strftime("%b %Y")
        result.append(MonthlyExpense(month=label, amount=totals.get((year, month), 0.0)))
    return result


def recent(expenses: Sequence[ExpenseWithCategory], limit: int = 5) -> list[ExpenseWithCategory]:
    return sorted(expenses, key=lambda e: e.date.timestamp(), reverse=True)[:limit]
