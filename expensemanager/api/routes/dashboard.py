"""Dashboard routes: aggregates over the caller's own expenses."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from expensemanager.api.dependencies import get_date_filter, get_storage
from expensemanager.auth import require_permission
from expensemanager.core.models import (
    CategoryDistribution,
    DateFilter,
    ExpenseSummary,
    ExpenseWithCategory,
    MonthlyExpense,
    PaymentMethodDistribution,
)
from expensemanager.gate import Principal
from expensemanager.storage.memory import MemoryStorage

router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])

_view_dashboard = require_permission("view_dashboard")


@router.get("/summary", response_model=ExpenseSummary)
async def summary(
    principal: Principal = Depends(_view_dashboard),
    date_filter: DateFilter | None = Depends(get_date_filter),
    storage: MemoryStorage = Depends(get_storage),
):
    return await storage.get_expense_summary(principal.id, date_filter)


@router.get("/category-distribution", response_model=list[CategoryDistribution])
async def category_distribution(
    principal: Principal = Depends(_view_dashboard),
    date_filter: DateFilter | None = Depends(get_date_filter),
    storage: MemoryStorage = Depends(get_storage),
):
    return await storage.get_category_distribution(principal.id, date_filter)


@router.get("/payment-distribution", response_model=list[PaymentMethodDistribution])
async def payment_distribution(
    principal: Principal = Depends(_view_dashboard),
    date_filter: DateFilter | None = Depends(get_date_filter),
    storage: MemoryStorage = Depends(get_storage),
):
    return await storage.get_payment_method_distribution(principal.id, date_filter)


@router.get("/monthly-trend", response_model=list[MonthlyExpense])
async def monthly_trend(
    months: int = Query(default=12, ge=1, le=60, description="Number of months, newest last"),
    principal: Principal = Depends(_view_dashboard),
    storage: MemoryStorage = Depends(get_storage),
):
    return await storage.get_monthly_expense_trend(principal.id, months)


@router.get("/recent-expenses", response_model=list[ExpenseWithCategory])
async def recent_expenses(
    limit: int = Query(default=5, ge=1, le=100, description="Max items to return"),
    principal: Principal = Depends(_view_dashboard),
    storage: MemoryStorage = Depends(get_storage),
):
    return await storage.get_recent_expenses(principal.id, limit)
