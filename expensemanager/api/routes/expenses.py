"""Expense routes.

Every single-expense endpoint runs the ownership gate after fetching the
row: a missing expense is a 404, someone else's expense needs the matching
``view_all_expenses`` / ``edit_all_expenses`` / ``delete_all_expenses``.
"""

from __future__ import annotations

from fastapi import APIRouter, Body, Depends, Request, Response

from expensemanager.api.dependencies import get_date_filter, get_storage
from expensemanager.auth import authorize_resource, require_permission, require_principal
from expensemanager.core.models import (
    DateFilter,
    Expense,
    ExpenseUpdate,
    ExpenseWithCategory,
    NewExpense,
)
from expensemanager.exceptions import ValidationError
from expensemanager.gate import Principal
from expensemanager.ownership import ResourceAction, ResourceKind, can_access_resource
from expensemanager.storage.memory import MemoryStorage

router = APIRouter(prefix="/api/expenses", tags=["Expenses"])

_MAX_BULK = 500


async def _check_category(
    request: Request,
    principal: Principal,
    storage: MemoryStorage,
    category_id: int,
    owner_id: int,
) -> None:
    """The category must exist and be usable by both the caller and the expense owner."""
    category = await storage.get_category(category_id)
    if category is None:
        raise ValidationError(f"Unknown category: {category_id}")
    if category.user_id == owner_id:
        return
    authorize_resource(
        request, principal, category.user_id, ResourceKind.CATEGORY, ResourceAction.VIEW
    )
    if owner_id == principal.id:
        return
    owner = await storage.get_user(owner_id)
    if owner is None or not can_access_resource(
        owner.id, owner.role, category.user_id, ResourceKind.CATEGORY, ResourceAction.VIEW
    ):
        raise ValidationError("Category is not available to the expense owner")


async def _fetch_authorized(
    request: Request,
    principal: Principal,
    storage: MemoryStorage,
    expense_id: int,
    action: ResourceAction,
) -> ExpenseWithCategory:
    expense = await storage.get_expense(expense_id)
    owner_id = expense.user_id if expense is not None else None
    authorize_resource(request, principal, owner_id, ResourceKind.EXPENSE, action)
    return expense


@router.get("", response_model=list[ExpenseWithCategory])
async def list_expenses(
    principal: Principal = Depends(require_principal),
    date_filter: DateFilter | None = Depends(get_date_filter),
    storage: MemoryStorage = Depends(get_storage),
):
    """The caller's own expenses, optionally limited to a date range."""
    return await storage.get_expenses(principal.id, date_filter)


@router.get("/{expense_id}", response_model=ExpenseWithCategory)
async def get_expense(
    expense_id: int,
    request: Request,
    principal: Principal = Depends(require_principal),
    storage: MemoryStorage = Depends(get_storage),
):
    return await _fetch_authorized(request, principal, storage, expense_id, ResourceAction.VIEW)


@router.post("", response_model=Expense, status_code=201)
async def create_expense(
    req: NewExpense,
    request: Request,
    principal: Principal = Depends(require_permission("create_expense")),
    storage: MemoryStorage = Depends(get_storage),
):
    await _check_category(request, principal, storage, req.category_id, principal.id)
    return await storage.create_expense(principal.id, req)


@router.post("/bulk", response_model=list[Expense], status_code=201)
async def create_expenses_bulk(
    request: Request,
    items: list[NewExpense] = Body(..., min_length=1, max_length=_MAX_BULK),
    principal: Principal = Depends(require_permission("create_expense")),
    storage: MemoryStorage = Depends(get_storage),
):
    """Create many expenses at once; nothing is stored if any item is rejected."""
    for category_id in sorted({item.category_id for item in items}):
        await _check_category(request, principal, storage, category_id, principal.id)
    return await storage.create_expenses_bulk(principal.id, items)


@router.put("/{expense_id}", response_model=Expense)
async def update_expense(
    expense_id: int,
    req: ExpenseUpdate,
    request: Request,
    principal: Principal = Depends(require_principal),
    storage: MemoryStorage = Depends(get_storage),
):
    """Update an expense. The original owner is preserved when someone else edits it."""
    expense = await _fetch_authorized(
        request, principal, storage, expense_id, ResourceAction.EDIT
    )
    if req.category_id is not None:
        await _check_category(request, principal, storage, req.category_id, expense.user_id)
    return await storage.update_expense(expense_id, req)


@router.delete("/{expense_id}", status_code=204)
async def delete_expense(
    expense_id: int,
    request: Request,
    principal: Principal = Depends(require_principal),
    storage: MemoryStorage = Depends(get_storage),
):
    await _fetch_authorized(request, principal, storage, expense_id, ResourceAction.DELETE)
    await storage.delete_expense(expense_id)
    return Response(status_code=204)
