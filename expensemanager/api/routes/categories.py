"""Category routes.

Listing and creation are feature-gated.  Update and delete act on one row
and are ownership-gated: owners keep rights over their own categories,
other users need ``edit_categories`` / ``delete_categories``.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response

from expensemanager.api.dependencies import get_storage
from expensemanager.auth import authorize_resource, require_permission, require_principal
from expensemanager.core.models import Category, CategoryUpdate, NewCategory
from expensemanager.exceptions import ConflictError
from expensemanager.gate import Principal
from expensemanager.ownership import ResourceAction, ResourceKind
from expensemanager.storage.memory import MemoryStorage

router = APIRouter(prefix="/api/categories", tags=["Categories"])


def _owner_of(category: Category | None) -> int | None:
    return category.user_id if category is not None else None


@router.get("", response_model=list[Category])
async def list_categories(
    principal: Principal = Depends(require_permission("view_categories")),
    storage: MemoryStorage = Depends(get_storage),
):
    return await storage.get_categories(principal.id)


@router.post("", response_model=Category, status_code=201)
async def create_category(
    req: NewCategory,
    principal: Principal = Depends(require_permission("create_category")),
    storage: MemoryStorage = Depends(get_storage),
):
    return await storage.create_category(principal.id, req)


@router.put("/{category_id}", response_model=Category)
async def update_category(
    category_id: int,
    req: CategoryUpdate,
    request: Request,
    principal: Principal = Depends(require_principal),
    storage: MemoryStorage = Depends(get_storage),
):
    category = await storage.get_category(category_id)
    authorize_resource(
        request, principal, _owner_of(category), ResourceKind.CATEGORY, ResourceAction.EDIT
    )
    return await storage.update_category(category_id, req)


@router.delete("/{category_id}", status_code=204)
async def delete_category(
    category_id: int,
    request: Request,
    principal: Principal = Depends(require_principal),
    storage: MemoryStorage = Depends(get_storage),
):
    category = await storage.get_category(category_id)
    authorize_resource(
        request, principal, _owner_of(category), ResourceKind.CATEGORY, ResourceAction.DELETE
    )
    if await storage.category_in_use(category_id):
        raise ConflictError("Category is in use and cannot be deleted")
    await storage.delete_category(category_id)
    return Response(status_code=204)
