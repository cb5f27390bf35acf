from fastapi import APIRouter, Depends, status
from supabase import Client
from typing import List, Literal, Optional
from uuid import UUID

from moneytor.api.deps import CurrentUser, get_current_user, get_db
from moneytor.schemas.category_schema import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    CategoryWithStats,
)
from moneytor.services import category_service

router = APIRouter(prefix="/api/categories", tags=["Categories"])


@router.get("/", response_model=List[CategoryResponse])
def read_categories(
    type: Optional[Literal["income", "expense"]] = None,
    db: Client = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Get the current user's categories, optionally of one type"""
    return category_service.list_categories(db, current_user.id, type)


@router.get("/stats", response_model=List[CategoryWithStats])
def read_category_stats(
    db: Client = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Categories with transaction counts and totals"""
    return category_service.categories_with_stats(db, current_user.id)


@router.get("/{category_id}", response_model=CategoryResponse)
def read_category(
    category_id: UUID,
    db: Client = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return category_service.get_category(db, current_user.id, str(category_id))


@router.post("/", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
def create_new_category(
    category: CategoryCreate,
    db: Client = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return category_service.create_category(db, current_user.id, category)


@router.put("/{category_id}", response_model=CategoryResponse)
def update_existing_category(
    category_id: UUID,
    category_update: CategoryUpdate,
    db: Client = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return category_service.update_category(db, current_user.id, str(category_id), category_update)


@router.delete("/{category_id}")
def delete_existing_category(
    category_id: UUID,
    db: Client = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Delete a category that has no transactions"""
    category_service.delete_category(db, current_user.id, str(category_id))
    return {"message": "Category deleted successfully"}
