from fastapi import APIRouter, Depends, Query, Response, status
from supabase import Client
from typing import Literal, Optional
from datetime import date
from uuid import UUID

from moneytor.api.deps import CurrentUser, get_current_user, get_db
from moneytor.schemas.transaction_schema import (
    SortOrder,
    TransactionCreate,
    TransactionFilters,
    TransactionPage,
    TransactionResponse,
    TransactionSortBy,
    TransactionStats,
    TransactionUpdate,
)
from moneytor.services import transaction_service

router = APIRouter(prefix="/api/transactions", tags=["Transactions"])


@router.get("/", response_model=TransactionPage)
def read_transactions(
    entry_type: Literal["income", "expense", "all"] = Query("all", alias="type"),
    category_id: Optional[UUID] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    search: Optional[str] = None,
    sort_by: TransactionSortBy = "date",
    sort_order: SortOrder = "desc",
    limit: Optional[int] = Query(None, ge=1, le=500),
    offset: Optional[int] = Query(None, ge=0),
    db: Client = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """List transactions with filters, sorting and pagination"""
    filters = TransactionFilters(
        type=entry_type,
        category_id=str(category_id) if category_id else None,
        date_from=date_from,
        date_to=date_to,
        search=search,
    )
    return transaction_service.list_transactions(
        db, current_user.id, filters, sort_by, sort_order, limit, offset
    )


@router.get("/stats", response_model=TransactionStats)
def read_transaction_stats(
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    db: Client = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Income, expense and net totals"""
    return transaction_service.transaction_stats(db, current_user.id, date_from, date_to)


@router.get("/export")
def export_transactions(
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    db: Client = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Download transactions as CSV"""
    content = transaction_service.export_transactions_csv(db, current_user.id, date_from, date_to)
    return Response(
        content,
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=transactions_export.csv"},
    )


@router.get("/{transaction_id}", response_model=TransactionResponse)
def read_transaction(
    transaction_id: UUID,
    db: Client = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return transaction_service.get_transaction(db, current_user.id, str(transaction_id))


@router.post("/", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
def create_new_transaction(
    transaction: TransactionCreate,
    db: Client = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Record an income or expense"""
    return transaction_service.create_transaction(db, current_user.id, transaction)


@router.put("/{transaction_id}", response_model=TransactionResponse)
def update_existing_transaction(
    transaction_id: UUID,
    transaction_update: TransactionUpdate,
    db: Client = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return transaction_service.update_transaction(db, current_user.id, str(transaction_id), transaction_update)


@router.delete("/{transaction_id}")
def delete_existing_transaction(
    transaction_id: UUID,
    db: Client = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    transaction_service.delete_transaction(db, current_user.id, str(transaction_id))
    return {"message": "Transaction deleted successfully"}
