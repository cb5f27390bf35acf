# moneytor/core/transaction_crud.py
from typing import List, Optional, Tuple
from supabase import Client

from moneytor.core.db import CATEGORY_EMBED, first_row, run_query
from moneytor.core.errors import NotFoundError
from moneytor.schemas.transaction_schema import TransactionFilters
from moneytor.utils.dates import DateRange

TABLE = "transactions"
TRANSACTION_SELECT = f"*, {CATEGORY_EMBED}"


def get_transactions(
    db: Client,
    user_id: str,
    filters: Optional[TransactionFilters] = None,
    sort_by: str = "date",
    sort_order: str = "desc",
    limit: Optional[int] = None,
    offset: Optional[int] = None,
) -> Tuple[List[dict], int]:
    query = db.table(TABLE).select(TRANSACTION_SELECT, count="exact").eq("user_id", user_id)

    if filters:
        if filters.type != "all":
            query = query.eq("type", filters.type)
        if filters.category_id:
            query = query.eq("category_id", filters.category_id)
        if filters.date_from:
            query = query.gte("date", filters.date_from.isoformat())
        if filters.date_to:
            query = query.lte("date", filters.date_to.isoformat())
        if filters.search:
            query = query.ilike("description", f"%{filters.search}%")

    column = "category_id" if sort_by == "category" else sort_by
    query = query.order(column, desc=sort_order == "desc")

    if offset:
        query = query.range(offset, offset + (limit or 10) - 1)
    elif limit:
        query = query.limit(limit)

    res = run_query(query, "fetching transactions")
    return res.data or [], res.count or 0


def get_transaction(db: Client, transaction_id: str, user_id: str) -> dict:
    query = (
        db.table(TABLE)
        .select(TRANSACTION_SELECT)
        .eq("id", transaction_id)
        .eq("user_id", user_id)
        .limit(1)
    )
    return first_row(run_query(query, "fetching transaction"), "Transaction not found")


def get_rows_in_range(
    db: Client,
    user_id: str,
    date_range: DateRange,
    columns: str = f"amount, type, date, {CATEGORY_EMBED}",
    entry_type: Optional[str] = None,
    category_id: Optional[str] = None,
    ascending: Optional[bool] = None,
    limit: Optional[int] = None,
) -> List[dict]:
    """Rows dated within ``date_range`` (inclusive), for aggregation."""
    query = (
        db.table(TABLE)
        .select(columns)
        .eq("user_id", user_id)
        .gte("date", date_range.start.isoformat())
        .lte("date", date_range.end.isoformat())
    )
    if entry_type and entry_type != "all":
        query = query.eq("type", entry_type)
    if category_id:
        query = query.eq("category_id", category_id)
    if ascending is not None:
        query = query.order("date", desc=not ascending)
    if limit:
        query = query.limit(limit)

    return run_query(query, "fetching transactions for period").data or []


def get_amounts(db: Client, user_id: str, date_from=None, date_to=None) -> List[dict]:
    query = db.table(TABLE).select("amount, type").eq("user_id", user_id)
    if date_from:
        query = query.gte("date", date_from.isoformat())
    if date_to:
        query = query.lte("date", date_to.isoformat())
    return run_query(query, "fetching transaction stats").data or []


def create_transaction(db: Client, user_id: str, values: dict) -> dict:
    query = db.table(TABLE).insert({"user_id": user_id, **values})
    return first_row(run_query(query, "creating transaction"), "Transaction was not created")


def update_transaction(db: Client, transaction_id: str, user_id: str, values: dict) -> dict:
    query = db.table(TABLE).update(values).eq("id", transaction_id).eq("user_id", user_id)
    return first_row(run_query(query, "updating transaction"), "Transaction not found")


def delete_transaction(db: Client, transaction_id: str, user_id: str) -> None:
    query = db.table(TABLE).delete().eq("id", transaction_id).eq("user_id", user_id)
    res = run_query(query, "deleting transaction")
    if not res.data:
        raise NotFoundError("Transaction not found")


def category_has_transactions(db: Client, category_id: str, user_id: str) -> bool:
    query = (
        db.table(TABLE)
        .select("id")
        .eq("category_id", category_id)
        .eq("user_id", user_id)
        .limit(1)
    )
    return bool(run_query(query, "checking category transactions").data)
