import csv
import io
import logging
from datetime import date
from typing import Optional
from supabase import Client

from moneytor.core import category_crud, transaction_crud
from moneytor.core.analytics import summarize
from moneytor.core.errors import InvariantError, NotFoundError
from moneytor.schemas.transaction_schema import (
    TransactionCreate,
    TransactionFilters,
    TransactionStats,
    TransactionUpdate,
)

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = ["date", "amount", "description", "category", "type"]


def _category_ref(category: dict) -> dict:
    return {k: category.get(k) for k in ("id", "name", "type", "color", "icon")}


def check_category_matches(db: Client, user_id: str, category_id: str, entry_type: str) -> dict:
    """The category must belong to the user and carry the same type as the transaction."""
    try:
        category = category_crud.get_category(db, category_id, user_id)
    except NotFoundError:
        raise InvariantError("Invalid category")

    if category.get("type") != entry_type:
        raise InvariantError(
            f"Category '{category.get('name')}' is an {category.get('type')} category "
            f"and cannot be used for an {entry_type} transaction"
        )
    return category


def list_transactions(
    db: Client,
    user_id: str,
    filters: Optional[TransactionFilters] = None,
    sort_by: str = "date",
    sort_order: str = "desc",
    limit: Optional[int] = None,
    offset: Optional[int] = None,
) -> dict:
    rows, count = transaction_crud.get_transactions(db, user_id, filters, sort_by, sort_order, limit, offset)
    return {"data": rows, "count": count}


def get_transaction(db: Client, user_id: str, transaction_id: str) -> dict:
    return transaction_crud.get_transaction(db, transaction_id, user_id)


def create_transaction(db: Client, user_id: str, payload: TransactionCreate) -> dict:
    category = check_category_matches(db, user_id, str(payload.category_id), payload.type)

    row = transaction_crud.create_transaction(db, user_id, payload.model_dump(mode="json"))
    row["category"] = _category_ref(category)

    logger.info("💸 Created %s transaction %s for user %s", payload.type, row.get("id"), user_id)
    return row


def update_transaction(db: Client, user_id: str, transaction_id: str, payload: TransactionUpdate) -> dict:
    values = payload.model_dump(mode="json", exclude_unset=True)
    if not values:
        raise InvariantError("No fields to update")

    existing = transaction_crud.get_transaction(db, transaction_id, user_id)
    category_id = values.get("category_id", existing.get("category_id"))
    entry_type = values.get("type", existing.get("type"))

    category = None
    if category_id and ("category_id" in values or "type" in values):
        category = check_category_matches(db, user_id, category_id, entry_type)

    row = transaction_crud.update_transaction(db, transaction_id, user_id, values)
    if category:
        row["category"] = _category_ref(category)
    else:
        row["category"] = None if "category_id" in values else existing.get("category")
    return row


def delete_transaction(db: Client, user_id: str, transaction_id: str) -> None:
    transaction_crud.delete_transaction(db, transaction_id, user_id)
    logger.info("🗑️ Deleted transaction %s for user %s", transaction_id, user_id)


def transaction_stats(db: Client, user_id: str, date_from: Optional[date] = None,
                      date_to: Optional[date] = None) -> TransactionStats:
    totals = summarize(transaction_crud.get_amounts(db, user_id, date_from, date_to))
    return TransactionStats(
        total_income=totals.income,
        total_expenses=totals.expenses,
        net_amount=totals.net,
        transaction_count=totals.transaction_count,
    )


def export_transactions_csv(db: Client, user_id: str, date_from: Optional[date] = None,
                            date_to: Optional[date] = None) -> str:
    filters = TransactionFilters(date_from=date_from, date_to=date_to)
    rows, _ = transaction_crud.get_transactions(db, user_id, filters, sort_by="date", sort_order="asc")

    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(EXPORT_COLUMNS)

    for tx in rows:
        category = tx.get("category") or {}
        writer.writerow([
            tx.get("date"),
            str(tx.get("amount")),
            tx.get("description") or "",
            category.get("name", "Uncategorized"),
            tx.get("type"),
        ])

    logger.info("📤 Exported %d transactions for user %s", len(rows), user_id)
    return output.getvalue()
