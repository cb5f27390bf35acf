import logging
from typing import List, Optional
from supabase import Client

from moneytor.core import budget_crud, category_crud, transaction_crud
from moneytor.core.errors import ConflictError, InvariantError
from moneytor.schemas.category_schema import CategoryCreate, CategoryUpdate

logger = logging.getLogger(__name__)


def list_categories(db: Client, user_id: str, entry_type: Optional[str] = None) -> List[dict]:
    return category_crud.get_categories(db, user_id, entry_type)


def categories_with_stats(db: Client, user_id: str) -> List[dict]:
    results = []
    for category in category_crud.get_categories_with_amounts(db, user_id):
        transactions = category.pop("transactions", None) or []
        results.append({
            **category,
            "transactions_count": len(transactions),
            "total_amount": sum(float(t.get("amount") or 0) for t in transactions),
        })
    return results


def get_category(db: Client, user_id: str, category_id: str) -> dict:
    return category_crud.get_category(db, category_id, user_id)


def create_category(db: Client, user_id: str, payload: CategoryCreate) -> dict:
    row = category_crud.create_category(db, user_id, payload.model_dump(mode="json"))
    logger.info("🏷️ Created %s category '%s' for user %s", payload.type, payload.name, user_id)
    return row


def update_category(db: Client, user_id: str, category_id: str, payload: CategoryUpdate) -> dict:
    values = payload.model_dump(mode="json", exclude_unset=True)
    if not values:
        raise InvariantError("No fields to update")

    existing = category_crud.get_category(db, category_id, user_id) if "type" in values else None
    if existing and existing.get("type") != values["type"]:
        # Existing transactions would no longer match their category's type
        if transaction_crud.category_has_transactions(db, category_id, user_id):
            raise ConflictError("Cannot change the type of a category that already has transactions.")
        # Budgets only track expense categories
        if existing.get("type") == "expense" and budget_crud.category_has_budgets(db, category_id, user_id):
            raise ConflictError("Cannot change the type of a category that is used by a budget.")

    return category_crud.update_category(db, category_id, user_id, values)


def delete_category(db: Client, user_id: str, category_id: str) -> None:
    if transaction_crud.category_has_transactions(db, category_id, user_id):
        raise ConflictError(
            "Cannot delete category with existing transactions. "
            "Please reassign or delete transactions first."
        )
    category_crud.delete_category(db, category_id, user_id)
    logger.info("🗑️ Deleted category %s for user %s", category_id, user_id)
