# moneytor/core/budget_crud.py
from typing import List, Optional
from supabase import Client

from moneytor.core.db import CATEGORY_EMBED, first_row, run_query
from moneytor.core.errors import NotFoundError

TABLE = "budgets"
BUDGET_SELECT = f"*, {CATEGORY_EMBED}"


def get_budgets(
    db: Client,
    user_id: str,
    period: Optional[str] = None,
    category_id: Optional[str] = None,
) -> List[dict]:
    query = db.table(TABLE).select(BUDGET_SELECT).eq("user_id", user_id)
    if period:
        query = query.eq("period", period)
    if category_id:
        query = query.eq("category_id", category_id)
    query = query.order("created_at", desc=True)
    return run_query(query, "fetching budgets").data or []


def get_budget(db: Client, budget_id: str, user_id: str) -> dict:
    query = db.table(TABLE).select(BUDGET_SELECT).eq("id", budget_id).eq("user_id", user_id).limit(1)
    return first_row(run_query(query, "fetching budget"), "Budget not found")


def create_budget(db: Client, user_id: str, values: dict) -> dict:
    query = db.table(TABLE).insert({"user_id": user_id, **values})
    return first_row(run_query(query, "creating budget"), "Budget was not created")


def update_budget(db: Client, budget_id: str, user_id: str, values: dict) -> dict:
    query = db.table(TABLE).update(values).eq("id", budget_id).eq("user_id", user_id)
    return first_row(run_query(query, "updating budget"), "Budget not found")


def delete_budget(db: Client, budget_id: str, user_id: str) -> None:
    query = db.table(TABLE).delete().eq("id", budget_id).eq("user_id", user_id)
    if not run_query(query, "deleting budget").data:
        raise NotFoundError("Budget not found")


def category_has_budgets(db: Client, category_id: str, user_id: str) -> bool:
    query = (
        db.table(TABLE)
        .select("id")
        .eq("category_id", category_id)
        .eq("user_id", user_id)
        .limit(1)
    )
    return bool(run_query(query, "checking category budgets").data)
