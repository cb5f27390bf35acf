# moneytor/core/category_crud.py
from typing import List, Optional
from supabase import Client

from moneytor.core.db import first_row, run_query
from moneytor.core.errors import NotFoundError

TABLE = "categories"


def get_categories(db: Client, user_id: str, entry_type: Optional[str] = None) -> List[dict]:
    query = db.table(TABLE).select("*").eq("user_id", user_id)
    if entry_type:
        query = query.eq("type", entry_type)
    return run_query(query.order("name"), "fetching categories").data or []


def get_categories_with_amounts(db: Client, user_id: str) -> List[dict]:
    """Categories with their transactions' amounts embedded."""
    query = db.table(TABLE).select("*, transactions (amount)").eq("user_id", user_id).order("name")
    return run_query(query, "fetching categories with stats").data or []


def get_category(db: Client, category_id: str, user_id: str) -> dict:
    query = db.table(TABLE).select("*").eq("id", category_id).eq("user_id", user_id).limit(1)
    return first_row(run_query(query, "fetching category"), "Category not found")


def create_category(db: Client, user_id: str, values: dict) -> dict:
    query = db.table(TABLE).insert({"user_id": user_id, **values})
    return first_row(run_query(query, "creating category"), "Category was not created")


def update_category(db: Client, category_id: str, user_id: str, values: dict) -> dict:
    query = db.table(TABLE).update(values).eq("id", category_id).eq("user_id", user_id)
    return first_row(run_query(query, "updating category"), "Category not found")


def delete_category(db: Client, category_id: str, user_id: str) -> None:
    query = db.table(TABLE).delete().eq("id", category_id).eq("user_id", user_id)
    if not run_query(query, "deleting category").data:
        raise NotFoundError("Category not found")
