# moneytor/core/goal_crud.py
from typing import List, Optional
from supabase import Client

from moneytor.core.db import CATEGORY_EMBED, first_row, run_query
from moneytor.core.errors import NotFoundError

TABLE = "saving_goals"
GOAL_SELECT = f"*, {CATEGORY_EMBED}"


def get_goals_by_user(
    db: Client,
    user_id: str,
    status: Optional[str] = None,
    category_id: Optional[str] = None,
) -> List[dict]:
    query = db.table(TABLE).select(GOAL_SELECT).eq("user_id", user_id)
    if status:
        query = query.eq("status", status)
    if category_id:
        query = query.eq("category_id", category_id)
    query = query.order("created_at", desc=True)
    return run_query(query, "fetching goals").data or []


def get_goal_by_id(db: Client, goal_id: str, user_id: str) -> dict:
    query = db.table(TABLE).select(GOAL_SELECT).eq("id", goal_id).eq("user_id", user_id).limit(1)
    return first_row(run_query(query, "fetching goal"), "Goal not found")


def create_goal(db: Client, user_id: str, values: dict) -> dict:
    query = db.table(TABLE).insert({"user_id": user_id, **values})
    return first_row(run_query(query, "creating goal"), "Goal was not created")


def update_goal(db: Client, goal_id: str, user_id: str, values: dict) -> dict:
    query = db.table(TABLE).update(values).eq("id", goal_id).eq("user_id", user_id)
    return first_row(run_query(query, "updating goal"), "Goal not found")


def delete_goal(db: Client, goal_id: str, user_id: str) -> None:
    query = db.table(TABLE).delete().eq("id", goal_id).eq("user_id", user_id)
    if not run_query(query, "deleting goal").data:
        raise NotFoundError("Goal not found")
