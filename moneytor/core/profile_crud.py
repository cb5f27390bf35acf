from typing import Optional
from supabase import Client

from moneytor.core.db import first_row, run_query

# One row per user, keyed by the auth user id
TABLE = "user_profiles"


def get_profile(db: Client, user_id: str) -> Optional[dict]:
    query = db.table(TABLE).select("*").eq("id", user_id).limit(1)
    rows = run_query(query, "fetching user profile").data or []
    return rows[0] if rows else None


def create_profile(db: Client, user_id: str, values: dict) -> dict:
    query = db.table(TABLE).insert({"id": user_id, **values})
    return first_row(run_query(query, "creating user profile"), "Profile was not created")


def update_profile(db: Client, user_id: str, values: dict) -> dict:
    query = db.table(TABLE).update(values).eq("id", user_id)
    return first_row(run_query(query, "updating user profile"), "Profile not found")
