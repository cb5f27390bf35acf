# moneytor/core/db.py
"""Helpers shared by the table wrappers: run a PostgREST query and map failures."""
import logging

import httpx
from postgrest.exceptions import APIError

from moneytor.core.errors import DatabaseError, NotFoundError

logger = logging.getLogger(__name__)

CATEGORY_EMBED = "category:categories (id, name, type, color, icon)"


def run_query(query, action: str):
    """Execute a query builder; ``action`` reads like "fetching budgets"."""
    try:
        return query.execute()
    except APIError as e:
        logger.error("❌ Error %s: %s", action, e.message)
        raise DatabaseError(e.message or f"Failed {action}")
    except httpx.HTTPError as e:
        logger.error("❌ Network error %s: %s", action, str(e))
        raise DatabaseError(f"Failed {action}")


def first_row(response, not_found: str) -> dict:
    rows = response.data or []
    if not rows:
        raise NotFoundError(not_found)
    return rows[0]
