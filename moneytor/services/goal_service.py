import logging
from datetime import date, timedelta
from typing import List, Optional
from supabase import Client

from moneytor.core import category_crud, goal_crud
from moneytor.core.errors import InvariantError, NotFoundError
from moneytor.schemas.goal_schema import (
    GoalContribution,
    GoalCreate,
    GoalFilters,
    GoalOverview,
    GoalUpdate,
    GoalWithProgress,
)
from moneytor.utils.dates import parse_date

logger = logging.getLogger(__name__)

# A goal is on track at 80% of the progress its elapsed time would suggest
ON_TRACK_RATIO = 0.8


def _category_ref(category: dict) -> dict:
    return {k: category.get(k) for k in ("id", "name", "type", "color", "icon")}


def is_overdue(goal: dict, today: date) -> bool:
    target_date = parse_date(goal.get("target_date"))
    return bool(target_date) and target_date < today and (goal.get("status") or "active") == "active"


def goal_progress(goal: dict, today: Optional[date] = None) -> GoalWithProgress:
    today = today or date.today()

    target = float(goal.get("target_amount") or 0)
    current = float(goal.get("current_amount") or 0)
    status = goal.get("status") or "active"
    created = parse_date(goal.get("created_at"), today)

    progress = current / target * 100 if target > 0 else 0.0
    remaining = max(0.0, target - current)

    days_remaining = None
    daily_target = None
    monthly_target = None
    projected_completion = None
    is_on_track = True

    target_date = parse_date(goal.get("target_date"))
    if target_date:
        days_remaining = max(0, (target_date - today).days)

        if days_remaining > 0 and remaining > 0:
            daily_target = remaining / days_remaining
            monthly_target = daily_target * 30

        if days_remaining > 0 and target > 0:
            span = (target_date - created).days
            expected = (span - days_remaining) / span * 100 if span > 0 else 100.0
            is_on_track = progress >= expected * ON_TRACK_RATIO

        if daily_target and current > 0:
            # Extrapolate the average saving rate since the goal was created
            rate = current / max(1, (today - created).days)
            days_needed = int(remaining / rate)
            # Slow savers can project past the last representable date
            if days_needed <= (date.max - today).days:
                projected_completion = today + timedelta(days=days_needed)

    return GoalWithProgress(
        **{**goal, "current_amount": current, "status": status},
        progress_percentage=min(100.0, progress),
        remaining_amount=remaining,
        is_completed=current >= target or status == "completed",
        days_remaining=days_remaining,
        daily_target=daily_target,
        monthly_target=monthly_target,
        projected_completion=projected_completion,
        is_on_track=is_on_track,
    )


def list_goals(db: Client, user_id: str, filters: Optional[GoalFilters] = None,
               today: Optional[date] = None) -> List[dict]:
    filters = filters or GoalFilters()
    today = today or date.today()

    status = filters.status
    if filters.completed is not None:
        status = "completed" if filters.completed else "active"

    goals = goal_crud.get_goals_by_user(db, user_id, status, filters.category_id)

    if filters.overdue is not None:
        goals = [
            g for g in goals
            if g.get("target_date") and is_overdue(g, today) == filters.overdue
        ]

    for goal in goals:
        goal["status"] = goal.get("status") or "active"
    return goals


def list_goals_with_progress(db: Client, user_id: str, filters: Optional[GoalFilters] = None,
                             today: Optional[date] = None) -> List[GoalWithProgress]:
    today = today or date.today()
    return [goal_progress(g, today) for g in list_goals(db, user_id, filters, today)]


def get_goal(db: Client, user_id: str, goal_id: str) -> dict:
    return goal_crud.get_goal_by_id(db, goal_id, user_id)


def create_goal(db: Client, user_id: str, payload: GoalCreate) -> dict:
    values = payload.model_dump(mode="json", exclude_none=True)
    row = goal_crud.create_goal(db, user_id, values)
    logger.info("🎯 Created goal '%s' (target %.2f) for user %s", payload.name, payload.target_amount, user_id)
    return row


def update_goal(db: Client, user_id: str, goal_id: str, payload: GoalUpdate) -> dict:
    values = payload.model_dump(mode="json", exclude_unset=True)
    if not values:
        raise InvariantError("No fields to update")

    existing = goal_crud.get_goal_by_id(db, goal_id, user_id)
    category = existing.get("category")
    if values.get("category_id") and values["category_id"] != existing.get("category_id"):
        try:
            category = category_crud.get_category(db, values["category_id"], user_id)
        except NotFoundError:
            raise InvariantError("Invalid category")
    elif "category_id" in values and not values["category_id"]:
        category = None

    row = goal_crud.update_goal(db, goal_id, user_id, values)
    # The update returns the bare row without the embedded category
    row["category"] = _category_ref(category) if category else None
    return row


def delete_goal(db: Client, user_id: str, goal_id: str) -> None:
    goal_crud.delete_goal(db, goal_id, user_id)


def contribute(db: Client, user_id: str, goal_id: str, contribution: GoalContribution) -> dict:
    """Add a contribution; reaching the target completes the goal."""
    goal = goal_crud.get_goal_by_id(db, goal_id, user_id)

    new_amount = float(goal.get("current_amount") or 0) + contribution.amount
    status = goal.get("status") or "active"
    if new_amount >= float(goal["target_amount"]):
        status = "completed"

    updated = goal_crud.update_goal(db, goal_id, user_id, {"current_amount": new_amount, "status": status})
    updated["category"] = goal.get("category")

    if status == "completed":
        logger.info("🏆 Goal %s reached its target for user %s", goal_id, user_id)
    return updated


def goal_overview(db: Client, user_id: str, today: Optional[date] = None) -> GoalOverview:
    today = today or date.today()
    goals = list_goals_with_progress(db, user_id, today=today)

    return GoalOverview(
        total_goals=len(goals),
        active_goals=len([g for g in goals if g.status == "active"]),
        completed_goals=len([g for g in goals if g.status == "completed"]),
        total_target_amount=sum(g.target_amount for g in goals),
        total_current_amount=sum(g.current_amount for g in goals),
        total_progress=sum(g.progress_percentage for g in goals) / len(goals) if goals else 0.0,
        overdue=len([g for g in goals if g.target_date and g.target_date < today and g.status == "active"]),
    )
