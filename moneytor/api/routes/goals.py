from fastapi import APIRouter, Depends, status
from supabase import Client
from typing import List, Optional
from uuid import UUID

from moneytor.api.deps import CurrentUser, get_current_user, get_db
from moneytor.schemas.goal_schema import (
    GoalContribution,
    GoalCreate,
    GoalFilters,
    GoalOverview,
    GoalResponse,
    GoalStatus,
    GoalUpdate,
    GoalWithProgress,
)
from moneytor.services import goal_service

router = APIRouter(prefix="/api/goals", tags=["goals"])


def goal_filters(
    status: Optional[GoalStatus] = None,
    category_id: Optional[UUID] = None,
    completed: Optional[bool] = None,
    overdue: Optional[bool] = None,
) -> GoalFilters:
    return GoalFilters(
        status=status,
        category_id=str(category_id) if category_id else None,
        completed=completed,
        overdue=overdue,
    )


@router.get("/", response_model=List[GoalResponse])
def read_goals(
    filters: GoalFilters = Depends(goal_filters),
    db: Client = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Get all goals for the current user"""
    return goal_service.list_goals(db, current_user.id, filters)


@router.get("/progress", response_model=List[GoalWithProgress])
def read_goals_progress(
    filters: GoalFilters = Depends(goal_filters),
    db: Client = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Goals with progress, daily targets and projected completion"""
    return goal_service.list_goals_with_progress(db, current_user.id, filters)


@router.get("/overview", response_model=GoalOverview)
def read_goals_overview(
    db: Client = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Get goals summary for the current user"""
    return goal_service.goal_overview(db, current_user.id)


@router.get("/{goal_id}", response_model=GoalWithProgress)
def read_goal(
    goal_id: UUID,
    db: Client = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Get a specific goal with its progress"""
    return goal_service.goal_progress(goal_service.get_goal(db, current_user.id, str(goal_id)))


@router.post("/", response_model=GoalResponse, status_code=status.HTTP_201_CREATED)
def create_new_goal(
    goal: GoalCreate,
    db: Client = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Create a new savings goal"""
    return goal_service.create_goal(db, current_user.id, goal)


@router.put("/{goal_id}", response_model=GoalResponse)
def update_existing_goal(
    goal_id: UUID,
    goal_update: GoalUpdate,
    db: Client = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Update an existing goal"""
    return goal_service.update_goal(db, current_user.id, str(goal_id), goal_update)


@router.post("/{goal_id}/contribute", response_model=GoalWithProgress)
def contribute_to_goal(
    goal_id: UUID,
    contribution: GoalContribution,
    db: Client = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Add a manual contribution to a goal"""
    updated = goal_service.contribute(db, current_user.id, str(goal_id), contribution)
    return goal_service.goal_progress(updated)


@router.delete("/{goal_id}")
def delete_existing_goal(
    goal_id: UUID,
    db: Client = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Delete a goal"""
    goal_service.delete_goal(db, current_user.id, str(goal_id))
    return {"message": "Goal deleted successfully"}
