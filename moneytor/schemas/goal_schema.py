from pydantic import BaseModel, Field, field_validator
from typing import Literal, Optional
from datetime import date, datetime
from uuid import UUID

from moneytor.schemas.common import CategoryRef, reject_null

GoalStatus = Literal["active", "paused", "completed", "cancelled"]


def clean_goal_name(v: str) -> str:
    if not v.strip():
        raise ValueError("Goal name cannot be empty")
    return v.strip()


class GoalBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    target_amount: float = Field(..., gt=0)
    target_date: Optional[date] = None
    category_id: Optional[UUID] = None
    status: GoalStatus = "active"

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v):
        return clean_goal_name(v)


class GoalCreate(GoalBase):
    current_amount: float = Field(0.0, ge=0)


class GoalUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    target_amount: Optional[float] = Field(None, gt=0)
    current_amount: Optional[float] = Field(None, ge=0)
    target_date: Optional[date] = None
    category_id: Optional[UUID] = None
    status: Optional[GoalStatus] = None

    @field_validator("name", "target_amount", "current_amount", "status", mode="before")
    @classmethod
    def required_columns_not_null(cls, v, info):
        return reject_null(v, info.field_name)

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v):
        return clean_goal_name(v)


class GoalContribution(BaseModel):
    amount: float = Field(..., gt=0, description="Contribution amount must be positive")
    description: Optional[str] = None


class GoalFilters(BaseModel):
    status: Optional[GoalStatus] = None
    category_id: Optional[str] = None
    completed: Optional[bool] = None
    overdue: Optional[bool] = None


class GoalResponse(BaseModel):
    id: str
    user_id: Optional[str] = None
    name: str
    description: Optional[str] = None
    target_amount: float
    current_amount: float = 0.0
    target_date: Optional[date] = None
    category_id: Optional[str] = None
    status: GoalStatus = "active"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    category: Optional[CategoryRef] = None

    @field_validator("status", mode="before")
    @classmethod
    def default_status(cls, v):
        # Rows written before the status column existed come back as null
        return v or "active"

    @field_validator("current_amount", mode="before")
    @classmethod
    def default_current_amount(cls, v):
        return 0.0 if v is None else v


class GoalWithProgress(GoalResponse):
    progress_percentage: float
    remaining_amount: float
    is_completed: bool
    days_remaining: Optional[int] = None
    daily_target: Optional[float] = None
    monthly_target: Optional[float] = None
    projected_completion: Optional[date] = None
    is_on_track: bool = True


class GoalOverview(BaseModel):
    total_goals: int
    active_goals: int
    completed_goals: int
    total_target_amount: float
    total_current_amount: float
    total_progress: float
    overdue: int
