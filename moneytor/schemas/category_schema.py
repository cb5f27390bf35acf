from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional

from moneytor.schemas.common import EntryType, reject_null

HEX_COLOR = r"^#[0-9A-Fa-f]{6}$"


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    type: EntryType
    color: str = Field("#6366f1", pattern=HEX_COLOR)
    icon: Optional[str] = None


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    type: Optional[EntryType] = None
    color: Optional[str] = Field(None, pattern=HEX_COLOR)
    icon: Optional[str] = None

    @field_validator("name", "type", mode="before")
    @classmethod
    def required_columns_not_null(cls, v, info):
        return reject_null(v, info.field_name)


class CategoryResponse(BaseModel):
    id: str
    user_id: Optional[str] = None
    name: str
    type: EntryType
    color: Optional[str] = None
    icon: Optional[str] = None
    created_at: Optional[datetime] = None


class CategoryWithStats(CategoryResponse):
    transactions_count: int = 0
    total_amount: float = 0.0
