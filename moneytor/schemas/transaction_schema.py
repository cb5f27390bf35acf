from pydantic import BaseModel, Field, field_validator
from datetime import date, datetime
from typing import List, Literal, Optional
from uuid import UUID

from moneytor.schemas.common import CategoryRef, EntryType, reject_null

# Alias so a field can be called "date"
TransactionDate = date

TransactionSortBy = Literal["date", "amount", "description", "category"]
SortOrder = Literal["asc", "desc"]


# --- Request schemas ---
class TransactionCreate(BaseModel):
    amount: float = Field(..., gt=0, description="Always positive; the type carries the direction")
    description: str = Field(..., min_length=1, max_length=255)
    category_id: UUID
    date: date
    type: EntryType

    @field_validator("description")
    @classmethod
    def description_not_blank(cls, v):
        if not v.strip():
            raise ValueError("Description is required")
        return v.strip()


class TransactionUpdate(BaseModel):
    amount: Optional[float] = Field(None, gt=0)
    description: Optional[str] = Field(None, min_length=1, max_length=255)
    category_id: Optional[UUID] = None
    date: Optional[TransactionDate] = None
    type: Optional[EntryType] = None

    @field_validator("amount", "description", "date", "type", mode="before")
    @classmethod
    def required_columns_not_null(cls, v, info):
        return reject_null(v, info.field_name)

    @field_validator("description")
    @classmethod
    def description_not_blank(cls, v):
        if not v.strip():
            raise ValueError("Description is required")
        return v.strip()


class TransactionFilters(BaseModel):
    type: Literal["income", "expense", "all"] = "all"
    category_id: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    search: Optional[str] = None


# --- Response schemas ---
class TransactionResponse(BaseModel):
    id: str
    user_id: Optional[str] = None
    category_id: Optional[str] = None
    amount: float
    description: Optional[str] = None
    date: date
    type: EntryType
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    category: Optional[CategoryRef] = None


class TransactionPage(BaseModel):
    data: List[TransactionResponse]
    count: int


class TransactionStats(BaseModel):
    total_income: float
    total_expenses: float
    net_amount: float
    transaction_count: int
