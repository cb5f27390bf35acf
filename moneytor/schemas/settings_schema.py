from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional

from moneytor.schemas.common import reject_null
from moneytor.utils.currency import get_currency


class SettingsUpdate(BaseModel):
    currency: Optional[str] = None
    timezone: Optional[str] = Field(None, min_length=1, max_length=64)

    @field_validator("currency", "timezone", mode="before")
    @classmethod
    def settings_not_null(cls, v, info):
        return reject_null(v, info.field_name)

    @field_validator("currency")
    @classmethod
    def supported_currency(cls, v):
        currency = get_currency(v)
        if currency is None:
            raise ValueError(f"Unsupported currency '{v}'")
        return currency.code


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = Field(None, max_length=100)
    avatar_url: Optional[str] = None


class UserProfile(BaseModel):
    id: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    currency: str
    timezone: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
