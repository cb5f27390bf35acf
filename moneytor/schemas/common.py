from pydantic import BaseModel
from typing import Literal, Optional

EntryType = Literal["income", "expense"]


def reject_null(value, field_name: str):
    """Partial updates may omit a required column but never clear it."""
    if value is None:
        raise ValueError(f"{field_name} cannot be null")
    return value


class CategoryRef(BaseModel):
    """Category embedded in transaction, budget and goal rows."""
    id: str
    name: str
    type: EntryType
    color: Optional[str] = None
    icon: Optional[str] = None
