# duobrain/schemas/charge.py
from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from duobrain.db.models import ChargeStatus
from .base import CamelModel, Money, naive_utc


class ChargeCreate(CamelModel):
    charge_name: str = Field(..., min_length=2)
    field: str = Field(..., min_length=2)
    due_date: datetime
    amount: Money

    normalize_date = field_validator("due_date")(naive_utc)


class ChargeUpdate(CamelModel):
    charge_name: Optional[str] = Field(None, min_length=2)
    field: Optional[str] = Field(None, min_length=2)
    due_date: Optional[datetime] = None
    amount: Optional[Money] = None

    normalize_date = field_validator("due_date")(naive_utc)


class ChargeOut(CamelModel):
    id: int
    user_id: int
    charge_name: str
    field: str
    due_date: datetime
    amount: float
    is_paid: bool
    status: ChargeStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
