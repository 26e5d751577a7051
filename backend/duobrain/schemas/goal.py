# duobrain/schemas/goal.py
from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from duobrain.db.models import GoalStatus
from .base import CamelModel, Money, naive_utc


class GoalCreate(CamelModel):
    goal_name: str = Field(..., min_length=3)
    target_amount: Money
    target_date: datetime

    normalize_date = field_validator("target_date")(naive_utc)


class GoalUpdate(CamelModel):
    goal_name: Optional[str] = Field(None, min_length=3)
    target_amount: Optional[Money] = None
    target_date: Optional[datetime] = None

    normalize_date = field_validator("target_date")(naive_utc)


class ContributionIn(CamelModel):
    amount: Money


class GoalOut(CamelModel):
    id: int
    user_id: int
    goal_name: str
    target_amount: float
    amount_saved: float
    target_date: datetime
    status: GoalStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
