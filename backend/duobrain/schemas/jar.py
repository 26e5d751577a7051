# duobrain/schemas/jar.py
from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import CamelModel, Money


class JarCreate(CamelModel):
    jar_name: str = Field(..., min_length=2)
    goal_amount: Money


class JarUpdate(CamelModel):
    jar_name: Optional[str] = Field(None, min_length=2)
    goal_amount: Optional[Money] = None


class MoneyIn(CamelModel):
    amount: Money


class JarOut(CamelModel):
    id: int
    user_id: int
    jar_name: str
    goal_amount: float
    amount_saved: float
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
