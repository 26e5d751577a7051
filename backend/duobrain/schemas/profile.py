# duobrain/schemas/profile.py
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from duobrain.db.models import IncomeType
from .base import CamelModel, NonNegativeMoney


class IncomeSourceIn(CamelModel):
    source_name: str = Field(min_length=2)
    amount: NonNegativeMoney


class IncomeSourceOut(CamelModel):
    id: int
    source_name: str
    amount: float


class RecurringExpenseIn(CamelModel):
    expense_name: str = Field(min_length=2)
    amount: NonNegativeMoney


class RecurringExpenseOut(CamelModel):
    id: int
    expense_name: str
    amount: float


class ProfileUpdate(CamelModel):
    full_name: Optional[str] = Field(None, min_length=2)
    monthly_income: Optional[NonNegativeMoney] = None
    income_type: Optional[IncomeType] = None
    finance_tips_opt_in: Optional[bool] = None


class ProfileOut(CamelModel):
    id: int
    full_name: str
    email: str
    monthly_income: float
    income_type: IncomeType
    income_sources: List[IncomeSourceOut] = []
    recurring_expenses: List[RecurringExpenseOut] = []
    finance_tips_opt_in: bool
    onboarding_done: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
