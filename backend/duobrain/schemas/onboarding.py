# duobrain/schemas/onboarding.py
from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import Field, field_validator

from .base import CamelModel, Money, naive_utc
from .profile import ProfileOut


class NamedAmount(CamelModel):
    name: str = Field(..., min_length=1)
    amount: Money


class IncomeStep(CamelModel):
    monthly_income: Money
    income_type: Literal["monthly", "irregular"]
    additional_sources: List[NamedAmount] = []


class ExpensesStep(CamelModel):
    predefined_expenses: Dict[str, Money] = {}
    custom_expenses: List[NamedAmount] = []


class GoalTarget(CamelModel):
    amount: Money
    date: Optional[datetime] = None

    normalize_date = field_validator("date")(naive_utc)


class CustomGoal(GoalTarget):
    name: str = Field(..., min_length=1)


class GoalsStep(CamelModel):
    predefined_goals: Dict[str, GoalTarget] = {}
    custom_goals: List[CustomGoal] = []
    finance_tips: bool = False


class OnboardingIn(CamelModel):
    income: IncomeStep
    expenses: ExpensesStep
    goals: GoalsStep


class OnboardingOut(CamelModel):
    message: str
    user: ProfileOut
