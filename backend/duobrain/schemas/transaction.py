# duobrain/schemas/transaction.py
from pydantic import Field, field_validator
from datetime import datetime
from typing import List, Optional
from enum import Enum

from duobrain.db.models import TransactionType
from .base import CamelModel, Money, naive_utc


class EntryType(str, Enum):
    """Types a client may record directly; recurring types are system-generated."""
    income = "Income"
    expense = "Expense"


class TransactionCreate(CamelModel):
    amount: Money
    type: EntryType
    category: str = Field(..., min_length=2)
    description: Optional[str] = None
    transaction_date: Optional[datetime] = None

    normalize_date = field_validator("transaction_date")(naive_utc)


class TransactionUpdate(CamelModel):
    amount: Optional[Money] = None
    type: Optional[EntryType] = None
    category: Optional[str] = Field(None, min_length=2)
    description: Optional[str] = None
    transaction_date: Optional[datetime] = None

    normalize_date = field_validator("transaction_date")(naive_utc)


class TransactionOut(CamelModel):
    id: int
    user_id: int
    amount: float
    type: TransactionType
    category: str
    description: Optional[str] = None
    transaction_date: datetime
    charge_id: Optional[int] = None
    jar_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TransactionPage(CamelModel):
    items: List[TransactionOut]
    total_pages: int
    current_page: int


class SummaryOut(CamelModel):
    total_income: float
    total_expense: float


class TrendPoint(CamelModel):
    day: str
    amount: float
