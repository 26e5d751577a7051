# duobrain/services/transactions.py
import calendar
import logging
import math
from collections import defaultdict
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from duobrain.core import clock
from duobrain.core.errors import NotFoundError
from duobrain.core.money import to_money
from duobrain.core.principal import Principal
from duobrain.db import models
from duobrain.schemas.transaction import SummaryOut, TransactionCreate, TransactionOut, TransactionPage, TransactionUpdate, TrendPoint
from duobrain.services import recurring
from duobrain.services.cache import SHORT_TTL, Entity, ResponseCache, summary_key, transactions_key

logger = logging.getLogger(__name__)

NOT_FOUND = "Transaction not found or you do not have permission to access it."

INCOME_TYPES = (models.TransactionType.income, models.TransactionType.recurring_income)
EXPENSE_TYPES = (models.TransactionType.expense, models.TransactionType.recurring_expense)


def month_bounds(year: int, month: int) -> Tuple[datetime, datetime]:
    """[first instant of the month, first instant of the next month)."""
    start = datetime(year, month, 1)
    end = datetime(year + 1, 1, 1) if month == 12 else datetime(year, month + 1, 1)
    return start, end


def _get_owned(db: Session, principal: Principal, txn_id: int) -> models.Transaction:
    txn = db.execute(
        select(models.Transaction).where(
            models.Transaction.id == txn_id, models.Transaction.user_id == principal.user_id
        )
    ).scalar_one_or_none()
    if txn is None:
        raise NotFoundError(NOT_FOUND)
    return txn


def create_transaction(db: Session, cache: ResponseCache, principal: Principal, payload: TransactionCreate) -> TransactionOut:
    txn = models.Transaction(
        user_id=principal.user_id,
        type=models.TransactionType(payload.type.value),
        amount=to_money(payload.amount),
        category=payload.category.strip(),
        description=payload.description,
        transaction_date=payload.transaction_date or clock.utcnow(),
    )
    db.add(txn)
    db.commit()
    db.refresh(txn)
    cache.invalidate(principal.email, Entity.TRANSACTION)
    return TransactionOut.model_validate(txn)


def list_transactions(
    db: Session,
    cache: ResponseCache,
    principal: Principal,
    page: int = 1,
    limit: int = 10,
    type_: Optional[models.TransactionType] = None,
    month: Optional[int] = None,
    year: Optional[int] = None,
) -> Any:
    """
    Paginated transactions for the current user, newest first.
    The month filter applies only when both month and year are given.
    """
    recurring.ensure_synced(db, cache, principal)

    def load() -> TransactionPage:
        filters = [models.Transaction.user_id == principal.user_id]
        if type_ is not None:
            filters.append(models.Transaction.type == type_)
        if month and year:
            start, end = month_bounds(year, month)
            filters.append(models.Transaction.transaction_date >= start)
            filters.append(models.Transaction.transaction_date < end)

        total = db.execute(select(func.count(models.Transaction.id)).where(*filters)).scalar_one()
        rows = db.execute(
            select(models.Transaction)
            .where(*filters)
            .order_by(models.Transaction.transaction_date.desc(), models.Transaction.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        ).scalars().all()
        return TransactionPage(
            items=[TransactionOut.model_validate(t) for t in rows],
            total_pages=math.ceil(total / limit),
            current_page=page,
        )

    key = transactions_key(principal.email, page, limit, type_.value if type_ else None, month, year)
    return cache.get_or_load(key, SHORT_TTL, load)


def monthly_totals(db: Session, user_id: int, year: int, month: int) -> Dict[models.TransactionType, float]:
    start, end = month_bounds(year, month)
    rows = db.execute(
        select(models.Transaction.type, func.sum(models.Transaction.amount))
        .where(
            models.Transaction.user_id == user_id,
            models.Transaction.transaction_date >= start,
            models.Transaction.transaction_date < end,
        )
        .group_by(models.Transaction.type)
    ).all()
    return {t: float(total or 0) for t, total in rows}


def summary(
    db: Session,
    cache: ResponseCache,
    principal: Principal,
    month: Optional[int] = None,
    year: Optional[int] = None,
) -> Any:
    recurring.ensure_synced(db, cache, principal)
    now = clock.utcnow()
    target_month = month or now.month
    target_year = year or now.year

    def load() -> SummaryOut:
        totals = monthly_totals(db, principal.user_id, target_year, target_month)
        return SummaryOut(
            total_income=sum(totals.get(t, 0.0) for t in INCOME_TYPES),
            total_expense=sum(totals.get(t, 0.0) for t in EXPENSE_TYPES),
        )

    return cache.get_or_load(summary_key(principal.email, target_month, target_year), SHORT_TTL, load)


def spending_trend(db: Session, principal: Principal) -> List[TrendPoint]:
    """Daily Expense totals for every day of the current month (zero-filled)."""
    now = clock.utcnow()
    start, end = month_bounds(now.year, now.month)
    rows = db.execute(
        select(models.Transaction.transaction_date, models.Transaction.amount).where(
            models.Transaction.user_id == principal.user_id,
            models.Transaction.type == models.TransactionType.expense,
            models.Transaction.transaction_date >= start,
            models.Transaction.transaction_date < end,
        )
    ).all()

    by_day: Dict[int, float] = defaultdict(float)
    for when, amount in rows:
        by_day[when.day] += float(amount)

    days_in_month = calendar.monthrange(now.year, now.month)[1]
    return [TrendPoint(day=str(day), amount=round(by_day.get(day, 0.0), 2)) for day in range(1, days_in_month + 1)]


def get_transaction(db: Session, principal: Principal, txn_id: int) -> TransactionOut:
    return TransactionOut.model_validate(_get_owned(db, principal, txn_id))


def update_transaction(
    db: Session, cache: ResponseCache, principal: Principal, txn_id: int, payload: TransactionUpdate
) -> TransactionOut:
    txn = _get_owned(db, principal, txn_id)
    if payload.amount is not None:
        txn.amount = to_money(payload.amount)
    if payload.type is not None:
        txn.type = models.TransactionType(payload.type.value)
    if payload.category is not None:
        txn.category = payload.category.strip()
    if "description" in payload.model_fields_set:
        txn.description = payload.description
    if payload.transaction_date is not None:
        txn.transaction_date = payload.transaction_date
    db.add(txn)
    db.commit()
    db.refresh(txn)
    cache.invalidate(principal.email, Entity.TRANSACTION)
    return TransactionOut.model_validate(txn)


def delete_transaction(db: Session, cache: ResponseCache, principal: Principal, txn_id: int) -> None:
    txn = _get_owned(db, principal, txn_id)
    db.delete(txn)
    db.commit()
    cache.invalidate(principal.email, Entity.TRANSACTION)
