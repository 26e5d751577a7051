# duobrain/services/recurring.py
"""Monthly materialisation of a user's standing income/expense profile.

Each user has at most one Job row recording the (month, year) whose recurring
items have already been turned into transactions. A read that finds the stamp
out of date claims the new month with a conditional UPDATE and writes the
transactions in the same commit, so two concurrent readers cannot both
materialise, and a failure leaves neither the stamp nor the rows behind.
"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from duobrain.core import clock
from duobrain.core.money import to_money
from duobrain.core.principal import Principal
from duobrain.db import models
from duobrain.services.cache import Entity, ResponseCache

logger = logging.getLogger(__name__)


def recurring_totals(user: models.User) -> Tuple[Decimal, Decimal]:
    """(recurring income, recurring expense) for one month of the user's profile."""
    income = Decimal("0")
    if user.income_type == models.IncomeType.monthly:
        income += Decimal(user.monthly_income or 0)
    income += sum((Decimal(s.amount) for s in user.income_sources), Decimal("0"))
    expense = sum((Decimal(e.amount) for e in user.recurring_expenses), Decimal("0"))
    return to_money(income), to_money(expense)


def materialize(db: Session, user: models.User, when: datetime) -> List[models.Transaction]:
    """Add (without committing) the month's RecurringIncome/RecurringExpense rows; zero totals are skipped."""
    income, expense = recurring_totals(user)
    period = f"{when.month:02d}/{when.year}"
    created = []
    if income > 0:
        created.append(models.Transaction(
            user_id=user.id,
            type=models.TransactionType.recurring_income,
            amount=income,
            category="Income",
            description=f"Recurring income for {period}",
            transaction_date=when,
        ))
    if expense > 0:
        created.append(models.Transaction(
            user_id=user.id,
            type=models.TransactionType.recurring_expense,
            amount=expense,
            category="Recurring",
            description=f"Recurring expenses for {period}",
            transaction_date=when,
        ))
    db.add_all(created)
    return created


def stamp_job(db: Session, user_id: int, when: datetime) -> None:
    """Mark (when.month, when.year) as materialised; caller commits."""
    job = db.execute(select(models.Job).where(models.Job.user_id == user_id)).scalar_one_or_none()
    if job is None:
        db.add(models.Job(user_id=user_id, last_updated_month=when.month, last_updated_year=when.year))
    else:
        job.last_updated_month = when.month
        job.last_updated_year = when.year


def _claim_month(db: Session, user_id: int, when: datetime) -> bool:
    month, year = when.month, when.year
    job = db.execute(
        select(models.Job).where(models.Job.user_id == user_id).execution_options(populate_existing=True)
    ).scalar_one_or_none()
    if job is None:
        db.add(models.Job(user_id=user_id, last_updated_month=month, last_updated_year=year))
        try:
            db.flush()
        except IntegrityError:
            # another request created the job first and owns this month
            db.rollback()
            return False
        return True

    if job.last_updated_month == month and job.last_updated_year == year:
        return False

    result = db.execute(
        update(models.Job)
        .where(
            models.Job.user_id == user_id,
            or_(models.Job.last_updated_month != month, models.Job.last_updated_year != year),
        )
        .values(last_updated_month=month, last_updated_year=year)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def ensure_synced(db: Session, cache: ResponseCache, principal: Principal, now: Optional[datetime] = None) -> int:
    """
    Materialise the current month's recurring transactions if that has not
    happened yet. Returns the number of transactions created (0 when already
    synced, or for users who have not finished onboarding).
    """
    user = db.get(models.User, principal.user_id)
    if user is None or not user.onboarding_done:
        return 0

    now = now or clock.utcnow()
    if not _claim_month(db, user.id, now):
        db.rollback()
        return 0

    try:
        created = materialize(db, user, now)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Recurring sync for user %s (%02d/%d): %d transaction(s)", user.id, now.month, now.year, len(created))
    if created:
        cache.invalidate(principal.email, Entity.TRANSACTION)
    return len(created)
