# duobrain/services/charges.py
"""Upcoming charges (scheduled bills): Upcoming -> Due -> Paid.

Overdue charges are swept to Due at the start of every charge read. Paying a
charge records an Expense transaction carrying the charge's id; un-paying it
deletes exactly the transactions carrying that id.
"""
import logging
from typing import Any, List

from sqlalchemy import case, delete, select, update
from sqlalchemy.orm import Session

from duobrain.core import clock
from duobrain.core.errors import NotFoundError
from duobrain.core.money import to_money
from duobrain.core.principal import Principal
from duobrain.db import models
from duobrain.schemas.charge import ChargeCreate, ChargeOut, ChargeUpdate
from duobrain.services.cache import LONG_TTL, Entity, ResponseCache, charges_key

logger = logging.getLogger(__name__)

NOT_FOUND = "Charge not found or access denied."


def _get_owned(db: Session, principal: Principal, charge_id: int, refresh: bool = False) -> models.UpcomingCharge:
    stmt = select(models.UpcomingCharge).where(
        models.UpcomingCharge.id == charge_id, models.UpcomingCharge.user_id == principal.user_id
    )
    if refresh:
        stmt = stmt.execution_options(populate_existing=True)
    charge = db.execute(stmt).scalar_one_or_none()
    if charge is None:
        raise NotFoundError(NOT_FOUND)
    return charge


def _unpaid_status(charge: models.UpcomingCharge) -> models.ChargeStatus:
    return models.ChargeStatus.due if charge.due_date < clock.utcnow() else models.ChargeStatus.upcoming


def sweep_overdue(db: Session, cache: ResponseCache, principal: Principal) -> int:
    """Move this user's unpaid, past-due Upcoming charges to Due. Returns the number moved."""
    result = db.execute(
        update(models.UpcomingCharge)
        .where(
            models.UpcomingCharge.user_id == principal.user_id,
            models.UpcomingCharge.due_date < clock.utcnow(),
            models.UpcomingCharge.is_paid.is_(False),
            models.UpcomingCharge.status == models.ChargeStatus.upcoming,
        )
        .values(status=models.ChargeStatus.due)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    moved = result.rowcount or 0
    if moved:
        logger.info("Marked %d charge(s) as due for user %s", moved, principal.user_id)
        # cached Upcoming/Due lists are now wrong
        cache.invalidate(principal.email, Entity.CHARGE)
    return moved


def list_charges(db: Session, cache: ResponseCache, principal: Principal, status: models.ChargeStatus) -> List[Any]:
    sweep_overdue(db, cache, principal)

    def load() -> List[ChargeOut]:
        rows = db.execute(
            select(models.UpcomingCharge)
            .where(models.UpcomingCharge.user_id == principal.user_id, models.UpcomingCharge.status == status)
            .order_by(models.UpcomingCharge.due_date, models.UpcomingCharge.id)
        ).scalars().all()
        return [ChargeOut.model_validate(c) for c in rows]

    return cache.get_or_load(charges_key(principal.email, status.value), LONG_TTL, load)


def list_dues(db: Session, cache: ResponseCache, principal: Principal) -> List[Any]:
    return list_charges(db, cache, principal, models.ChargeStatus.due)


def create_charge(db: Session, cache: ResponseCache, principal: Principal, payload: ChargeCreate) -> ChargeOut:
    charge = models.UpcomingCharge(
        user_id=principal.user_id,
        charge_name=payload.charge_name.strip(),
        field=payload.field.strip(),
        due_date=payload.due_date,
        amount=to_money(payload.amount),
        is_paid=False,
        status=models.ChargeStatus.upcoming,
    )
    db.add(charge)
    db.commit()
    db.refresh(charge)
    cache.invalidate(principal.email, Entity.CHARGE)
    return ChargeOut.model_validate(charge)


def update_charge(db: Session, cache: ResponseCache, principal: Principal, charge_id: int, payload: ChargeUpdate) -> ChargeOut:
    charge = _get_owned(db, principal, charge_id)
    if payload.charge_name is not None:
        charge.charge_name = payload.charge_name.strip()
    if payload.field is not None:
        charge.field = payload.field.strip()
    if payload.amount is not None:
        charge.amount = to_money(payload.amount)
    if payload.due_date is not None:
        charge.due_date = payload.due_date
        if not charge.is_paid:
            charge.status = _unpaid_status(charge)
    db.add(charge)
    db.commit()
    db.refresh(charge)
    cache.invalidate(principal.email, Entity.CHARGE)
    return ChargeOut.model_validate(charge)


def mark_paid(db: Session, cache: ResponseCache, principal: Principal, charge_id: int) -> ChargeOut:
    result = db.execute(
        update(models.UpcomingCharge)
        .where(
            models.UpcomingCharge.id == charge_id,
            models.UpcomingCharge.user_id == principal.user_id,
            models.UpcomingCharge.is_paid.is_(False),
        )
        .values(is_paid=True, status=models.ChargeStatus.paid)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        # already paid (nothing to record) or not ours
        db.rollback()
        return ChargeOut.model_validate(_get_owned(db, principal, charge_id))

    charge = _get_owned(db, principal, charge_id, refresh=True)
    db.add(models.Transaction(
        user_id=principal.user_id,
        type=models.TransactionType.expense,
        amount=charge.amount,
        category=charge.field,
        description=f"Paid: {charge.charge_name}",
        transaction_date=clock.utcnow(),
        charge_id=charge.id,
    ))
    db.commit()
    cache.invalidate(principal.email, Entity.CHARGE, Entity.TRANSACTION)
    return ChargeOut.model_validate(charge)


def mark_not_paid(db: Session, cache: ResponseCache, principal: Principal, charge_id: int) -> ChargeOut:
    result = db.execute(
        update(models.UpcomingCharge)
        .where(
            models.UpcomingCharge.id == charge_id,
            models.UpcomingCharge.user_id == principal.user_id,
            models.UpcomingCharge.is_paid.is_(True),
        )
        .values(
            is_paid=False,
            status=case(
                (models.UpcomingCharge.due_date < clock.utcnow(), models.ChargeStatus.due.value),
                else_=models.ChargeStatus.upcoming.value,
            ),
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        db.rollback()
        return ChargeOut.model_validate(_get_owned(db, principal, charge_id))

    db.execute(
        delete(models.Transaction)
        .where(models.Transaction.charge_id == charge_id, models.Transaction.user_id == principal.user_id)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    charge = _get_owned(db, principal, charge_id, refresh=True)
    cache.invalidate(principal.email, Entity.CHARGE, Entity.TRANSACTION)
    return ChargeOut.model_validate(charge)


def delete_charge(db: Session, cache: ResponseCache, principal: Principal, charge_id: int) -> None:
    charge = _get_owned(db, principal, charge_id)
    # a paid bill stays in the transaction history
    db.execute(
        update(models.Transaction)
        .where(models.Transaction.charge_id == charge.id)
        .values(charge_id=None)
        .execution_options(synchronize_session=False)
    )
    db.delete(charge)
    db.commit()
    cache.invalidate(principal.email, Entity.CHARGE, Entity.TRANSACTION)
