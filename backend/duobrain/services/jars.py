# duobrain/services/jars.py
"""Jars: named savings buckets funded by explicit deposits and withdrawals.

Balance changes are single conditional UPDATEs, so concurrent withdrawals
cannot overdraw a jar. Every deposit/withdrawal also records a Savings
transaction linked to the jar.
"""
import logging
from typing import Any, List

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from duobrain.core import clock
from duobrain.core.errors import BusinessRuleError, NotFoundError
from duobrain.core.money import to_money
from duobrain.core.principal import Principal
from duobrain.db import models
from duobrain.schemas.jar import JarCreate, JarOut, JarUpdate
from duobrain.services.cache import LONG_TTL, Entity, ResponseCache, jars_key

logger = logging.getLogger(__name__)

NOT_FOUND = "Jar not found or access denied."


def _get_owned(db: Session, principal: Principal, jar_id: int, refresh: bool = False) -> models.Jar:
    stmt = select(models.Jar).where(models.Jar.id == jar_id, models.Jar.user_id == principal.user_id)
    if refresh:
        stmt = stmt.execution_options(populate_existing=True)
    jar = db.execute(stmt).scalar_one_or_none()
    if jar is None:
        raise NotFoundError(NOT_FOUND)
    return jar


def list_jars(db: Session, cache: ResponseCache, principal: Principal) -> List[Any]:
    def load() -> List[JarOut]:
        rows = db.execute(
            select(models.Jar)
            .where(models.Jar.user_id == principal.user_id)
            .order_by(models.Jar.created_at, models.Jar.id)
        ).scalars().all()
        return [JarOut.model_validate(j) for j in rows]

    return cache.get_or_load(jars_key(principal.email), LONG_TTL, load)


def create_jar(db: Session, cache: ResponseCache, principal: Principal, payload: JarCreate) -> JarOut:
    jar = models.Jar(
        user_id=principal.user_id,
        jar_name=payload.jar_name.strip(),
        goal_amount=to_money(payload.goal_amount),
        amount_saved=to_money(0),
    )
    db.add(jar)
    db.commit()
    db.refresh(jar)
    cache.invalidate(principal.email, Entity.JAR)
    return JarOut.model_validate(jar)


def update_jar(db: Session, cache: ResponseCache, principal: Principal, jar_id: int, payload: JarUpdate) -> JarOut:
    jar = _get_owned(db, principal, jar_id)
    if payload.jar_name is not None:
        jar.jar_name = payload.jar_name.strip()
    if payload.goal_amount is not None:
        jar.goal_amount = to_money(payload.goal_amount)
    db.add(jar)
    db.commit()
    db.refresh(jar)
    cache.invalidate(principal.email, Entity.JAR)
    return JarOut.model_validate(jar)


def delete_jar(db: Session, cache: ResponseCache, principal: Principal, jar_id: int) -> None:
    jar = _get_owned(db, principal, jar_id)
    # keep the savings history, drop the link
    db.execute(
        update(models.Transaction)
        .where(models.Transaction.jar_id == jar.id)
        .values(jar_id=None)
        .execution_options(synchronize_session=False)
    )
    db.delete(jar)
    db.commit()
    cache.invalidate(principal.email, Entity.JAR, Entity.TRANSACTION)


def _record_movement(db: Session, jar: models.Jar, amount, kind: models.TransactionType, description: str) -> None:
    db.add(models.Transaction(
        user_id=jar.user_id,
        type=kind,
        amount=amount,
        category="Savings",
        description=description,
        transaction_date=clock.utcnow(),
        jar_id=jar.id,
    ))


def deposit(db: Session, cache: ResponseCache, principal: Principal, jar_id: int, amount: float) -> JarOut:
    value = to_money(amount)
    result = db.execute(
        update(models.Jar)
        .where(models.Jar.id == jar_id, models.Jar.user_id == principal.user_id)
        .values(amount_saved=models.Jar.amount_saved + value)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        db.rollback()
        raise NotFoundError(NOT_FOUND)

    jar = _get_owned(db, principal, jar_id, refresh=True)
    _record_movement(db, jar, value, models.TransactionType.expense, f"Deposit to jar: {jar.jar_name}")
    db.commit()
    logger.info("Deposited %s into jar %s for user %s", value, jar.id, principal.user_id)
    cache.invalidate(principal.email, Entity.JAR, Entity.TRANSACTION)
    return JarOut.model_validate(jar)


def withdraw(db: Session, cache: ResponseCache, principal: Principal, jar_id: int, amount: float) -> JarOut:
    value = to_money(amount)
    result = db.execute(
        update(models.Jar)
        .where(
            models.Jar.id == jar_id,
            models.Jar.user_id == principal.user_id,
            models.Jar.amount_saved >= value,
        )
        .values(amount_saved=models.Jar.amount_saved - value)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        db.rollback()
        # distinguish a missing jar from an insufficient balance
        _get_owned(db, principal, jar_id)
        raise BusinessRuleError("Withdrawal amount cannot be greater than the saved amount.")

    jar = _get_owned(db, principal, jar_id, refresh=True)
    _record_movement(db, jar, value, models.TransactionType.income, f"Withdrawal from jar: {jar.jar_name}")
    db.commit()
    logger.info("Withdrew %s from jar %s for user %s", value, jar.id, principal.user_id)
    cache.invalidate(principal.email, Entity.JAR, Entity.TRANSACTION)
    return JarOut.model_validate(jar)
