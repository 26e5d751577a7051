# duobrain/services/profile.py
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from duobrain.core.errors import NotFoundError
from duobrain.core.money import to_money
from duobrain.core.principal import Principal
from duobrain.db import models
from duobrain.schemas.profile import IncomeSourceIn, ProfileOut, ProfileUpdate, RecurringExpenseIn
from duobrain.services import recurring
from duobrain.services.cache import LONG_TTL, Entity, ResponseCache, profile_key


def load_user(db: Session, principal: Principal) -> models.User:
    user = db.execute(
        select(models.User)
        .where(models.User.id == principal.user_id)
        .options(selectinload(models.User.income_sources), selectinload(models.User.recurring_expenses))
        .execution_options(populate_existing=True)
    ).scalar_one_or_none()
    if user is None:
        raise NotFoundError("User not found")
    return user


def _saved(db: Session, cache: ResponseCache, principal: Principal) -> ProfileOut:
    db.commit()
    cache.invalidate(principal.email, Entity.USER)
    return ProfileOut.model_validate(load_user(db, principal))


def get_profile(db: Session, cache: ResponseCache, principal: Principal) -> Any:
    recurring.ensure_synced(db, cache, principal)
    return cache.get_or_load(
        profile_key(principal.email),
        LONG_TTL,
        lambda: ProfileOut.model_validate(load_user(db, principal)),
    )


def update_profile(db: Session, cache: ResponseCache, principal: Principal, payload: ProfileUpdate) -> ProfileOut:
    user = load_user(db, principal)
    if payload.full_name is not None:
        user.full_name = payload.full_name.strip()
    if payload.monthly_income is not None:
        user.monthly_income = to_money(payload.monthly_income)
    if payload.income_type is not None:
        user.income_type = payload.income_type
    if payload.finance_tips_opt_in is not None:
        user.finance_tips_opt_in = payload.finance_tips_opt_in
    return _saved(db, cache, principal)


def add_income_source(db: Session, cache: ResponseCache, principal: Principal, payload: IncomeSourceIn) -> ProfileOut:
    user = load_user(db, principal)
    user.income_sources.append(models.IncomeSource(source_name=payload.source_name.strip(), amount=to_money(payload.amount)))
    return _saved(db, cache, principal)


def _owned_item(items, item_id: int, label: str):
    for item in items:
        if item.id == item_id:
            return item
    raise NotFoundError(f"{label} not found")


def update_income_source(db: Session, cache: ResponseCache, principal: Principal, source_id: int, payload: IncomeSourceIn) -> ProfileOut:
    user = load_user(db, principal)
    source = _owned_item(user.income_sources, source_id, "Income source")
    source.source_name = payload.source_name.strip()
    source.amount = to_money(payload.amount)
    return _saved(db, cache, principal)


def delete_income_source(db: Session, cache: ResponseCache, principal: Principal, source_id: int) -> ProfileOut:
    user = load_user(db, principal)
    user.income_sources.remove(_owned_item(user.income_sources, source_id, "Income source"))
    return _saved(db, cache, principal)


def add_recurring_expense(db: Session, cache: ResponseCache, principal: Principal, payload: RecurringExpenseIn) -> ProfileOut:
    user = load_user(db, principal)
    user.recurring_expenses.append(models.RecurringExpense(expense_name=payload.expense_name.strip(), amount=to_money(payload.amount)))
    return _saved(db, cache, principal)


def update_recurring_expense(db: Session, cache: ResponseCache, principal: Principal, expense_id: int, payload: RecurringExpenseIn) -> ProfileOut:
    user = load_user(db, principal)
    expense = _owned_item(user.recurring_expenses, expense_id, "Expense")
    expense.expense_name = payload.expense_name.strip()
    expense.amount = to_money(payload.amount)
    return _saved(db, cache, principal)


def delete_recurring_expense(db: Session, cache: ResponseCache, principal: Principal, expense_id: int) -> ProfileOut:
    user = load_user(db, principal)
    user.recurring_expenses.remove(_owned_item(user.recurring_expenses, expense_id, "Expense"))
    return _saved(db, cache, principal)
