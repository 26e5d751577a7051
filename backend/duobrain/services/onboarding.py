# duobrain/services/onboarding.py
import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from duobrain.core import clock
from duobrain.core.errors import BusinessRuleError
from duobrain.core.money import to_money
from duobrain.core.principal import Principal
from duobrain.db import models
from duobrain.schemas.onboarding import OnboardingIn
from duobrain.schemas.profile import ProfileOut
from duobrain.services import recurring
from duobrain.services.cache import Entity, ResponseCache
from duobrain.services.profile import load_user

logger = logging.getLogger(__name__)

PREDEFINED_GOAL_NAMES = {
    "laptop": "New Laptop",
    "trip": "Weekend Trip",
    "emergency": "Build Emergency Fund",
    "invest": "Invest in Stocks",
}

DEFAULT_GOAL_HORIZON = timedelta(days=365)


def _goal_and_jar(user_id: int, name: str, amount: float, date: Optional[datetime], now: datetime):
    target = to_money(amount)
    goal = models.Goal(
        user_id=user_id,
        goal_name=name,
        target_amount=target,
        amount_saved=to_money(0),
        target_date=date or now + DEFAULT_GOAL_HORIZON,
        status=models.GoalStatus.in_progress,
    )
    jar = models.Jar(user_id=user_id, jar_name=name, goal_amount=target, amount_saved=to_money(0))
    return goal, jar


def _claim_onboarding(db: Session, user_id: int) -> bool:
    result = db.execute(
        update(models.User)
        .where(models.User.id == user_id, models.User.onboarding_done.is_(False))
        .values(onboarding_done=True)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def submit(db: Session, cache: ResponseCache, principal: Principal, payload: OnboardingIn) -> dict:
    """
    Store the onboarding questionnaire: income profile, recurring expenses,
    one goal + jar per chosen goal, and this month's recurring transactions.
    Everything lands in a single commit.
    """
    user = load_user(db, principal)
    # conditional update: a submission that already flipped the flag matches no row
    if not _claim_onboarding(db, user.id):
        db.rollback()
        raise BusinessRuleError("Onboarding already completed.")

    now = clock.utcnow()
    income, expenses, goals = payload.income, payload.expenses, payload.goals

    user.monthly_income = to_money(income.monthly_income)
    user.income_type = models.IncomeType.monthly if income.income_type == "monthly" else models.IncomeType.irregular
    user.income_sources = [
        models.IncomeSource(source_name=s.name, amount=to_money(s.amount)) for s in income.additional_sources
    ]

    recurring_expenses = [
        models.RecurringExpense(expense_name=name, amount=to_money(amount))
        for name, amount in expenses.predefined_expenses.items()
    ]
    recurring_expenses += [
        models.RecurringExpense(expense_name=e.name, amount=to_money(e.amount)) for e in expenses.custom_expenses
    ]
    user.recurring_expenses = recurring_expenses

    for goal_id, target in goals.predefined_goals.items():
        name = PREDEFINED_GOAL_NAMES.get(goal_id, "Goal")
        db.add_all(_goal_and_jar(user.id, name, target.amount, target.date, now))
    for custom in goals.custom_goals:
        db.add_all(_goal_and_jar(user.id, custom.name, custom.amount, custom.date, now))

    user.finance_tips_opt_in = goals.finance_tips
    user.onboarding_done = True
    db.flush()

    created = recurring.materialize(db, user, now)
    recurring.stamp_job(db, user.id, now)
    db.commit()
    logger.info("Onboarding completed for user %s (%d recurring transaction(s))", user.id, len(created))

    cache.invalidate(principal.email, Entity.USER, Entity.GOAL, Entity.JAR, Entity.TRANSACTION)
    return {
        "message": "Onboarding completed successfully!",
        "user": ProfileOut.model_validate(load_user(db, principal)),
    }
