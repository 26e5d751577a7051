# duobrain/services/goals.py
import logging
from typing import Any, List

from sqlalchemy import case, select, update
from sqlalchemy.orm import Session

from duobrain.core.errors import BusinessRuleError, NotFoundError
from duobrain.core.money import to_money
from duobrain.core.principal import Principal
from duobrain.db import models
from duobrain.schemas.goal import GoalCreate, GoalOut, GoalUpdate
from duobrain.services.cache import LONG_TTL, Entity, ResponseCache, goal_key, goals_key

logger = logging.getLogger(__name__)

NOT_FOUND = "Goal not found or access denied."


def _get_owned(db: Session, principal: Principal, goal_id: int, refresh: bool = False) -> models.Goal:
    stmt = select(models.Goal).where(models.Goal.id == goal_id, models.Goal.user_id == principal.user_id)
    if refresh:
        stmt = stmt.execution_options(populate_existing=True)
    goal = db.execute(stmt).scalar_one_or_none()
    if goal is None:
        raise NotFoundError(NOT_FOUND)
    return goal


def list_goals(db: Session, cache: ResponseCache, principal: Principal) -> List[Any]:
    def load() -> List[GoalOut]:
        rows = db.execute(
            select(models.Goal)
            .where(models.Goal.user_id == principal.user_id)
            .order_by(models.Goal.target_date, models.Goal.id)
        ).scalars().all()
        return [GoalOut.model_validate(g) for g in rows]

    return cache.get_or_load(goals_key(principal.email), LONG_TTL, load)


def get_goal(db: Session, cache: ResponseCache, principal: Principal, goal_id: int) -> Any:
    return cache.get_or_load(
        goal_key(principal.email, goal_id),
        LONG_TTL,
        lambda: GoalOut.model_validate(_get_owned(db, principal, goal_id)),
    )


def create_goal(db: Session, cache: ResponseCache, principal: Principal, payload: GoalCreate) -> GoalOut:
    goal = models.Goal(
        user_id=principal.user_id,
        goal_name=payload.goal_name.strip(),
        target_amount=to_money(payload.target_amount),
        amount_saved=to_money(0),
        target_date=payload.target_date,
        status=models.GoalStatus.in_progress,
    )
    db.add(goal)
    db.commit()
    db.refresh(goal)
    cache.invalidate(principal.email, Entity.GOAL)
    return GoalOut.model_validate(goal)


def update_goal(db: Session, cache: ResponseCache, principal: Principal, goal_id: int, payload: GoalUpdate) -> GoalOut:
    goal = _get_owned(db, principal, goal_id)
    if payload.goal_name is not None:
        goal.goal_name = payload.goal_name.strip()
    if payload.target_amount is not None:
        goal.target_amount = to_money(payload.target_amount)
    if payload.target_date is not None:
        goal.target_date = payload.target_date
    # a lowered target can complete a goal; completion is never undone
    if goal.status == models.GoalStatus.in_progress and goal.amount_saved >= goal.target_amount:
        goal.status = models.GoalStatus.completed
    db.add(goal)
    db.commit()
    db.refresh(goal)
    cache.invalidate(principal.email, Entity.GOAL)
    return GoalOut.model_validate(goal)


def contribute(db: Session, cache: ResponseCache, principal: Principal, goal_id: int, amount: float) -> GoalOut:
    value = to_money(amount)
    new_saved = models.Goal.amount_saved + value
    # status is assigned first: MySQL evaluates SET left to right with updated values
    result = db.execute(
        update(models.Goal)
        .where(
            models.Goal.id == goal_id,
            models.Goal.user_id == principal.user_id,
            models.Goal.status != models.GoalStatus.completed,
        )
        .ordered_values(
            (models.Goal.status, case(
                (new_saved >= models.Goal.target_amount, models.GoalStatus.completed.value),
                else_=models.Goal.status,
            )),
            (models.Goal.amount_saved, new_saved),
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        db.rollback()
        _get_owned(db, principal, goal_id)
        raise BusinessRuleError("This goal has already been completed.")
    db.commit()

    goal = _get_owned(db, principal, goal_id, refresh=True)
    if goal.status == models.GoalStatus.completed:
        logger.info("Goal %s completed for user %s", goal.id, principal.user_id)
    cache.invalidate(principal.email, Entity.GOAL)
    return GoalOut.model_validate(goal)


def delete_goal(db: Session, cache: ResponseCache, principal: Principal, goal_id: int) -> None:
    goal = _get_owned(db, principal, goal_id)
    db.delete(goal)
    db.commit()
    cache.invalidate(principal.email, Entity.GOAL)
