# duobrain/api/routes/goals.py
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from duobrain.api.deps import get_cache, get_current_principal, get_db_dep
from duobrain.core.principal import Principal
from duobrain.schemas.base import MessageOut
from duobrain.schemas.goal import ContributionIn, GoalCreate, GoalOut, GoalUpdate
from duobrain.services import goals
from duobrain.services.cache import ResponseCache

router = APIRouter()


@router.post("", response_model=GoalOut, status_code=status.HTTP_201_CREATED)
def create_goal(
    payload: GoalCreate,
    db: Session = Depends(get_db_dep),
    cache: ResponseCache = Depends(get_cache),
    principal: Principal = Depends(get_current_principal),
):
    return goals.create_goal(db, cache, principal, payload)


@router.get("", response_model=List[GoalOut])
def list_goals(
    db: Session = Depends(get_db_dep),
    cache: ResponseCache = Depends(get_cache),
    principal: Principal = Depends(get_current_principal),
):
    return goals.list_goals(db, cache, principal)


@router.get("/{goal_id}", response_model=GoalOut)
def get_goal(
    goal_id: int,
    db: Session = Depends(get_db_dep),
    cache: ResponseCache = Depends(get_cache),
    principal: Principal = Depends(get_current_principal),
):
    return goals.get_goal(db, cache, principal, goal_id)


@router.put("/{goal_id}", response_model=GoalOut)
def update_goal(
    goal_id: int,
    payload: GoalUpdate,
    db: Session = Depends(get_db_dep),
    cache: ResponseCache = Depends(get_cache),
    principal: Principal = Depends(get_current_principal),
):
    return goals.update_goal(db, cache, principal, goal_id, payload)


@router.post("/{goal_id}/contribute", response_model=GoalOut)
def contribute(
    goal_id: int,
    payload: ContributionIn,
    db: Session = Depends(get_db_dep),
    cache: ResponseCache = Depends(get_cache),
    principal: Principal = Depends(get_current_principal),
):
    return goals.contribute(db, cache, principal, goal_id, payload.amount)


@router.delete("/{goal_id}", response_model=MessageOut)
def delete_goal(
    goal_id: int,
    db: Session = Depends(get_db_dep),
    cache: ResponseCache = Depends(get_cache),
    principal: Principal = Depends(get_current_principal),
):
    goals.delete_goal(db, cache, principal, goal_id)
    return {"message": "Goal deleted successfully."}
