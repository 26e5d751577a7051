# duobrain/api/routes/user.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from duobrain.api.deps import get_cache, get_current_principal, get_db_dep
from duobrain.core.principal import Principal
from duobrain.schemas.profile import IncomeSourceIn, ProfileOut, ProfileUpdate, RecurringExpenseIn
from duobrain.services import profile
from duobrain.services.cache import ResponseCache

router = APIRouter()


@router.get("/profile", response_model=ProfileOut)
def get_profile(
    db: Session = Depends(get_db_dep),
    cache: ResponseCache = Depends(get_cache),
    principal: Principal = Depends(get_current_principal),
):
    return profile.get_profile(db, cache, principal)


@router.put("/profile", response_model=ProfileOut)
def update_profile(
    payload: ProfileUpdate,
    db: Session = Depends(get_db_dep),
    cache: ResponseCache = Depends(get_cache),
    principal: Principal = Depends(get_current_principal),
):
    return profile.update_profile(db, cache, principal, payload)


@router.post("/profile/income-sources", response_model=ProfileOut, status_code=status.HTTP_201_CREATED)
def add_income_source(
    payload: IncomeSourceIn,
    db: Session = Depends(get_db_dep),
    cache: ResponseCache = Depends(get_cache),
    principal: Principal = Depends(get_current_principal),
):
    return profile.add_income_source(db, cache, principal, payload)


@router.put("/profile/income-sources/{source_id}", response_model=ProfileOut)
def update_income_source(
    source_id: int,
    payload: IncomeSourceIn,
    db: Session = Depends(get_db_dep),
    cache: ResponseCache = Depends(get_cache),
    principal: Principal = Depends(get_current_principal),
):
    return profile.update_income_source(db, cache, principal, source_id, payload)


@router.delete("/profile/income-sources/{source_id}", response_model=ProfileOut)
def delete_income_source(
    source_id: int,
    db: Session = Depends(get_db_dep),
    cache: ResponseCache = Depends(get_cache),
    principal: Principal = Depends(get_current_principal),
):
    return profile.delete_income_source(db, cache, principal, source_id)


@router.post("/profile/recurring-expenses", response_model=ProfileOut, status_code=status.HTTP_201_CREATED)
def add_recurring_expense(
    payload: RecurringExpenseIn,
    db: Session = Depends(get_db_dep),
    cache: ResponseCache = Depends(get_cache),
    principal: Principal = Depends(get_current_principal),
):
    return profile.add_recurring_expense(db, cache, principal, payload)


@router.put("/profile/recurring-expenses/{expense_id}", response_model=ProfileOut)
def update_recurring_expense(
    expense_id: int,
    payload: RecurringExpenseIn,
    db: Session = Depends(get_db_dep),
    cache: ResponseCache = Depends(get_cache),
    principal: Principal = Depends(get_current_principal),
):
    return profile.update_recurring_expense(db, cache, principal, expense_id, payload)


@router.delete("/profile/recurring-expenses/{expense_id}", response_model=ProfileOut)
def delete_recurring_expense(
    expense_id: int,
    db: Session = Depends(get_db_dep),
    cache: ResponseCache = Depends(get_cache),
    principal: Principal = Depends(get_current_principal),
):
    return profile.delete_recurring_expense(db, cache, principal, expense_id)
