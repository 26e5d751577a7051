# duobrain/api/routes/transactions.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from duobrain.api.deps import get_cache, get_current_principal, get_db_dep
from duobrain.core.principal import Principal
from duobrain.db import models
from duobrain.schemas.base import MessageOut
from duobrain.schemas.transaction import (
    SummaryOut,
    TransactionCreate,
    TransactionOut,
    TransactionPage,
    TransactionUpdate,
    TrendPoint,
)
from duobrain.services import transactions
from duobrain.services.cache import ResponseCache

router = APIRouter()


@router.post("", response_model=TransactionOut, status_code=status.HTTP_201_CREATED)
def create_transaction(
    payload: TransactionCreate,
    db: Session = Depends(get_db_dep),
    cache: ResponseCache = Depends(get_cache),
    principal: Principal = Depends(get_current_principal),
):
    return transactions.create_transaction(db, cache, principal, payload)


@router.get("", response_model=TransactionPage)
def list_transactions(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    type: Optional[models.TransactionType] = None,
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=1970, le=9999),
    db: Session = Depends(get_db_dep),
    cache: ResponseCache = Depends(get_cache),
    principal: Principal = Depends(get_current_principal),
):
    return transactions.list_transactions(db, cache, principal, page=page, limit=limit, type_=type, month=month, year=year)


# static paths must be registered before /{transaction_id}
@router.get("/summary", response_model=SummaryOut)
def summary(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=1970, le=9999),
    db: Session = Depends(get_db_dep),
    cache: ResponseCache = Depends(get_cache),
    principal: Principal = Depends(get_current_principal),
):
    return transactions.summary(db, cache, principal, month=month, year=year)


@router.get("/spending-trend", response_model=List[TrendPoint])
def spending_trend(db: Session = Depends(get_db_dep), principal: Principal = Depends(get_current_principal)):
    return transactions.spending_trend(db, principal)


@router.get("/{transaction_id}", response_model=TransactionOut)
def get_transaction(transaction_id: int, db: Session = Depends(get_db_dep), principal: Principal = Depends(get_current_principal)):
    return transactions.get_transaction(db, principal, transaction_id)


@router.put("/{transaction_id}", response_model=TransactionOut)
def update_transaction(
    transaction_id: int,
    payload: TransactionUpdate,
    db: Session = Depends(get_db_dep),
    cache: ResponseCache = Depends(get_cache),
    principal: Principal = Depends(get_current_principal),
):
    return transactions.update_transaction(db, cache, principal, transaction_id, payload)


@router.delete("/{transaction_id}", response_model=MessageOut)
def delete_transaction(
    transaction_id: int,
    db: Session = Depends(get_db_dep),
    cache: ResponseCache = Depends(get_cache),
    principal: Principal = Depends(get_current_principal),
):
    transactions.delete_transaction(db, cache, principal, transaction_id)
    return {"message": "Transaction deleted successfully."}
