# duobrain/api/routes/charges.py
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from duobrain.api.deps import get_cache, get_current_principal, get_db_dep
from duobrain.core.principal import Principal
from duobrain.db import models
from duobrain.schemas.base import MessageOut
from duobrain.schemas.charge import ChargeCreate, ChargeOut, ChargeUpdate
from duobrain.services import charges
from duobrain.services.cache import ResponseCache

router = APIRouter()


@router.post("", response_model=ChargeOut, status_code=status.HTTP_201_CREATED)
def create_charge(
    payload: ChargeCreate,
    db: Session = Depends(get_db_dep),
    cache: ResponseCache = Depends(get_cache),
    principal: Principal = Depends(get_current_principal),
):
    return charges.create_charge(db, cache, principal, payload)


@router.get("", response_model=List[ChargeOut])
def list_charges(
    status: models.ChargeStatus = models.ChargeStatus.upcoming,
    db: Session = Depends(get_db_dep),
    cache: ResponseCache = Depends(get_cache),
    principal: Principal = Depends(get_current_principal),
):
    return charges.list_charges(db, cache, principal, status)


@router.get("/dues", response_model=List[ChargeOut])
def list_dues(
    db: Session = Depends(get_db_dep),
    cache: ResponseCache = Depends(get_cache),
    principal: Principal = Depends(get_current_principal),
):
    return charges.list_dues(db, cache, principal)


@router.put("/{charge_id}", response_model=ChargeOut)
def update_charge(
    charge_id: int,
    payload: ChargeUpdate,
    db: Session = Depends(get_db_dep),
    cache: ResponseCache = Depends(get_cache),
    principal: Principal = Depends(get_current_principal),
):
    return charges.update_charge(db, cache, principal, charge_id, payload)


@router.patch("/{charge_id}/mark-paid", response_model=ChargeOut)
def mark_paid(
    charge_id: int,
    db: Session = Depends(get_db_dep),
    cache: ResponseCache = Depends(get_cache),
    principal: Principal = Depends(get_current_principal),
):
    return charges.mark_paid(db, cache, principal, charge_id)


@router.patch("/{charge_id}/mark-not-paid", response_model=ChargeOut)
def mark_not_paid(
    charge_id: int,
    db: Session = Depends(get_db_dep),
    cache: ResponseCache = Depends(get_cache),
    principal: Principal = Depends(get_current_principal),
):
    return charges.mark_not_paid(db, cache, principal, charge_id)


@router.delete("/{charge_id}", response_model=MessageOut)
def delete_charge(
    charge_id: int,
    db: Session = Depends(get_db_dep),
    cache: ResponseCache = Depends(get_cache),
    principal: Principal = Depends(get_current_principal),
):
    charges.delete_charge(db, cache, principal, charge_id)
    return {"message": "Charge deleted successfully."}
