# duobrain/api/routes/jars.py
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from duobrain.api.deps import get_cache, get_current_principal, get_db_dep
from duobrain.core.principal import Principal
from duobrain.schemas.base import MessageOut
from duobrain.schemas.jar import JarCreate, JarOut, JarUpdate, MoneyIn
from duobrain.services import jars
from duobrain.services.cache import ResponseCache

router = APIRouter()


@router.post("", response_model=JarOut, status_code=status.HTTP_201_CREATED)
def create_jar(
    payload: JarCreate,
    db: Session = Depends(get_db_dep),
    cache: ResponseCache = Depends(get_cache),
    principal: Principal = Depends(get_current_principal),
):
    return jars.create_jar(db, cache, principal, payload)


@router.get("", response_model=List[JarOut])
def list_jars(
    db: Session = Depends(get_db_dep),
    cache: ResponseCache = Depends(get_cache),
    principal: Principal = Depends(get_current_principal),
):
    return jars.list_jars(db, cache, principal)


@router.put("/{jar_id}", response_model=JarOut)
def update_jar(
    jar_id: int,
    payload: JarUpdate,
    db: Session = Depends(get_db_dep),
    cache: ResponseCache = Depends(get_cache),
    principal: Principal = Depends(get_current_principal),
):
    return jars.update_jar(db, cache, principal, jar_id, payload)


@router.delete("/{jar_id}", response_model=MessageOut)
def delete_jar(
    jar_id: int,
    db: Session = Depends(get_db_dep),
    cache: ResponseCache = Depends(get_cache),
    principal: Principal = Depends(get_current_principal),
):
    jars.delete_jar(db, cache, principal, jar_id)
    return {"message": "Jar deleted successfully."}


@router.post("/{jar_id}/deposit", response_model=JarOut)
def deposit(
    jar_id: int,
    payload: MoneyIn,
    db: Session = Depends(get_db_dep),
    cache: ResponseCache = Depends(get_cache),
    principal: Principal = Depends(get_current_principal),
):
    return jars.deposit(db, cache, principal, jar_id, payload.amount)


@router.post("/{jar_id}/withdraw", response_model=JarOut)
def withdraw(
    jar_id: int,
    payload: MoneyIn,
    db: Session = Depends(get_db_dep),
    cache: ResponseCache = Depends(get_cache),
    principal: Principal = Depends(get_current_principal),
):
    return jars.withdraw(db, cache, principal, jar_id, payload.amount)
