# duobrain/api/routes/onboarding.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from duobrain.api.deps import get_cache, get_current_principal, get_db_dep
from duobrain.core.principal import Principal
from duobrain.schemas.onboarding import OnboardingIn, OnboardingOut
from duobrain.services import onboarding
from duobrain.services.cache import ResponseCache

router = APIRouter()


@router.post("/submit", response_model=OnboardingOut)
def submit(
    payload: OnboardingIn,
    db: Session = Depends(get_db_dep),
    cache: ResponseCache = Depends(get_cache),
    principal: Principal = Depends(get_current_principal),
):
    return onboarding.submit(db, cache, principal, payload)
