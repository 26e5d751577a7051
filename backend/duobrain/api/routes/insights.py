# duobrain/api/routes/insights.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from duobrain.api.deps import get_cache, get_current_principal, get_db_dep, get_settings
from duobrain.core.config import SimpleSettings
from duobrain.core.principal import Principal
from duobrain.schemas.insight import InsightsOut
from duobrain.services import insights
from duobrain.services.cache import ResponseCache

router = APIRouter()


@router.get("/all", response_model=InsightsOut)
def all_insights(
    db: Session = Depends(get_db_dep),
    cache: ResponseCache = Depends(get_cache),
    principal: Principal = Depends(get_current_principal),
    settings: SimpleSettings = Depends(get_settings),
):
    return insights.get_insights(db, cache, principal, settings)
