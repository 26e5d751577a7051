from fastapi import APIRouter

from duobrain.schemas.base import Health

router = APIRouter()


@router.get('/health', response_model=Health)
def health():
    return {'status': 'ok'}
