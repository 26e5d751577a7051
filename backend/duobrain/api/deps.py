# duobrain/api/deps.py
from typing import Generator, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.orm import Session

from duobrain.core.config import SimpleSettings
from duobrain.core.principal import Principal
from duobrain.db import models
from duobrain.services.cache import ResponseCache
from duobrain.services.security import JWTError, decode_access_token

# auto_error=False so a missing header is a 401 (HTTPBearer's own error is a 403)
bearer_scheme = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> SimpleSettings:
    return request.app.state.settings


def get_db_dep(request: Request) -> Generator[Session, None, None]:
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_cache(request: Request) -> ResponseCache:
    return request.app.state.cache


def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db_dep),
    settings: SimpleSettings = Depends(get_settings),
) -> Principal:
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authorized, no token provided.")

    try:
        payload = decode_access_token(credentials.credentials, settings)
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authorized, token failed.")

    email = payload.get("email")
    if not email:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token (no email)")

    user_id = db.execute(select(models.User.id).where(models.User.email == email)).scalar_one_or_none()
    if user_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return Principal(user_id=user_id, email=email)
