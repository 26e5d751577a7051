# duobrain/services/security.py
"""Password hashing + JWT helpers.

We use passlib pbkdf2_sha256 (pure-python) to avoid bcrypt backend issues.
Tokens carry the user's email; the signing secret and lifetime come from the
settings instance the app was built with.
"""
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from duobrain.core.config import SimpleSettings

pwd_ctx = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

ALGORITHM = "HS256"
OTP_TTL = timedelta(minutes=10)


def hash_password(password: str) -> str:
    """Hash a plaintext password (never store plaintext)."""
    if password is None:
        raise ValueError("password cannot be None")
    return pwd_ctx.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    """Verify plain password against hashed. Returns False on any error."""
    if plain is None or hashed is None:
        return False
    try:
        return pwd_ctx.verify(plain, hashed)
    except (ValueError, TypeError):
        return False


def create_access_token(
    email: str,
    settings: SimpleSettings,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a JWT access token for the given email.
    - 'iat' and 'exp' included (exp as int timestamp)
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))

    payload: Dict[str, Any] = {
        "email": email,
        "iat": int(now.timestamp()),
        "exp": int(expire.timestamp()),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str, settings: SimpleSettings) -> Dict[str, Any]:
    """
    Decode and validate a JWT. Raises JWTError on invalid or expired tokens;
    deps.get_current_principal converts that to a 401.
    """
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])


def generate_otp() -> str:
    """Six-digit numeric one-time passcode."""
    return str(secrets.randbelow(900000) + 100000)


__all__ = [
    "JWTError",
    "OTP_TTL",
    "create_access_token",
    "decode_access_token",
    "generate_otp",
    "hash_password",
    "verify_password",
]
