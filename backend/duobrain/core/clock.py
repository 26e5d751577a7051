# duobrain/core/clock.py
from datetime import datetime, timezone


def utcnow() -> datetime:
    """Naive UTC now; every DateTime column holds naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
