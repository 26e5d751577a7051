# duobrain/core/principal.py
from dataclasses import dataclass


@dataclass(frozen=True)
class Principal:
    """The authenticated caller, passed explicitly into every service call."""
    user_id: int
    email: str
