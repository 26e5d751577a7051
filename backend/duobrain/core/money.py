# duobrain/core/money.py
from decimal import Decimal
from typing import Union


def to_money(amount: Union[float, int, str, Decimal]) -> Decimal:
    """Two-decimal Decimal for Numeric(12, 2) columns."""
    return Decimal(str(amount)).quantize(Decimal("0.01"))
