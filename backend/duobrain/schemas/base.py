# duobrain/schemas/base.py
from datetime import datetime, timezone
from decimal import Decimal
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase on the wire (the budgeting app speaks camelCase)."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class MessageOut(BaseModel):
    message: str


def naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    # columns store naive UTC; convert offset-aware input
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class Health(BaseModel):
    status: str


# amounts that fit a Numeric(12, 2) column; finer or larger values fail validation
Money = Annotated[Decimal, Field(gt=0, max_digits=12, decimal_places=2)]
NonNegativeMoney = Annotated[Decimal, Field(ge=0, max_digits=12, decimal_places=2)]
