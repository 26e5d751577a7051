# duobrain/schemas/insight.py
from typing import List

from pydantic import BaseModel


class Insight(BaseModel):
    title: str
    description: str


class InsightsOut(BaseModel):
    message: str
    data: List[Insight]
