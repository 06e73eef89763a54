"""Request models for the movements API."""

import datetime as dt
from typing import Literal

from pydantic import BaseModel, Field

MovementType = Literal["income", "expense"]


def _today() -> dt.date:
    return dt.datetime.now(dt.timezone.utc).date()


class MovementCreate(BaseModel):
    description: str = Field(min_length=1)
    amount: float = Field(gt=0, allow_inf_nan=False)
    type: MovementType
    category: str = "general"
    date: dt.date = Field(default_factory=_today)


class MovementUpdate(BaseModel):
    description: str | None = Field(default=None, min_length=1)
    amount: float | None = Field(default=None, gt=0, allow_inf_nan=False)
    type: MovementType | None = None
    category: str | None = None
    date: dt.date | None = None
