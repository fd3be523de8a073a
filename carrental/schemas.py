"""Pydantic request schemas, one per endpoint body."""
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, model_validator

from .models import BookingStatus

MAX_DAYS = 365
MAX_RENT_PER_DAY = 2000

_BOOKING_FIELD_KEYS = {"carName", "car_name", "days", "rentPerDay", "rent_per_day"}


class TokenData(BaseModel):
    """Identity carried by a verified bearer token."""

    user_id: StrictInt
    username: StrictStr


class Credentials(BaseModel):
    username: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=1)


class SignupRequest(Credentials):
    pass


class LoginRequest(Credentials):
    pass


class BookingCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    car_name: str = Field(..., alias="carName", min_length=1, max_length=255)
    days: int = Field(..., ge=1, le=MAX_DAYS)
    rent_per_day: float = Field(..., alias="rentPerDay", gt=0, le=MAX_RENT_PER_DAY)


class BookingUpdate(BaseModel):
    """Either the full field set or a status change.

    When ``status`` is given it wins and any field values are ignored.
    """

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    car_name: Optional[str] = Field(None, alias="carName", min_length=1, max_length=255)
    days: Optional[int] = Field(None, ge=1, le=MAX_DAYS)
    rent_per_day: Optional[float] = Field(None, alias="rentPerDay", gt=0, le=MAX_RENT_PER_DAY)
    status: Optional[BookingStatus] = None

    @model_validator(mode="before")
    @classmethod
    def drop_fields_on_status_change(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("status") is not None:
            return {key: value for key, value in data.items() if key not in _BOOKING_FIELD_KEYS}
        return data

    @model_validator(mode="after")
    def check_fields_or_status(self) -> "BookingUpdate":
        if self.status is None and None in (self.car_name, self.days, self.rent_per_day):
            raise ValueError("provide carName, days and rentPerDay, or a status")
        return self

    @property
    def is_status_change(self) -> bool:
        return self.status is not None
