from __future__ import annotations

import re
from datetime import date, datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, Field, model_validator, validator

from parish_api.schemas.common import naive_utc

MassIntentionType = Literal["THANKSGIVING", "DECEASED", "HEALTH", "BIRTHDAY", "ANNIVERSARY", "SPECIAL", "OTHER"]
MassScheduleType = Literal["REGULAR", "SPECIAL", "CONFESSION", "ADORATION"]

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class MassIntentionCreate(BaseModel):
    community_id: int
    intention_for: str = Field(..., min_length=2, max_length=255)
    type: MassIntentionType = "OTHER"
    requested_date: datetime
    requested_by: Optional[str] = Field(None, max_length=200)
    notes: Optional[str] = None
    amount: Optional[Decimal] = Field(None, ge=0)

    @validator("requested_date")
    def normalize_requested_date(cls, value: datetime) -> datetime:
        return naive_utc(value)


class MassIntentionUpdate(BaseModel):
    intention_for: Optional[str] = Field(None, min_length=2, max_length=255)
    type: Optional[MassIntentionType] = None
    requested_date: Optional[datetime] = None
    requested_by: Optional[str] = Field(None, max_length=200)
    notes: Optional[str] = None
    amount: Optional[Decimal] = Field(None, ge=0)

    @validator("requested_date")
    def normalize_requested_date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return naive_utc(value)


class MarkPaidRequest(BaseModel):
    payment_method: Optional[str] = Field(None, max_length=60)


class MassIntentionOut(BaseModel):
    id: int
    community_id: int
    intention_for: str
    type: MassIntentionType
    requested_date: datetime
    requested_by: Optional[str]
    notes: Optional[str]
    amount: Optional[Decimal]
    is_paid: bool
    paid_at: Optional[datetime]
    payment_method: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True


class MassIntentionStats(BaseModel):
    total: int
    paid: int
    pending: int
    total_revenue: Decimal
    pending_revenue: Decimal


class MassScheduleCreate(BaseModel):
    community_id: int
    day_of_week: int = Field(..., ge=0, le=6)
    time: str
    type: MassScheduleType = "REGULAR"
    notes: Optional[str] = None
    is_special: bool = False
    special_date: Optional[date] = None

    @validator("time")
    def validate_time(cls, value: str) -> str:
        if not _TIME_RE.match(value):
            raise ValueError("Time must use the HH:MM format")
        return value

    @model_validator(mode="after")
    def ensure_special_date(self: "MassScheduleCreate") -> "MassScheduleCreate":
        if self.is_special and not self.special_date:
            raise ValueError("Special schedules require a special_date")
        return self


class MassScheduleUpdate(BaseModel):
    day_of_week: Optional[int] = Field(None, ge=0, le=6)
    time: Optional[str] = None
    type: Optional[MassScheduleType] = None
    notes: Optional[str] = None
    is_special: Optional[bool] = None
    special_date: Optional[date] = None

    @validator("time")
    def validate_time(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not _TIME_RE.match(value):
            raise ValueError("Time must use the HH:MM format")
        return value


class MassScheduleOut(BaseModel):
    id: int
    community_id: int
    day_of_week: int
    time: str
    type: MassScheduleType
    notes: Optional[str]
    is_special: bool
    special_date: Optional[date]

    class Config:
        from_attributes = True
