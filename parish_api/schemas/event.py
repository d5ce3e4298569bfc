from __future__ import annotations

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, model_validator, validator

from parish_api.schemas.common import naive_utc

EventType = Literal[
    "MASS",
    "MEETING",
    "CELEBRATION",
    "RETREAT",
    "FORMATION",
    "SOCIAL",
    "PASTORAL_MEETING",
    "PASTORAL_ACTIVITY",
    "OTHER",
]
EventStatus = Literal["DRAFT", "PUBLISHED", "CANCELLED", "COMPLETED"]
RecurrenceType = Literal["DAILY", "WEEKLY", "MONTHLY", "CUSTOM"]


class RecurrenceConfig(BaseModel):
    type: RecurrenceType
    interval: int = Field(1, ge=1, le=365)
    days: Optional[list[int]] = None
    end_date: Optional[date] = None
    max_occurrences: int = Field(52, ge=1, le=366)

    @validator("days")
    def validate_days(cls, value: Optional[list[int]]) -> Optional[list[int]]:
        if value is None:
            return value
        if any(day < 0 or day > 6 for day in value):
            raise ValueError("Weekdays must be between 0 (Sunday) and 6 (Saturday)")
        return sorted(set(value))

    @model_validator(mode="after")
    def ensure_custom_days(self: "RecurrenceConfig") -> "RecurrenceConfig":
        if self.type == "CUSTOM" and not self.days:
            raise ValueError("Custom recurrence requires at least one weekday")
        return self


class EventCreate(BaseModel):
    community_id: int
    title: str = Field(..., min_length=2, max_length=200)
    description: Optional[str] = None
    type: EventType = "OTHER"
    status: EventStatus = "PUBLISHED"
    start_date: datetime
    end_date: Optional[datetime] = None
    location: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None
    is_public: bool = True
    max_participants: Optional[int] = Field(None, ge=1)
    recurrence: Optional[RecurrenceConfig] = None

    @validator("start_date", "end_date")
    def normalize_dates(cls, value: Optional[datetime]) -> Optional[datetime]:
        return naive_utc(value)

    @model_validator(mode="after")
    def ensure_date_order(self: "EventCreate") -> "EventCreate":
        if self.end_date and self.end_date < self.start_date:
            raise ValueError("End date must be after the start date")
        return self


class EventUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=2, max_length=200)
    description: Optional[str] = None
    type: Optional[EventType] = None
    status: Optional[EventStatus] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    location: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None
    is_public: Optional[bool] = None
    max_participants: Optional[int] = Field(None, ge=1)

    @validator("start_date", "end_date")
    def normalize_dates(cls, value: Optional[datetime]) -> Optional[datetime]:
        return naive_utc(value)


class EventDuplicateRequest(BaseModel):
    dates: list[date] = Field(..., min_length=1, max_length=100)


class EventOut(BaseModel):
    id: int
    community_id: int
    title: str
    description: Optional[str]
    type: EventType
    status: EventStatus
    start_date: datetime
    end_date: Optional[datetime]
    location: Optional[str]
    notes: Optional[str]
    is_public: bool
    max_participants: Optional[int]
    is_recurring: bool
    recurrence_type: Optional[RecurrenceType]
    recurrence_interval: Optional[int]
    recurrence_days: Optional[list[int]]
    recurrence_end_date: Optional[date]
    parent_event_id: Optional[int]
    created_at: datetime
    updated_at: datetime
    participant_count: int = 0

    class Config:
        from_attributes = True


class ParticipantCreate(BaseModel):
    member_id: int


class ParticipantOut(BaseModel):
    id: int
    event_id: int
    member_id: int
    member_name: str
    registered_at: datetime
    attended: bool


class EventPastoralCreate(BaseModel):
    community_pastoral_id: int
    role: Optional[str] = Field(None, max_length=120)
    is_leader: bool = False


class EventPastoralOut(BaseModel):
    id: int
    event_id: int
    community_pastoral_id: int
    pastoral_name: str
    role: Optional[str]
    is_leader: bool


class PastoralAssignmentCreate(BaseModel):
    member_id: int
    role: Optional[str] = Field(None, max_length=120)
    notes: Optional[str] = None


class PastoralAssignmentOut(BaseModel):
    id: int
    event_pastoral_id: int
    member_id: int
    role: Optional[str]
    notes: Optional[str]
    checked_in: bool
    checked_in_at: Optional[datetime]
    created_at: datetime

    class Config:
        from_attributes = True


class EventScheduleAssignment(BaseModel):
    id: int
    member_id: int
    role: str
    status: str
    checked_in: bool

    class Config:
        from_attributes = True


class EventScheduleOut(BaseModel):
    id: int
    title: str
    description: Optional[str]
    date: datetime
    assignments: list[EventScheduleAssignment] = []

    class Config:
        from_attributes = True


class EventDetail(EventOut):
    schedules: list[EventScheduleOut] = []
    pastorals: list[EventPastoralOut] = []


class CheckinRequest(BaseModel):
    checked_in: bool = True
