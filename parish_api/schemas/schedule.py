from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, validator

from parish_api.schemas.common import naive_utc

AssignmentStatus = Literal["PENDING", "CONFIRMED", "DECLINED"]


class ScheduleCreate(BaseModel):
    event_id: int
    title: str = Field(..., min_length=2, max_length=200)
    description: Optional[str] = None
    date: datetime

    @validator("date")
    def normalize_date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return naive_utc(value)


class ScheduleUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=2, max_length=200)
    description: Optional[str] = None
    date: Optional[datetime] = None

    @validator("date")
    def normalize_date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return naive_utc(value)


class AssignmentCreate(BaseModel):
    schedule_id: int
    member_id: int
    role: str = Field(..., min_length=1, max_length=120)
    notes: Optional[str] = None


class AssignmentOut(BaseModel):
    id: int
    schedule_id: int
    member_id: int
    role: str
    status: AssignmentStatus
    notes: Optional[str]
    checked_in: bool
    checked_in_at: Optional[datetime]
    created_at: datetime

    class Config:
        from_attributes = True


class ScheduleOut(BaseModel):
    id: int
    event_id: int
    title: str
    description: Optional[str]
    date: datetime
    created_at: datetime
    assignments: list[AssignmentOut] = []

    class Config:
        from_attributes = True


class MyAssignmentOut(BaseModel):
    id: int
    schedule_id: int
    schedule_title: str
    schedule_date: datetime
    event_id: int
    event_title: str
    role: str
    status: AssignmentStatus
    checked_in: bool


class MyAssignmentsResponse(BaseModel):
    member_id: Optional[int]
    upcoming: list[MyAssignmentOut]
    past: list[MyAssignmentOut]


class EligiblePastoral(BaseModel):
    id: int
    name: str
    role: Optional[str] = None
    is_leader: bool = False


class MemberPastoralRole(BaseModel):
    name: str
    role: str


class EligibleMember(BaseModel):
    id: int
    full_name: str
    phone: Optional[str]
    email: Optional[str]
    pastorals: list[MemberPastoralRole] = []


class EligibleMembersResponse(BaseModel):
    event_id: int
    event_title: str
    community_id: int
    has_pastorals: bool
    pastorals: list[EligiblePastoral]
    members: list[EligibleMember]


class MemberScheduleStats(BaseModel):
    member_id: int
    total: int
    checked_in: int
    missed: int
    attendance_rate: float
