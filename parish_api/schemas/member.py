from __future__ import annotations

import re
from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field, validator

MemberStatus = Literal["ACTIVE", "INACTIVE", "VISITOR", "DECEASED", "TRANSFERRED"]

_CPF_RE = re.compile(r"^\d{3}\.?\d{3}\.?\d{3}-?\d{2}$")


def _clean_cpf(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    cleaned = value.strip()
    if not cleaned:
        return None
    if not _CPF_RE.match(cleaned):
        raise ValueError("CPF must contain 11 digits")
    return re.sub(r"\D", "", cleaned)


class _MemberFields(BaseModel):
    birth_date: Optional[date] = None
    cpf: Optional[str] = Field(None, max_length=14)
    rg: Optional[str] = Field(None, max_length=20)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=30)
    photo_url: Optional[str] = Field(None, max_length=500)
    address: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=120)
    state: Optional[str] = Field(None, max_length=60)
    zip_code: Optional[str] = Field(None, max_length=20)
    father_name: Optional[str] = Field(None, max_length=200)
    mother_name: Optional[str] = Field(None, max_length=200)
    occupation: Optional[str] = Field(None, max_length=120)
    spouse_id: Optional[int] = None
    notes: Optional[str] = None

    @validator("cpf")
    def validate_cpf(cls, value: Optional[str]) -> Optional[str]:
        return _clean_cpf(value)

    @validator("birth_date")
    def validate_birth_date(cls, value: Optional[date]) -> Optional[date]:
        if value and value > date.today():
            raise ValueError("Birth date cannot be in the future")
        return value


class MemberCreate(_MemberFields):
    community_id: int
    full_name: str = Field(..., min_length=2, max_length=200)
    user_id: Optional[int] = None
    status: MemberStatus = "ACTIVE"
    consent_given: bool = False


class MemberUpdate(_MemberFields):
    full_name: Optional[str] = Field(None, min_length=2, max_length=200)
    community_id: Optional[int] = None
    status: Optional[MemberStatus] = None


class ConsentUpdate(BaseModel):
    consent_given: bool


class MemberOut(BaseModel):
    id: int
    community_id: int
    user_id: Optional[int]
    full_name: str
    birth_date: Optional[date]
    cpf: Optional[str]
    rg: Optional[str]
    email: Optional[str]
    phone: Optional[str]
    photo_url: Optional[str]
    address: Optional[str]
    city: Optional[str]
    state: Optional[str]
    zip_code: Optional[str]
    father_name: Optional[str]
    mother_name: Optional[str]
    occupation: Optional[str]
    spouse_id: Optional[int]
    notes: Optional[str]
    status: MemberStatus
    consent_given: bool
    consent_date: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class MemberSummary(BaseModel):
    id: int
    full_name: str
    community_id: int
    status: MemberStatus

    class Config:
        from_attributes = True


class MemberCommunityRef(BaseModel):
    id: int
    name: str
    parish_id: int

    class Config:
        from_attributes = True


class MemberUserRef(BaseModel):
    id: int
    email: str
    role: str

    class Config:
        from_attributes = True


class MemberPastoralRef(BaseModel):
    id: int
    community_pastoral_id: int
    pastoral_name: str
    role: str
    is_active: bool


class MemberAssignmentRef(BaseModel):
    id: int
    schedule_id: int
    role: str
    status: str
    checked_in: bool
    created_at: datetime

    class Config:
        from_attributes = True


class MemberDetail(MemberOut):
    community: MemberCommunityRef
    user: Optional[MemberUserRef] = None
    pastorals: list[MemberPastoralRef] = []
    recent_assignments: list[MemberAssignmentRef] = []


class MemberExport(BaseModel):
    exported_at: datetime
    member: MemberOut
    pastorals: list[MemberPastoralRef]
    event_participations: int
    schedule_assignments: int
