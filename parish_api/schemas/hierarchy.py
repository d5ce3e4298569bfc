from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from parish_api.schemas.common import EntityStatus
from parish_api.schemas.event import EventOut
from parish_api.schemas.member import MemberSummary


class _ContactFields(BaseModel):
    address: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=120)
    state: Optional[str] = Field(None, max_length=60)
    zip_code: Optional[str] = Field(None, max_length=20)
    phone: Optional[str] = Field(None, max_length=30)
    email: Optional[EmailStr] = None
    website: Optional[str] = Field(None, max_length=255)
    logo_url: Optional[str] = Field(None, max_length=500)


class DioceseCreate(_ContactFields):
    name: str = Field(..., min_length=2, max_length=200)
    bishop_name: Optional[str] = Field(None, max_length=200)


class DioceseUpdate(_ContactFields):
    name: Optional[str] = Field(None, min_length=2, max_length=200)
    bishop_name: Optional[str] = Field(None, max_length=200)
    status: Optional[EntityStatus] = None


class ParishCreate(_ContactFields):
    diocese_id: int
    name: str = Field(..., min_length=2, max_length=200)
    priest_name: Optional[str] = Field(None, max_length=200)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)


class ParishUpdate(_ContactFields):
    name: Optional[str] = Field(None, min_length=2, max_length=200)
    priest_name: Optional[str] = Field(None, max_length=200)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    status: Optional[EntityStatus] = None


class CommunityCreate(_ContactFields):
    parish_id: int
    name: str = Field(..., min_length=2, max_length=200)
    coordinator_name: Optional[str] = Field(None, max_length=200)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)


class CommunityUpdate(_ContactFields):
    name: Optional[str] = Field(None, min_length=2, max_length=200)
    coordinator_name: Optional[str] = Field(None, max_length=200)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    status: Optional[EntityStatus] = None


class _ContactOut(BaseModel):
    address: Optional[str]
    city: Optional[str]
    state: Optional[str]
    zip_code: Optional[str]
    phone: Optional[str]
    email: Optional[str]
    website: Optional[str]
    logo_url: Optional[str]


class CommunityOut(_ContactOut):
    id: int
    parish_id: int
    name: str
    coordinator_name: Optional[str]
    latitude: Optional[float]
    longitude: Optional[float]
    status: EntityStatus
    created_at: datetime
    updated_at: datetime
    member_count: int = 0
    event_count: int = 0

    class Config:
        from_attributes = True


class CommunitySummary(BaseModel):
    id: int
    name: str
    status: EntityStatus

    class Config:
        from_attributes = True


class ParishOut(_ContactOut):
    id: int
    diocese_id: int
    name: str
    priest_name: Optional[str]
    latitude: Optional[float]
    longitude: Optional[float]
    status: EntityStatus
    created_at: datetime
    updated_at: datetime
    community_count: int = 0

    class Config:
        from_attributes = True


class ParishDetail(ParishOut):
    communities: list[CommunitySummary] = []


class DioceseOut(_ContactOut):
    id: int
    name: str
    bishop_name: Optional[str]
    status: EntityStatus
    created_at: datetime
    updated_at: datetime
    parish_count: int = 0

    class Config:
        from_attributes = True


class DioceseDetail(DioceseOut):
    parishes: list[ParishDetail] = []


class CommunityDetail(CommunityOut):
    members: list[MemberSummary] = []
    events: list[EventOut] = []
