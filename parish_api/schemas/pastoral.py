from __future__ import annotations

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, validator

from parish_api.schemas.common import EntityStatus

PastoralRole = Literal["COORDINATOR", "VICE_COORDINATOR", "SECRETARY", "MEMBER"]


class GlobalPastoralCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=200)
    description: Optional[str] = None
    mission: Optional[str] = None
    icon_url: Optional[str] = Field(None, max_length=500)
    color_hex: Optional[str] = Field(None, max_length=9)

    @validator("color_hex")
    def validate_color(cls, value: Optional[str]) -> Optional[str]:
        if value and not value.startswith("#"):
            raise ValueError("Color must be a hex value such as #1E88E5")
        return value


class GlobalPastoralUpdate(GlobalPastoralCreate):
    name: Optional[str] = Field(None, min_length=2, max_length=200)
    status: Optional[EntityStatus] = None


class GlobalPastoralOut(BaseModel):
    id: int
    name: str
    description: Optional[str]
    mission: Optional[str]
    icon_url: Optional[str]
    color_hex: Optional[str]
    status: EntityStatus
    created_at: datetime

    class Config:
        from_attributes = True


class CommunityPastoralCreate(BaseModel):
    global_pastoral_id: int
    community_id: int
    description: Optional[str] = None
    mission: Optional[str] = None
    photo_url: Optional[str] = Field(None, max_length=500)
    notes: Optional[str] = None
    founded_at: Optional[date] = None


class CommunityPastoralUpdate(BaseModel):
    description: Optional[str] = None
    mission: Optional[str] = None
    photo_url: Optional[str] = Field(None, max_length=500)
    notes: Optional[str] = None
    founded_at: Optional[date] = None
    status: Optional[EntityStatus] = None


class CommunityPastoralOut(BaseModel):
    id: int
    global_pastoral_id: int
    community_id: int
    name: str
    description: Optional[str]
    mission: Optional[str]
    photo_url: Optional[str]
    notes: Optional[str]
    founded_at: Optional[date]
    status: EntityStatus
    member_count: int = 0
    group_count: int = 0


class PastoralGroupCreate(BaseModel):
    community_pastoral_id: int
    parent_group_id: Optional[int] = None
    name: str = Field(..., min_length=2, max_length=200)
    description: Optional[str] = None
    photo_url: Optional[str] = Field(None, max_length=500)


class PastoralGroupUpdate(BaseModel):
    parent_group_id: Optional[int] = None
    name: Optional[str] = Field(None, min_length=2, max_length=200)
    description: Optional[str] = None
    photo_url: Optional[str] = Field(None, max_length=500)
    status: Optional[EntityStatus] = None


class PastoralGroupOut(BaseModel):
    id: int
    community_pastoral_id: int
    parent_group_id: Optional[int]
    name: str
    description: Optional[str]
    photo_url: Optional[str]
    status: EntityStatus
    created_at: datetime

    class Config:
        from_attributes = True


class PastoralMemberCreate(BaseModel):
    community_pastoral_id: int
    member_id: int
    pastoral_group_id: Optional[int] = None
    role: PastoralRole = "MEMBER"


class PastoralMemberUpdate(BaseModel):
    pastoral_group_id: Optional[int] = None
    role: Optional[PastoralRole] = None
    is_active: Optional[bool] = None


class PastoralMemberOut(BaseModel):
    id: int
    community_pastoral_id: int
    pastoral_group_id: Optional[int]
    member_id: int
    member_name: str
    role: PastoralRole
    is_active: bool
    joined_at: datetime
