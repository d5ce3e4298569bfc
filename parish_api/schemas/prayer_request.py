from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

PrayerCategory = Literal["HEALTH", "FAMILY", "WORK", "SPIRITUAL", "THANKSGIVING", "OTHER"]
PrayerRequestStatus = Literal["PENDING", "APPROVED", "REJECTED"]


class PrayerRequestCreate(BaseModel):
    community_id: int
    member_id: Optional[int] = None
    title: str = Field(..., min_length=2, max_length=255)
    description: str = Field(..., min_length=1)
    category: PrayerCategory = "OTHER"
    is_anonymous: bool = False


class PrayerRequestUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=2, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    category: Optional[PrayerCategory] = None
    is_anonymous: Optional[bool] = None


class PrayerRequestOut(BaseModel):
    id: int
    community_id: int
    member_id: Optional[int]
    title: str
    description: str
    category: PrayerCategory
    is_anonymous: bool
    status: PrayerRequestStatus
    prayer_count: int
    moderated_at: Optional[datetime]
    moderated_by_id: Optional[int]
    created_at: datetime

    class Config:
        from_attributes = True


class PrayerRequestStats(BaseModel):
    total: int
    pending: int
    approved: int
    rejected: int
    total_prayers: int


class PrayerRequestPublicOut(BaseModel):
    id: int
    community_id: int
    title: str
    description: str
    category: PrayerCategory
    is_anonymous: bool
    prayer_count: int
    member_name: Optional[str] = None
    created_at: datetime
