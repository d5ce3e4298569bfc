from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, validator

from parish_api.schemas.common import naive_utc


class NewsCreate(BaseModel):
    community_id: int
    title: str = Field(..., min_length=2, max_length=255)
    content: str = Field(..., min_length=1)
    category: Optional[str] = Field(None, max_length=60)
    image_url: Optional[str] = Field(None, max_length=500)
    is_urgent: bool = False
    published_at: Optional[datetime] = None

    @validator("published_at")
    def normalize_published_at(cls, value: Optional[datetime]) -> Optional[datetime]:
        return naive_utc(value)


class NewsUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=2, max_length=255)
    content: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = Field(None, max_length=60)
    image_url: Optional[str] = Field(None, max_length=500)
    is_urgent: Optional[bool] = None
    published_at: Optional[datetime] = None

    @validator("published_at")
    def normalize_published_at(cls, value: Optional[datetime]) -> Optional[datetime]:
        return naive_utc(value)


class NewsOut(BaseModel):
    id: int
    community_id: int
    title: str
    content: str
    category: Optional[str]
    image_url: Optional[str]
    is_urgent: bool
    published_at: datetime
    created_at: datetime

    class Config:
        from_attributes = True
