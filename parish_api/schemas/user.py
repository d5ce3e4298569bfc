from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field, validator

from parish_api.schemas.common import check_password_length

UserRole = Literal[
    "SYSTEM_ADMIN",
    "DIOCESAN_ADMIN",
    "PARISH_ADMIN",
    "COMMUNITY_COORDINATOR",
    "PASTORAL_COORDINATOR",
    "VOLUNTEER",
    "FAITHFUL",
]


class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    name: str = Field(..., min_length=2, max_length=200)
    phone: Optional[str] = Field(None, max_length=30)
    role: UserRole = "FAITHFUL"
    diocese_id: Optional[int] = None
    parish_id: Optional[int] = None
    community_id: Optional[int] = None

    @validator("password")
    def validate_password(cls, value: str) -> str:
        return check_password_length(value)


class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=200)
    phone: Optional[str] = Field(None, max_length=30)
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None
    diocese_id: Optional[int] = None
    parish_id: Optional[int] = None
    community_id: Optional[int] = None


class PasswordChangeRequest(BaseModel):
    current_password: Optional[str] = None
    new_password: str = Field(..., min_length=8, max_length=128)

    @validator("new_password")
    def validate_new_password(cls, value: str) -> str:
        return check_password_length(value)


class PasswordResetResponse(BaseModel):
    user_id: int
    temporary_password: str
    force_password_change: bool = True


class UserOut(BaseModel):
    id: int
    email: EmailStr
    name: str
    phone: Optional[str]
    role: UserRole
    is_active: bool
    force_password_change: bool
    last_login_at: Optional[datetime]
    diocese_id: Optional[int]
    parish_id: Optional[int]
    community_id: Optional[int]
    created_at: datetime

    class Config:
        from_attributes = True


class ProfileOut(UserOut):
    member_id: Optional[int] = None
