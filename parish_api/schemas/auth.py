from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, validator

from parish_api.schemas.common import check_password_length
from parish_api.schemas.user import ProfileOut


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    name: str = Field(..., min_length=2, max_length=200)
    phone: Optional[str] = Field(None, max_length=30)
    community_id: Optional[int] = None

    @validator("password")
    def validate_password(cls, value: str) -> str:
        return check_password_length(value)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class AuthResponse(TokenPair):
    user: ProfileOut


class OnboardingRequest(BaseModel):
    community_id: int
    phone: Optional[str] = Field(None, max_length=30)
    birth_date: Optional[date] = None
    consent_given: bool = True
