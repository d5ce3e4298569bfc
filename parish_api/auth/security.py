from __future__ import annotations

import secrets
import string
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
from jose import jwt

from parish_api.core.config import settings
from parish_api.models.user import User

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        return False


def generate_temporary_password(length: int = 12) -> str:
    alphabet = string.ascii_letters + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))


def _claims(user: User, token_type: str, expires_at: datetime) -> dict[str, Any]:
    return {
        "sub": str(user.id),
        "email": user.email,
        "role": user.role,
        "dioceseId": user.diocese_id,
        "parishId": user.parish_id,
        "communityId": user.community_id,
        "type": token_type,
        "jti": uuid.uuid4().hex,
        "exp": expires_at,
    }


def create_access_token(user: User) -> str:
    expires_at = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return jwt.encode(_claims(user, ACCESS_TOKEN_TYPE, expires_at), settings.JWT_SECRET, algorithm=settings.JWT_ALG)


def create_refresh_token(user: User) -> tuple[str, datetime]:
    """Return the signed refresh token and its expiry as naive UTC for storage."""
    expires_at = datetime.now(timezone.utc) + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    token = jwt.encode(
        _claims(user, REFRESH_TOKEN_TYPE, expires_at), settings.JWT_REFRESH_SECRET, algorithm=settings.JWT_ALG
    )
    return token, expires_at.replace(tzinfo=None)


def decode_access_token(token: str) -> dict[str, Any]:
    return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALG])


def decode_refresh_token(token: str) -> dict[str, Any]:
    return jwt.decode(token, settings.JWT_REFRESH_SECRET, algorithms=[settings.JWT_ALG])
