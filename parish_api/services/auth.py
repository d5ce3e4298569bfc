from __future__ import annotations

import logging

from fastapi import HTTPException, status
from jose import JWTError
from sqlalchemy import func
from sqlalchemy.orm import Session

from parish_api.auth.security import (
    REFRESH_TOKEN_TYPE,
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    hash_password,
    verify_password,
)
from parish_api.core.db import utcnow
from parish_api.models import Community, Member, RefreshToken, User
from parish_api.schemas.auth import AuthResponse, LoginRequest, OnboardingRequest, RegisterRequest, TokenPair
from parish_api.services.common import get_or_404
from parish_api.services.hierarchy import FAITHFUL, member_for_user
from parish_api.services.users import profile

logger = logging.getLogger(__name__)


def _invalid(detail: str = "Invalid refresh token") -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def issue_tokens(db: Session, user: User) -> TokenPair:
    """Create an access token and persist a fresh refresh token for ``user``. Caller commits."""
    refresh_token, expires_at = create_refresh_token(user)
    db.add(RefreshToken(token=refresh_token, user_id=user.id, expires_at=expires_at))
    return TokenPair(access_token=create_access_token(user), refresh_token=refresh_token)


def _auth_response(db: Session, user: User) -> AuthResponse:
    tokens = issue_tokens(db, user)
    db.commit()
    db.refresh(user)
    return AuthResponse(**tokens.dict(), user=profile(db, user))


def _attach_community(user: User, community: Community) -> None:
    user.community_id = community.id
    user.parish_id = community.parish_id
    user.diocese_id = community.parish.diocese_id


def _member_email_free(db: Session, email: str, exclude_id: int | None = None) -> bool:
    query = db.query(Member.id).filter(func.lower(Member.email) == email.lower())
    if exclude_id is not None:
        query = query.filter(Member.id != exclude_id)
    return query.first() is None


def register(db: Session, payload: RegisterRequest) -> AuthResponse:
    email = payload.email.lower()
    if db.query(User.id).filter(func.lower(User.email) == email).first():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")

    community = None
    if payload.community_id is not None:
        community = get_or_404(db, Community, payload.community_id, "Community not found")

    user = User(
        email=email,
        hashed_password=hash_password(payload.password),
        name=payload.name.strip(),
        phone=payload.phone,
        role=FAITHFUL,
        is_active=True,
    )
    if community is not None:
        _attach_community(user, community)
    db.add(user)
    db.flush()

    if community is not None:
        db.add(
            Member(
                community_id=community.id,
                user_id=user.id,
                full_name=user.name,
                email=email if _member_email_free(db, email) else None,
                phone=payload.phone,
                status="ACTIVE",
                consent_given=True,
                consent_date=utcnow(),
            )
        )

    logger.info("user_registered", extra={"user_id": user.id, "community_id": payload.community_id})
    return _auth_response(db, user)


def login(db: Session, payload: LoginRequest) -> AuthResponse:
    user = db.query(User).filter(func.lower(User.email) == payload.email.lower()).first()
    if not user or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    if not verify_password(payload.password, user.hashed_password):
        logger.warning("login_failed", extra={"user_id": user.id})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    user.last_login_at = utcnow()
    logger.info("user_logged_in", extra={"user_id": user.id})
    return _auth_response(db, user)


def refresh(db: Session, token: str) -> TokenPair:
    """Redeem a refresh token exactly once and hand out a new pair."""
    try:
        payload = decode_refresh_token(token)
    except JWTError as exc:
        raise _invalid() from exc
    if payload.get("type") != REFRESH_TOKEN_TYPE:
        raise _invalid()

    stored = db.query(RefreshToken).filter(RefreshToken.token == token).first()
    if stored is None:
        raise _invalid()
    if stored.expires_at < utcnow():
        db.delete(stored)
        db.commit()
        raise _invalid("Refresh token expired")

    user = db.get(User, stored.user_id)
    if user is None or not user.is_active:
        raise _invalid("Inactive user")

    db.delete(stored)
    tokens = issue_tokens(db, user)
    db.commit()
    logger.info("refresh_token_redeemed", extra={"user_id": user.id})
    return tokens


def logout(db: Session, user: User) -> int:
    removed = db.query(RefreshToken).filter(RefreshToken.user_id == user.id).delete(synchronize_session=False)
    db.commit()
    logger.info("user_logged_out", extra={"user_id": user.id, "tokens_removed": removed})
    return removed


def onboard_community(db: Session, user: User, payload: OnboardingRequest) -> AuthResponse:
    """Attach the caller to a community and create or move their member record in one transaction."""
    community = get_or_404(db, Community, payload.community_id, "Community not found")
    user = db.get(User, user.id)
    _attach_community(user, community)
    if payload.phone:
        user.phone = payload.phone

    member = member_for_user(db, user)
    if member is None:
        member = Member(
            user_id=user.id,
            full_name=user.name,
            email=user.email if _member_email_free(db, user.email) else None,
            status="ACTIVE",
        )
        db.add(member)
    member.community_id = community.id
    member.phone = payload.phone or member.phone or user.phone
    if payload.birth_date is not None:
        member.birth_date = payload.birth_date
    member.consent_given = payload.consent_given
    member.consent_date = utcnow() if payload.consent_given else None

    logger.info("user_onboarded", extra={"user_id": user.id, "community_id": community.id})
    return _auth_response(db, user)
