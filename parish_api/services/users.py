from __future__ import annotations

import logging
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from parish_api.auth.security import generate_temporary_password, hash_password, verify_password
from parish_api.models import User
from parish_api.schemas.user import (
    PasswordChangeRequest,
    PasswordResetResponse,
    ProfileOut,
    UserCreate,
    UserOut,
    UserUpdate,
)
from parish_api.services.common import get_or_404
from parish_api.services.hierarchy import (
    COMMUNITY_COORDINATOR,
    DIOCESAN_ADMIN,
    PARISH_ADMIN,
    SYSTEM_ADMIN,
    can_assign_role,
    can_manage,
    ensure_can_read,
    ensure_scope_ids,
    member_for_user,
    scope_filter,
)

logger = logging.getLogger(__name__)

_REQUIRED_SCOPE = {
    DIOCESAN_ADMIN: ("diocese_id", "Diocesan admins require a diocese"),
    PARISH_ADMIN: ("parish_id", "Parish admins require a parish"),
    COMMUNITY_COORDINATOR: ("community_id", "Community coordinators require a community"),
}


def profile(db: Session, user: User) -> ProfileOut:
    out = ProfileOut.from_orm(user)
    member = member_for_user(db, user)
    out.member_id = member.id if member else None
    return out


def _ensure_email_available(db: Session, email: str, exclude_id: Optional[int] = None) -> None:
    query = db.query(User.id).filter(func.lower(User.email) == email.lower())
    if exclude_id is not None:
        query = query.filter(User.id != exclude_id)
    if query.first():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")


def _ensure_can_assign(actor: User, role: str) -> None:
    if not can_assign_role(actor, role):
        logger.info("role_assignment_denied", extra={"actor_id": actor.id, "actor_role": actor.role, "role": role})
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You cannot assign a role equal to or above your own",
        )


def _ensure_required_scope(role: str, diocese_id, parish_id, community_id) -> None:
    requirement = _REQUIRED_SCOPE.get(role)
    if requirement is None:
        return
    field, detail = requirement
    ids = {"diocese_id": diocese_id, "parish_id": parish_id, "community_id": community_id}
    if ids[field] is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def _ensure_can_administer(db: Session, actor: User, target: User) -> None:
    """Actor outranks the target and the target sits inside the actor's scope."""
    if actor.role == SYSTEM_ADMIN:
        return
    if not can_assign_role(actor, target.role) or not can_manage(db, actor, target):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You do not have permission to manage this user")


def create_user(db: Session, payload: UserCreate, actor: User) -> UserOut:
    _ensure_email_available(db, payload.email)
    _ensure_can_assign(actor, payload.role)
    _ensure_required_scope(payload.role, payload.diocese_id, payload.parish_id, payload.community_id)
    scope = ensure_scope_ids(db, actor, payload.diocese_id, payload.parish_id, payload.community_id)

    user = User(
        email=payload.email.lower(),
        hashed_password=hash_password(payload.password),
        name=payload.name.strip(),
        phone=payload.phone,
        role=payload.role,
        is_active=True,
        force_password_change=True,
        diocese_id=scope.diocese_id,
        parish_id=scope.parish_id,
        community_id=scope.community_id,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("user_created", extra={"user_id": user.id, "role": user.role, "actor_id": actor.id})
    return UserOut.from_orm(user)


def list_users(db: Session, actor: User, role: Optional[str] = None, search: Optional[str] = None) -> list[UserOut]:
    query = db.query(User).filter(scope_filter(actor, User))
    if role:
        query = query.filter(User.role == role)
    if search:
        pattern = f"%{search.lower()}%"
        query = query.filter(func.lower(User.name).like(pattern) | func.lower(User.email).like(pattern))
    return [UserOut.from_orm(user) for user in query.order_by(User.name.asc()).all()]


def get_user(db: Session, actor: User, user_id: int) -> ProfileOut:
    user = get_or_404(db, User, user_id, "User not found")
    if user.id != actor.id:
        ensure_can_read(db, actor, user)
    return profile(db, user)


def update_user(db: Session, user_id: int, payload: UserUpdate, actor: User) -> UserOut:
    user = get_or_404(db, User, user_id, "User not found")
    fields = payload.model_fields_set
    privileged = fields & {"role", "is_active", "diocese_id", "parish_id", "community_id"}
    if user.id == actor.id and privileged and actor.role != SYSTEM_ADMIN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You cannot change your own role or scope")
    if user.id != actor.id:
        _ensure_can_administer(db, actor, user)

    role = payload.role if payload.role is not None else user.role
    if "role" in fields and payload.role is not None:
        _ensure_can_assign(actor, payload.role)
    if fields & {"role", "diocese_id", "parish_id", "community_id"}:
        diocese_id = payload.diocese_id if "diocese_id" in fields else user.diocese_id
        parish_id = payload.parish_id if "parish_id" in fields else user.parish_id
        community_id = payload.community_id if "community_id" in fields else user.community_id
        _ensure_required_scope(role, diocese_id, parish_id, community_id)
        scope = ensure_scope_ids(db, actor, diocese_id, parish_id, community_id)
        user.diocese_id = scope.diocese_id
        user.parish_id = scope.parish_id
        user.community_id = scope.community_id
        user.role = role

    if payload.name is not None:
        user.name = payload.name.strip()
    if payload.phone is not None:
        user.phone = payload.phone.strip() or None
    if payload.is_active is not None:
        user.is_active = payload.is_active

    db.commit()
    db.refresh(user)
    logger.info("user_updated", extra={"user_id": user.id, "fields": sorted(fields), "actor_id": actor.id})
    return UserOut.from_orm(user)


def delete_user(db: Session, user_id: int, actor: User) -> None:
    user = get_or_404(db, User, user_id, "User not found")
    if user.id == actor.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot delete your own account")
    member = member_for_user(db, user)
    if member is not None:
        member.user_id = None
    db.delete(user)
    db.commit()
    logger.info("user_deleted", extra={"user_id": user_id, "actor_id": actor.id})


def change_password(db: Session, user_id: int, payload: PasswordChangeRequest, actor: User) -> None:
    user = get_or_404(db, User, user_id, "User not found")
    if user.id != actor.id and actor.role != SYSTEM_ADMIN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You can only change your own password")
    if user.id == actor.id:
        if not payload.current_password or not verify_password(payload.current_password, user.hashed_password):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Current password is incorrect")
    user.hashed_password = hash_password(payload.new_password)
    user.force_password_change = False
    db.commit()
    logger.info("password_changed", extra={"user_id": user.id, "actor_id": actor.id})


def reset_password(db: Session, user_id: int, actor: User) -> PasswordResetResponse:
    user = get_or_404(db, User, user_id, "User not found")
    _ensure_can_administer(db, actor, user)
    temporary = generate_temporary_password()
    user.hashed_password = hash_password(temporary)
    user.force_password_change = True
    db.commit()
    logger.info("password_reset", extra={"user_id": user.id, "actor_id": actor.id})
    return PasswordResetResponse(user_id=user.id, temporary_password=temporary)
