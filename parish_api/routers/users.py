from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from parish_api.auth.deps import get_current_user, require_roles
from parish_api.core.db import get_db
from parish_api.models.user import User
from parish_api.schemas.user import (
    PasswordChangeRequest,
    PasswordResetResponse,
    ProfileOut,
    UserCreate,
    UserOut,
    UserRole,
    UserUpdate,
)
from parish_api.services import users as users_service
from parish_api.services.hierarchy import COORDINATOR_ROLES, SYSTEM_ADMIN

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(
    payload: UserCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*COORDINATOR_ROLES)),
) -> UserOut:
    return users_service.create_user(db, payload, user)


@router.get("", response_model=list[UserOut])
def list_users(
    *,
    role: Optional[UserRole] = Query(default=None),
    search: Optional[str] = Query(default=None, min_length=1),
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*COORDINATOR_ROLES)),
) -> list[UserOut]:
    return users_service.list_users(db, user, role, search)


@router.get("/{user_id}", response_model=ProfileOut)
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> ProfileOut:
    return users_service.get_user(db, user, user_id)


@router.patch("/{user_id}", response_model=UserOut)
def update_user(
    user_id: int,
    payload: UserUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> UserOut:
    return users_service.update_user(db, user_id, payload, user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(SYSTEM_ADMIN)),
) -> None:
    users_service.delete_user(db, user_id, user)


@router.post("/{user_id}/password", status_code=status.HTTP_204_NO_CONTENT)
def change_password(
    user_id: int,
    payload: PasswordChangeRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> None:
    users_service.change_password(db, user_id, payload, user)


@router.post("/{user_id}/reset-password", response_model=PasswordResetResponse)
def reset_password(
    user_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*COORDINATOR_ROLES)),
) -> PasswordResetResponse:
    return users_service.reset_password(db, user_id, user)
