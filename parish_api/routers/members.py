from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from parish_api.auth.deps import get_current_user, require_roles
from parish_api.core.db import get_db
from parish_api.models.user import User
from parish_api.schemas.member import (
    ConsentUpdate,
    MemberCreate,
    MemberDetail,
    MemberExport,
    MemberOut,
    MemberStatus,
    MemberUpdate,
)
from parish_api.services import members as members_service
from parish_api.services.hierarchy import ADMIN_ROLES, COORDINATOR_ROLES

router = APIRouter(prefix="/members", tags=["members"])


@router.post("", response_model=MemberOut, status_code=status.HTTP_201_CREATED)
def create_member(
    payload: MemberCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*COORDINATOR_ROLES)),
) -> MemberOut:
    return members_service.create_member(db, payload, user)


@router.get("", response_model=list[MemberOut])
def list_members(
    *,
    community_id: Optional[int] = Query(default=None),
    status_filter: Optional[MemberStatus] = Query(default=None, alias="status"),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> list[MemberOut]:
    return members_service.list_members(db, user, community_id, status_filter)


@router.get("/search", response_model=list[MemberOut])
def search_members(
    *,
    name: str = Query(..., min_length=1),
    community_id: Optional[int] = Query(default=None),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> list[MemberOut]:
    return members_service.search_members(db, user, name, community_id)


@router.get("/{member_id}", response_model=MemberDetail)
def get_member(
    member_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> MemberDetail:
    return members_service.get_member(db, user, member_id)


@router.patch("/{member_id}", response_model=MemberOut)
def update_member(
    member_id: int,
    payload: MemberUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*COORDINATOR_ROLES)),
) -> MemberOut:
    return members_service.update_member(db, member_id, payload, user)


@router.delete("/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_member(
    member_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*ADMIN_ROLES)),
) -> None:
    members_service.delete_member(db, member_id, user)


@router.get("/{member_id}/export", response_model=MemberExport)
def export_member(
    member_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> MemberExport:
    return members_service.export_member(db, member_id, user)


@router.post("/{member_id}/anonymize", response_model=MemberOut)
def anonymize_member(
    member_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*ADMIN_ROLES)),
) -> MemberOut:
    return members_service.anonymize_member(db, member_id, user)


@router.patch("/{member_id}/consent", response_model=MemberOut)
def update_consent(
    member_id: int,
    payload: ConsentUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> MemberOut:
    return members_service.update_consent(db, member_id, payload.consent_given, user)
