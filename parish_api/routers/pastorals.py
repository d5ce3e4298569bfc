from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from parish_api.auth.deps import get_current_user, require_roles
from parish_api.core.db import get_db
from parish_api.models.user import User
from parish_api.schemas.pastoral import (
    CommunityPastoralCreate,
    CommunityPastoralOut,
    CommunityPastoralUpdate,
    GlobalPastoralCreate,
    GlobalPastoralOut,
    GlobalPastoralUpdate,
    PastoralGroupCreate,
    PastoralGroupOut,
    PastoralGroupUpdate,
    PastoralMemberCreate,
    PastoralMemberOut,
    PastoralMemberUpdate,
)
from parish_api.services import pastorals as pastorals_service
from parish_api.services.hierarchy import COORDINATOR_ROLES, PASTORAL_STAFF_ROLES, SYSTEM_ADMIN

router = APIRouter(prefix="/pastorals", tags=["pastorals"])


# Global catalog


@router.post("/global", response_model=GlobalPastoralOut, status_code=status.HTTP_201_CREATED)
def create_global_pastoral(
    payload: GlobalPastoralCreate,
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(SYSTEM_ADMIN)),
) -> GlobalPastoralOut:
    return pastorals_service.create_global_pastoral(db, payload)


@router.get("/global", response_model=list[GlobalPastoralOut])
def list_global_pastorals(
    *,
    include_inactive: bool = Query(default=False),
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
) -> list[GlobalPastoralOut]:
    return pastorals_service.list_global_pastorals(db, include_inactive)


@router.get("/global/{pastoral_id}", response_model=GlobalPastoralOut)
def get_global_pastoral(
    pastoral_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
) -> GlobalPastoralOut:
    return pastorals_service.get_global_pastoral(db, pastoral_id)


@router.patch("/global/{pastoral_id}", response_model=GlobalPastoralOut)
def update_global_pastoral(
    pastoral_id: int,
    payload: GlobalPastoralUpdate,
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(SYSTEM_ADMIN)),
) -> GlobalPastoralOut:
    return pastorals_service.update_global_pastoral(db, pastoral_id, payload)


@router.delete("/global/{pastoral_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_global_pastoral(
    pastoral_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(SYSTEM_ADMIN)),
) -> None:
    pastorals_service.delete_global_pastoral(db, pastoral_id)


# Community pastorals


@router.post("/community", response_model=CommunityPastoralOut, status_code=status.HTTP_201_CREATED)
def create_community_pastoral(
    payload: CommunityPastoralCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*COORDINATOR_ROLES)),
) -> CommunityPastoralOut:
    return pastorals_service.create_community_pastoral(db, payload, user)


@router.get("/community", response_model=list[CommunityPastoralOut])
def list_community_pastorals(
    *,
    community_id: Optional[int] = Query(default=None),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> list[CommunityPastoralOut]:
    return pastorals_service.list_community_pastorals(db, user, community_id)


@router.get("/community/{pastoral_id}", response_model=CommunityPastoralOut)
def get_community_pastoral(
    pastoral_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> CommunityPastoralOut:
    return pastorals_service.get_community_pastoral(db, user, pastoral_id)


@router.patch("/community/{pastoral_id}", response_model=CommunityPastoralOut)
def update_community_pastoral(
    pastoral_id: int,
    payload: CommunityPastoralUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*PASTORAL_STAFF_ROLES)),
) -> CommunityPastoralOut:
    return pastorals_service.update_community_pastoral(db, pastoral_id, payload, user)


@router.delete("/community/{pastoral_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_community_pastoral(
    pastoral_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*COORDINATOR_ROLES)),
) -> None:
    pastorals_service.delete_community_pastoral(db, pastoral_id, user)


@router.get("/community/{pastoral_id}/groups", response_model=list[PastoralGroupOut])
def list_groups(
    pastoral_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> list[PastoralGroupOut]:
    return pastorals_service.list_groups(db, user, pastoral_id)


@router.get("/community/{pastoral_id}/members", response_model=list[PastoralMemberOut])
def list_members(
    pastoral_id: int,
    include_inactive: bool = Query(default=False),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> list[PastoralMemberOut]:
    return pastorals_service.list_members(db, user, pastoral_id, include_inactive)


# Groups


@router.post("/groups", response_model=PastoralGroupOut, status_code=status.HTTP_201_CREATED)
def create_group(
    payload: PastoralGroupCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*PASTORAL_STAFF_ROLES)),
) -> PastoralGroupOut:
    return pastorals_service.create_group(db, payload, user)


@router.get("/groups/{group_id}", response_model=PastoralGroupOut)
def get_group(
    group_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> PastoralGroupOut:
    return pastorals_service.get_group(db, user, group_id)


@router.patch("/groups/{group_id}", response_model=PastoralGroupOut)
def update_group(
    group_id: int,
    payload: PastoralGroupUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*PASTORAL_STAFF_ROLES)),
) -> PastoralGroupOut:
    return pastorals_service.update_group(db, group_id, payload, user)


@router.delete("/groups/{group_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_group(
    group_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*PASTORAL_STAFF_ROLES)),
) -> None:
    pastorals_service.delete_group(db, group_id, user)


# Memberships


@router.post("/members", response_model=PastoralMemberOut, status_code=status.HTTP_201_CREATED)
def add_member(
    payload: PastoralMemberCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*PASTORAL_STAFF_ROLES)),
) -> PastoralMemberOut:
    return pastorals_service.add_member(db, payload, user)


@router.patch("/members/{membership_id}", response_model=PastoralMemberOut)
def update_member(
    membership_id: int,
    payload: PastoralMemberUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*PASTORAL_STAFF_ROLES)),
) -> PastoralMemberOut:
    return pastorals_service.update_member(db, membership_id, payload, user)


@router.delete("/members/{membership_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_member(
    membership_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*PASTORAL_STAFF_ROLES)),
) -> None:
    pastorals_service.remove_member(db, membership_id, user)
