from __future__ import annotations

import logging
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from parish_api.models import (
    Community,
    CommunityPastoral,
    GlobalPastoral,
    Member,
    PastoralGroup,
    PastoralMember,
    User,
)
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
from parish_api.services.common import apply_updates, get_or_404
from parish_api.services.hierarchy import ensure_can_manage, ensure_can_read, scope_filter

logger = logging.getLogger(__name__)


# Global catalog


def _ensure_unique_global_name(db: Session, name: str, exclude_id: Optional[int] = None) -> None:
    query = db.query(GlobalPastoral.id).filter(func.lower(GlobalPastoral.name) == name.lower())
    if exclude_id is not None:
        query = query.filter(GlobalPastoral.id != exclude_id)
    if query.first():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Pastoral already exists")


def create_global_pastoral(db: Session, payload: GlobalPastoralCreate) -> GlobalPastoralOut:
    name = payload.name.strip()
    _ensure_unique_global_name(db, name)
    pastoral = GlobalPastoral(**payload.dict(exclude={"name"}), name=name)
    db.add(pastoral)
    db.commit()
    db.refresh(pastoral)
    return GlobalPastoralOut.from_orm(pastoral)


def list_global_pastorals(db: Session, include_inactive: bool = False) -> list[GlobalPastoralOut]:
    query = db.query(GlobalPastoral)
    if not include_inactive:
        query = query.filter(GlobalPastoral.status == "ACTIVE")
    return [GlobalPastoralOut.from_orm(item) for item in query.order_by(GlobalPastoral.name.asc()).all()]


def get_global_pastoral(db: Session, pastoral_id: int) -> GlobalPastoralOut:
    return GlobalPastoralOut.from_orm(get_or_404(db, GlobalPastoral, pastoral_id, "Pastoral not found"))


def update_global_pastoral(db: Session, pastoral_id: int, payload: GlobalPastoralUpdate) -> GlobalPastoralOut:
    pastoral = get_or_404(db, GlobalPastoral, pastoral_id, "Pastoral not found")
    if payload.name:
        _ensure_unique_global_name(db, payload.name.strip(), exclude_id=pastoral.id)
    apply_updates(pastoral, payload)
    db.commit()
    db.refresh(pastoral)
    return GlobalPastoralOut.from_orm(pastoral)


def delete_global_pastoral(db: Session, pastoral_id: int) -> None:
    pastoral = get_or_404(db, GlobalPastoral, pastoral_id, "Pastoral not found")
    if pastoral.community_pastorals:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Pastoral is still used by communities")
    db.delete(pastoral)
    db.commit()


# Community pastorals


def _community_pastoral_out(pastoral: CommunityPastoral) -> CommunityPastoralOut:
    return CommunityPastoralOut(
        id=pastoral.id,
        global_pastoral_id=pastoral.global_pastoral_id,
        community_id=pastoral.community_id,
        name=pastoral.global_pastoral.name,
        description=pastoral.description,
        mission=pastoral.mission,
        photo_url=pastoral.photo_url,
        notes=pastoral.notes,
        founded_at=pastoral.founded_at,
        status=pastoral.status,
        member_count=sum(1 for item in pastoral.members if item.is_active),
        group_count=len(pastoral.groups),
    )


def create_community_pastoral(db: Session, payload: CommunityPastoralCreate, actor: User) -> CommunityPastoralOut:
    community = get_or_404(db, Community, payload.community_id, "Community not found")
    get_or_404(db, GlobalPastoral, payload.global_pastoral_id, "Pastoral not found")
    ensure_can_manage(db, actor, community, "You do not have permission to add pastorals to this community")
    existing = (
        db.query(CommunityPastoral.id)
        .filter(
            CommunityPastoral.global_pastoral_id == payload.global_pastoral_id,
            CommunityPastoral.community_id == community.id,
        )
        .first()
    )
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Pastoral already exists in this community")
    pastoral = CommunityPastoral(**payload.dict())
    db.add(pastoral)
    db.commit()
    db.refresh(pastoral)
    logger.info("community_pastoral_created", extra={"pastoral_id": pastoral.id, "community_id": community.id})
    return _community_pastoral_out(pastoral)


def list_community_pastorals(db: Session, user: User, community_id: Optional[int] = None) -> list[CommunityPastoralOut]:
    query = db.query(CommunityPastoral).filter(scope_filter(user, CommunityPastoral))
    if community_id is not None:
        query = query.filter(CommunityPastoral.community_id == community_id)
    items = query.join(GlobalPastoral).order_by(GlobalPastoral.name.asc()).all()
    return [_community_pastoral_out(item) for item in items]


def get_community_pastoral(db: Session, user: User, pastoral_id: int) -> CommunityPastoralOut:
    pastoral = get_or_404(db, CommunityPastoral, pastoral_id, "Pastoral not found")
    ensure_can_read(db, user, pastoral)
    return _community_pastoral_out(pastoral)


def update_community_pastoral(
    db: Session, pastoral_id: int, payload: CommunityPastoralUpdate, actor: User
) -> CommunityPastoralOut:
    pastoral = get_or_404(db, CommunityPastoral, pastoral_id, "Pastoral not found")
    ensure_can_manage(db, actor, pastoral, "You do not have permission to edit this pastoral")
    apply_updates(pastoral, payload)
    db.commit()
    db.refresh(pastoral)
    return _community_pastoral_out(pastoral)


def delete_community_pastoral(db: Session, pastoral_id: int, actor: User) -> None:
    pastoral = get_or_404(db, CommunityPastoral, pastoral_id, "Pastoral not found")
    ensure_can_manage(db, actor, pastoral.community, "You do not have permission to delete this pastoral")
    db.delete(pastoral)
    db.commit()
    logger.info("community_pastoral_deleted", extra={"pastoral_id": pastoral_id, "actor_id": actor.id})


# Groups


def _validate_parent_group(
    db: Session, pastoral_id: int, parent_group_id: Optional[int], group_id: Optional[int] = None
) -> None:
    if parent_group_id is None:
        return
    parent = get_or_404(db, PastoralGroup, parent_group_id, "Parent group not found")
    if parent.community_pastoral_id != pastoral_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Parent group belongs to another pastoral")
    if group_id is not None and parent.id == group_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Group cannot be its own parent")


def create_group(db: Session, payload: PastoralGroupCreate, actor: User) -> PastoralGroupOut:
    pastoral = get_or_404(db, CommunityPastoral, payload.community_pastoral_id, "Pastoral not found")
    ensure_can_manage(db, actor, pastoral, "You do not have permission to edit this pastoral")
    _validate_parent_group(db, pastoral.id, payload.parent_group_id)
    group = PastoralGroup(**payload.dict(exclude={"name"}), name=payload.name.strip())
    db.add(group)
    db.commit()
    db.refresh(group)
    return PastoralGroupOut.from_orm(group)


def list_groups(db: Session, user: User, pastoral_id: int) -> list[PastoralGroupOut]:
    pastoral = get_or_404(db, CommunityPastoral, pastoral_id, "Pastoral not found")
    ensure_can_read(db, user, pastoral)
    groups = sorted(pastoral.groups, key=lambda item: item.name)
    return [PastoralGroupOut.from_orm(group) for group in groups]


def get_group(db: Session, user: User, group_id: int) -> PastoralGroupOut:
    group = get_or_404(db, PastoralGroup, group_id, "Group not found")
    ensure_can_read(db, user, group.community_pastoral)
    return PastoralGroupOut.from_orm(group)


def update_group(db: Session, group_id: int, payload: PastoralGroupUpdate, actor: User) -> PastoralGroupOut:
    group = get_or_404(db, PastoralGroup, group_id, "Group not found")
    ensure_can_manage(db, actor, group, "You do not have permission to edit this group")
    if "parent_group_id" in payload.model_fields_set:
        _validate_parent_group(db, group.community_pastoral_id, payload.parent_group_id, group.id)
    apply_updates(group, payload)
    db.commit()
    db.refresh(group)
    return PastoralGroupOut.from_orm(group)


def delete_group(db: Session, group_id: int, actor: User) -> None:
    group = get_or_404(db, PastoralGroup, group_id, "Group not found")
    ensure_can_manage(db, actor, group, "You do not have permission to delete this group")
    for child in group.subgroups:
        child.parent_group_id = group.parent_group_id
    for membership in group.members:
        membership.pastoral_group_id = None
    db.delete(group)
    db.commit()


# Members


def _pastoral_member_out(membership: PastoralMember) -> PastoralMemberOut:
    return PastoralMemberOut(
        id=membership.id,
        community_pastoral_id=membership.community_pastoral_id,
        pastoral_group_id=membership.pastoral_group_id,
        member_id=membership.member_id,
        member_name=membership.member.full_name,
        role=membership.role,
        is_active=membership.is_active,
        joined_at=membership.joined_at,
    )


def _validate_group(db: Session, pastoral_id: int, group_id: Optional[int]) -> None:
    if group_id is None:
        return
    group = get_or_404(db, PastoralGroup, group_id, "Group not found")
    if group.community_pastoral_id != pastoral_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Group belongs to another pastoral")


def add_member(db: Session, payload: PastoralMemberCreate, actor: User) -> PastoralMemberOut:
    pastoral = get_or_404(db, CommunityPastoral, payload.community_pastoral_id, "Pastoral not found")
    member = get_or_404(db, Member, payload.member_id, "Member not found")
    ensure_can_manage(db, actor, pastoral, "You do not have permission to edit this pastoral")
    if member.community_id != pastoral.community_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Member belongs to another community")
    existing = (
        db.query(PastoralMember.id)
        .filter(PastoralMember.community_pastoral_id == pastoral.id, PastoralMember.member_id == member.id)
        .first()
    )
    if existing:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Member already belongs to this pastoral")
    _validate_group(db, pastoral.id, payload.pastoral_group_id)

    membership = PastoralMember(**payload.dict())
    db.add(membership)
    db.commit()
    db.refresh(membership)
    logger.info(
        "pastoral_member_added",
        extra={"pastoral_id": pastoral.id, "member_id": member.id, "role": membership.role, "actor_id": actor.id},
    )
    return _pastoral_member_out(membership)


def list_members(db: Session, user: User, pastoral_id: int, include_inactive: bool = False) -> list[PastoralMemberOut]:
    pastoral = get_or_404(db, CommunityPastoral, pastoral_id, "Pastoral not found")
    ensure_can_read(db, user, pastoral)
    memberships = [item for item in pastoral.members if include_inactive or item.is_active]
    memberships.sort(key=lambda item: item.member.full_name)
    return [_pastoral_member_out(item) for item in memberships]


def update_member(db: Session, membership_id: int, payload: PastoralMemberUpdate, actor: User) -> PastoralMemberOut:
    membership = get_or_404(db, PastoralMember, membership_id, "Pastoral member not found")
    ensure_can_manage(db, actor, membership, "You do not have permission to edit this pastoral")
    if "pastoral_group_id" in payload.model_fields_set:
        _validate_group(db, membership.community_pastoral_id, payload.pastoral_group_id)
    apply_updates(membership, payload)
    db.commit()
    db.refresh(membership)
    return _pastoral_member_out(membership)


def remove_member(db: Session, membership_id: int, actor: User) -> None:
    membership = get_or_404(db, PastoralMember, membership_id, "Pastoral member not found")
    ensure_can_manage(db, actor, membership, "You do not have permission to edit this pastoral")
    db.delete(membership)
    db.commit()
