from __future__ import annotations

import logging
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from parish_api.core.db import utcnow
from parish_api.models import Community, Member, User
from parish_api.schemas.member import (
    MemberAssignmentRef,
    MemberCommunityRef,
    MemberCreate,
    MemberDetail,
    MemberExport,
    MemberOut,
    MemberPastoralRef,
    MemberUpdate,
    MemberUserRef,
)
from parish_api.services.common import apply_updates, get_or_404
from parish_api.services.hierarchy import can_manage, ensure_can_manage, ensure_can_read, scope_filter

logger = logging.getLogger(__name__)

RECENT_ASSIGNMENTS = 10
SEARCH_LIMIT = 20
ANONYMOUS_NAME = "Anonymous Member"

_PERSONAL_FIELDS = (
    "birth_date",
    "cpf",
    "rg",
    "email",
    "phone",
    "photo_url",
    "address",
    "city",
    "state",
    "zip_code",
    "father_name",
    "mother_name",
    "occupation",
    "notes",
)


def _ensure_unique_identity(
    db: Session, cpf: Optional[str], email: Optional[str], exclude_id: Optional[int] = None
) -> None:
    if cpf:
        query = db.query(Member.id).filter(Member.cpf == cpf)
        if exclude_id is not None:
            query = query.filter(Member.id != exclude_id)
        if query.first():
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="CPF already registered")
    if email:
        query = db.query(Member.id).filter(func.lower(Member.email) == email.lower())
        if exclude_id is not None:
            query = query.filter(Member.id != exclude_id)
        if query.first():
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")


def _pastoral_refs(member: Member) -> list[MemberPastoralRef]:
    return [
        MemberPastoralRef(
            id=membership.id,
            community_pastoral_id=membership.community_pastoral_id,
            pastoral_name=membership.community_pastoral.global_pastoral.name,
            role=membership.role,
            is_active=membership.is_active,
        )
        for membership in member.pastoral_memberships
    ]


def _is_self(user: User, member: Member) -> bool:
    return member.user_id is not None and member.user_id == user.id


def create_member(db: Session, payload: MemberCreate, actor: User) -> MemberOut:
    community = get_or_404(db, Community, payload.community_id, "Community not found")
    ensure_can_manage(db, actor, community, "You do not have permission to add members to this community")
    _ensure_unique_identity(db, payload.cpf, payload.email)
    if payload.user_id is not None:
        get_or_404(db, User, payload.user_id, "User not found")
        if db.query(Member.id).filter(Member.user_id == payload.user_id).first():
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User already linked to a member")

    data = payload.dict(exclude={"full_name"})
    member = Member(**data, full_name=payload.full_name.strip())
    if payload.consent_given:
        member.consent_date = utcnow()
    db.add(member)
    db.commit()
    db.refresh(member)
    logger.info("member_created", extra={"member_id": member.id, "community_id": community.id, "actor_id": actor.id})
    return MemberOut.from_orm(member)


def list_members(
    db: Session,
    user: User,
    community_id: Optional[int] = None,
    status_filter: Optional[str] = None,
) -> list[MemberOut]:
    query = db.query(Member).filter(scope_filter(user, Member))
    if community_id is not None:
        query = query.filter(Member.community_id == community_id)
    if status_filter:
        query = query.filter(Member.status == status_filter)
    return [MemberOut.from_orm(member) for member in query.order_by(Member.full_name.asc()).all()]


def search_members(db: Session, user: User, name: str, community_id: Optional[int] = None) -> list[MemberOut]:
    pattern = f"%{name.lower()}%"
    query = db.query(Member).filter(scope_filter(user, Member), func.lower(Member.full_name).like(pattern))
    if community_id is not None:
        query = query.filter(Member.community_id == community_id)
    members = query.order_by(Member.full_name.asc()).limit(SEARCH_LIMIT).all()
    return [MemberOut.from_orm(member) for member in members]


def get_member(db: Session, user: User, member_id: int) -> MemberDetail:
    member = get_or_404(db, Member, member_id, "Member not found")
    if not _is_self(user, member):
        ensure_can_read(db, user, member)
    base = MemberOut.from_orm(member).dict()
    return MemberDetail(
        **base,
        community=MemberCommunityRef.from_orm(member.community),
        user=MemberUserRef.from_orm(member.user) if member.user else None,
        pastorals=_pastoral_refs(member),
        recent_assignments=[
            MemberAssignmentRef.from_orm(item) for item in member.schedule_assignments[:RECENT_ASSIGNMENTS]
        ],
    )


def update_member(db: Session, member_id: int, payload: MemberUpdate, actor: User) -> MemberOut:
    member = get_or_404(db, Member, member_id, "Member not found")
    ensure_can_manage(db, actor, member, "You do not have permission to edit this member")
    _ensure_unique_identity(db, payload.cpf, payload.email, exclude_id=member.id)
    if payload.community_id is not None and payload.community_id != member.community_id:
        target = get_or_404(db, Community, payload.community_id, "Community not found")
        ensure_can_manage(db, actor, target, "You do not have permission to move members to this community")
    if payload.spouse_id is not None:
        if payload.spouse_id == member.id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Member cannot be their own spouse")
        get_or_404(db, Member, payload.spouse_id, "Spouse not found")
    apply_updates(member, payload)
    db.commit()
    db.refresh(member)
    return MemberOut.from_orm(member)


def delete_member(db: Session, member_id: int, actor: User) -> None:
    member = get_or_404(db, Member, member_id, "Member not found")
    ensure_can_manage(db, actor, member, "You do not have permission to delete this member")
    db.delete(member)
    db.commit()
    logger.info("member_deleted", extra={"member_id": member_id, "actor_id": actor.id})


def export_member(db: Session, member_id: int, actor: User) -> MemberExport:
    member = get_or_404(db, Member, member_id, "Member not found")
    if not _is_self(actor, member):
        ensure_can_manage(db, actor, member, "You do not have permission to export this member")
    logger.info("member_exported", extra={"member_id": member.id, "actor_id": actor.id})
    return MemberExport(
        exported_at=utcnow(),
        member=MemberOut.from_orm(member),
        pastorals=_pastoral_refs(member),
        event_participations=len(member.event_participations),
        schedule_assignments=len(member.schedule_assignments),
    )


def anonymize_member(db: Session, member_id: int, actor: User) -> MemberOut:
    member = get_or_404(db, Member, member_id, "Member not found")
    ensure_can_manage(db, actor, member, "You do not have permission to anonymize this member")
    if not member.consent_given:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Member has not consented to data processing",
        )
    for field in _PERSONAL_FIELDS:
        setattr(member, field, None)
    member.full_name = ANONYMOUS_NAME
    member.status = "DECEASED"
    member.consent_given = False
    member.consent_date = None
    db.commit()
    db.refresh(member)
    logger.info("member_anonymized", extra={"member_id": member.id, "actor_id": actor.id})
    return MemberOut.from_orm(member)


def update_consent(db: Session, member_id: int, consent_given: bool, actor: User) -> MemberOut:
    member = get_or_404(db, Member, member_id, "Member not found")
    if not _is_self(actor, member) and not can_manage(db, actor, member):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You do not have permission to edit this member")
    member.consent_given = consent_given
    member.consent_date = utcnow() if consent_given else None
    db.commit()
    db.refresh(member)
    return MemberOut.from_orm(member)
