from __future__ import annotations

import logging
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Query, Session

from parish_api.core.db import utcnow
from parish_api.models import Community, Member, PrayerRequest, User
from parish_api.schemas.prayer_request import (
    PrayerRequestCreate,
    PrayerRequestOut,
    PrayerRequestPublicOut,
    PrayerRequestStats,
    PrayerRequestUpdate,
)
from parish_api.services.common import apply_updates, get_or_404
from parish_api.services.hierarchy import can_manage, ensure_can_manage, ensure_can_read, member_for_user, scope_filter

logger = logging.getLogger(__name__)

# Allowed source states for each moderation target.
_TRANSITIONS = {
    "APPROVED": ("PENDING", "REJECTED"),
    "REJECTED": ("PENDING", "APPROVED"),
}

# Fields shown on the public wall; author edits to them require a new approval.
_MODERATED_FIELDS = {"title", "description", "category"}


def _scoped(db: Session, user: User, community_id: Optional[int]) -> Query:
    query = db.query(PrayerRequest).filter(scope_filter(user, PrayerRequest))
    if community_id is not None:
        query = query.filter(PrayerRequest.community_id == community_id)
    return query


def _public(request: PrayerRequest) -> PrayerRequestPublicOut:
    member_name = None
    if not request.is_anonymous and request.member is not None:
        member_name = request.member.full_name
    return PrayerRequestPublicOut(
        id=request.id,
        community_id=request.community_id,
        title=request.title,
        description=request.description,
        category=request.category,
        is_anonymous=request.is_anonymous,
        prayer_count=request.prayer_count,
        member_name=member_name,
        created_at=request.created_at,
    )


def create_request(db: Session, payload: PrayerRequestCreate, actor: User) -> PrayerRequestOut:
    get_or_404(db, Community, payload.community_id, "Community not found")
    if payload.member_id is not None:
        member = get_or_404(db, Member, payload.member_id, "Member not found")
        if member.community_id != payload.community_id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Member belongs to another community")
        if member.user_id != actor.id and not can_manage(db, actor, member):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You can only submit requests in your own name",
            )
    request = PrayerRequest(**payload.dict(exclude={"title"}), title=payload.title.strip(), status="PENDING")
    db.add(request)
    db.commit()
    db.refresh(request)
    logger.info("prayer_request_created", extra={"request_id": request.id, "actor_id": actor.id})
    return PrayerRequestOut.from_orm(request)


def list_requests(
    db: Session,
    user: User,
    community_id: Optional[int] = None,
    status_filter: Optional[str] = None,
    category: Optional[str] = None,
) -> list[PrayerRequestOut]:
    query = _scoped(db, user, community_id)
    if status_filter:
        query = query.filter(PrayerRequest.status == status_filter)
    if category:
        query = query.filter(PrayerRequest.category == category)
    items = query.order_by(PrayerRequest.created_at.desc()).all()
    return [PrayerRequestOut.from_orm(item) for item in items]


def list_approved(
    db: Session, community_id: Optional[int] = None, category: Optional[str] = None
) -> list[PrayerRequestPublicOut]:
    query = db.query(PrayerRequest).filter(PrayerRequest.status == "APPROVED")
    if community_id is not None:
        query = query.filter(PrayerRequest.community_id == community_id)
    if category:
        query = query.filter(PrayerRequest.category == category)
    return [_public(item) for item in query.order_by(PrayerRequest.created_at.desc()).all()]


def list_pending(db: Session, user: User, community_id: Optional[int] = None) -> list[PrayerRequestOut]:
    items = (
        _scoped(db, user, community_id)
        .filter(PrayerRequest.status == "PENDING")
        .order_by(PrayerRequest.created_at.asc())
        .all()
    )
    return [PrayerRequestOut.from_orm(item) for item in items]


def get_stats(db: Session, user: User, community_id: Optional[int] = None) -> PrayerRequestStats:
    counts = dict(
        _scoped(db, user, community_id)
        .with_entities(PrayerRequest.status, func.count(PrayerRequest.id))
        .group_by(PrayerRequest.status)
        .all()
    )
    total_prayers = (
        _scoped(db, user, community_id)
        .filter(PrayerRequest.status == "APPROVED")
        .with_entities(func.coalesce(func.sum(PrayerRequest.prayer_count), 0))
        .scalar()
    )
    return PrayerRequestStats(
        total=sum(counts.values()),
        pending=counts.get("PENDING", 0),
        approved=counts.get("APPROVED", 0),
        rejected=counts.get("REJECTED", 0),
        total_prayers=total_prayers or 0,
    )


def _is_author(db: Session, user: User, request: PrayerRequest) -> bool:
    member = member_for_user(db, user)
    return member is not None and request.member_id == member.id


def get_request(db: Session, user: User, request_id: int) -> PrayerRequestOut:
    request = get_or_404(db, PrayerRequest, request_id, "Prayer request not found")
    if _is_author(db, user, request) or can_manage(db, user, request):
        return PrayerRequestOut.from_orm(request)
    if request.status != "APPROVED":
        ensure_can_read(db, user, request)
    out = PrayerRequestOut.from_orm(request)
    if request.is_anonymous:
        out.member_id = None
    return out


def update_request(db: Session, request_id: int, payload: PrayerRequestUpdate, actor: User) -> PrayerRequestOut:
    request = get_or_404(db, PrayerRequest, request_id, "Prayer request not found")
    is_manager = can_manage(db, actor, request)
    if not is_manager and not _is_author(db, actor, request):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You do not have permission to edit this request")
    changed = apply_updates(request, payload)
    # Content edited by the author goes back through moderation.
    if not is_manager and request.status != "PENDING" and set(changed) & _MODERATED_FIELDS:
        request.status = "PENDING"
        request.moderated_at = None
        request.moderated_by_id = None
        logger.info("prayer_request_requeued", extra={"request_id": request.id, "actor_id": actor.id})
    db.commit()
    db.refresh(request)
    return PrayerRequestOut.from_orm(request)


def delete_request(db: Session, request_id: int, actor: User) -> None:
    request = get_or_404(db, PrayerRequest, request_id, "Prayer request not found")
    if not _is_author(db, actor, request):
        ensure_can_manage(db, actor, request, "You do not have permission to delete this request")
    db.delete(request)
    db.commit()


def _moderate(db: Session, request_id: int, target: str, actor: User) -> PrayerRequestOut:
    request = get_or_404(db, PrayerRequest, request_id, "Prayer request not found")
    ensure_can_manage(db, actor, request, "You do not have permission to moderate this request")
    if request.status not in _TRANSITIONS[target]:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Prayer request is already {request.status.lower()}",
        )
    request.status = target
    request.moderated_at = utcnow()
    request.moderated_by_id = actor.id
    db.commit()
    db.refresh(request)
    logger.info("prayer_request_moderated", extra={"request_id": request.id, "status": target, "actor_id": actor.id})
    return PrayerRequestOut.from_orm(request)


def approve_request(db: Session, request_id: int, actor: User) -> PrayerRequestOut:
    return _moderate(db, request_id, "APPROVED", actor)


def reject_request(db: Session, request_id: int, actor: User) -> PrayerRequestOut:
    return _moderate(db, request_id, "REJECTED", actor)


def pray(db: Session, request_id: int) -> PrayerRequestPublicOut:
    request = get_or_404(db, PrayerRequest, request_id, "Prayer request not found")
    if request.status != "APPROVED":
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Only approved requests can receive prayers")
    request.prayer_count = PrayerRequest.prayer_count + 1
    db.commit()
    db.refresh(request)
    return _public(request)
