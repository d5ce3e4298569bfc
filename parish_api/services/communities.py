from __future__ import annotations

import logging
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from parish_api.models import Community, Event, Member, Parish, User
from parish_api.schemas.hierarchy import CommunityCreate, CommunityDetail, CommunityOut, CommunityUpdate
from parish_api.services.common import apply_updates, get_or_404
from parish_api.services.hierarchy import ensure_can_manage, ensure_can_read, scope_filter

logger = logging.getLogger(__name__)


def _counts(db: Session, column) -> dict[int, int]:
    rows = db.query(column, func.count()).group_by(column).all()
    return {community_id: count for community_id, count in rows}


def create_community(db: Session, payload: CommunityCreate, actor: User) -> CommunityOut:
    parish = get_or_404(db, Parish, payload.parish_id, "Parish not found")
    ensure_can_manage(db, actor, parish, "You do not have permission to create communities in this parish")
    community = Community(**payload.dict(exclude={"name"}), name=payload.name.strip())
    db.add(community)
    db.commit()
    db.refresh(community)
    logger.info("community_created", extra={"community_id": community.id, "parish_id": parish.id, "actor_id": actor.id})
    return CommunityOut.from_orm(community)


def list_communities(db: Session, user: User, parish_id: Optional[int] = None) -> list[CommunityOut]:
    query = db.query(Community).filter(scope_filter(user, Community))
    if parish_id is not None:
        query = query.filter(Community.parish_id == parish_id)
    member_counts = _counts(db, Member.community_id)
    event_counts = _counts(db, Event.community_id)
    items = []
    for community in query.order_by(Community.name.asc()).all():
        item = CommunityOut.from_orm(community)
        item.member_count = member_counts.get(community.id, 0)
        item.event_count = event_counts.get(community.id, 0)
        items.append(item)
    return items


def get_community(db: Session, user: User, community_id: int) -> CommunityDetail:
    community = get_or_404(db, Community, community_id, "Community not found")
    ensure_can_read(db, user, community)
    detail = CommunityDetail.from_orm(community)
    detail.member_count = len(detail.members)
    detail.event_count = len(detail.events)
    return detail


def update_community(db: Session, community_id: int, payload: CommunityUpdate, actor: User) -> CommunityOut:
    community = get_or_404(db, Community, community_id, "Community not found")
    ensure_can_manage(db, actor, community, "You do not have permission to edit this community")
    apply_updates(community, payload)
    db.commit()
    db.refresh(community)
    return CommunityOut.from_orm(community)


def delete_community(db: Session, community_id: int, actor: User) -> None:
    community = get_or_404(db, Community, community_id, "Community not found")
    ensure_can_manage(db, actor, community)
    if community.members or community.events:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Community still has members or events")
    db.delete(community)
    db.commit()
    logger.info("community_deleted", extra={"community_id": community_id, "actor_id": actor.id})
