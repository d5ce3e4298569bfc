from __future__ import annotations

import logging
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from parish_api.models import Community, Diocese, Parish, User
from parish_api.schemas.hierarchy import ParishCreate, ParishDetail, ParishOut, ParishUpdate
from parish_api.services.common import apply_updates, get_or_404
from parish_api.services.hierarchy import ensure_can_manage, ensure_can_read, scope_filter

logger = logging.getLogger(__name__)


def _community_counts(db: Session) -> dict[int, int]:
    rows = db.query(Community.parish_id, func.count(Community.id)).group_by(Community.parish_id).all()
    return {parish_id: count for parish_id, count in rows}


def create_parish(db: Session, payload: ParishCreate, actor: User) -> ParishOut:
    diocese = get_or_404(db, Diocese, payload.diocese_id, "Diocese not found")
    ensure_can_manage(db, actor, diocese, "You do not have permission to create parishes in this diocese")
    parish = Parish(**payload.dict(exclude={"name"}), name=payload.name.strip())
    db.add(parish)
    db.commit()
    db.refresh(parish)
    logger.info("parish_created", extra={"parish_id": parish.id, "diocese_id": diocese.id, "actor_id": actor.id})
    return ParishOut.from_orm(parish)


def list_parishes(db: Session, user: User, diocese_id: Optional[int] = None) -> list[ParishOut]:
    query = db.query(Parish).filter(scope_filter(user, Parish))
    if diocese_id is not None:
        query = query.filter(Parish.diocese_id == diocese_id)
    counts = _community_counts(db)
    items = []
    for parish in query.order_by(Parish.name.asc()).all():
        item = ParishOut.from_orm(parish)
        item.community_count = counts.get(parish.id, 0)
        items.append(item)
    return items


def get_parish(db: Session, user: User, parish_id: int) -> ParishDetail:
    parish = (
        db.query(Parish).options(selectinload(Parish.communities)).filter(Parish.id == parish_id).first()
    )
    if not parish:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Parish not found")
    ensure_can_read(db, user, parish)
    detail = ParishDetail.from_orm(parish)
    detail.community_count = len(parish.communities)
    return detail


def update_parish(db: Session, parish_id: int, payload: ParishUpdate, actor: User) -> ParishOut:
    parish = get_or_404(db, Parish, parish_id, "Parish not found")
    ensure_can_manage(db, actor, parish, "You do not have permission to edit this parish")
    apply_updates(parish, payload)
    db.commit()
    db.refresh(parish)
    return ParishOut.from_orm(parish)


def delete_parish(db: Session, parish_id: int, actor: User) -> None:
    parish = get_or_404(db, Parish, parish_id, "Parish not found")
    ensure_can_manage(db, actor, parish)
    if parish.communities:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Parish still has communities")
    db.delete(parish)
    db.commit()
    logger.info("parish_deleted", extra={"parish_id": parish_id, "actor_id": actor.id})
