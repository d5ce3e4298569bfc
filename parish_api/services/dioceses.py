from __future__ import annotations

import logging

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from parish_api.models import Diocese, Parish, User
from parish_api.schemas.hierarchy import DioceseCreate, DioceseDetail, DioceseOut, DioceseUpdate
from parish_api.services.common import apply_updates, get_or_404
from parish_api.services.hierarchy import ensure_can_manage, ensure_can_read, scope_filter

logger = logging.getLogger(__name__)


def _ensure_unique_name(db: Session, name: str, exclude_id: int | None = None) -> None:
    query = db.query(Diocese).filter(func.lower(Diocese.name) == name.lower())
    if exclude_id is not None:
        query = query.filter(Diocese.id != exclude_id)
    if query.first():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Diocese already exists")


def _parish_counts(db: Session) -> dict[int, int]:
    rows = db.query(Parish.diocese_id, func.count(Parish.id)).group_by(Parish.diocese_id).all()
    return {diocese_id: count for diocese_id, count in rows}


def _detail(diocese: Diocese) -> DioceseDetail:
    detail = DioceseDetail.from_orm(diocese)
    detail.parish_count = len(detail.parishes)
    for item in detail.parishes:
        item.community_count = len(item.communities)
    return detail


def create_diocese(db: Session, payload: DioceseCreate, actor: User) -> DioceseOut:
    name = payload.name.strip()
    _ensure_unique_name(db, name)
    diocese = Diocese(**payload.dict(exclude={"name"}), name=name)
    db.add(diocese)
    db.commit()
    db.refresh(diocese)
    logger.info("diocese_created", extra={"diocese_id": diocese.id, "actor_id": actor.id})
    return DioceseOut.from_orm(diocese)


def list_dioceses(db: Session, user: User) -> list[DioceseOut]:
    dioceses = db.query(Diocese).filter(scope_filter(user, Diocese)).order_by(Diocese.name.asc()).all()
    counts = _parish_counts(db)
    items = []
    for diocese in dioceses:
        item = DioceseOut.from_orm(diocese)
        item.parish_count = counts.get(diocese.id, 0)
        items.append(item)
    return items


def get_diocese(db: Session, user: User, diocese_id: int) -> DioceseDetail:
    diocese = (
        db.query(Diocese)
        .options(selectinload(Diocese.parishes).selectinload(Parish.communities))
        .filter(Diocese.id == diocese_id)
        .first()
    )
    if not diocese:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Diocese not found")
    ensure_can_read(db, user, diocese)
    return _detail(diocese)


def update_diocese(db: Session, diocese_id: int, payload: DioceseUpdate, actor: User) -> DioceseOut:
    diocese = get_or_404(db, Diocese, diocese_id, "Diocese not found")
    ensure_can_manage(db, actor, diocese, "You do not have permission to edit this diocese")
    if payload.name:
        _ensure_unique_name(db, payload.name.strip(), exclude_id=diocese.id)
    apply_updates(diocese, payload)
    db.commit()
    db.refresh(diocese)
    return DioceseOut.from_orm(diocese)


def delete_diocese(db: Session, diocese_id: int, actor: User) -> None:
    diocese = get_or_404(db, Diocese, diocese_id, "Diocese not found")
    ensure_can_manage(db, actor, diocese)
    if diocese.parishes:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Diocese still has parishes")
    db.delete(diocese)
    db.commit()
    logger.info("diocese_deleted", extra={"diocese_id": diocese_id, "actor_id": actor.id})
