from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Query, Session

from parish_api.core.db import utcnow
from parish_api.models import Community, MassIntention, User
from parish_api.schemas.mass import (
    MassIntentionCreate,
    MassIntentionOut,
    MassIntentionStats,
    MassIntentionUpdate,
)
from parish_api.services.common import apply_updates, get_or_404
from parish_api.services.hierarchy import ensure_can_manage, scope_filter

logger = logging.getLogger(__name__)

UPCOMING_LIMIT = 20


def _scoped(db: Session, user: User, community_id: Optional[int]) -> Query:
    query = db.query(MassIntention).filter(scope_filter(user, MassIntention))
    if community_id is not None:
        query = query.filter(MassIntention.community_id == community_id)
    return query


def create_intention(db: Session, payload: MassIntentionCreate) -> MassIntentionOut:
    get_or_404(db, Community, payload.community_id, "Community not found")
    intention = MassIntention(**payload.dict(exclude={"intention_for"}), intention_for=payload.intention_for.strip())
    db.add(intention)
    db.commit()
    db.refresh(intention)
    logger.info("mass_intention_created", extra={"intention_id": intention.id, "community_id": intention.community_id})
    return MassIntentionOut.from_orm(intention)


def list_intentions(
    db: Session,
    user: User,
    community_id: Optional[int] = None,
    intention_type: Optional[str] = None,
    is_paid: Optional[bool] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> list[MassIntentionOut]:
    query = _scoped(db, user, community_id)
    if intention_type:
        query = query.filter(MassIntention.type == intention_type)
    if is_paid is not None:
        query = query.filter(MassIntention.is_paid.is_(is_paid))
    if start_date is not None:
        query = query.filter(MassIntention.requested_date >= start_date)
    if end_date is not None:
        query = query.filter(MassIntention.requested_date <= end_date)
    items = query.order_by(MassIntention.requested_date.asc()).all()
    return [MassIntentionOut.from_orm(item) for item in items]


def list_upcoming(db: Session, community_id: Optional[int] = None, limit: int = UPCOMING_LIMIT) -> list[MassIntentionOut]:
    query = db.query(MassIntention).filter(MassIntention.requested_date >= utcnow())
    if community_id is not None:
        query = query.filter(MassIntention.community_id == community_id)
    items = query.order_by(MassIntention.requested_date.asc()).limit(limit).all()
    return [MassIntentionOut.from_orm(item) for item in items]


def list_pending(db: Session, user: User, community_id: Optional[int] = None) -> list[MassIntentionOut]:
    items = (
        _scoped(db, user, community_id)
        .filter(MassIntention.is_paid.is_(False))
        .order_by(MassIntention.requested_date.asc())
        .all()
    )
    return [MassIntentionOut.from_orm(item) for item in items]


def list_by_date(db: Session, day: date, community_id: Optional[int] = None) -> list[MassIntentionOut]:
    start = datetime.combine(day, time.min)
    query = db.query(MassIntention).filter(
        MassIntention.requested_date >= start,
        MassIntention.requested_date < start + timedelta(days=1),
    )
    if community_id is not None:
        query = query.filter(MassIntention.community_id == community_id)
    return [MassIntentionOut.from_orm(item) for item in query.order_by(MassIntention.requested_date.asc()).all()]


def get_stats(db: Session, user: User, community_id: Optional[int] = None) -> MassIntentionStats:
    def _sum(paid: bool) -> Decimal:
        value = (
            _scoped(db, user, community_id)
            .filter(MassIntention.is_paid.is_(paid))
            .with_entities(func.coalesce(func.sum(MassIntention.amount), 0))
            .scalar()
        )
        return Decimal(value or 0)

    total = _scoped(db, user, community_id).count()
    paid = _scoped(db, user, community_id).filter(MassIntention.is_paid.is_(True)).count()
    return MassIntentionStats(
        total=total,
        paid=paid,
        pending=total - paid,
        total_revenue=_sum(True),
        pending_revenue=_sum(False),
    )


def get_intention(db: Session, intention_id: int) -> MassIntentionOut:
    return MassIntentionOut.from_orm(get_or_404(db, MassIntention, intention_id, "Mass intention not found"))


def update_intention(db: Session, intention_id: int, payload: MassIntentionUpdate, actor: User) -> MassIntentionOut:
    intention = get_or_404(db, MassIntention, intention_id, "Mass intention not found")
    ensure_can_manage(db, actor, intention, "You do not have permission to edit this mass intention")
    apply_updates(intention, payload)
    db.commit()
    db.refresh(intention)
    return MassIntentionOut.from_orm(intention)


def delete_intention(db: Session, intention_id: int, actor: User) -> None:
    intention = get_or_404(db, MassIntention, intention_id, "Mass intention not found")
    ensure_can_manage(db, actor, intention, "You do not have permission to delete this mass intention")
    db.delete(intention)
    db.commit()


def mark_paid(db: Session, intention_id: int, payment_method: Optional[str], actor: User) -> MassIntentionOut:
    intention = get_or_404(db, MassIntention, intention_id, "Mass intention not found")
    ensure_can_manage(db, actor, intention, "You do not have permission to edit this mass intention")
    intention.is_paid = True
    intention.paid_at = utcnow()
    intention.payment_method = payment_method
    db.commit()
    db.refresh(intention)
    logger.info(
        "mass_intention_paid",
        extra={"intention_id": intention.id, "payment_method": payment_method, "actor_id": actor.id},
    )
    return MassIntentionOut.from_orm(intention)


def mark_unpaid(db: Session, intention_id: int, actor: User) -> MassIntentionOut:
    intention = get_or_404(db, MassIntention, intention_id, "Mass intention not found")
    ensure_can_manage(db, actor, intention, "You do not have permission to edit this mass intention")
    intention.is_paid = False
    intention.paid_at = None
    intention.payment_method = None
    db.commit()
    db.refresh(intention)
    logger.info("mass_intention_unpaid", extra={"intention_id": intention.id, "actor_id": actor.id})
    return MassIntentionOut.from_orm(intention)
