from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import Session

from parish_api.models import Community, MassSchedule, User
from parish_api.schemas.mass import MassScheduleCreate, MassScheduleOut, MassScheduleUpdate
from parish_api.services.common import apply_updates, get_or_404
from parish_api.services.hierarchy import ensure_can_manage


def _ordered(query):
    return query.order_by(MassSchedule.day_of_week.asc(), MassSchedule.time.asc())


def create_schedule(db: Session, payload: MassScheduleCreate, actor: User) -> MassScheduleOut:
    community = get_or_404(db, Community, payload.community_id, "Community not found")
    ensure_can_manage(db, actor, community, "You do not have permission to edit this community's mass times")
    schedule = MassSchedule(**payload.dict())
    db.add(schedule)
    db.commit()
    db.refresh(schedule)
    return MassScheduleOut.from_orm(schedule)


def list_schedules(
    db: Session, community_id: Optional[int] = None, schedule_type: Optional[str] = None
) -> list[MassScheduleOut]:
    query = db.query(MassSchedule)
    if community_id is not None:
        query = query.filter(MassSchedule.community_id == community_id)
    if schedule_type:
        query = query.filter(MassSchedule.type == schedule_type)
    return [MassScheduleOut.from_orm(item) for item in _ordered(query).all()]


def list_by_day(db: Session, day_of_week: int, community_id: Optional[int] = None) -> list[MassScheduleOut]:
    query = db.query(MassSchedule).filter(MassSchedule.day_of_week == day_of_week)
    if community_id is not None:
        query = query.filter(MassSchedule.community_id == community_id)
    return [MassScheduleOut.from_orm(item) for item in _ordered(query).all()]


def list_special(db: Session, community_id: Optional[int] = None) -> list[MassScheduleOut]:
    query = db.query(MassSchedule).filter(MassSchedule.is_special.is_(True))
    if community_id is not None:
        query = query.filter(MassSchedule.community_id == community_id)
    items = query.order_by(MassSchedule.special_date.asc(), MassSchedule.time.asc()).all()
    return [MassScheduleOut.from_orm(item) for item in items]


def get_schedule(db: Session, schedule_id: int) -> MassScheduleOut:
    return MassScheduleOut.from_orm(get_or_404(db, MassSchedule, schedule_id, "Mass schedule not found"))


def update_schedule(db: Session, schedule_id: int, payload: MassScheduleUpdate, actor: User) -> MassScheduleOut:
    schedule = get_or_404(db, MassSchedule, schedule_id, "Mass schedule not found")
    ensure_can_manage(db, actor, schedule, "You do not have permission to edit this mass schedule")
    apply_updates(schedule, payload)
    db.commit()
    db.refresh(schedule)
    return MassScheduleOut.from_orm(schedule)


def delete_schedule(db: Session, schedule_id: int, actor: User) -> None:
    schedule = get_or_404(db, MassSchedule, schedule_id, "Mass schedule not found")
    ensure_can_manage(db, actor, schedule, "You do not have permission to delete this mass schedule")
    db.delete(schedule)
    db.commit()
