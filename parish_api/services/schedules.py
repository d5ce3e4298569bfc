from __future__ import annotations

import logging
from datetime import datetime, time, timedelta
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from parish_api.core.db import utcnow
from parish_api.models import Event, Member, Schedule, ScheduleAssignment, User
from parish_api.schemas.schedule import (
    AssignmentCreate,
    AssignmentOut,
    EligibleMember,
    EligibleMembersResponse,
    EligiblePastoral,
    MemberPastoralRole,
    MemberScheduleStats,
    MyAssignmentOut,
    MyAssignmentsResponse,
    ScheduleCreate,
    ScheduleOut,
    ScheduleUpdate,
)
from parish_api.services.common import apply_updates, get_or_404
from parish_api.services.hierarchy import (
    can_manage,
    ensure_can_manage,
    ensure_can_read,
    member_for_user,
    scope_filter,
)

logger = logging.getLogger(__name__)

PAST_WINDOW_DAYS = 30
PAST_LIMIT = 10


def _start_of_today() -> datetime:
    return datetime.combine(utcnow().date(), time.min)


def create_schedule(db: Session, payload: ScheduleCreate, actor: User) -> ScheduleOut:
    event = get_or_404(db, Event, payload.event_id, "Event not found")
    ensure_can_manage(db, actor, event, "You do not have permission to create schedules for this event")
    schedule = Schedule(
        event_id=event.id,
        title=payload.title.strip(),
        description=payload.description,
        date=payload.date,
    )
    db.add(schedule)
    db.commit()
    db.refresh(schedule)
    logger.info("schedule_created", extra={"schedule_id": schedule.id, "event_id": event.id, "actor_id": actor.id})
    return ScheduleOut.from_orm(schedule)


def list_schedules(db: Session, user: User, event_id: Optional[int] = None) -> list[ScheduleOut]:
    query = db.query(Schedule).filter(scope_filter(user, Schedule))
    if event_id is not None:
        query = query.filter(Schedule.event_id == event_id)
    return [ScheduleOut.from_orm(item) for item in query.order_by(Schedule.date.asc()).all()]


def get_schedule(db: Session, user: User, schedule_id: int) -> ScheduleOut:
    schedule = get_or_404(db, Schedule, schedule_id, "Schedule not found")
    ensure_can_read(db, user, schedule)
    return ScheduleOut.from_orm(schedule)


def update_schedule(db: Session, schedule_id: int, payload: ScheduleUpdate, actor: User) -> ScheduleOut:
    schedule = get_or_404(db, Schedule, schedule_id, "Schedule not found")
    ensure_can_manage(db, actor, schedule, "You do not have permission to edit this schedule")
    apply_updates(schedule, payload)
    db.commit()
    db.refresh(schedule)
    return ScheduleOut.from_orm(schedule)


def delete_schedule(db: Session, schedule_id: int, actor: User) -> None:
    schedule = get_or_404(db, Schedule, schedule_id, "Schedule not found")
    ensure_can_manage(db, actor, schedule, "You do not have permission to delete this schedule")
    db.delete(schedule)
    db.commit()
    logger.info("schedule_deleted", extra={"schedule_id": schedule_id, "actor_id": actor.id})


# Assignments


def create_assignment(db: Session, payload: AssignmentCreate, actor: User) -> AssignmentOut:
    schedule = get_or_404(db, Schedule, payload.schedule_id, "Schedule not found")
    member = get_or_404(db, Member, payload.member_id, "Member not found")
    ensure_can_manage(db, actor, schedule, "You do not have permission to assign members to this schedule")
    role = payload.role.strip()
    existing = (
        db.query(ScheduleAssignment.id)
        .filter(
            ScheduleAssignment.schedule_id == schedule.id,
            ScheduleAssignment.member_id == member.id,
            ScheduleAssignment.role == role,
        )
        .first()
    )
    if existing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Member is already assigned to this schedule as {role}",
        )
    assignment = ScheduleAssignment(schedule_id=schedule.id, member_id=member.id, role=role, notes=payload.notes)
    db.add(assignment)
    db.commit()
    db.refresh(assignment)
    logger.info(
        "schedule_assignment_created",
        extra={"assignment_id": assignment.id, "schedule_id": schedule.id, "member_id": member.id},
    )
    return AssignmentOut.from_orm(assignment)


def list_assignments(
    db: Session, user: User, schedule_id: Optional[int] = None, member_id: Optional[int] = None
) -> list[AssignmentOut]:
    query = db.query(ScheduleAssignment).filter(scope_filter(user, ScheduleAssignment))
    if schedule_id is not None:
        query = query.filter(ScheduleAssignment.schedule_id == schedule_id)
    if member_id is not None:
        query = query.filter(ScheduleAssignment.member_id == member_id)
    items = query.order_by(ScheduleAssignment.created_at.desc()).all()
    return [AssignmentOut.from_orm(item) for item in items]


def get_assignment(db: Session, user: User, assignment_id: int) -> AssignmentOut:
    assignment = get_or_404(db, ScheduleAssignment, assignment_id, "Assignment not found")
    if not can_manage(db, user, assignment):
        ensure_can_read(db, user, assignment)
    return AssignmentOut.from_orm(assignment)


def delete_assignment(db: Session, assignment_id: int, actor: User) -> None:
    assignment = get_or_404(db, ScheduleAssignment, assignment_id, "Assignment not found")
    ensure_can_manage(db, actor, assignment.schedule, "You do not have permission to remove this assignment")
    db.delete(assignment)
    db.commit()


def check_in(db: Session, assignment_id: int, actor: User) -> AssignmentOut:
    assignment = get_or_404(db, ScheduleAssignment, assignment_id, "Assignment not found")
    ensure_can_manage(db, actor, assignment, "You do not have permission to check in this assignment")
    if assignment.checked_in:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Already checked in")
    assignment.checked_in = True
    assignment.checked_in_at = utcnow()
    db.commit()
    db.refresh(assignment)
    logger.info("schedule_check_in", extra={"assignment_id": assignment.id, "actor_id": actor.id})
    return AssignmentOut.from_orm(assignment)


def undo_check_in(db: Session, assignment_id: int, actor: User) -> AssignmentOut:
    assignment = get_or_404(db, ScheduleAssignment, assignment_id, "Assignment not found")
    ensure_can_manage(db, actor, assignment, "You do not have permission to edit this assignment")
    if not assignment.checked_in:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Member has not checked in")
    assignment.checked_in = False
    assignment.checked_in_at = None
    db.commit()
    db.refresh(assignment)
    return AssignmentOut.from_orm(assignment)


def _set_status(db: Session, assignment_id: int, new_status: str, actor: User) -> AssignmentOut:
    assignment = get_or_404(db, ScheduleAssignment, assignment_id, "Assignment not found")
    ensure_can_manage(db, actor, assignment, "You do not have permission to respond to this assignment")
    assignment.status = new_status
    db.commit()
    db.refresh(assignment)
    logger.info(
        "schedule_assignment_status_changed",
        extra={"assignment_id": assignment.id, "status": new_status, "actor_id": actor.id},
    )
    return AssignmentOut.from_orm(assignment)


def confirm_assignment(db: Session, assignment_id: int, actor: User) -> AssignmentOut:
    return _set_status(db, assignment_id, "CONFIRMED", actor)


def decline_assignment(db: Session, assignment_id: int, actor: User) -> AssignmentOut:
    return _set_status(db, assignment_id, "DECLINED", actor)


def _my_assignment(assignment: ScheduleAssignment) -> MyAssignmentOut:
    schedule = assignment.schedule
    return MyAssignmentOut(
        id=assignment.id,
        schedule_id=schedule.id,
        schedule_title=schedule.title,
        schedule_date=schedule.date,
        event_id=schedule.event_id,
        event_title=schedule.event.title,
        role=assignment.role,
        status=assignment.status,
        checked_in=assignment.checked_in,
    )


def my_assignments(db: Session, user: User) -> MyAssignmentsResponse:
    member = member_for_user(db, user)
    if member is None:
        return MyAssignmentsResponse(member_id=None, upcoming=[], past=[])

    today = _start_of_today()
    base = db.query(ScheduleAssignment).join(Schedule).filter(ScheduleAssignment.member_id == member.id)
    upcoming = base.filter(Schedule.date >= today).order_by(Schedule.date.asc()).all()
    past = (
        base.filter(Schedule.date < today, Schedule.date >= today - timedelta(days=PAST_WINDOW_DAYS))
        .order_by(Schedule.date.desc())
        .limit(PAST_LIMIT)
        .all()
    )
    return MyAssignmentsResponse(
        member_id=member.id,
        upcoming=[_my_assignment(item) for item in upcoming],
        past=[_my_assignment(item) for item in past],
    )


def eligible_members(db: Session, user: User, event_id: int) -> EligibleMembersResponse:
    """Members of the pastorals linked to the event, or every active community member when none is linked."""
    event = get_or_404(db, Event, event_id, "Event not found")
    ensure_can_read(db, user, event)

    pastorals: list[EligiblePastoral] = []
    members: dict[int, EligibleMember] = {}
    for link in event.pastorals:
        pastoral = link.community_pastoral
        name = pastoral.global_pastoral.name
        pastorals.append(EligiblePastoral(id=pastoral.id, name=name, role=link.role, is_leader=link.is_leader))
        for membership in pastoral.members:
            member = membership.member
            if not membership.is_active or member.status != "ACTIVE":
                continue
            entry = members.get(member.id)
            if entry is None:
                entry = EligibleMember(id=member.id, full_name=member.full_name, phone=member.phone, email=member.email)
                members[member.id] = entry
            entry.pastorals.append(MemberPastoralRole(name=name, role=membership.role))

    if not pastorals:
        rows = (
            db.query(Member)
            .filter(Member.community_id == event.community_id, Member.status == "ACTIVE")
            .order_by(Member.full_name.asc())
            .all()
        )
        members = {
            row.id: EligibleMember(id=row.id, full_name=row.full_name, phone=row.phone, email=row.email)
            for row in rows
        }

    return EligibleMembersResponse(
        event_id=event.id,
        event_title=event.title,
        community_id=event.community_id,
        has_pastorals=bool(pastorals),
        pastorals=pastorals,
        members=sorted(members.values(), key=lambda item: item.full_name),
    )


def member_stats(db: Session, user: User, member_id: int) -> MemberScheduleStats:
    member = get_or_404(db, Member, member_id, "Member not found")
    if member.user_id != user.id:
        ensure_can_read(db, user, member)
    assignments = db.query(ScheduleAssignment).filter(ScheduleAssignment.member_id == member.id).all()
    total = len(assignments)
    checked_in = sum(1 for item in assignments if item.checked_in)
    rate = (checked_in / total) * 100 if total else 0.0
    return MemberScheduleStats(
        member_id=member.id,
        total=total,
        checked_in=checked_in,
        missed=total - checked_in,
        attendance_rate=round(rate, 2),
    )
