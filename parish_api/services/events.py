from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from parish_api.core.db import utcnow
from parish_api.models import (
    Community,
    CommunityPastoral,
    Event,
    EventParticipant,
    EventPastoral,
    EventPastoralAssignment,
    Member,
    PastoralMember,
    User,
)
from parish_api.schemas.event import (
    EventCreate,
    EventDetail,
    EventDuplicateRequest,
    EventOut,
    EventPastoralCreate,
    EventPastoralOut,
    EventScheduleOut,
    EventUpdate,
    ParticipantOut,
    PastoralAssignmentCreate,
    PastoralAssignmentOut,
)
from parish_api.services.common import apply_updates, get_or_404
from parish_api.services.hierarchy import (
    can_manage,
    ensure_can_manage,
    ensure_can_read,
    member_for_user,
    scope_filter,
)
from parish_api.services.recurrence import apply_duration, event_duration, generate_recurrence_dates

logger = logging.getLogger(__name__)

UPCOMING_LIMIT = 10
_COPIED_FIELDS = (
    "community_id",
    "title",
    "description",
    "type",
    "status",
    "location",
    "notes",
    "is_public",
    "max_participants",
)


def _participant_counts(db: Session, event_ids: list[int]) -> dict[int, int]:
    if not event_ids:
        return {}
    rows = (
        db.query(EventParticipant.event_id, func.count(EventParticipant.id))
        .filter(EventParticipant.event_id.in_(event_ids))
        .group_by(EventParticipant.event_id)
        .all()
    )
    return {event_id: count for event_id, count in rows}


def _to_out(db: Session, events: list[Event]) -> list[EventOut]:
    counts = _participant_counts(db, [event.id for event in events])
    items = []
    for event in events:
        item = EventOut.from_orm(event)
        item.participant_count = counts.get(event.id, 0)
        items.append(item)
    return items


def _pastoral_out(link: EventPastoral) -> EventPastoralOut:
    return EventPastoralOut(
        id=link.id,
        event_id=link.event_id,
        community_pastoral_id=link.community_pastoral_id,
        pastoral_name=link.community_pastoral.global_pastoral.name,
        role=link.role,
        is_leader=link.is_leader,
    )


def _participant_out(participant: EventParticipant) -> ParticipantOut:
    return ParticipantOut(
        id=participant.id,
        event_id=participant.event_id,
        member_id=participant.member_id,
        member_name=participant.member.full_name,
        registered_at=participant.registered_at,
        attended=participant.attended,
    )


def create_event(db: Session, payload: EventCreate, actor: User) -> list[EventOut]:
    """Create a single event, or a whole series when ``payload.recurrence`` is set."""
    community = get_or_404(db, Community, payload.community_id, "Community not found")
    ensure_can_manage(db, actor, community, "You do not have permission to create events in this community")

    base = payload.dict(exclude={"recurrence", "title"})
    base["title"] = payload.title.strip()
    recurrence = payload.recurrence
    if recurrence is None:
        event = Event(**base)
        db.add(event)
        db.commit()
        db.refresh(event)
        logger.info("event_created", extra={"event_id": event.id, "community_id": community.id, "actor_id": actor.id})
        return _to_out(db, [event])

    starts = generate_recurrence_dates(
        payload.start_date,
        recurrence.type,
        interval=recurrence.interval,
        days=recurrence.days,
        end_date=recurrence.end_date,
        max_occurrences=recurrence.max_occurrences,
    )
    duration = event_duration(payload.start_date, payload.end_date)
    series_fields = {
        "is_recurring": True,
        "recurrence_type": recurrence.type,
        "recurrence_interval": recurrence.interval,
        "recurrence_days": recurrence.days,
        "recurrence_end_date": recurrence.end_date,
    }
    first = Event(**base, **series_fields)
    db.add(first)
    db.flush()
    events = [first]
    for start in starts[1:]:
        occurrence = Event(**{**base, "start_date": start, "end_date": apply_duration(start, duration)}, **series_fields)
        occurrence.parent_event_id = first.id
        db.add(occurrence)
        events.append(occurrence)
    db.commit()
    for event in events:
        db.refresh(event)
    logger.info(
        "event_series_created",
        extra={"event_id": first.id, "occurrences": len(events), "community_id": community.id, "actor_id": actor.id},
    )
    return _to_out(db, events)


def list_events(
    db: Session,
    user: User,
    community_id: Optional[int] = None,
    event_type: Optional[str] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    status_filter: Optional[str] = None,
) -> list[EventOut]:
    query = db.query(Event).filter(scope_filter(user, Event))
    if community_id is not None:
        query = query.filter(Event.community_id == community_id)
    if event_type:
        query = query.filter(Event.type == event_type)
    if start_date is not None:
        query = query.filter(Event.start_date >= start_date)
    if end_date is not None:
        query = query.filter(Event.start_date <= end_date)
    if status_filter:
        query = query.filter(Event.status == status_filter)
    return _to_out(db, query.order_by(Event.start_date.asc()).all())


def list_upcoming(db: Session, community_id: Optional[int] = None, limit: int = UPCOMING_LIMIT) -> list[EventOut]:
    query = db.query(Event).filter(
        Event.start_date >= utcnow(),
        Event.is_public.is_(True),
        Event.status == "PUBLISHED",
    )
    if community_id is not None:
        query = query.filter(Event.community_id == community_id)
    return _to_out(db, query.order_by(Event.start_date.asc()).limit(limit).all())


def list_recurring(db: Session, community_id: Optional[int] = None) -> list[EventOut]:
    query = db.query(Event).filter(Event.is_recurring.is_(True), Event.is_public.is_(True))
    if community_id is not None:
        query = query.filter(Event.community_id == community_id)
    return _to_out(db, query.order_by(Event.start_date.asc()).all())


def get_event(db: Session, user: User, event_id: int) -> EventDetail:
    event = get_or_404(db, Event, event_id, "Event not found")
    ensure_can_read(db, user, event)
    base = _to_out(db, [event])[0]
    return EventDetail(
        **base.dict(),
        schedules=[EventScheduleOut.from_orm(schedule) for schedule in event.schedules],
        pastorals=[_pastoral_out(link) for link in event.pastorals],
    )


def update_event(db: Session, event_id: int, payload: EventUpdate, actor: User) -> EventOut:
    event = get_or_404(db, Event, event_id, "Event not found")
    ensure_can_manage(db, actor, event, "You do not have permission to edit this event")
    apply_updates(event, payload)
    if event.end_date and event.end_date < event.start_date:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="End date must be after the start date")
    db.commit()
    db.refresh(event)
    return _to_out(db, [event])[0]


def delete_event(db: Session, event_id: int, actor: User) -> None:
    event = get_or_404(db, Event, event_id, "Event not found")
    ensure_can_manage(db, actor, event, "You do not have permission to delete this event")
    for occurrence in event.occurrences:
        occurrence.parent_event_id = None
    db.delete(event)
    db.commit()
    logger.info("event_deleted", extra={"event_id": event_id, "actor_id": actor.id})


def duplicate_event(db: Session, event_id: int, payload: EventDuplicateRequest, actor: User) -> list[EventOut]:
    """Copy an event onto each target date, keeping its time of day and duration."""
    source = get_or_404(db, Event, event_id, "Event not found")
    ensure_can_manage(db, actor, source, "You do not have permission to duplicate this event")

    duration = event_duration(source.start_date, source.end_date)
    copies = []
    for target in payload.dates:
        start = datetime.combine(target, source.start_date.time())
        copy = Event(**{field: getattr(source, field) for field in _COPIED_FIELDS})
        copy.start_date = start
        copy.end_date = apply_duration(start, duration)
        copy.is_recurring = False
        db.add(copy)
        copies.append(copy)
    db.commit()
    for copy in copies:
        db.refresh(copy)
    logger.info("event_duplicated", extra={"event_id": source.id, "copies": len(copies), "actor_id": actor.id})
    return _to_out(db, copies)


# Participants


def _ensure_member_action(db: Session, actor: User, event: Event, member: Member, detail: str) -> None:
    own = member_for_user(db, actor)
    if own is not None and own.id == member.id:
        return
    ensure_can_manage(db, actor, event, detail)


def add_participant(db: Session, event_id: int, member_id: int, actor: User) -> ParticipantOut:
    event = get_or_404(db, Event, event_id, "Event not found")
    member = get_or_404(db, Member, member_id, "Member not found")
    _ensure_member_action(db, actor, event, member, "You do not have permission to register this member")
    if member.community_id != event.community_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Member belongs to another community")
    existing = (
        db.query(EventParticipant.id)
        .filter(EventParticipant.event_id == event.id, EventParticipant.member_id == member.id)
        .first()
    )
    if existing:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Member already registered for this event")
    if event.max_participants is not None:
        registered = db.query(func.count(EventParticipant.id)).filter(EventParticipant.event_id == event.id).scalar()
        if registered >= event.max_participants:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Event is full")

    participant = EventParticipant(event_id=event.id, member_id=member.id)
    db.add(participant)
    db.commit()
    db.refresh(participant)
    return _participant_out(participant)


def remove_participant(db: Session, event_id: int, member_id: int, actor: User) -> None:
    event = get_or_404(db, Event, event_id, "Event not found")
    participant = (
        db.query(EventParticipant)
        .filter(EventParticipant.event_id == event_id, EventParticipant.member_id == member_id)
        .first()
    )
    if not participant:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Participant not found")
    _ensure_member_action(db, actor, event, participant.member, "You do not have permission to remove this participant")
    db.delete(participant)
    db.commit()


def list_participants(db: Session, user: User, event_id: int) -> list[ParticipantOut]:
    event = get_or_404(db, Event, event_id, "Event not found")
    ensure_can_read(db, user, event)
    participants = sorted(event.participants, key=lambda item: item.registered_at)
    return [_participant_out(participant) for participant in participants]


# Pastorals linked to an event


def add_pastoral(db: Session, event_id: int, payload: EventPastoralCreate, actor: User) -> EventPastoralOut:
    event = get_or_404(db, Event, event_id, "Event not found")
    pastoral = get_or_404(db, CommunityPastoral, payload.community_pastoral_id, "Pastoral not found")
    if not can_manage(db, actor, event) and not can_manage(db, actor, pastoral):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You do not have permission to edit this event")
    if pastoral.community_id != event.community_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Pastoral belongs to another community")
    existing = (
        db.query(EventPastoral.id)
        .filter(EventPastoral.event_id == event.id, EventPastoral.community_pastoral_id == pastoral.id)
        .first()
    )
    if existing:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Pastoral already linked to this event")

    link = EventPastoral(
        event_id=event.id,
        community_pastoral_id=pastoral.id,
        role=payload.role,
        is_leader=payload.is_leader,
    )
    db.add(link)
    db.commit()
    db.refresh(link)
    logger.info("event_pastoral_linked", extra={"event_id": event.id, "pastoral_id": pastoral.id, "actor_id": actor.id})
    return _pastoral_out(link)


def list_pastorals(db: Session, user: User, event_id: int) -> list[EventPastoralOut]:
    event = get_or_404(db, Event, event_id, "Event not found")
    ensure_can_read(db, user, event)
    return [_pastoral_out(link) for link in event.pastorals]


def _get_link_or_404(db: Session, event_id: int, community_pastoral_id: int) -> EventPastoral:
    get_or_404(db, Event, event_id, "Event not found")
    link = (
        db.query(EventPastoral)
        .filter(EventPastoral.event_id == event_id, EventPastoral.community_pastoral_id == community_pastoral_id)
        .first()
    )
    if not link:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Pastoral is not linked to this event")
    return link


def remove_pastoral(db: Session, event_id: int, community_pastoral_id: int, actor: User) -> None:
    link = _get_link_or_404(db, event_id, community_pastoral_id)
    ensure_can_manage(db, actor, link, "You do not have permission to edit this event")
    db.delete(link)
    db.commit()


# Pastoral assignments


def create_assignment(
    db: Session, event_id: int, community_pastoral_id: int, payload: PastoralAssignmentCreate, actor: User
) -> PastoralAssignmentOut:
    link = _get_link_or_404(db, event_id, community_pastoral_id)
    get_or_404(db, Member, payload.member_id, "Member not found")
    ensure_can_manage(db, actor, link, "You do not have permission to assign members to this event")
    belongs = (
        db.query(PastoralMember.id)
        .filter(
            PastoralMember.community_pastoral_id == community_pastoral_id,
            PastoralMember.member_id == payload.member_id,
            PastoralMember.is_active.is_(True),
        )
        .first()
    )
    if not belongs:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Member does not belong to this pastoral")

    assignment = EventPastoralAssignment(
        event_pastoral_id=link.id,
        member_id=payload.member_id,
        role=payload.role,
        notes=payload.notes,
    )
    db.add(assignment)
    db.commit()
    db.refresh(assignment)
    return PastoralAssignmentOut.from_orm(assignment)


def list_assignments(db: Session, user: User, event_id: int, community_pastoral_id: int) -> list[PastoralAssignmentOut]:
    link = _get_link_or_404(db, event_id, community_pastoral_id)
    ensure_can_read(db, user, link.event)
    return [PastoralAssignmentOut.from_orm(item) for item in link.assignments]


def checkin_assignment(db: Session, assignment_id: int, checked_in: bool, actor: User) -> PastoralAssignmentOut:
    assignment = get_or_404(db, EventPastoralAssignment, assignment_id, "Assignment not found")
    ensure_can_manage(db, actor, assignment, "You do not have permission to check in this assignment")
    assignment.checked_in = checked_in
    assignment.checked_in_at = utcnow() if checked_in else None
    db.commit()
    db.refresh(assignment)
    return PastoralAssignmentOut.from_orm(assignment)


def delete_assignment(db: Session, assignment_id: int, actor: User) -> None:
    assignment = get_or_404(db, EventPastoralAssignment, assignment_id, "Assignment not found")
    ensure_can_manage(db, actor, assignment.event_pastoral, "You do not have permission to remove this assignment")
    db.delete(assignment)
    db.commit()
