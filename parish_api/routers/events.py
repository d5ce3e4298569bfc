from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from parish_api.auth.deps import get_current_user, require_roles
from parish_api.core.db import get_db
from parish_api.models.user import User
from parish_api.schemas.event import (
    CheckinRequest,
    EventCreate,
    EventDetail,
    EventDuplicateRequest,
    EventOut,
    EventPastoralCreate,
    EventPastoralOut,
    EventStatus,
    EventType,
    EventUpdate,
    ParticipantCreate,
    ParticipantOut,
    PastoralAssignmentCreate,
    PastoralAssignmentOut,
)
from parish_api.services import events as events_service
from parish_api.services.hierarchy import COORDINATOR_ROLES, PASTORAL_STAFF_ROLES

router = APIRouter(prefix="/events", tags=["events"])


@router.post("", response_model=list[EventOut], status_code=status.HTTP_201_CREATED)
def create_event(
    payload: EventCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*COORDINATOR_ROLES)),
) -> list[EventOut]:
    """Create an event. A recurrence config yields the whole series, first occurrence first."""
    return events_service.create_event(db, payload, user)


@router.get("", response_model=list[EventOut])
def list_events(
    *,
    community_id: Optional[int] = Query(default=None),
    event_type: Optional[EventType] = Query(default=None, alias="type"),
    start_date: Optional[datetime] = Query(default=None),
    end_date: Optional[datetime] = Query(default=None),
    status_filter: Optional[EventStatus] = Query(default=None, alias="status"),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> list[EventOut]:
    return events_service.list_events(db, user, community_id, event_type, start_date, end_date, status_filter)


@router.get("/upcoming", response_model=list[EventOut])
def list_upcoming(
    *,
    community_id: Optional[int] = Query(default=None),
    limit: int = Query(default=events_service.UPCOMING_LIMIT, ge=1, le=50),
    db: Session = Depends(get_db),
) -> list[EventOut]:
    return events_service.list_upcoming(db, community_id, limit)


@router.get("/recurring", response_model=list[EventOut])
def list_recurring(
    *,
    community_id: Optional[int] = Query(default=None),
    db: Session = Depends(get_db),
) -> list[EventOut]:
    return events_service.list_recurring(db, community_id)


@router.patch("/assignments/{assignment_id}/checkin", response_model=PastoralAssignmentOut)
def checkin_assignment(
    assignment_id: int,
    payload: CheckinRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> PastoralAssignmentOut:
    return events_service.checkin_assignment(db, assignment_id, payload.checked_in, user)


@router.delete("/assignments/{assignment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_assignment(
    assignment_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*PASTORAL_STAFF_ROLES)),
) -> None:
    events_service.delete_assignment(db, assignment_id, user)


@router.get("/{event_id}", response_model=EventDetail)
def get_event(
    event_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> EventDetail:
    return events_service.get_event(db, user, event_id)


@router.patch("/{event_id}", response_model=EventOut)
def update_event(
    event_id: int,
    payload: EventUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*PASTORAL_STAFF_ROLES)),
) -> EventOut:
    return events_service.update_event(db, event_id, payload, user)


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(
    event_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*COORDINATOR_ROLES)),
) -> None:
    events_service.delete_event(db, event_id, user)


@router.post("/{event_id}/duplicate", response_model=list[EventOut], status_code=status.HTTP_201_CREATED)
def duplicate_event(
    event_id: int,
    payload: EventDuplicateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*COORDINATOR_ROLES)),
) -> list[EventOut]:
    return events_service.duplicate_event(db, event_id, payload, user)


@router.post("/{event_id}/participants", response_model=ParticipantOut, status_code=status.HTTP_201_CREATED)
def add_participant(
    event_id: int,
    payload: ParticipantCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> ParticipantOut:
    return events_service.add_participant(db, event_id, payload.member_id, user)


@router.get("/{event_id}/participants", response_model=list[ParticipantOut])
def list_participants(
    event_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> list[ParticipantOut]:
    return events_service.list_participants(db, user, event_id)


@router.delete("/{event_id}/participants/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_participant(
    event_id: int,
    member_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> None:
    events_service.remove_participant(db, event_id, member_id, user)


@router.post("/{event_id}/pastorals", response_model=EventPastoralOut, status_code=status.HTTP_201_CREATED)
def add_pastoral(
    event_id: int,
    payload: EventPastoralCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*PASTORAL_STAFF_ROLES)),
) -> EventPastoralOut:
    return events_service.add_pastoral(db, event_id, payload, user)


@router.get("/{event_id}/pastorals", response_model=list[EventPastoralOut])
def list_pastorals(
    event_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> list[EventPastoralOut]:
    return events_service.list_pastorals(db, user, event_id)


@router.delete("/{event_id}/pastorals/{community_pastoral_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_pastoral(
    event_id: int,
    community_pastoral_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*PASTORAL_STAFF_ROLES)),
) -> None:
    events_service.remove_pastoral(db, event_id, community_pastoral_id, user)


@router.post(
    "/{event_id}/pastorals/{community_pastoral_id}/assignments",
    response_model=PastoralAssignmentOut,
    status_code=status.HTTP_201_CREATED,
)
def create_assignment(
    event_id: int,
    community_pastoral_id: int,
    payload: PastoralAssignmentCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*PASTORAL_STAFF_ROLES)),
) -> PastoralAssignmentOut:
    return events_service.create_assignment(db, event_id, community_pastoral_id, payload, user)


@router.get(
    "/{event_id}/pastorals/{community_pastoral_id}/assignments",
    response_model=list[PastoralAssignmentOut],
)
def list_assignments(
    event_id: int,
    community_pastoral_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> list[PastoralAssignmentOut]:
    return events_service.list_assignments(db, user, event_id, community_pastoral_id)
