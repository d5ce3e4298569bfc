from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from parish_api.auth.deps import get_current_user, require_roles
from parish_api.core.db import get_db
from parish_api.models.user import User
from parish_api.schemas.schedule import (
    AssignmentCreate,
    AssignmentOut,
    EligibleMembersResponse,
    MemberScheduleStats,
    MyAssignmentsResponse,
    ScheduleCreate,
    ScheduleOut,
    ScheduleUpdate,
)
from parish_api.services import schedules as schedules_service
from parish_api.services.hierarchy import PASTORAL_STAFF_ROLES

router = APIRouter(prefix="/schedules", tags=["schedules"])


@router.post("", response_model=ScheduleOut, status_code=status.HTTP_201_CREATED)
def create_schedule(
    payload: ScheduleCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*PASTORAL_STAFF_ROLES)),
) -> ScheduleOut:
    return schedules_service.create_schedule(db, payload, user)


@router.get("", response_model=list[ScheduleOut])
def list_schedules(
    *,
    event_id: Optional[int] = Query(default=None),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> list[ScheduleOut]:
    return schedules_service.list_schedules(db, user, event_id)


@router.get("/my-assignments", response_model=MyAssignmentsResponse)
def my_assignments(db: Session = Depends(get_db), user: User = Depends(get_current_user)) -> MyAssignmentsResponse:
    return schedules_service.my_assignments(db, user)


@router.get("/events/{event_id}/eligible-members", response_model=EligibleMembersResponse)
def eligible_members(
    event_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*PASTORAL_STAFF_ROLES)),
) -> EligibleMembersResponse:
    return schedules_service.eligible_members(db, user, event_id)


@router.get("/members/{member_id}/stats", response_model=MemberScheduleStats)
def member_stats(
    member_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> MemberScheduleStats:
    return schedules_service.member_stats(db, user, member_id)


@router.post("/assignments", response_model=AssignmentOut, status_code=status.HTTP_201_CREATED)
def create_assignment(
    payload: AssignmentCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*PASTORAL_STAFF_ROLES)),
) -> AssignmentOut:
    return schedules_service.create_assignment(db, payload, user)


@router.get("/assignments", response_model=list[AssignmentOut])
def list_assignments(
    *,
    schedule_id: Optional[int] = Query(default=None),
    member_id: Optional[int] = Query(default=None),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> list[AssignmentOut]:
    return schedules_service.list_assignments(db, user, schedule_id, member_id)


@router.get("/assignments/{assignment_id}", response_model=AssignmentOut)
def get_assignment(
    assignment_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> AssignmentOut:
    return schedules_service.get_assignment(db, user, assignment_id)


@router.delete("/assignments/{assignment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_assignment(
    assignment_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*PASTORAL_STAFF_ROLES)),
) -> None:
    schedules_service.delete_assignment(db, assignment_id, user)


@router.post("/assignments/{assignment_id}/checkin", response_model=AssignmentOut)
def check_in(
    assignment_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> AssignmentOut:
    return schedules_service.check_in(db, assignment_id, user)


@router.delete("/assignments/{assignment_id}/checkin", response_model=AssignmentOut)
def undo_check_in(
    assignment_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> AssignmentOut:
    return schedules_service.undo_check_in(db, assignment_id, user)


@router.post("/assignments/{assignment_id}/confirm", response_model=AssignmentOut)
def confirm_assignment(
    assignment_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> AssignmentOut:
    return schedules_service.confirm_assignment(db, assignment_id, user)


@router.post("/assignments/{assignment_id}/decline", response_model=AssignmentOut)
def decline_assignment(
    assignment_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> AssignmentOut:
    return schedules_service.decline_assignment(db, assignment_id, user)


@router.get("/{schedule_id}", response_model=ScheduleOut)
def get_schedule(
    schedule_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> ScheduleOut:
    return schedules_service.get_schedule(db, user, schedule_id)


@router.patch("/{schedule_id}", response_model=ScheduleOut)
def update_schedule(
    schedule_id: int,
    payload: ScheduleUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*PASTORAL_STAFF_ROLES)),
) -> ScheduleOut:
    return schedules_service.update_schedule(db, schedule_id, payload, user)


@router.delete("/{schedule_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_schedule(
    schedule_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*PASTORAL_STAFF_ROLES)),
) -> None:
    schedules_service.delete_schedule(db, schedule_id, user)
