from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from parish_api.auth.deps import require_roles
from parish_api.core.db import get_db
from parish_api.models.user import User
from parish_api.schemas.mass import MassScheduleCreate, MassScheduleOut, MassScheduleType, MassScheduleUpdate
from parish_api.services import mass_schedules as mass_schedules_service
from parish_api.services.hierarchy import COORDINATOR_ROLES

router = APIRouter(prefix="/mass-schedules", tags=["mass-schedules"])


@router.post("", response_model=MassScheduleOut, status_code=status.HTTP_201_CREATED)
def create_schedule(
    payload: MassScheduleCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*COORDINATOR_ROLES)),
) -> MassScheduleOut:
    return mass_schedules_service.create_schedule(db, payload, user)


@router.get("", response_model=list[MassScheduleOut])
def list_schedules(
    *,
    community_id: Optional[int] = Query(default=None),
    schedule_type: Optional[MassScheduleType] = Query(default=None, alias="type"),
    db: Session = Depends(get_db),
) -> list[MassScheduleOut]:
    return mass_schedules_service.list_schedules(db, community_id, schedule_type)


@router.get("/special", response_model=list[MassScheduleOut])
def list_special(
    *,
    community_id: Optional[int] = Query(default=None),
    db: Session = Depends(get_db),
) -> list[MassScheduleOut]:
    return mass_schedules_service.list_special(db, community_id)


@router.get("/day/{day_of_week}", response_model=list[MassScheduleOut])
def list_by_day(
    day_of_week: int = Path(..., ge=0, le=6),
    community_id: Optional[int] = Query(default=None),
    db: Session = Depends(get_db),
) -> list[MassScheduleOut]:
    return mass_schedules_service.list_by_day(db, day_of_week, community_id)


@router.get("/{schedule_id}", response_model=MassScheduleOut)
def get_schedule(schedule_id: int, db: Session = Depends(get_db)) -> MassScheduleOut:
    return mass_schedules_service.get_schedule(db, schedule_id)


@router.patch("/{schedule_id}", response_model=MassScheduleOut)
def update_schedule(
    schedule_id: int,
    payload: MassScheduleUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*COORDINATOR_ROLES)),
) -> MassScheduleOut:
    return mass_schedules_service.update_schedule(db, schedule_id, payload, user)


@router.delete("/{schedule_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_schedule(
    schedule_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*COORDINATOR_ROLES)),
) -> None:
    mass_schedules_service.delete_schedule(db, schedule_id, user)
