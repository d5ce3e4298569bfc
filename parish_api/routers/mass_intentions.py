from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from parish_api.auth.deps import require_roles
from parish_api.core.db import get_db
from parish_api.models.user import User
from parish_api.schemas.mass import (
    MarkPaidRequest,
    MassIntentionCreate,
    MassIntentionOut,
    MassIntentionStats,
    MassIntentionType,
    MassIntentionUpdate,
)
from parish_api.services import mass_intentions as intentions_service
from parish_api.services.hierarchy import ADMIN_ROLES, COORDINATOR_ROLES

router = APIRouter(prefix="/mass-intentions", tags=["mass-intentions"])


@router.post("", response_model=MassIntentionOut, status_code=status.HTTP_201_CREATED)
def create_intention(payload: MassIntentionCreate, db: Session = Depends(get_db)) -> MassIntentionOut:
    return intentions_service.create_intention(db, payload)


@router.get("", response_model=list[MassIntentionOut])
def list_intentions(
    *,
    community_id: Optional[int] = Query(default=None),
    intention_type: Optional[MassIntentionType] = Query(default=None, alias="type"),
    is_paid: Optional[bool] = Query(default=None),
    start_date: Optional[datetime] = Query(default=None),
    end_date: Optional[datetime] = Query(default=None),
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*COORDINATOR_ROLES)),
) -> list[MassIntentionOut]:
    return intentions_service.list_intentions(db, user, community_id, intention_type, is_paid, start_date, end_date)


@router.get("/upcoming", response_model=list[MassIntentionOut])
def list_upcoming(
    *,
    community_id: Optional[int] = Query(default=None),
    limit: int = Query(default=intentions_service.UPCOMING_LIMIT, ge=1, le=100),
    db: Session = Depends(get_db),
) -> list[MassIntentionOut]:
    return intentions_service.list_upcoming(db, community_id, limit)


@router.get("/pending", response_model=list[MassIntentionOut])
def list_pending(
    *,
    community_id: Optional[int] = Query(default=None),
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*COORDINATOR_ROLES)),
) -> list[MassIntentionOut]:
    return intentions_service.list_pending(db, user, community_id)


@router.get("/stats", response_model=MassIntentionStats)
def get_stats(
    *,
    community_id: Optional[int] = Query(default=None),
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*COORDINATOR_ROLES)),
) -> MassIntentionStats:
    return intentions_service.get_stats(db, user, community_id)


@router.get("/date/{day}", response_model=list[MassIntentionOut])
def list_by_date(
    day: date,
    community_id: Optional[int] = Query(default=None),
    db: Session = Depends(get_db),
) -> list[MassIntentionOut]:
    return intentions_service.list_by_date(db, day, community_id)


@router.get("/{intention_id}", response_model=MassIntentionOut)
def get_intention(intention_id: int, db: Session = Depends(get_db)) -> MassIntentionOut:
    return intentions_service.get_intention(db, intention_id)


@router.patch("/{intention_id}", response_model=MassIntentionOut)
def update_intention(
    intention_id: int,
    payload: MassIntentionUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*COORDINATOR_ROLES)),
) -> MassIntentionOut:
    return intentions_service.update_intention(db, intention_id, payload, user)


@router.delete("/{intention_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_intention(
    intention_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*ADMIN_ROLES)),
) -> None:
    intentions_service.delete_intention(db, intention_id, user)


@router.post("/{intention_id}/mark-paid", response_model=MassIntentionOut)
def mark_paid(
    intention_id: int,
    payload: MarkPaidRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*COORDINATOR_ROLES)),
) -> MassIntentionOut:
    return intentions_service.mark_paid(db, intention_id, payload.payment_method, user)


@router.post("/{intention_id}/mark-unpaid", response_model=MassIntentionOut)
def mark_unpaid(
    intention_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*COORDINATOR_ROLES)),
) -> MassIntentionOut:
    return intentions_service.mark_unpaid(db, intention_id, user)
