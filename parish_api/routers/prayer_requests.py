from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from parish_api.auth.deps import get_current_user, require_roles
from parish_api.core.db import get_db
from parish_api.models.user import User
from parish_api.schemas.prayer_request import (
    PrayerCategory,
    PrayerRequestCreate,
    PrayerRequestOut,
    PrayerRequestPublicOut,
    PrayerRequestStats,
    PrayerRequestStatus,
    PrayerRequestUpdate,
)
from parish_api.services import prayer_requests as prayer_service
from parish_api.services.hierarchy import COORDINATOR_ROLES

router = APIRouter(prefix="/prayer-requests", tags=["prayer-requests"])


@router.post("", response_model=PrayerRequestOut, status_code=status.HTTP_201_CREATED)
def create_request(
    payload: PrayerRequestCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> PrayerRequestOut:
    return prayer_service.create_request(db, payload, user)


@router.get("", response_model=list[PrayerRequestOut])
def list_requests(
    *,
    community_id: Optional[int] = Query(default=None),
    status_filter: Optional[PrayerRequestStatus] = Query(default=None, alias="status"),
    category: Optional[PrayerCategory] = Query(default=None),
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*COORDINATOR_ROLES)),
) -> list[PrayerRequestOut]:
    return prayer_service.list_requests(db, user, community_id, status_filter, category)


@router.get("/approved", response_model=list[PrayerRequestPublicOut])
def list_approved(
    *,
    community_id: Optional[int] = Query(default=None),
    category: Optional[PrayerCategory] = Query(default=None),
    db: Session = Depends(get_db),
) -> list[PrayerRequestPublicOut]:
    return prayer_service.list_approved(db, community_id, category)


@router.get("/pending", response_model=list[PrayerRequestOut])
def list_pending(
    *,
    community_id: Optional[int] = Query(default=None),
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*COORDINATOR_ROLES)),
) -> list[PrayerRequestOut]:
    return prayer_service.list_pending(db, user, community_id)


@router.get("/stats", response_model=PrayerRequestStats)
def get_stats(
    *,
    community_id: Optional[int] = Query(default=None),
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*COORDINATOR_ROLES)),
) -> PrayerRequestStats:
    return prayer_service.get_stats(db, user, community_id)


@router.get("/{request_id}", response_model=PrayerRequestOut)
def get_request(
    request_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> PrayerRequestOut:
    return prayer_service.get_request(db, user, request_id)


@router.patch("/{request_id}", response_model=PrayerRequestOut)
def update_request(
    request_id: int,
    payload: PrayerRequestUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> PrayerRequestOut:
    return prayer_service.update_request(db, request_id, payload, user)


@router.delete("/{request_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_request(
    request_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> None:
    prayer_service.delete_request(db, request_id, user)


@router.post("/{request_id}/approve", response_model=PrayerRequestOut)
def approve_request(
    request_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*COORDINATOR_ROLES)),
) -> PrayerRequestOut:
    return prayer_service.approve_request(db, request_id, user)


@router.post("/{request_id}/reject", response_model=PrayerRequestOut)
def reject_request(
    request_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*COORDINATOR_ROLES)),
) -> PrayerRequestOut:
    return prayer_service.reject_request(db, request_id, user)


@router.post("/{request_id}/pray", response_model=PrayerRequestPublicOut)
def pray(request_id: int, db: Session = Depends(get_db)) -> PrayerRequestPublicOut:
    return prayer_service.pray(db, request_id)
