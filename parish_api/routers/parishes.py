from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from parish_api.auth.deps import get_current_user, require_roles
from parish_api.core.db import get_db
from parish_api.models.user import User
from parish_api.schemas.hierarchy import ParishCreate, ParishDetail, ParishOut, ParishUpdate
from parish_api.services import parishes as parishes_service
from parish_api.services.hierarchy import ADMIN_ROLES, DIOCESAN_ADMIN, SYSTEM_ADMIN

CREATE_ROLES = (SYSTEM_ADMIN, DIOCESAN_ADMIN)

router = APIRouter(prefix="/parishes", tags=["parishes"])


@router.post("", response_model=ParishOut, status_code=status.HTTP_201_CREATED)
def create_parish(
    payload: ParishCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*CREATE_ROLES)),
) -> ParishOut:
    return parishes_service.create_parish(db, payload, user)


@router.get("", response_model=list[ParishOut])
def list_parishes(
    *,
    diocese_id: Optional[int] = Query(default=None),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> list[ParishOut]:
    return parishes_service.list_parishes(db, user, diocese_id)


@router.get("/{parish_id}", response_model=ParishDetail)
def get_parish(
    parish_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> ParishDetail:
    return parishes_service.get_parish(db, user, parish_id)


@router.patch("/{parish_id}", response_model=ParishOut)
def update_parish(
    parish_id: int,
    payload: ParishUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*ADMIN_ROLES)),
) -> ParishOut:
    return parishes_service.update_parish(db, parish_id, payload, user)


@router.delete("/{parish_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_parish(
    parish_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*CREATE_ROLES)),
) -> None:
    parishes_service.delete_parish(db, parish_id, user)
