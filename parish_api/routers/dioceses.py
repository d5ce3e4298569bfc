from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from parish_api.auth.deps import get_current_user, require_roles
from parish_api.core.db import get_db
from parish_api.models.user import User
from parish_api.schemas.hierarchy import DioceseCreate, DioceseDetail, DioceseOut, DioceseUpdate
from parish_api.services import dioceses as dioceses_service
from parish_api.services.hierarchy import DIOCESAN_ADMIN, SYSTEM_ADMIN

WRITE_ROLES = (SYSTEM_ADMIN, DIOCESAN_ADMIN)

router = APIRouter(prefix="/dioceses", tags=["dioceses"])


@router.post("", response_model=DioceseOut, status_code=status.HTTP_201_CREATED)
def create_diocese(
    payload: DioceseCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(SYSTEM_ADMIN)),
) -> DioceseOut:
    return dioceses_service.create_diocese(db, payload, user)


@router.get("", response_model=list[DioceseOut])
def list_dioceses(db: Session = Depends(get_db), user: User = Depends(get_current_user)) -> list[DioceseOut]:
    return dioceses_service.list_dioceses(db, user)


@router.get("/{diocese_id}", response_model=DioceseDetail)
def get_diocese(
    diocese_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> DioceseDetail:
    return dioceses_service.get_diocese(db, user, diocese_id)


@router.patch("/{diocese_id}", response_model=DioceseOut)
def update_diocese(
    diocese_id: int,
    payload: DioceseUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*WRITE_ROLES)),
) -> DioceseOut:
    return dioceses_service.update_diocese(db, diocese_id, payload, user)


@router.delete("/{diocese_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_diocese(
    diocese_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(SYSTEM_ADMIN)),
) -> None:
    dioceses_service.delete_diocese(db, diocese_id, user)
