from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from parish_api.auth.deps import get_current_user, require_roles
from parish_api.core.db import get_db
from parish_api.models.user import User
from parish_api.schemas.hierarchy import CommunityCreate, CommunityDetail, CommunityOut, CommunityUpdate
from parish_api.services import communities as communities_service
from parish_api.services.hierarchy import ADMIN_ROLES, COORDINATOR_ROLES

router = APIRouter(prefix="/communities", tags=["communities"])


@router.post("", response_model=CommunityOut, status_code=status.HTTP_201_CREATED)
def create_community(
    payload: CommunityCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*ADMIN_ROLES)),
) -> CommunityOut:
    return communities_service.create_community(db, payload, user)


@router.get("", response_model=list[CommunityOut])
def list_communities(
    *,
    parish_id: Optional[int] = Query(default=None),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> list[CommunityOut]:
    return communities_service.list_communities(db, user, parish_id)


@router.get("/{community_id}", response_model=CommunityDetail)
def get_community(
    community_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> CommunityDetail:
    return communities_service.get_community(db, user, community_id)


@router.patch("/{community_id}", response_model=CommunityOut)
def update_community(
    community_id: int,
    payload: CommunityUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*COORDINATOR_ROLES)),
) -> CommunityOut:
    return communities_service.update_community(db, community_id, payload, user)


@router.delete("/{community_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_community(
    community_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*ADMIN_ROLES)),
) -> None:
    communities_service.delete_community(db, community_id, user)
