from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from parish_api.auth.deps import require_roles
from parish_api.core.db import get_db
from parish_api.models.user import User
from parish_api.schemas.news import NewsCreate, NewsOut, NewsUpdate
from parish_api.services import news as news_service
from parish_api.services.hierarchy import COORDINATOR_ROLES

router = APIRouter(prefix="/news", tags=["news"])


@router.post("", response_model=NewsOut, status_code=status.HTTP_201_CREATED)
def create_news(
    payload: NewsCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*COORDINATOR_ROLES)),
) -> NewsOut:
    return news_service.create_news(db, payload, user)


@router.get("", response_model=list[NewsOut])
def list_news(
    *,
    community_id: Optional[int] = Query(default=None),
    category: Optional[str] = Query(default=None),
    is_urgent: Optional[bool] = Query(default=None),
    db: Session = Depends(get_db),
) -> list[NewsOut]:
    return news_service.list_news(db, community_id, category, is_urgent)


@router.get("/recent", response_model=list[NewsOut])
def list_recent(
    *,
    community_id: Optional[int] = Query(default=None),
    limit: int = Query(default=news_service.RECENT_LIMIT, ge=1, le=50),
    db: Session = Depends(get_db),
) -> list[NewsOut]:
    return news_service.list_recent(db, community_id, limit)


@router.get("/urgent", response_model=list[NewsOut])
def list_urgent(
    *,
    community_id: Optional[int] = Query(default=None),
    db: Session = Depends(get_db),
) -> list[NewsOut]:
    return news_service.list_urgent(db, community_id)


@router.get("/{news_id}", response_model=NewsOut)
def get_news(news_id: int, db: Session = Depends(get_db)) -> NewsOut:
    return news_service.get_news(db, news_id)


@router.patch("/{news_id}", response_model=NewsOut)
def update_news(
    news_id: int,
    payload: NewsUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*COORDINATOR_ROLES)),
) -> NewsOut:
    return news_service.update_news(db, news_id, payload, user)


@router.delete("/{news_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_news(
    news_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*COORDINATOR_ROLES)),
) -> None:
    news_service.delete_news(db, news_id, user)
