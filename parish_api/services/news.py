from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.orm import Session

from parish_api.core.db import utcnow
from parish_api.models import Community, News, User
from parish_api.schemas.news import NewsCreate, NewsOut, NewsUpdate
from parish_api.services.common import apply_updates, get_or_404
from parish_api.services.hierarchy import ensure_can_manage

logger = logging.getLogger(__name__)

RECENT_LIMIT = 5


def create_news(db: Session, payload: NewsCreate, actor: User) -> NewsOut:
    community = get_or_404(db, Community, payload.community_id, "Community not found")
    ensure_can_manage(db, actor, community, "You do not have permission to publish news in this community")
    data = payload.dict(exclude={"title", "published_at"})
    news = News(**data, title=payload.title.strip(), published_at=payload.published_at or utcnow())
    db.add(news)
    db.commit()
    db.refresh(news)
    logger.info("news_published", extra={"news_id": news.id, "community_id": community.id, "actor_id": actor.id})
    return NewsOut.from_orm(news)


def list_news(
    db: Session,
    community_id: Optional[int] = None,
    category: Optional[str] = None,
    is_urgent: Optional[bool] = None,
) -> list[NewsOut]:
    query = db.query(News)
    if community_id is not None:
        query = query.filter(News.community_id == community_id)
    if category:
        query = query.filter(News.category == category)
    if is_urgent is not None:
        query = query.filter(News.is_urgent.is_(is_urgent))
    items = query.order_by(News.is_urgent.desc(), News.published_at.desc()).all()
    return [NewsOut.from_orm(item) for item in items]


def list_recent(db: Session, community_id: Optional[int] = None, limit: int = RECENT_LIMIT) -> list[NewsOut]:
    query = db.query(News)
    if community_id is not None:
        query = query.filter(News.community_id == community_id)
    return [NewsOut.from_orm(item) for item in query.order_by(News.published_at.desc()).limit(limit).all()]


def list_urgent(db: Session, community_id: Optional[int] = None) -> list[NewsOut]:
    query = db.query(News).filter(News.is_urgent.is_(True))
    if community_id is not None:
        query = query.filter(News.community_id == community_id)
    return [NewsOut.from_orm(item) for item in query.order_by(News.published_at.desc()).all()]


def get_news(db: Session, news_id: int) -> NewsOut:
    return NewsOut.from_orm(get_or_404(db, News, news_id, "News not found"))


def update_news(db: Session, news_id: int, payload: NewsUpdate, actor: User) -> NewsOut:
    news = get_or_404(db, News, news_id, "News not found")
    ensure_can_manage(db, actor, news, "You do not have permission to edit this news")
    apply_updates(news, payload)
    db.commit()
    db.refresh(news)
    return NewsOut.from_orm(news)


def delete_news(db: Session, news_id: int, actor: User) -> None:
    news = get_or_404(db, News, news_id, "News not found")
    ensure_can_manage(db, actor, news, "You do not have permission to delete this news")
    db.delete(news)
    db.commit()
