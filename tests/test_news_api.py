from __future__ import annotations

from datetime import datetime

from parish_api.models import News


def _news(db_session, community, title, published_at, **fields) -> News:
    news = News(community_id=community.id, title=title, content="Details", published_at=published_at, **fields)
    db_session.add(news)
    db_session.commit()
    db_session.refresh(news)
    return news


def test_coordinator_publishes_news(client, authorize, coordinator, world):
    authorize(coordinator)
    payload = {
        "community_id": world.community.id,
        "title": " Festa Junina ",
        "content": "Bring a dish",
        "category": "Events",
    }
    resp = client.post("/news", json=payload)
    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert body["title"] == "Festa Junina"
    assert body["is_urgent"] is False
    assert body["published_at"] is not None

    elsewhere = client.post(
        "/news", json={"community_id": world.other_community.id, "title": "Intruder", "content": "Nope"}
    )
    assert elsewhere.status_code == 403


def test_faithful_cannot_publish(client, authorize, faithful_user, world):
    authorize(faithful_user)
    resp = client.post("/news", json={"community_id": world.community.id, "title": "Hello", "content": "Hi"})
    assert resp.status_code == 403
    assert resp.json()["detail"] == "Insufficient permissions"


def test_recent_and_urgent_news_are_public(client, world, db_session):
    _news(db_session, world.community, "Oldest", datetime(2030, 1, 1))
    _news(db_session, world.community, "Middle", datetime(2030, 1, 2), is_urgent=True)
    _news(db_session, world.community, "Newest", datetime(2030, 1, 3))
    _news(db_session, world.other_community, "Far away", datetime(2030, 1, 4))

    recent = client.get("/news/recent", params={"community_id": world.community.id, "limit": 2})
    assert recent.status_code == 200
    assert [item["title"] for item in recent.json()] == ["Newest", "Middle"]

    urgent = client.get("/news/urgent")
    assert [item["title"] for item in urgent.json()] == ["Middle"]

    listing = client.get("/news", params={"community_id": world.community.id})
    assert [item["title"] for item in listing.json()] == ["Middle", "Newest", "Oldest"]


def test_news_update_and_delete_respect_scope(client, authorize, coordinator, other_coordinator, world, db_session):
    news = _news(db_session, world.community, "Choir rehearsal", datetime(2030, 1, 1))

    authorize(other_coordinator)
    assert client.patch(f"/news/{news.id}", json={"is_urgent": True}).status_code == 403
    assert client.delete(f"/news/{news.id}").status_code == 403

    authorize(coordinator)
    update = client.patch(f"/news/{news.id}", json={"is_urgent": True})
    assert update.status_code == 200
    assert update.json()["is_urgent"] is True

    assert client.delete(f"/news/{news.id}").status_code == 204
    assert client.get(f"/news/{news.id}").status_code == 404
