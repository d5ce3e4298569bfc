from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from parish_api.models import MassIntention, MassSchedule


def _intention(db_session, community, intention_for, when, amount=None, is_paid=False) -> MassIntention:
    intention = MassIntention(
        community_id=community.id,
        intention_for=intention_for,
        type="DECEASED",
        requested_date=when,
        amount=amount,
        is_paid=is_paid,
    )
    db_session.add(intention)
    db_session.commit()
    db_session.refresh(intention)
    return intention


def test_anyone_can_request_an_intention(client, world):
    resp = client.post(
        "/mass-intentions",
        json={
            "community_id": world.community.id,
            "intention_for": "  Soul of José Almeida ",
            "type": "DECEASED",
            "requested_date": "2030-02-03T10:00:00",
            "requested_by": "Family Almeida",
            "amount": "25.00",
        },
    )
    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert body["intention_for"] == "Soul of José Almeida"
    assert body["is_paid"] is False
    assert Decimal(body["amount"]) == Decimal("25.00")


def test_intention_for_unknown_community(client):
    resp = client.post(
        "/mass-intentions",
        json={"community_id": 999, "intention_for": "Health of Ana", "requested_date": "2030-02-03T10:00:00"},
    )
    assert resp.status_code == 404


def test_mark_paid_and_unpaid(client, authorize, coordinator, other_coordinator, world, db_session):
    intention = _intention(db_session, world.community, "Health of Rita", datetime(2030, 2, 3, 10), Decimal("30.00"))

    authorize(other_coordinator)
    denied = client.post(f"/mass-intentions/{intention.id}/mark-paid", json={"payment_method": "PIX"})
    assert denied.status_code == 403

    authorize(coordinator)
    paid = client.post(f"/mass-intentions/{intention.id}/mark-paid", json={"payment_method": "PIX"})
    assert paid.status_code == 200, paid.text
    assert paid.json()["is_paid"] is True
    assert paid.json()["paid_at"] is not None
    assert paid.json()["payment_method"] == "PIX"

    unpaid = client.post(f"/mass-intentions/{intention.id}/mark-unpaid")
    assert unpaid.status_code == 200
    assert unpaid.json()["is_paid"] is False
    assert unpaid.json()["paid_at"] is None
    assert unpaid.json()["payment_method"] is None


def test_intention_stats_are_scoped(client, authorize, coordinator, world, db_session):
    _intention(db_session, world.community, "Paid one", datetime(2030, 2, 3, 10), Decimal("50.00"), is_paid=True)
    _intention(db_session, world.community, "Pending one", datetime(2030, 2, 4, 10), Decimal("20.00"))
    _intention(db_session, world.community, "No offering", datetime(2030, 2, 5, 10))
    _intention(db_session, world.other_community, "Elsewhere", datetime(2030, 2, 5, 10), Decimal("99.00"))
    authorize(coordinator)

    resp = client.get("/mass-intentions/stats")
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert (body["total"], body["paid"], body["pending"]) == (3, 1, 2)
    assert Decimal(body["total_revenue"]) == Decimal("50")
    assert Decimal(body["pending_revenue"]) == Decimal("20")

    pending = client.get("/mass-intentions/pending")
    assert [item["intention_for"] for item in pending.json()] == ["Pending one", "No offering"]

    listing = client.get("/mass-intentions", params={"is_paid": True})
    assert [item["intention_for"] for item in listing.json()] == ["Paid one"]


def test_stats_require_coordinator(client, authorize, faithful_user):
    authorize(faithful_user)
    assert client.get("/mass-intentions/stats").status_code == 403


def test_intentions_by_date_are_public(client, world, db_session):
    _intention(db_session, world.community, "Morning", datetime(2030, 2, 3, 7))
    _intention(db_session, world.community, "Evening", datetime(2030, 2, 3, 19))
    _intention(db_session, world.community, "Next day", datetime(2030, 2, 4, 7))

    resp = client.get("/mass-intentions/date/2030-02-03")
    assert resp.status_code == 200
    assert [item["intention_for"] for item in resp.json()] == ["Morning", "Evening"]


def test_coordinator_publishes_mass_times(client, authorize, coordinator, world):
    authorize(coordinator)
    resp = client.post(
        "/mass-schedules",
        json={"community_id": world.community.id, "day_of_week": 0, "time": "09:30"},
    )
    assert resp.status_code == 201, resp.text
    assert resp.json()["type"] == "REGULAR"

    bad_time = client.post(
        "/mass-schedules",
        json={"community_id": world.community.id, "day_of_week": 0, "time": "9h30"},
    )
    assert bad_time.status_code == 422

    missing_date = client.post(
        "/mass-schedules",
        json={"community_id": world.community.id, "day_of_week": 3, "time": "19:00", "is_special": True},
    )
    assert missing_date.status_code == 422

    special = client.post(
        "/mass-schedules",
        json={
            "community_id": world.community.id,
            "day_of_week": 3,
            "time": "19:00",
            "type": "ADORATION",
            "is_special": True,
            "special_date": "2030-06-20",
        },
    )
    assert special.status_code == 201

    elsewhere = client.post(
        "/mass-schedules",
        json={"community_id": world.other_community.id, "day_of_week": 0, "time": "08:00"},
    )
    assert elsewhere.status_code == 403


def test_mass_times_by_day_are_public(client, world, db_session):
    db_session.add_all(
        [
            MassSchedule(community_id=world.community.id, day_of_week=0, time="18:00"),
            MassSchedule(community_id=world.community.id, day_of_week=0, time="08:00"),
            MassSchedule(community_id=world.community.id, day_of_week=2, time="07:00"),
        ]
    )
    db_session.commit()

    resp = client.get("/mass-schedules/day/0")
    assert resp.status_code == 200
    assert [item["time"] for item in resp.json()] == ["08:00", "18:00"]

    assert client.get("/mass-schedules/day/7").status_code == 422
    assert client.get("/mass-schedules/special").json() == []
