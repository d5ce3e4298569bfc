from __future__ import annotations

from datetime import datetime

from parish_api.models import CommunityPastoral, Event, GlobalPastoral, PastoralMember


def _event(db_session, community, title="Evening Prayer", start=datetime(2030, 3, 10, 18, 30), **fields) -> Event:
    event = Event(community_id=community.id, title=title, start_date=start, **fields)
    db_session.add(event)
    db_session.commit()
    db_session.refresh(event)
    return event


def _pastoral(db_session, community, name="Youth Ministry") -> CommunityPastoral:
    catalog = GlobalPastoral(name=name)
    db_session.add(catalog)
    db_session.flush()
    pastoral = CommunityPastoral(global_pastoral_id=catalog.id, community_id=community.id)
    db_session.add(pastoral)
    db_session.commit()
    db_session.refresh(pastoral)
    return pastoral


def test_create_single_event(client, authorize, coordinator, world):
    authorize(coordinator)
    resp = client.post(
        "/events",
        json={
            "community_id": world.community.id,
            "title": "Feast of St. Anne",
            "type": "CELEBRATION",
            "start_date": "2030-07-26T10:00:00",
            "end_date": "2030-07-26T12:00:00",
        },
    )
    assert resp.status_code == 201, resp.text
    events = resp.json()
    assert len(events) == 1
    assert events[0]["is_recurring"] is False
    assert events[0]["participant_count"] == 0


def test_end_before_start_is_rejected(client, authorize, coordinator, world):
    authorize(coordinator)
    resp = client.post(
        "/events",
        json={
            "community_id": world.community.id,
            "title": "Backwards",
            "start_date": "2030-07-26T10:00:00",
            "end_date": "2030-07-26T09:00:00",
        },
    )
    assert resp.status_code == 422


def test_create_weekly_series_keeps_duration(client, authorize, coordinator, world):
    authorize(coordinator)
    resp = client.post(
        "/events",
        json={
            "community_id": world.community.id,
            "title": "Bible Study",
            "type": "FORMATION",
            "start_date": "2030-01-07T19:00:00",
            "end_date": "2030-01-07T20:30:00",
            "recurrence": {"type": "WEEKLY", "interval": 1, "max_occurrences": 4},
        },
    )
    assert resp.status_code == 201, resp.text
    events = resp.json()
    assert [item["start_date"] for item in events] == [
        "2030-01-07T19:00:00",
        "2030-01-14T19:00:00",
        "2030-01-21T19:00:00",
        "2030-01-28T19:00:00",
    ]
    assert events[3]["end_date"] == "2030-01-28T20:30:00"
    assert events[0]["parent_event_id"] is None
    assert {item["parent_event_id"] for item in events[1:]} == {events[0]["id"]}
    assert all(item["is_recurring"] for item in events)

    recurring = client.get("/events/recurring")
    assert len(recurring.json()) == 4


def test_coordinator_cannot_create_event_elsewhere(client, authorize, coordinator, world):
    authorize(coordinator)
    resp = client.post(
        "/events",
        json={"community_id": world.other_community.id, "title": "Trespass", "start_date": "2030-01-01T10:00:00"},
    )
    assert resp.status_code == 403


def test_duplicate_event_keeps_time_and_duration(client, authorize, coordinator, world, db_session):
    source = _event(
        db_session,
        world.community,
        title="Novena",
        start=datetime(2030, 3, 10, 18, 30),
        end_date=datetime(2030, 3, 10, 20, 0),
        location="Main hall",
    )
    authorize(coordinator)

    resp = client.post(f"/events/{source.id}/duplicate", json={"dates": ["2030-04-01", "2030-04-08"]})
    assert resp.status_code == 201, resp.text
    copies = resp.json()
    assert [item["start_date"] for item in copies] == ["2030-04-01T18:30:00", "2030-04-08T18:30:00"]
    assert [item["end_date"] for item in copies] == ["2030-04-01T20:00:00", "2030-04-08T20:00:00"]
    assert all(item["location"] == "Main hall" for item in copies)
    assert all(item["is_recurring"] is False for item in copies)


def test_participants_respect_capacity(client, authorize, coordinator, world, db_session, make_member):
    event = _event(db_session, world.community, max_participants=1)
    first = make_member(world.community, full_name="First Person")
    second = make_member(world.community, full_name="Second Person")
    authorize(coordinator)

    ok = client.post(f"/events/{event.id}/participants", json={"member_id": first.id})
    assert ok.status_code == 201, ok.text
    assert ok.json()["member_name"] == "First Person"

    again = client.post(f"/events/{event.id}/participants", json={"member_id": first.id})
    assert again.status_code == 400
    assert again.json()["detail"] == "Member already registered for this event"

    full = client.post(f"/events/{event.id}/participants", json={"member_id": second.id})
    assert full.status_code == 400
    assert full.json()["detail"] == "Event is full"

    listing = client.get(f"/events/{event.id}/participants")
    assert [item["member_id"] for item in listing.json()] == [first.id]

    removed = client.delete(f"/events/{event.id}/participants/{first.id}")
    assert removed.status_code == 204


def test_member_from_other_community_is_rejected(client, authorize, parish_admin, world, db_session, make_member):
    event = _event(db_session, world.community)
    outsider = make_member(world.other_community, full_name="Outsider")
    authorize(parish_admin)

    resp = client.post(f"/events/{event.id}/participants", json={"member_id": outsider.id})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Member belongs to another community"


def test_faithful_registers_self(client, authorize, faithful_user, faithful_member, world, db_session, make_member):
    event = _event(db_session, world.community)
    neighbour = make_member(world.community, full_name="Neighbour")
    authorize(faithful_user)

    own = client.post(f"/events/{event.id}/participants", json={"member_id": faithful_member.id})
    assert own.status_code == 201

    other = client.post(f"/events/{event.id}/participants", json={"member_id": neighbour.id})
    assert other.status_code == 403


def test_event_pastoral_links_and_assignments(client, authorize, coordinator, world, db_session, make_member):
    event = _event(db_session, world.community)
    pastoral = _pastoral(db_session, world.community)
    foreign_pastoral = _pastoral(db_session, world.other_community, name="Choir")
    member = make_member(world.community, full_name="Helper One")
    stranger = make_member(world.community, full_name="Not In Pastoral")
    db_session.add(PastoralMember(community_pastoral_id=pastoral.id, member_id=member.id))
    db_session.commit()
    authorize(coordinator)

    link = client.post(
        f"/events/{event.id}/pastorals",
        json={"community_pastoral_id": pastoral.id, "role": "Hospitality", "is_leader": True},
    )
    assert link.status_code == 201, link.text
    assert link.json()["pastoral_name"] == "Youth Ministry"

    again = client.post(f"/events/{event.id}/pastorals", json={"community_pastoral_id": pastoral.id})
    assert again.status_code == 400

    foreign = client.post(f"/events/{event.id}/pastorals", json={"community_pastoral_id": foreign_pastoral.id})
    assert foreign.status_code == 400
    assert foreign.json()["detail"] == "Pastoral belongs to another community"

    bad = client.post(
        f"/events/{event.id}/pastorals/{pastoral.id}/assignments",
        json={"member_id": stranger.id},
    )
    assert bad.status_code == 400
    assert bad.json()["detail"] == "Member does not belong to this pastoral"

    assignment = client.post(
        f"/events/{event.id}/pastorals/{pastoral.id}/assignments",
        json={"member_id": member.id, "role": "Greeter"},
    )
    assert assignment.status_code == 201, assignment.text
    assignment_id = assignment.json()["id"]

    checkin = client.patch(f"/events/assignments/{assignment_id}/checkin", json={"checked_in": True})
    assert checkin.status_code == 200
    assert checkin.json()["checked_in"] is True
    assert checkin.json()["checked_in_at"] is not None

    detail = client.get(f"/events/{event.id}")
    assert detail.status_code == 200
    assert detail.json()["pastorals"][0]["is_leader"] is True


def test_upcoming_events_are_public(client, world, db_session):
    _event(db_session, world.community, title="Future Mass", start=datetime(2031, 1, 1, 9))
    _event(db_session, world.community, title="Past Mass", start=datetime(2020, 1, 1, 9))
    _event(db_session, world.community, title="Private Meeting", start=datetime(2031, 1, 2, 9), is_public=False)
    _event(db_session, world.community, title="Draft Retreat", start=datetime(2031, 1, 3, 9), status="DRAFT")

    resp = client.get("/events/upcoming", params={"community_id": world.community.id})
    assert resp.status_code == 200
    assert [item["title"] for item in resp.json()] == ["Future Mass"]


def test_event_listing_requires_scope(client, authorize, other_coordinator, coordinator, world, db_session):
    event = _event(db_session, world.community)
    authorize(other_coordinator)
    assert client.get("/events").json() == []
    assert client.get(f"/events/{event.id}").status_code == 403

    authorize(coordinator)
    assert [item["id"] for item in client.get("/events").json()] == [event.id]
    update = client.patch(f"/events/{event.id}", json={"status": "CANCELLED"})
    assert update.status_code == 200
    assert update.json()["status"] == "CANCELLED"


def test_patch_rejects_null_for_required_fields(client, authorize, coordinator, world, db_session):
    event = _event(db_session, world.community, end_date=datetime(2030, 3, 10, 20))
    authorize(coordinator)

    resp = client.patch(f"/events/{event.id}", json={"start_date": None, "location": "Hall"})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "start_date cannot be null"

    untouched = client.get(f"/events/{event.id}").json()
    assert untouched["start_date"] == "2030-03-10T18:30:00"
    assert untouched["location"] is None

    assert client.patch(f"/events/{event.id}", json={"title": None}).status_code == 400

    cleared = client.patch(f"/events/{event.id}", json={"end_date": None})
    assert cleared.status_code == 200
    assert cleared.json()["end_date"] is None
