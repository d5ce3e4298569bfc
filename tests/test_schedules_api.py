from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from parish_api.core.db import utcnow
from parish_api.models import (
    CommunityPastoral,
    Event,
    EventPastoral,
    GlobalPastoral,
    PastoralMember,
    Schedule,
    ScheduleAssignment,
)


@pytest.fixture()
def mass_event(db_session, world) -> Event:
    event = Event(
        community_id=world.community.id, title="Sunday Mass", type="MASS", start_date=datetime(2030, 5, 5, 10)
    )
    db_session.add(event)
    db_session.commit()
    db_session.refresh(event)
    return event


@pytest.fixture()
def liturgy_pastoral(db_session, world) -> CommunityPastoral:
    catalog = GlobalPastoral(name="Liturgy")
    db_session.add(catalog)
    db_session.flush()
    pastoral = CommunityPastoral(global_pastoral_id=catalog.id, community_id=world.community.id)
    db_session.add(pastoral)
    db_session.commit()
    db_session.refresh(pastoral)
    return pastoral


@pytest.fixture()
def volunteer(make_user, make_member, world):
    user = make_user("VOLUNTEER", diocese=world.diocese, parish=world.parish, community=world.community)
    member = make_member(world.community, full_name="Vera Santos", user_id=user.id)
    return user, member


def _schedule(db_session, event, title="Readers", when=datetime(2030, 5, 5, 9)) -> Schedule:
    schedule = Schedule(event_id=event.id, title=title, date=when)
    db_session.add(schedule)
    db_session.commit()
    db_session.refresh(schedule)
    return schedule


def test_pastoral_coordinator_schedules_linked_event(
    client, authorize, db_session, world, make_user, make_member, mass_event, liturgy_pastoral
):
    pastoral_user = make_user(
        "PASTORAL_COORDINATOR", diocese=world.diocese, parish=world.parish, community=world.community
    )
    member = make_member(world.community, full_name="Paula Coordinator", user_id=pastoral_user.id)
    db_session.add(PastoralMember(community_pastoral_id=liturgy_pastoral.id, member_id=member.id, role="COORDINATOR"))
    unlinked = Event(community_id=world.community.id, title="Parish Picnic", start_date=datetime(2030, 6, 1, 12))
    db_session.add(unlinked)
    db_session.flush()
    db_session.add(EventPastoral(event_id=mass_event.id, community_pastoral_id=liturgy_pastoral.id))
    db_session.commit()
    authorize(pastoral_user)

    resp = client.post(
        "/schedules",
        json={"event_id": mass_event.id, "title": "Readers", "date": "2030-05-05T09:00:00"},
    )
    assert resp.status_code == 201, resp.text
    assert resp.json()["event_id"] == mass_event.id

    denied = client.post(
        "/schedules",
        json={"event_id": unlinked.id, "title": "Grill", "date": "2030-06-01T11:00:00"},
    )
    assert denied.status_code == 403


def test_volunteer_cannot_create_schedule(client, authorize, volunteer, mass_event):
    user, _ = volunteer
    authorize(user)
    payload = {"event_id": mass_event.id, "title": "Readers", "date": "2030-05-05T09:00:00"}
    resp = client.post("/schedules", json=payload)
    assert resp.status_code == 403


def test_assignment_role_is_unique_per_member(client, authorize, coordinator, db_session, mass_event, volunteer):
    schedule = _schedule(db_session, mass_event)
    _, member = volunteer
    authorize(coordinator)

    payload = {"schedule_id": schedule.id, "member_id": member.id, "role": "Lector"}
    first = client.post("/schedules/assignments", json=payload)
    assert first.status_code == 201, first.text
    assert first.json()["status"] == "PENDING"

    again = client.post("/schedules/assignments", json=payload)
    assert again.status_code == 400
    assert again.json()["detail"] == "Member is already assigned to this schedule as Lector"

    other_role = client.post(
        "/schedules/assignments", json={"schedule_id": schedule.id, "member_id": member.id, "role": "Psalmist"}
    )
    assert other_role.status_code == 201

    schedule_view = client.get(f"/schedules/{schedule.id}")
    assert len(schedule_view.json()["assignments"]) == 2


def test_member_checks_in_and_responds(client, authorize, db_session, mass_event, volunteer, other_coordinator):
    schedule = _schedule(db_session, mass_event)
    user, member = volunteer
    assignment = ScheduleAssignment(schedule_id=schedule.id, member_id=member.id, role="Usher")
    db_session.add(assignment)
    db_session.commit()

    authorize(other_coordinator)
    assert client.post(f"/schedules/assignments/{assignment.id}/checkin").status_code == 403

    authorize(user)
    confirm = client.post(f"/schedules/assignments/{assignment.id}/confirm")
    assert confirm.status_code == 200
    assert confirm.json()["status"] == "CONFIRMED"

    checkin = client.post(f"/schedules/assignments/{assignment.id}/checkin")
    assert checkin.status_code == 200, checkin.text
    assert checkin.json()["checked_in"] is True

    twice = client.post(f"/schedules/assignments/{assignment.id}/checkin")
    assert twice.status_code == 400
    assert twice.json()["detail"] == "Already checked in"

    undo = client.delete(f"/schedules/assignments/{assignment.id}/checkin")
    assert undo.status_code == 200
    assert undo.json()["checked_in_at"] is None

    undo_again = client.delete(f"/schedules/assignments/{assignment.id}/checkin")
    assert undo_again.status_code == 400
    assert undo_again.json()["detail"] == "Member has not checked in"

    decline = client.post(f"/schedules/assignments/{assignment.id}/decline")
    assert decline.json()["status"] == "DECLINED"


def test_my_assignments_splits_upcoming_and_past(client, authorize, db_session, mass_event, volunteer):
    user, member = volunteer
    upcoming = _schedule(db_session, mass_event, title="Next Sunday", when=datetime(2030, 5, 5, 9))
    recent = _schedule(db_session, mass_event, title="Last Week", when=utcnow() - timedelta(days=3))
    ancient = _schedule(db_session, mass_event, title="Long Ago", when=utcnow() - timedelta(days=90))
    for schedule in (upcoming, recent, ancient):
        db_session.add(ScheduleAssignment(schedule_id=schedule.id, member_id=member.id, role="Lector"))
    db_session.commit()
    authorize(user)

    resp = client.get("/schedules/my-assignments")
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["member_id"] == member.id
    assert [item["schedule_title"] for item in body["upcoming"]] == ["Next Sunday"]
    assert [item["schedule_title"] for item in body["past"]] == ["Last Week"]
    assert body["upcoming"][0]["event_title"] == "Sunday Mass"


def test_my_assignments_without_member_record(client, authorize, make_user):
    authorize(make_user("FAITHFUL"))
    resp = client.get("/schedules/my-assignments")
    assert resp.status_code == 200
    assert resp.json() == {"member_id": None, "upcoming": [], "past": []}


def test_eligible_members_follow_linked_pastorals(
    client, authorize, coordinator, db_session, world, make_member, mass_event, liturgy_pastoral
):
    in_pastoral = make_member(world.community, full_name="Ines Liturgy")
    make_member(world.community, full_name="Otto Bystander")
    make_member(world.community, full_name="Ivo Inactive", status="INACTIVE")
    authorize(coordinator)

    everyone = client.get(f"/schedules/events/{mass_event.id}/eligible-members")
    assert everyone.status_code == 200, everyone.text
    assert everyone.json()["has_pastorals"] is False
    assert [item["full_name"] for item in everyone.json()["members"]] == ["Ines Liturgy", "Otto Bystander"]

    db_session.add(PastoralMember(community_pastoral_id=liturgy_pastoral.id, member_id=in_pastoral.id, role="SECRETARY"))
    db_session.add(EventPastoral(event_id=mass_event.id, community_pastoral_id=liturgy_pastoral.id, is_leader=True))
    db_session.commit()

    linked = client.get(f"/schedules/events/{mass_event.id}/eligible-members")
    body = linked.json()
    assert body["has_pastorals"] is True
    assert body["pastorals"][0]["name"] == "Liturgy"
    assert [item["full_name"] for item in body["members"]] == ["Ines Liturgy"]
    assert body["members"][0]["pastorals"] == [{"name": "Liturgy", "role": "SECRETARY"}]


def test_member_stats_attendance_rate(client, authorize, db_session, mass_event, volunteer, other_coordinator):
    user, member = volunteer
    for index in range(3):
        schedule = _schedule(db_session, mass_event, title=f"Slot {index}")
        db_session.add(
            ScheduleAssignment(schedule_id=schedule.id, member_id=member.id, role="Usher", checked_in=index == 0)
        )
    db_session.commit()

    authorize(user)
    resp = client.get(f"/schedules/members/{member.id}/stats")
    assert resp.status_code == 200
    assert resp.json() == {
        "member_id": member.id,
        "total": 3,
        "checked_in": 1,
        "missed": 2,
        "attendance_rate": 33.33,
    }

    authorize(other_coordinator)
    assert client.get(f"/schedules/members/{member.id}/stats").status_code == 403
