from __future__ import annotations

from datetime import datetime

import pytest
from fastapi import HTTPException

from parish_api.models import (
    Community,
    CommunityPastoral,
    Event,
    EventPastoral,
    GlobalPastoral,
    Member,
    PastoralMember,
    Schedule,
)
from parish_api.services import hierarchy


def test_can_assign_role_requires_strictly_lower_level(make_user, world, system_admin):
    parish_admin = make_user("PARISH_ADMIN", diocese=world.diocese, parish=world.parish)

    assert hierarchy.can_assign_role(system_admin, "SYSTEM_ADMIN")
    assert hierarchy.can_assign_role(parish_admin, "COMMUNITY_COORDINATOR")
    assert not hierarchy.can_assign_role(parish_admin, "PARISH_ADMIN")
    assert not hierarchy.can_assign_role(parish_admin, "DIOCESAN_ADMIN")


def test_scope_filter_narrows_communities_per_role(db_session, world, diocesan_admin, parish_admin, coordinator):
    extra_parish_community = Community(parish_id=world.parish.id, name="Our Lady Chapel")
    db_session.add(extra_parish_community)
    db_session.commit()

    def visible(user):
        rows = db_session.query(Community).filter(hierarchy.scope_filter(user, Community)).all()
        return {row.id for row in rows}

    assert visible(diocesan_admin) == {world.community.id, extra_parish_community.id}
    assert visible(parish_admin) == {world.community.id, extra_parish_community.id}
    assert visible(coordinator) == {world.community.id}


def test_privileged_role_without_scope_sees_nothing(db_session, world, make_user):
    unscoped = make_user("DIOCESAN_ADMIN")
    rows = db_session.query(Community).filter(hierarchy.scope_filter(unscoped, Community)).all()
    assert rows == []


def test_scope_filter_rejects_unknown_models(coordinator):
    with pytest.raises(ValueError):
        hierarchy.scope_filter(coordinator, GlobalPastoral)


def test_resolve_scope_walks_up_from_schedule(db_session, world):
    event = Event(community_id=world.community.id, title="Sunday Mass", start_date=datetime(2030, 1, 6, 10))
    db_session.add(event)
    db_session.flush()
    schedule = Schedule(event_id=event.id, title="Readers", date=datetime(2030, 1, 6, 9))
    db_session.add(schedule)
    db_session.commit()

    scope = hierarchy.resolve_scope(schedule)

    assert scope == hierarchy.Scope(
        diocese_id=world.diocese.id,
        parish_id=world.parish.id,
        community_id=world.community.id,
    )


def test_can_manage_respects_jurisdiction(db_session, world, diocesan_admin, coordinator, other_coordinator):
    member = Member(community_id=world.community.id, full_name="Paulo Souza")
    db_session.add(member)
    db_session.commit()

    assert hierarchy.can_manage(db_session, diocesan_admin, member)
    assert hierarchy.can_manage(db_session, coordinator, member)
    assert not hierarchy.can_manage(db_session, other_coordinator, member)
    with pytest.raises(HTTPException) as exc:
        hierarchy.ensure_can_manage(db_session, other_coordinator, member)
    assert exc.value.status_code == 403


def test_pastoral_coordinator_manages_linked_events_only(db_session, world, make_user, make_member):
    pastoral_user = make_user(
        "PASTORAL_COORDINATOR", diocese=world.diocese, parish=world.parish, community=world.community
    )
    member = make_member(world.community, full_name="Ana Lima", user_id=pastoral_user.id)
    catalog = GlobalPastoral(name="Liturgy")
    db_session.add(catalog)
    db_session.flush()
    pastoral = CommunityPastoral(global_pastoral_id=catalog.id, community_id=world.community.id)
    db_session.add(pastoral)
    db_session.flush()
    db_session.add(PastoralMember(community_pastoral_id=pastoral.id, member_id=member.id, role="COORDINATOR"))
    linked = Event(community_id=world.community.id, title="Choir Practice", start_date=datetime(2030, 2, 1, 19))
    unlinked = Event(community_id=world.community.id, title="Bingo Night", start_date=datetime(2030, 2, 2, 19))
    db_session.add_all([linked, unlinked])
    db_session.flush()
    db_session.add(EventPastoral(event_id=linked.id, community_pastoral_id=pastoral.id))
    db_session.commit()

    assert hierarchy.can_manage(db_session, pastoral_user, linked)
    assert hierarchy.can_manage(db_session, pastoral_user, pastoral)
    assert not hierarchy.can_manage(db_session, pastoral_user, unlinked)
    assert not hierarchy.can_manage(db_session, pastoral_user, world.community)


def test_ensure_scope_ids_completes_and_checks_target(db_session, world, parish_admin):
    scope = hierarchy.ensure_scope_ids(db_session, parish_admin, None, None, world.community.id)
    assert scope.parish_id == world.parish.id
    assert scope.diocese_id == world.diocese.id

    with pytest.raises(HTTPException) as exc:
        hierarchy.ensure_scope_ids(db_session, parish_admin, None, None, world.other_community.id)
    assert exc.value.status_code == 403

    with pytest.raises(HTTPException) as exc:
        hierarchy.ensure_scope_ids(db_session, parish_admin, None, world.other_parish.id, world.community.id)
    assert exc.value.status_code == 400
