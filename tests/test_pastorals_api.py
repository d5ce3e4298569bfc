from __future__ import annotations

import pytest

from parish_api.models import CommunityPastoral, GlobalPastoral, PastoralMember


@pytest.fixture()
def catechesis(db_session) -> GlobalPastoral:
    pastoral = GlobalPastoral(name="Catechesis", color_hex="#1E88E5")
    db_session.add(pastoral)
    db_session.commit()
    db_session.refresh(pastoral)
    return pastoral


@pytest.fixture()
def chapel_catechesis(db_session, world, catechesis) -> CommunityPastoral:
    pastoral = CommunityPastoral(global_pastoral_id=catechesis.id, community_id=world.community.id)
    db_session.add(pastoral)
    db_session.commit()
    db_session.refresh(pastoral)
    return pastoral


def test_global_catalog_is_system_admin_only(client, authorize, system_admin, coordinator):
    authorize(coordinator)
    assert client.post("/pastorals/global", json={"name": "Music"}).status_code == 403

    authorize(system_admin)
    created = client.post("/pastorals/global", json={"name": "Music", "color_hex": "#FF0000"})
    assert created.status_code == 201, created.text
    pastoral_id = created.json()["id"]

    assert client.post("/pastorals/global", json={"name": "music"}).status_code == 409
    assert client.post("/pastorals/global", json={"name": "Bad Color", "color_hex": "red"}).status_code == 422

    client.patch(f"/pastorals/global/{pastoral_id}", json={"status": "INACTIVE"})
    assert client.get("/pastorals/global").json() == []
    assert len(client.get("/pastorals/global", params={"include_inactive": True}).json()) == 1


def test_global_pastoral_in_use_cannot_be_deleted(client, authorize, system_admin, catechesis, chapel_catechesis):
    authorize(system_admin)
    resp = client.delete(f"/pastorals/global/{catechesis.id}")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Pastoral is still used by communities"


def test_coordinator_adopts_pastoral_in_own_community(client, authorize, coordinator, world, catechesis):
    authorize(coordinator)
    resp = client.post(
        "/pastorals/community",
        json={"global_pastoral_id": catechesis.id, "community_id": world.community.id, "mission": "Teach"},
    )
    assert resp.status_code == 201, resp.text
    assert resp.json()["name"] == "Catechesis"
    assert resp.json()["member_count"] == 0

    again = client.post(
        "/pastorals/community",
        json={"global_pastoral_id": catechesis.id, "community_id": world.community.id},
    )
    assert again.status_code == 409

    elsewhere = client.post(
        "/pastorals/community",
        json={"global_pastoral_id": catechesis.id, "community_id": world.other_community.id},
    )
    assert elsewhere.status_code == 403

    listing = client.get("/pastorals/community")
    assert [item["community_id"] for item in listing.json()] == [world.community.id]


def test_groups_nest_inside_one_pastoral(client, authorize, coordinator, db_session, world, chapel_catechesis):
    other_catalog = GlobalPastoral(name="Youth")
    db_session.add(other_catalog)
    db_session.flush()
    other_pastoral = CommunityPastoral(global_pastoral_id=other_catalog.id, community_id=world.community.id)
    db_session.add(other_pastoral)
    db_session.commit()
    authorize(coordinator)

    parent = client.post(
        "/pastorals/groups", json={"community_pastoral_id": chapel_catechesis.id, "name": "First Communion"}
    )
    assert parent.status_code == 201, parent.text
    parent_id = parent.json()["id"]

    child = client.post(
        "/pastorals/groups",
        json={"community_pastoral_id": chapel_catechesis.id, "name": "Saturday Class", "parent_group_id": parent_id},
    )
    assert child.status_code == 201
    child_id = child.json()["id"]
    assert client.get(f"/pastorals/groups/{child_id}").json()["parent_group_id"] == parent_id

    crossed = client.post(
        "/pastorals/groups",
        json={"community_pastoral_id": other_pastoral.id, "name": "Mixed", "parent_group_id": parent_id},
    )
    assert crossed.status_code == 400

    self_parent = client.patch(f"/pastorals/groups/{child_id}", json={"parent_group_id": child_id})
    assert self_parent.status_code == 400

    assert client.delete(f"/pastorals/groups/{parent_id}").status_code == 204
    groups = client.get(f"/pastorals/community/{chapel_catechesis.id}/groups").json()
    assert [(item["name"], item["parent_group_id"]) for item in groups] == [("Saturday Class", None)]


def test_pastoral_membership_rules(client, authorize, coordinator, world, make_member, chapel_catechesis):
    local = make_member(world.community, full_name="Lara Mendes")
    outsider = make_member(world.other_community, full_name="Otavio Lins")
    authorize(coordinator)

    added = client.post(
        "/pastorals/members",
        json={"community_pastoral_id": chapel_catechesis.id, "member_id": local.id, "role": "SECRETARY"},
    )
    assert added.status_code == 201, added.text
    assert added.json()["member_name"] == "Lara Mendes"

    duplicate = client.post(
        "/pastorals/members",
        json={"community_pastoral_id": chapel_catechesis.id, "member_id": local.id},
    )
    assert duplicate.status_code == 400

    foreign = client.post(
        "/pastorals/members",
        json={"community_pastoral_id": chapel_catechesis.id, "member_id": outsider.id},
    )
    assert foreign.status_code == 400
    assert foreign.json()["detail"] == "Member belongs to another community"

    members = client.get(f"/pastorals/community/{chapel_catechesis.id}/members")
    assert [item["role"] for item in members.json()] == ["SECRETARY"]


def test_pastoral_coordinator_edits_only_own_pastoral(
    client, authorize, db_session, world, make_user, make_member, catechesis, chapel_catechesis
):
    other_catalog = GlobalPastoral(name="Charity")
    db_session.add(other_catalog)
    db_session.flush()
    charity = CommunityPastoral(global_pastoral_id=other_catalog.id, community_id=world.community.id)
    db_session.add(charity)
    pastoral_user = make_user(
        "PASTORAL_COORDINATOR", diocese=world.diocese, parish=world.parish, community=world.community
    )
    leader = make_member(world.community, full_name="Lia Leader", user_id=pastoral_user.id)
    helper = make_member(world.community, full_name="Hugo Helper")
    db_session.add(PastoralMember(community_pastoral_id=chapel_catechesis.id, member_id=leader.id, role="COORDINATOR"))
    membership = PastoralMember(community_pastoral_id=chapel_catechesis.id, member_id=helper.id)
    db_session.add(membership)
    db_session.commit()
    authorize(pastoral_user)

    resp = client.patch(f"/pastorals/members/{membership.id}", json={"role": "VICE_COORDINATOR"})
    assert resp.status_code == 200, resp.text
    assert resp.json()["role"] == "VICE_COORDINATOR"

    edit_own = client.patch(f"/pastorals/community/{chapel_catechesis.id}", json={"notes": "Meets on Saturdays"})
    assert edit_own.status_code == 200

    edit_other = client.patch(f"/pastorals/community/{charity.id}", json={"notes": "Not mine"})
    assert edit_other.status_code == 403
