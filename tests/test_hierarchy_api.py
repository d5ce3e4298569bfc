from __future__ import annotations


def test_system_admin_manages_dioceses(client, authorize, system_admin):
    authorize(system_admin)
    resp = client.post("/dioceses", json={"name": "Diocese of Eastham", "bishop_name": "Dom Pedro"})
    assert resp.status_code == 201, resp.text
    diocese_id = resp.json()["id"]
    assert resp.json()["status"] == "ACTIVE"

    duplicate = client.post("/dioceses", json={"name": "diocese of eastham"})
    assert duplicate.status_code == 409

    update = client.patch(f"/dioceses/{diocese_id}", json={"city": "Eastham"})
    assert update.status_code == 200
    assert update.json()["city"] == "Eastham"

    assert client.delete(f"/dioceses/{diocese_id}").status_code == 204
    assert client.get(f"/dioceses/{diocese_id}").status_code == 404


def test_diocese_with_parishes_cannot_be_deleted(client, authorize, system_admin, world):
    authorize(system_admin)
    resp = client.delete(f"/dioceses/{world.diocese.id}")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Diocese still has parishes"


def test_diocesan_admin_cannot_create_dioceses(client, authorize, diocesan_admin):
    authorize(diocesan_admin)
    resp = client.post("/dioceses", json={"name": "Rogue Diocese"})
    assert resp.status_code == 403


def test_diocese_detail_nests_parishes_and_communities(client, authorize, diocesan_admin, world):
    authorize(diocesan_admin)
    resp = client.get(f"/dioceses/{world.diocese.id}")
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["parish_count"] == 1
    assert body["parishes"][0]["name"] == "St. Anne"
    assert body["parishes"][0]["communities"][0]["name"] == "St. Anne Chapel"

    other = client.get(f"/dioceses/{world.other_diocese.id}")
    assert other.status_code == 403


def test_diocesan_admin_lists_only_own_communities(client, authorize, diocesan_admin, world):
    authorize(diocesan_admin)
    resp = client.get("/communities")
    assert resp.status_code == 200
    assert [item["id"] for item in resp.json()] == [world.community.id]

    parishes = client.get("/parishes")
    assert [item["id"] for item in parishes.json()] == [world.parish.id]


def test_diocesan_admin_creates_parish_only_in_own_diocese(client, authorize, diocesan_admin, world):
    authorize(diocesan_admin)
    ok = client.post("/parishes", json={"diocese_id": world.diocese.id, "name": "Holy Cross"})
    assert ok.status_code == 201, ok.text

    denied = client.post("/parishes", json={"diocese_id": world.other_diocese.id, "name": "Holy Spirit"})
    assert denied.status_code == 403

    listing = client.get("/parishes", params={"diocese_id": world.diocese.id})
    names = [item["name"] for item in listing.json()]
    assert names == ["Holy Cross", "St. Anne"]


def test_parish_admin_updates_own_parish_only(client, authorize, parish_admin, world):
    authorize(parish_admin)
    resp = client.patch(f"/parishes/{world.parish.id}", json={"priest_name": "Fr. Antonio"})
    assert resp.status_code == 200
    assert resp.json()["priest_name"] == "Fr. Antonio"

    denied = client.patch(f"/parishes/{world.other_parish.id}", json={"priest_name": "Fr. Bento"})
    assert denied.status_code == 403


def test_parish_admin_creates_and_deletes_community(client, authorize, parish_admin, world):
    authorize(parish_admin)
    resp = client.post("/communities", json={"parish_id": world.parish.id, "name": "São Francisco"})
    assert resp.status_code == 201, resp.text
    community_id = resp.json()["id"]

    assert client.delete(f"/communities/{community_id}").status_code == 204


def test_community_with_members_cannot_be_deleted(client, authorize, parish_admin, world, make_member):
    make_member(world.community)
    authorize(parish_admin)
    resp = client.delete(f"/communities/{world.community.id}")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Community still has members or events"


def test_coordinator_reads_own_community_detail(client, authorize, coordinator, world, make_member):
    make_member(world.community, full_name="Carlos Dias")
    authorize(coordinator)

    resp = client.get(f"/communities/{world.community.id}")
    assert resp.status_code == 200, resp.text
    assert resp.json()["member_count"] == 1
    assert resp.json()["members"][0]["full_name"] == "Carlos Dias"

    other = client.get(f"/communities/{world.other_community.id}")
    assert other.status_code == 403
    assert other.json()["detail"] == "Resource is outside your jurisdiction"

    update = client.patch(f"/communities/{world.community.id}", json={"coordinator_name": "Carla"})
    assert update.status_code == 200
