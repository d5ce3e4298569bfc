from __future__ import annotations

import pytest

from parish_api.auth.security import hash_password


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def test_register_creates_faithful_user_and_member(client, world):
    resp = client.post(
        "/auth/register",
        json={
            "email": "New.Person@Example.com",
            "password": "s3cretpass",
            "name": "New Person",
            "community_id": world.community.id,
        },
    )
    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert body["user"]["role"] == "FAITHFUL"
    assert body["user"]["email"] == "new.person@example.com"
    assert body["user"]["community_id"] == world.community.id
    assert body["user"]["parish_id"] == world.parish.id
    assert body["user"]["member_id"] is not None

    duplicate = client.post(
        "/auth/register",
        json={"email": "new.person@example.com", "password": "s3cretpass", "name": "Again"},
    )
    assert duplicate.status_code == 409


def test_login_and_me_with_real_token(client, make_user):
    make_user("FAITHFUL", email="joana@example.com", hashed_password=hash_password("correct-horse"))

    bad = client.post("/auth/login", json={"email": "joana@example.com", "password": "wrong-pass"})
    assert bad.status_code == 401
    assert bad.json()["detail"] == "Invalid credentials"

    resp = client.post("/auth/login", json={"email": "JOANA@example.com", "password": "correct-horse"})
    assert resp.status_code == 200, resp.text
    tokens = resp.json()

    me = client.get("/auth/me", headers=_bearer(tokens["access_token"]))
    assert me.status_code == 200
    assert me.json()["email"] == "joana@example.com"
    assert me.json()["last_login_at"] is not None


def test_refresh_token_is_single_use(client, make_user):
    make_user("FAITHFUL", email="pedro@example.com", hashed_password=hash_password("correct-horse"))
    login = client.post("/auth/login", json={"email": "pedro@example.com", "password": "correct-horse"})
    refresh_token = login.json()["refresh_token"]

    first = client.post("/auth/refresh", json={"refresh_token": refresh_token})
    assert first.status_code == 200, first.text
    assert first.json()["refresh_token"] != refresh_token

    second = client.post("/auth/refresh", json={"refresh_token": refresh_token})
    assert second.status_code == 401
    assert second.json()["detail"] == "Invalid refresh token"


def test_access_token_is_not_accepted_as_refresh_token(client, make_user):
    make_user("FAITHFUL", email="lucas@example.com", hashed_password=hash_password("correct-horse"))
    login = client.post("/auth/login", json={"email": "lucas@example.com", "password": "correct-horse"})

    resp = client.post("/auth/refresh", json={"refresh_token": login.json()["access_token"]})
    assert resp.status_code == 401


def test_logout_revokes_refresh_tokens(client, make_user):
    make_user("FAITHFUL", email="rita@example.com", hashed_password=hash_password("correct-horse"))
    tokens = client.post("/auth/login", json={"email": "rita@example.com", "password": "correct-horse"}).json()

    resp = client.post("/auth/logout", headers=_bearer(tokens["access_token"]))
    assert resp.status_code == 204

    reuse = client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert reuse.status_code == 401


def test_protected_route_requires_token(client):
    assert client.get("/auth/me").status_code == 401
    assert client.get("/auth/me", headers=_bearer("not-a-jwt")).status_code == 401


def test_inactive_user_cannot_login(client, make_user):
    make_user("FAITHFUL", email="gone@example.com", hashed_password=hash_password("correct-horse"), is_active=False)
    resp = client.post("/auth/login", json={"email": "gone@example.com", "password": "correct-horse"})
    assert resp.status_code == 401


def test_onboarding_attaches_community_and_member(client, authorize, make_user, world):
    user = make_user("FAITHFUL", email="walkin@example.com")
    authorize(user)

    resp = client.post(
        "/auth/me/community",
        json={"community_id": world.other_community.id, "phone": "+55 11 99999-0000"},
    )
    assert resp.status_code == 200, resp.text
    profile = resp.json()["user"]
    assert profile["community_id"] == world.other_community.id
    assert profile["diocese_id"] == world.other_diocese.id
    assert profile["member_id"] is not None
    assert profile["phone"] == "+55 11 99999-0000"


def test_health_is_served_outside_api_prefix(client):
    resp = client.get("http://testserver/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


@pytest.mark.parametrize("password", ["a" * 100, "é" * 40])
def test_register_rejects_passwords_longer_than_bcrypt_allows(client, password):
    resp = client.post(
        "/auth/register",
        json={"email": "long@example.com", "password": password, "name": "Long Password"},
    )
    assert resp.status_code == 422


def test_register_accepts_password_at_bcrypt_limit(client):
    resp = client.post(
        "/auth/register",
        json={"email": "limit@example.com", "password": "a" * 72, "name": "At Limit"},
    )
    assert resp.status_code == 201, resp.text

    login = client.post("/auth/login", json={"email": "limit@example.com", "password": "a" * 72})
    assert login.status_code == 200
