from __future__ import annotations

import pytest

from parish_api.auth.security import verify_password
from parish_api.scripts.create_system_admin import ensure_system_admin, main


def test_creates_first_system_admin(db_session):
    user, created = ensure_system_admin(db_session, "Root@Example.com", "s3cret-pass", " Root ")
    assert created is True
    assert user.email == "root@example.com"
    assert user.name == "Root"
    assert user.role == "SYSTEM_ADMIN"
    assert verify_password("s3cret-pass", user.hashed_password)


def test_existing_system_admin_is_reused(db_session, system_admin):
    user, created = ensure_system_admin(db_session, "another@example.com", "s3cret-pass", "Another")
    assert created is False
    assert user.id == system_admin.id


def test_email_taken_by_other_role(db_session, faithful_user):
    with pytest.raises(SystemExit):
        ensure_system_admin(db_session, faithful_user.email, "s3cret-pass", "Root")


def test_short_password_is_refused():
    with pytest.raises(SystemExit):
        main(["--email", "root@example.com", "--password", "short"])
