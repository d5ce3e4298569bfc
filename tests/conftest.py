from __future__ import annotations

import os

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from collections.abc import Generator
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from parish_api.auth.deps import get_current_user
from parish_api.core.db import Base, get_db
from parish_api.main import app
from parish_api.models import Community, Diocese, Member, Parish, User

SQLALCHEMY_TEST_URL = "sqlite+pysqlite:///:memory:"
engine = create_engine(
    SQLALCHEMY_TEST_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


def override_get_db() -> Generator[Session, None, None]:
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def setup_database() -> Generator[None, None, None]:
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db_session() -> Generator[Session, None, None]:
    session = TestingSessionLocal()
    try:
        yield session
        session.commit()
    finally:
        session.close()


@pytest.fixture()
def client(db_session: Session) -> Generator[TestClient, None, None]:
    app.dependency_overrides.clear()
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app, base_url="http://testserver/api/v1") as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def authorize(client: TestClient):
    def _apply(user: User):
        app.dependency_overrides[get_current_user] = lambda: user

    yield _apply
    app.dependency_overrides.pop(get_current_user, None)


@pytest.fixture()
def anonymous(client: TestClient):
    def _apply():
        app.dependency_overrides.pop(get_current_user, None)

    return _apply


@pytest.fixture()
def world(db_session: Session) -> SimpleNamespace:
    """Two dioceses, each with one parish holding one community."""
    north = Diocese(name="Diocese of Northfield")
    south = Diocese(name="Diocese of Southport")
    db_session.add_all([north, south])
    db_session.flush()

    north_parish = Parish(diocese_id=north.id, name="St. Anne")
    south_parish = Parish(diocese_id=south.id, name="St. Joseph")
    db_session.add_all([north_parish, south_parish])
    db_session.flush()

    north_community = Community(parish_id=north_parish.id, name="St. Anne Chapel")
    south_community = Community(parish_id=south_parish.id, name="St. Joseph Chapel")
    db_session.add_all([north_community, south_community])
    db_session.commit()

    return SimpleNamespace(
        diocese=north,
        parish=north_parish,
        community=north_community,
        other_diocese=south,
        other_parish=south_parish,
        other_community=south_community,
    )


@pytest.fixture()
def make_user(db_session: Session):
    counter = {"value": 0}

    def _make(role: str, *, diocese=None, parish=None, community=None, email: str | None = None, **fields) -> User:
        counter["value"] += 1
        user = User(
            email=email or f"{role.lower()}{counter['value']}@example.com",
            name=fields.pop("name", role.replace("_", " ").title()),
            hashed_password=fields.pop("hashed_password", "hash"),
            role=role,
            is_active=fields.pop("is_active", True),
            diocese_id=diocese.id if diocese else None,
            parish_id=parish.id if parish else None,
            community_id=community.id if community else None,
            **fields,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make


@pytest.fixture()
def make_member(db_session: Session):
    def _make(community: Community, full_name: str = "Maria Silva", **fields) -> Member:
        member = Member(community_id=community.id, full_name=full_name, status=fields.pop("status", "ACTIVE"), **fields)
        db_session.add(member)
        db_session.commit()
        db_session.refresh(member)
        return member

    return _make


@pytest.fixture()
def system_admin(make_user) -> User:
    return make_user("SYSTEM_ADMIN")


@pytest.fixture()
def diocesan_admin(make_user, world) -> User:
    return make_user("DIOCESAN_ADMIN", diocese=world.diocese)


@pytest.fixture()
def parish_admin(make_user, world) -> User:
    return make_user("PARISH_ADMIN", diocese=world.diocese, parish=world.parish)


@pytest.fixture()
def coordinator(make_user, world) -> User:
    return make_user(
        "COMMUNITY_COORDINATOR",
        diocese=world.diocese,
        parish=world.parish,
        community=world.community,
    )


@pytest.fixture()
def other_coordinator(make_user, world) -> User:
    return make_user(
        "COMMUNITY_COORDINATOR",
        diocese=world.other_diocese,
        parish=world.other_parish,
        community=world.other_community,
    )


@pytest.fixture()
def faithful_user(make_user, world) -> User:
    return make_user("FAITHFUL", diocese=world.diocese, parish=world.parish, community=world.community)


@pytest.fixture()
def faithful_member(make_member, faithful_user, world) -> Member:
    return make_member(world.community, full_name="Joana Pereira", user_id=faithful_user.id, consent_given=True)
