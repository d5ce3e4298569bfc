"""Single source of truth for hierarchical access rules.

Every principal is a ``User`` carrying a role and up to three scope ids
(diocese, parish, community). Reads are narrowed with :func:`scope_filter`,
writes are checked with :func:`can_manage` / :func:`ensure_can_manage`, and
user administration goes through :func:`can_assign_role` and
:func:`ensure_scope_ids`. A privileged role with no scope id matches nothing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from fastapi import HTTPException, status
from sqlalchemy import false, or_, true
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from parish_api.models import (
    CommunityPastoral,
    Community,
    Diocese,
    Event,
    EventParticipant,
    EventPastoral,
    EventPastoralAssignment,
    MassIntention,
    MassSchedule,
    Member,
    News,
    Parish,
    PastoralGroup,
    PastoralMember,
    PrayerRequest,
    Schedule,
    ScheduleAssignment,
    User,
)

logger = logging.getLogger(__name__)

SYSTEM_ADMIN = "SYSTEM_ADMIN"
DIOCESAN_ADMIN = "DIOCESAN_ADMIN"
PARISH_ADMIN = "PARISH_ADMIN"
COMMUNITY_COORDINATOR = "COMMUNITY_COORDINATOR"
PASTORAL_COORDINATOR = "PASTORAL_COORDINATOR"
VOLUNTEER = "VOLUNTEER"
FAITHFUL = "FAITHFUL"

ROLE_LEVELS = {
    SYSTEM_ADMIN: 7,
    DIOCESAN_ADMIN: 6,
    PARISH_ADMIN: 5,
    COMMUNITY_COORDINATOR: 4,
    PASTORAL_COORDINATOR: 3,
    VOLUNTEER: 2,
    FAITHFUL: 1,
}

ADMIN_ROLES = (SYSTEM_ADMIN, DIOCESAN_ADMIN, PARISH_ADMIN)
COORDINATOR_ROLES = ADMIN_ROLES + (COMMUNITY_COORDINATOR,)
PASTORAL_STAFF_ROLES = COORDINATOR_ROLES + (PASTORAL_COORDINATOR,)
ALL_ROLES = tuple(ROLE_LEVELS)

# Models whose rows hang directly off a community.
_COMMUNITY_OWNED = (Member, Event, CommunityPastoral, MassIntention, MassSchedule, News, PrayerRequest)


@dataclass(frozen=True)
class Scope:
    diocese_id: Optional[int] = None
    parish_id: Optional[int] = None
    community_id: Optional[int] = None


def role_level(role: str) -> int:
    return ROLE_LEVELS.get(role, 0)


def can_assign_role(actor: User, role: str) -> bool:
    """SYSTEM_ADMIN assigns anything; everyone else only strictly lower roles."""
    if actor.role == SYSTEM_ADMIN:
        return True
    return role_level(role) < role_level(actor.role)


def member_for_user(db: Session, user: User) -> Optional[Member]:
    return db.query(Member).filter(Member.user_id == user.id).first()


def coordinated_pastoral_ids(db: Session, user: User) -> list[int]:
    member = member_for_user(db, user)
    if member is None:
        return []
    rows = (
        db.query(PastoralMember.community_pastoral_id)
        .filter(
            PastoralMember.member_id == member.id,
            PastoralMember.role == "COORDINATOR",
            PastoralMember.is_active.is_(True),
        )
        .all()
    )
    return [row[0] for row in rows]


# Read path


def _community_clause(user: User) -> ColumnElement:
    if user.role == DIOCESAN_ADMIN:
        if user.diocese_id is None:
            return false()
        return Community.parish.has(Parish.diocese_id == user.diocese_id)
    if user.role == PARISH_ADMIN:
        if user.parish_id is None:
            return false()
        return Community.parish_id == user.parish_id
    if user.community_id is None:
        return false()
    return Community.id == user.community_id


def _owned_by_community(user: User, model: Any) -> ColumnElement:
    if user.role in (DIOCESAN_ADMIN, PARISH_ADMIN):
        return model.community.has(_community_clause(user))
    if user.community_id is None:
        return false()
    return model.community_id == user.community_id


def _diocese_clause(user: User) -> ColumnElement:
    if user.role == DIOCESAN_ADMIN:
        return Diocese.id == user.diocese_id if user.diocese_id is not None else false()
    if user.role == PARISH_ADMIN:
        return Diocese.parishes.any(Parish.id == user.parish_id) if user.parish_id is not None else false()
    if user.community_id is None:
        return false()
    return Diocese.parishes.any(Parish.communities.any(Community.id == user.community_id))


def _parish_clause(user: User) -> ColumnElement:
    if user.role == DIOCESAN_ADMIN:
        return Parish.diocese_id == user.diocese_id if user.diocese_id is not None else false()
    if user.role == PARISH_ADMIN:
        return Parish.id == user.parish_id if user.parish_id is not None else false()
    if user.community_id is None:
        return false()
    return Parish.communities.any(Community.id == user.community_id)


def _user_clause(user: User) -> ColumnElement:
    if user.role == DIOCESAN_ADMIN:
        if user.diocese_id is None:
            return false()
        return or_(
            User.diocese_id == user.diocese_id,
            User.parish.has(Parish.diocese_id == user.diocese_id),
            User.community.has(_community_clause(user)),
        )
    if user.role == PARISH_ADMIN:
        if user.parish_id is None:
            return false()
        return or_(User.parish_id == user.parish_id, User.community.has(Community.parish_id == user.parish_id))
    if user.community_id is None:
        return false()
    return User.community_id == user.community_id


def scope_filter(user: User, model: Any) -> ColumnElement:
    """Return a boolean clause restricting ``model`` rows to what ``user`` may read."""
    if user.role == SYSTEM_ADMIN:
        return true()
    if model is Diocese:
        return _diocese_clause(user)
    if model is Parish:
        return _parish_clause(user)
    if model is Community:
        return _community_clause(user)
    if model is User:
        return _user_clause(user)
    if model is Schedule:
        return Schedule.event.has(_owned_by_community(user, Event))
    if model is ScheduleAssignment:
        return ScheduleAssignment.schedule.has(scope_filter(user, Schedule))
    if model in _COMMUNITY_OWNED:
        return _owned_by_community(user, model)
    raise ValueError(f"No scope rule for {model.__name__}")


# Write path


def resolve_scope(obj: Any) -> Scope:
    """Walk an object's references up to its community, parish and diocese."""
    if isinstance(obj, Diocese):
        return Scope(diocese_id=obj.id)
    if isinstance(obj, Parish):
        return Scope(diocese_id=obj.diocese_id, parish_id=obj.id)
    if isinstance(obj, Community):
        return Scope(diocese_id=obj.parish.diocese_id, parish_id=obj.parish_id, community_id=obj.id)
    if isinstance(obj, _COMMUNITY_OWNED):
        return resolve_scope(obj.community)
    if isinstance(obj, (Schedule, EventParticipant, EventPastoral)):
        return resolve_scope(obj.event)
    if isinstance(obj, ScheduleAssignment):
        return resolve_scope(obj.schedule)
    if isinstance(obj, EventPastoralAssignment):
        return resolve_scope(obj.event_pastoral)
    if isinstance(obj, (PastoralGroup, PastoralMember)):
        return resolve_scope(obj.community_pastoral)
    if isinstance(obj, User):
        if obj.community is not None:
            return resolve_scope(obj.community)
        if obj.parish is not None:
            return resolve_scope(obj.parish)
        return Scope(diocese_id=obj.diocese_id)
    raise ValueError(f"No scope rule for {type(obj).__name__}")


def _scope_matches(user: User, scope: Scope) -> bool:
    if user.role == SYSTEM_ADMIN:
        return True
    if user.role == DIOCESAN_ADMIN:
        return user.diocese_id is not None and scope.diocese_id == user.diocese_id
    if user.role == PARISH_ADMIN:
        return user.parish_id is not None and scope.parish_id == user.parish_id
    if user.role == COMMUNITY_COORDINATOR:
        return user.community_id is not None and scope.community_id == user.community_id
    return False


def can_manage(db: Session, user: User, obj: Any) -> bool:
    if isinstance(obj, (ScheduleAssignment, EventPastoralAssignment)):
        member = member_for_user(db, user)
        if member is not None and obj.member_id == member.id:
            return True
        parent = obj.schedule if isinstance(obj, ScheduleAssignment) else obj.event_pastoral
        return can_manage(db, user, parent)

    if _scope_matches(user, resolve_scope(obj)):
        return True
    if user.role != PASTORAL_COORDINATOR:
        return False

    pastoral_ids = set(coordinated_pastoral_ids(db, user))
    if not pastoral_ids:
        return False
    if isinstance(obj, (Schedule, EventPastoral)):
        obj = obj.event
    if isinstance(obj, Event):
        return any(link.community_pastoral_id in pastoral_ids for link in obj.pastorals)
    if isinstance(obj, CommunityPastoral):
        return obj.id in pastoral_ids
    if isinstance(obj, (PastoralGroup, PastoralMember)):
        return obj.community_pastoral_id in pastoral_ids
    return False


def ensure_can_manage(
    db: Session,
    user: User,
    obj: Any,
    detail: str = "You do not have permission to manage this resource",
) -> None:
    if not can_manage(db, user, obj):
        logger.info(
            "access_denied",
            extra={"user_id": user.id, "role": user.role, "resource": type(obj).__name__, "resource_id": obj.id},
        )
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


def ensure_scope_ids(
    db: Session,
    user: User,
    diocese_id: Optional[int],
    parish_id: Optional[int],
    community_id: Optional[int],
) -> Scope:
    """Complete a target scope from its lowest id and check it lies inside ``user``'s scope."""
    if community_id is not None:
        community = db.get(Community, community_id)
        if not community:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Community not found")
        if parish_id is not None and parish_id != community.parish_id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Community does not belong to parish")
        parish_id = community.parish_id
    if parish_id is not None:
        parish = db.get(Parish, parish_id)
        if not parish:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Parish not found")
        if diocese_id is not None and diocese_id != parish.diocese_id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Parish does not belong to diocese")
        diocese_id = parish.diocese_id
    if diocese_id is not None and not db.get(Diocese, diocese_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Diocese not found")

    scope = Scope(diocese_id=diocese_id, parish_id=parish_id, community_id=community_id)
    if not _scope_matches(user, scope):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Target scope is outside your jurisdiction")
    return scope


def can_read(db: Session, user: User, obj: Any) -> bool:
    model = type(obj)
    return db.query(model.id).filter(model.id == obj.id, scope_filter(user, model)).first() is not None


def ensure_can_read(db: Session, user: User, obj: Any, detail: str = "Resource is outside your jurisdiction") -> None:
    if not can_read(db, user, obj):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
