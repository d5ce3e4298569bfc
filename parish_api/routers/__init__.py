"""API routers for the parish administration service."""

from parish_api.routers import (
    auth,
    communities,
    dioceses,
    events,
    liturgy,
    mass_intentions,
    mass_schedules,
    members,
    news,
    parishes,
    pastorals,
    prayer_requests,
    schedules,
    users,
)

__all__ = [
    "auth",
    "communities",
    "dioceses",
    "events",
    "liturgy",
    "mass_intentions",
    "mass_schedules",
    "members",
    "news",
    "parishes",
    "pastorals",
    "prayer_requests",
    "schedules",
    "users",
]
