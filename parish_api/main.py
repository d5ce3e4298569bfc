import logging

import parish_api.models  # noqa: F401
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from parish_api.core.config import settings
from parish_api.core.logging import configure_logging
from parish_api.routers import auth as auth_router
from parish_api.routers import communities as communities_router
from parish_api.routers import dioceses as dioceses_router
from parish_api.routers import events as events_router
from parish_api.routers import liturgy as liturgy_router
from parish_api.routers import mass_intentions as mass_intentions_router
from parish_api.routers import mass_schedules as mass_schedules_router
from parish_api.routers import members as members_router
from parish_api.routers import news as news_router
from parish_api.routers import parishes as parishes_router
from parish_api.routers import pastorals as pastorals_router
from parish_api.routers import prayer_requests as prayer_requests_router
from parish_api.routers import schedules as schedules_router
from parish_api.routers import users as users_router

configure_logging()

app = FastAPI(title="Parish Administration API", version="0.1.0")

logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

for module in (
    auth_router,
    users_router,
    dioceses_router,
    parishes_router,
    communities_router,
    members_router,
    events_router,
    schedules_router,
    pastorals_router,
    mass_intentions_router,
    mass_schedules_router,
    news_router,
    prayer_requests_router,
    liturgy_router,
):
    app.include_router(module.router, prefix=settings.API_PREFIX)


@app.on_event("startup")
def log_startup() -> None:
    logger.info("api_started", extra={"environment": settings.ENVIRONMENT, "prefix": settings.API_PREFIX})


@app.get("/health", tags=["health"])
def health() -> dict[str, str]:
    return {"status": "ok"}
