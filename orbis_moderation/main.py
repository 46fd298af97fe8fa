from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI
from redis import Redis
from sqlalchemy import text

from orbis_moderation.api.errors import install_error_handlers
from orbis_moderation.api.routers.moderation import router as moderation_router
from orbis_moderation.api.routers.notifications import router as notifications_router
from orbis_moderation.api.routers.resources import router as resources_router
from orbis_moderation.api.routers.users import router as users_router
from orbis_moderation.core.config import settings
from orbis_moderation.core.db import engine
from orbis_moderation.core.logging import configure_logging

configure_logging(settings.LOG_LEVEL)
log = logging.getLogger("app")

app = FastAPI(title=settings.APP_NAME)
install_error_handlers(app)


def _check_database() -> bool:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False


def _check_redis() -> bool:
    try:
        r = Redis.from_url(settings.REDIS_URL, socket_connect_timeout=1, socket_timeout=1)
        return bool(r.ping())
    except Exception:
        return False


@app.on_event("startup")
def _startup() -> None:
    # Do not crash API if deps are temporarily unavailable.
    if not settings.ENSURE_EXTERNAL_DEPS_ON_STARTUP:
        log.info("Startup: ENSURE_EXTERNAL_DEPS_ON_STARTUP=false; skipping dependency checks")
        return

    if not _check_database():
        log.error("Startup: database not reachable at %s", engine.url.render_as_string(hide_password=True))
    if not _check_redis():
        log.warning("Startup: redis not reachable; notification fan-out will be logged and dropped")


@app.get("/health")
def health() -> dict[str, Any]:
    deps = {
        "database": _check_database(),
        "redis": _check_redis(),
    }
    return {"ok": all(deps.values()), "deps": deps, "app": settings.APP_NAME}


app.include_router(moderation_router, prefix="/moderation", tags=["moderation"])
app.include_router(resources_router, prefix="/resources", tags=["resources"])
app.include_router(users_router, prefix="/users", tags=["users"])
app.include_router(notifications_router, prefix="/notifications", tags=["notifications"])
