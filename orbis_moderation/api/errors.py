from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from orbis_moderation.domain.errors import ModerationError


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ModerationError)
    async def _moderation_error(request: Request, exc: ModerationError) -> JSONResponse:
        return JSONResponse(status_code=exc.http_status, content={"detail": exc.to_dict()})
