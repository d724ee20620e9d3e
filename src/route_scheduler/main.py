"""FastAPI application entry point."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.routes import chat, health, routes
from .config import settings
from .errors import ExternalServiceError, ScheduleValidationError

logger = logging.getLogger(__name__)


def _error_body(error: str, details: object) -> dict:
    return {"error": error, "details": details}


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ScheduleValidationError)
    async def validation_error_handler(request: Request, exc: ScheduleValidationError) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=_error_body(exc.message, exc.details))

    @app.exception_handler(ExternalServiceError)
    async def external_error_handler(request: Request, exc: ExternalServiceError) -> JSONResponse:
        logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.details)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body(exc.message, exc.details),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        details = "; ".join(
            f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg')}" for error in exc.errors()
        )
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=_error_body("Invalid request", details))


def create_app() -> FastAPI:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    app = FastAPI(title=settings.app_name)
    if settings.frontend_allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.frontend_allowed_origins),
            allow_credentials="*" not in settings.frontend_allowed_origins,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.get("/")
    def root():
        return {
            "service": settings.app_name,
            "status": "running",
            "health": f"{settings.api_prefix}/health",
            "docs": "/docs",
        }

    _register_error_handlers(app)
    app.include_router(health.router, prefix=settings.api_prefix)
    app.include_router(chat.router, prefix=settings.api_prefix)
    app.include_router(routes.router, prefix=settings.api_prefix)
    return app


app = create_app()
