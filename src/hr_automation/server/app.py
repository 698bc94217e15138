"""FastAPI app factory.

Endpoints are thin wrappers over the services built in `hr_automation.services`.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from hr_automation import __version__
from hr_automation.config import AutomationSettings
from hr_automation.errors import HTTP_STATUS_BY_CODE, DomainError
from hr_automation.notifications.mailer import Mailer
from hr_automation.server.routers import alerts, directory, events, invitations, workflows
from hr_automation.services import build_services
from hr_automation.storage import utc_now

logger = logging.getLogger(__name__)


def create_app(
    settings: AutomationSettings | None = None,
    *,
    mailer: Mailer | None = None,
    clock: Callable[[], datetime] = utc_now,
) -> FastAPI:
    settings = settings or AutomationSettings()
    services = build_services(settings, mailer=mailer, clock=clock)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        yield
        services.close()

    app = FastAPI(
        title="HR Automation",
        version=__version__,
        description="Workflow automation and invitations for HR teams.",
        openapi_url="/api/openapi.json",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.parsed_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(DomainError)
    def handle_domain_error(request: Request, exc: DomainError) -> JSONResponse:
        status = HTTP_STATUS_BY_CODE.get(exc.code, 500)
        if status >= 500:
            logger.error(
                "Request failed",
                extra={"path": request.url.path, "code": exc.code, "error": exc.message},
            )
        return JSONResponse(status_code=status, content={"detail": exc.message, "code": exc.code})

    @app.get("/api/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    for module in (workflows, events, alerts, invitations, directory):
        app.include_router(module.router, prefix="/api")

    return app
