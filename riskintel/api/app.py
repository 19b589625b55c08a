from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import structlog
from fastapi import FastAPI

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from riskintel.orchestration.service import AssessmentService

from riskintel import __version__
from riskintel.api.routes import admin, assessments, health
from riskintel.config.logging import configure_logging
from riskintel.config.settings import Settings
from riskintel.orchestration.runtime import build_runtime

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: Settings = app.state.settings
    configure_logging(settings.log_level)
    logger.info("api_startup", mode=settings.mode.value)

    runtime = None
    if getattr(app.state, "service", None) is None:
        runtime = await build_runtime(settings)
        app.state.service = runtime.service
    try:
        yield
    finally:
        if runtime is not None:
            await runtime.aclose()
        logger.info("api_shutdown")


def create_app(service: AssessmentService | None = None, settings: Settings | None = None) -> FastAPI:
    app = FastAPI(
        title="Risk Intelligence",
        description="Multi-provider KYC risk assessment API",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings or Settings()
    app.state.service = service

    app.include_router(health.router, tags=["health"])
    app.include_router(assessments.router, prefix="/api/v1", tags=["assessments"])
    app.include_router(admin.router, prefix="/api/v1", tags=["admin"])

    return app
