from __future__ import annotations

from fastapi import APIRouter, Request

from riskintel import __version__
from riskintel.api.schemas import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)  # type: ignore[misc]
async def health_check(request: Request) -> HealthResponse:
    settings = getattr(request.app.state, "settings", None)
    return HealthResponse(
        status="healthy",
        version=__version__,
        mode=settings.mode.value if settings is not None else "simulation",
    )


@router.get("/ready")  # type: ignore[misc]
async def readiness(request: Request) -> dict[str, str]:
    if getattr(request.app.state, "service", None) is None:
        return {"status": "starting"}
    return {"status": "ready"}
