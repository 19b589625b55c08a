from __future__ import annotations

from fastapi import HTTPException, Request

from riskintel.orchestration.service import AssessmentService


def get_service(request: Request) -> AssessmentService:
    service = getattr(request.app.state, "service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Assessment service not initialized")
    return service  # type: ignore[no-any-return]
