from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from riskintel.api.deps import get_service
from riskintel.api.schemas import HighRiskResponse, SweepRequest, SweepResponse
from riskintel.domain.levels import RiskLevel
from riskintel.orchestration.service import DEFAULT_HIGH_RISK_LEVELS, AssessmentService

router = APIRouter()


@router.get("/admin/high-risk", response_model=HighRiskResponse)  # type: ignore[misc]
async def list_high_risk(
    min_score: int = Query(default=0, ge=0, le=100),
    level: list[RiskLevel] | None = Query(default=None),
    limit: int = Query(default=50, ge=1, le=500),
    service: AssessmentService = Depends(get_service),
) -> HighRiskResponse:
    listing = await service.list_high_risk(
        min_score=min_score,
        levels=level or DEFAULT_HIGH_RISK_LEVELS,
        limit=limit,
    )
    return HighRiskResponse.from_listing(listing)


@router.post("/admin/sweep", response_model=SweepResponse)  # type: ignore[misc]
async def sweep_pending(
    body: SweepRequest | None = None,
    service: AssessmentService = Depends(get_service),
) -> SweepResponse:
    limit = body.limit if body is not None else None
    summary = await service.assess_pending(limit=limit)
    return SweepResponse.from_summary(summary)
