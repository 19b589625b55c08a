from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from riskintel.api.deps import get_service
from riskintel.api.schemas import AssessmentResponse
from riskintel.domain.errors import ScoringUnavailableError, ScoringValidationError, SubjectNotFoundError
from riskintel.domain.models import RiskSummary
from riskintel.orchestration.service import AssessmentService

router = APIRouter()


@router.post("/assessments/{subject_id}", response_model=AssessmentResponse)  # type: ignore[misc]
async def assess_subject(
    subject_id: str,
    service: AssessmentService = Depends(get_service),
) -> AssessmentResponse:
    try:
        result = await service.assess_one(subject_id)
    except SubjectNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ScoringValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except ScoringUnavailableError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    return AssessmentResponse.from_result(result)


@router.get("/subjects/{subject_id}/risk-summary", response_model=RiskSummary)  # type: ignore[misc]
async def get_risk_summary(
    subject_id: str,
    service: AssessmentService = Depends(get_service),
) -> RiskSummary:
    try:
        return await service.get_risk_summary(subject_id)
    except SubjectNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
