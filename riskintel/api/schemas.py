from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from riskintel.domain.levels import RiskLevel
from riskintel.domain.models import (
    AssessmentResult,
    DimensionalRiskScore,
    HighRiskEntry,
    HighRiskListing,
    RiskFactor,
    SinkOutcome,
    SubjectOutcome,
    SweepSummary,
)


class HealthResponse(BaseModel):
    status: str
    version: str
    mode: str


class AssessmentResponse(BaseModel):
    subject_id: str
    aggregate_score: int
    aggregate_level: RiskLevel
    dimensions: dict[str, DimensionalRiskScore]
    overall_reasoning: str
    factors: list[RiskFactor]
    web_intelligence_score: int
    web_intelligence_confidence: int
    sources: list[str]
    documents_analyzed: int
    documents_failed: int
    persistence: list[SinkOutcome]
    fully_persisted: bool
    mirrored: bool | None = None
    completed_at: datetime

    @classmethod
    def from_result(cls, result: AssessmentResult) -> AssessmentResponse:
        docs = result.document_analyses
        return cls(
            subject_id=result.subject_id,
            aggregate_score=result.assessment.aggregate_score,
            aggregate_level=result.assessment.aggregate_level,
            dimensions=result.assessment.dimensions(),
            overall_reasoning=result.assessment.overall_reasoning,
            factors=result.factors,
            web_intelligence_score=result.web_intelligence.risk_score,
            web_intelligence_confidence=result.web_intelligence.confidence,
            sources=result.web_intelligence.sources,
            documents_analyzed=sum(1 for d in docs if d.ok),
            documents_failed=sum(1 for d in docs if not d.ok),
            persistence=result.persistence,
            fully_persisted=result.fully_persisted,
            mirrored=result.mirrored,
            completed_at=result.completed_at,
        )


class HighRiskResponse(BaseModel):
    subjects: list[HighRiskEntry]
    total: int
    level_breakdown: dict[str, int]

    @classmethod
    def from_listing(cls, listing: HighRiskListing) -> HighRiskResponse:
        return cls(subjects=listing.subjects, total=listing.total, level_breakdown=listing.level_breakdown)


class SweepRequest(BaseModel):
    limit: int = Field(default=10, ge=1, le=100)


class SweepResponse(BaseModel):
    processed: int
    successful: int
    failed: int
    success_rate: float
    results: list[SubjectOutcome]

    @classmethod
    def from_summary(cls, summary: SweepSummary) -> SweepResponse:
        return cls(
            processed=summary.processed,
            successful=summary.successful,
            failed=summary.failed,
            success_rate=summary.success_rate,
            results=summary.results,
        )
