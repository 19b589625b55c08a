from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from riskintel.domain.errors import SubjectNotFoundError
from riskintel.domain.levels import RiskLevel
from riskintel.domain.models import (
    HighRiskEntry,
    HighRiskListing,
    RiskSummary,
    SubjectOutcome,
    SubjectOverview,
    SweepSummary,
    VerificationStatus,
)
from riskintel.scoring.aggregator import ScoreAggregator

if TYPE_CHECKING:
    from collections.abc import Iterable

    from riskintel.config.settings import OrchestrationConfig
    from riskintel.domain.models import AssessmentResult
    from riskintel.orchestration.orchestrator import AssessmentOrchestrator
    from riskintel.storage.redis_cache import RedisSummaryCache

logger = structlog.get_logger(__name__)

SUMMARY_RECENT_FACTORS = 5
LISTING_RECENT_FACTORS = 3
DEFAULT_HIGH_RISK_LEVELS = (RiskLevel.HIGH, RiskLevel.CRITICAL)


class AssessmentService:
    """Administrative entry points over one orchestrator."""

    def __init__(
        self,
        orchestrator: AssessmentOrchestrator,
        config: OrchestrationConfig,
        summary_cache: RedisSummaryCache | None = None,
        summary_cache_ttl: int = 3600,
    ) -> None:
        self.orchestrator = orchestrator
        self.config = config
        self.summary_cache = summary_cache
        self.summary_cache_ttl = summary_cache_ttl
        self.aggregator = ScoreAggregator()

    async def assess_one(self, subject_id: str) -> AssessmentResult:
        result = await self.orchestrator.assess(subject_id)
        await self._invalidate_summary(subject_id)
        return result

    async def assess_pending(self, limit: int | None = None) -> SweepSummary:
        """Assess pending subjects in one bounded batch.

        Always returns a summary; individual failures are recorded, not raised.
        """
        batch = limit if limit is not None else self.config.sweep_batch_size
        pending = await self.orchestrator.subjects.list_pending(batch, self.config.pending_max_risk_score)
        logger.info("sweep_start", pending=len(pending), concurrency=self.config.sweep_concurrency)

        semaphore = asyncio.Semaphore(self.config.sweep_concurrency)
        outcomes: list[SubjectOutcome | None] = [None] * len(pending)

        async def _assess(index: int, subject_id: str) -> None:
            async with semaphore:
                try:
                    result = await self.assess_one(subject_id)
                except Exception as exc:
                    logger.warning("sweep_subject_failed", subject_id=subject_id, error=str(exc))
                    outcomes[index] = SubjectOutcome(subject_id=subject_id, success=False, error=str(exc))
                    return
                outcomes[index] = SubjectOutcome(
                    subject_id=subject_id,
                    success=True,
                    risk_score=result.assessment.aggregate_score,
                )

        await asyncio.gather(*(_assess(i, s.subject_id) for i, s in enumerate(pending)))

        results = [o for o in outcomes if o is not None]
        successful = sum(1 for o in results if o.success)
        summary = SweepSummary(
            processed=len(results),
            successful=successful,
            failed=len(results) - successful,
            results=results,
        )
        logger.info(
            "sweep_complete",
            processed=summary.processed,
            successful=summary.successful,
            failed=summary.failed,
            success_rate=summary.success_rate,
        )
        return summary

    async def list_high_risk(
        self,
        min_score: int = 0,
        levels: Iterable[RiskLevel] | None = DEFAULT_HIGH_RISK_LEVELS,
        limit: int = 50,
    ) -> HighRiskListing:
        profiles = await self.orchestrator.profiles.list_profiles(
            min_score=min_score,
            levels=list(levels) if levels else None,
            limit=limit,
        )
        entries = [
            HighRiskEntry(
                subject_id=p.subject_id,
                risk_score=p.aggregate_score,
                risk_level=p.aggregate_level,
                risk_factors=p.recent_factors(LISTING_RECENT_FACTORS),
                last_updated=p.last_updated,
            )
            for p in profiles
        ]
        breakdown = {level.value: 0 for level in RiskLevel}
        for entry in entries:
            breakdown[entry.risk_level.value] += 1
        return HighRiskListing(subjects=entries, level_breakdown=breakdown)

    async def get_risk_summary(self, subject_id: str) -> RiskSummary:
        cached = await self._cached_summary(subject_id)
        if cached is not None:
            return cached

        subject = await self.orchestrator.subjects.get_subject(subject_id)
        if subject is None:
            raise SubjectNotFoundError(subject_id)
        profile = await self.orchestrator.profiles.get_profile(subject_id)
        documents = await self.orchestrator.documents.list_documents(subject_id)

        contributions: dict[str, float] = {}
        if profile is not None:
            contributions = self.aggregator.decompose({name: d.score for name, d in profile.dimensions().items()})
            profile = profile.model_copy(update={"risk_factors": profile.recent_factors(SUMMARY_RECENT_FACTORS)})

        summary = RiskSummary(
            subject_id=subject_id,
            subject=SubjectOverview(
                first_name=subject.first_name,
                last_name=subject.last_name,
                email=subject.email,
                kyc_status=subject.kyc_status,
                risk_score=subject.risk_score,
            ),
            profile=profile,
            contributions=contributions,
            document_count=len(documents),
            verified_documents=sum(1 for d in documents if d.verification_status is VerificationStatus.VERIFIED),
        )
        await self._store_summary(summary)
        return summary

    async def _cached_summary(self, subject_id: str) -> RiskSummary | None:
        if self.summary_cache is None:
            return None
        try:
            data = await self.summary_cache.get_risk_summary(subject_id)
        except Exception as exc:
            logger.warning("summary_cache_unavailable", subject_id=subject_id, error=str(exc))
            return None
        return RiskSummary.model_validate(data) if data is not None else None

    async def _store_summary(self, summary: RiskSummary) -> None:
        if self.summary_cache is None:
            return
        try:
            await self.summary_cache.cache_risk_summary(
                summary.subject_id,
                summary.model_dump(mode="json"),
                ttl=self.summary_cache_ttl,
            )
        except Exception as exc:
            logger.warning("summary_cache_unavailable", subject_id=summary.subject_id, error=str(exc))

    async def _invalidate_summary(self, subject_id: str) -> None:
        if self.summary_cache is None:
            return
        try:
            await self.summary_cache.invalidate_subject(subject_id)
        except Exception as exc:
            logger.warning("summary_cache_unavailable", subject_id=subject_id, error=str(exc))
