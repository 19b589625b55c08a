from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock

import pytest

from riskintel.config.settings import OrchestrationConfig
from riskintel.domain.errors import ScoringUnavailableError, SubjectNotFoundError
from riskintel.domain.levels import RiskLevel
from riskintel.domain.models import KYCStatus, Subject
from riskintel.orchestration.orchestrator import AssessmentOrchestrator
from riskintel.orchestration.service import AssessmentService
from riskintel.providers.factory import ProviderSuite
from riskintel.scoring.risk_scorer import RiskScorer
from riskintel.storage.memory import (
    InMemoryAuditSink,
    InMemoryDocumentStore,
    InMemoryProfileStore,
    InMemorySubjectDirectory,
)

FAILING = {"user-2", "user-5", "user-8"}


@pytest.fixture  # type: ignore[misc]
def sweep_service(
    provider_suite: ProviderSuite,
    scripted_provider: Any,
    profile_store: InMemoryProfileStore,
) -> AssessmentService:
    subjects = InMemorySubjectDirectory(
        Subject(
            subject_id=f"user-{i}",
            first_name="User",
            last_name=str(i),
            email=f"user{i}@example.com",
            kyc_status=KYCStatus.IN_PROGRESS,
        )
        for i in range(10)
    )
    for subject_id in FAILING:
        scripted_provider.overrides[subject_id] = ScoringUnavailableError("provider down")
    provider_suite.risk_assessment = scripted_provider
    orchestrator = AssessmentOrchestrator(
        provider_suite,
        subjects,
        InMemoryDocumentStore(),
        profile_store,
        InMemoryAuditSink(),
    )
    return AssessmentService(orchestrator, OrchestrationConfig(sweep_batch_size=10, sweep_concurrency=3))


class TestSweep:
    @pytest.mark.asyncio  # type: ignore[misc]
    async def test_failures_are_isolated(
        self,
        sweep_service: AssessmentService,
        profile_store: InMemoryProfileStore,
        raw_assessment: Any,
    ) -> None:
        previous = RiskScorer().score(raw_assessment(40, 40, 40, 40))
        before = {sid: await profile_store.upsert_profile(sid, previous, []) for sid in FAILING}

        summary = await sweep_service.assess_pending()

        assert summary.processed == 10
        assert summary.successful == 7
        assert summary.failed == 3
        assert summary.success_rate == 70.0
        assert [o.subject_id for o in summary.results] == [f"user-{i}" for i in range(10)]
        failed = {o.subject_id for o in summary.results if not o.success}
        assert failed == FAILING
        assert all(o.error for o in summary.results if not o.success)
        assert all(o.risk_score == 10 for o in summary.results if o.success)

        for subject_id in FAILING:
            profile = await profile_store.get_profile(subject_id)
            assert profile is not None
            assert profile.last_updated == before[subject_id].last_updated
            assert profile.aggregate_score == 40

    @pytest.mark.asyncio  # type: ignore[misc]
    async def test_limit_bounds_batch(self, sweep_service: AssessmentService) -> None:
        summary = await sweep_service.assess_pending(limit=4)
        assert summary.processed == 4

    @pytest.mark.asyncio  # type: ignore[misc]
    async def test_assessed_subjects_leave_pending_set(self, service: AssessmentService) -> None:
        first = await service.assess_pending()
        assert first.processed == 4

        second = await service.assess_pending()
        # Only subjects still under the pending threshold are picked up again.
        assert {o.subject_id for o in second.results} <= {"subj-low", "subj-medium"}

    @pytest.mark.asyncio  # type: ignore[misc]
    async def test_empty_sweep(self, service: AssessmentService, subject_directory: InMemorySubjectDirectory) -> None:
        for subject_id in ("subj-low", "subj-medium", "subj-high", "subj-critical"):
            await subject_directory.update_risk_score(subject_id, 90)

        summary = await service.assess_pending()

        assert summary.processed == 0
        assert summary.success_rate == 0.0


class TestHighRiskListing:
    @pytest.mark.asyncio  # type: ignore[misc]
    async def test_default_levels(self, service: AssessmentService) -> None:
        for subject_id in ("subj-low", "subj-medium", "subj-high", "subj-critical"):
            await service.assess_one(subject_id)

        listing = await service.list_high_risk()

        assert [e.subject_id for e in listing.subjects] == ["subj-critical", "subj-high"]
        assert listing.total == 2
        assert listing.level_breakdown == {"low": 0, "medium": 0, "high": 1, "critical": 1}
        assert all(len(e.risk_factors) <= 3 for e in listing.subjects)

    @pytest.mark.asyncio  # type: ignore[misc]
    async def test_filters(self, service: AssessmentService) -> None:
        for subject_id in ("subj-low", "subj-medium", "subj-critical"):
            await service.assess_one(subject_id)

        everything = await service.list_high_risk(levels=None)
        assert everything.total == 3
        scores = [e.risk_score for e in everything.subjects]
        assert scores == sorted(scores, reverse=True)

        medium = await service.list_high_risk(levels=[RiskLevel.MEDIUM])
        assert [e.subject_id for e in medium.subjects] == ["subj-medium"]

        capped = await service.list_high_risk(min_score=95, levels=None)
        assert capped.total == 0


class TestRiskSummary:
    @pytest.mark.asyncio  # type: ignore[misc]
    async def test_unassessed_subject(self, service: AssessmentService) -> None:
        summary = await service.get_risk_summary("subj-medium")

        assert summary.profile is None
        assert summary.contributions == {}
        assert summary.document_count == 2
        assert summary.verified_documents == 2
        assert summary.subject.email == "maria.garcia@example.com"

    @pytest.mark.asyncio  # type: ignore[misc]
    async def test_assessed_subject(self, service: AssessmentService) -> None:
        await service.assess_one("subj-critical")

        summary = await service.get_risk_summary("subj-critical")

        assert summary.profile is not None
        assert len(summary.profile.risk_factors) <= 5
        assert summary.subject.risk_score == summary.profile.aggregate_score
        assert summary.contributions["identity_raw"] == 85
        assert summary.contributions["identity_contribution"] == pytest.approx(85 * 0.25)

    @pytest.mark.asyncio  # type: ignore[misc]
    async def test_unknown_subject(self, service: AssessmentService) -> None:
        with pytest.raises(SubjectNotFoundError):
            await service.get_risk_summary("nobody")


class TestSummaryCache:
    @pytest.mark.asyncio  # type: ignore[misc]
    async def test_miss_then_store(self, orchestrator: AssessmentOrchestrator) -> None:
        cache = AsyncMock()
        cache.get_risk_summary.return_value = None
        service = AssessmentService(orchestrator, OrchestrationConfig(), summary_cache=cache, summary_cache_ttl=60)

        summary = await service.get_risk_summary("subj-low")

        cache.cache_risk_summary.assert_awaited_once()
        args, kwargs = cache.cache_risk_summary.await_args
        assert args[0] == "subj-low"
        assert args[1]["subject"]["email"] == summary.subject.email
        assert kwargs["ttl"] == 60

    @pytest.mark.asyncio  # type: ignore[misc]
    async def test_hit_skips_stores(self, orchestrator: AssessmentOrchestrator) -> None:
        cached = {
            "subject_id": "subj-low",
            "subject": {
                "first_name": "Cached",
                "last_name": "Person",
                "email": "cached@example.com",
                "kyc_status": "in_progress",
                "risk_score": 12,
            },
        }
        cache = AsyncMock()
        cache.get_risk_summary.return_value = cached
        service = AssessmentService(orchestrator, OrchestrationConfig(), summary_cache=cache)

        summary = await service.get_risk_summary("subj-low")

        assert summary.subject.first_name == "Cached"
        cache.cache_risk_summary.assert_not_awaited()

    @pytest.mark.asyncio  # type: ignore[misc]
    async def test_assessment_invalidates(self, orchestrator: AssessmentOrchestrator) -> None:
        cache = AsyncMock()
        service = AssessmentService(orchestrator, OrchestrationConfig(), summary_cache=cache)

        await service.assess_one("subj-low")

        cache.invalidate_subject.assert_awaited_once_with("subj-low")

    @pytest.mark.asyncio  # type: ignore[misc]
    async def test_cache_outage_is_not_fatal(self, orchestrator: AssessmentOrchestrator) -> None:
        cache = AsyncMock()
        cache.get_risk_summary.side_effect = ConnectionError("redis down")
        cache.cache_risk_summary.side_effect = ConnectionError("redis down")
        cache.invalidate_subject.side_effect = ConnectionError("redis down")
        service = AssessmentService(orchestrator, OrchestrationConfig(), summary_cache=cache)

        result = await service.assess_one("subj-low")
        summary = await service.get_risk_summary("subj-low")

        assert summary.profile is not None
        assert summary.profile.aggregate_score == result.assessment.aggregate_score
