from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

import structlog

from riskintel.domain.errors import PersistenceError, SubjectNotFoundError
from riskintel.domain.models import (
    AssessmentEvent,
    AssessmentResult,
    IntelligenceBundle,
    SinkOutcome,
)
from riskintel.locks import KeyedLocks
from riskintel.scoring.factors import derive_factors
from riskintel.scoring.risk_scorer import RiskScorer

if TYPE_CHECKING:
    from collections.abc import Awaitable

    from riskintel.domain.models import Document, RiskAssessment, RiskFactor, RiskProfile, Subject
    from riskintel.providers.factory import ProviderSuite
    from riskintel.storage.base import (
        AuditSink,
        DocumentStore,
        LedgerMirror,
        ProfileStore,
        SubjectDirectory,
    )

logger = structlog.get_logger(__name__)

PROFILE_SINK = "profile_store"
SUBJECT_SINK = "subject_directory"
AUDIT_SINK = "audit_sink"


class AssessmentOrchestrator:
    """Runs one subject through gather, score, derive, persist and mirror.

    A run either raises ``SubjectNotFoundError`` / ``ScoringError`` before
    anything is written, or returns a complete ``AssessmentResult``. Runs for
    the same subject are serialized.
    """

    def __init__(
        self,
        providers: ProviderSuite,
        subjects: SubjectDirectory,
        documents: DocumentStore,
        profiles: ProfileStore,
        audit: AuditSink,
        ledger: LedgerMirror | None = None,
        scorer: RiskScorer | None = None,
    ) -> None:
        self.providers = providers
        self.subjects = subjects
        self.documents = documents
        self.profiles = profiles
        self.audit = audit
        self.ledger = ledger
        self.scorer = scorer or RiskScorer()
        self._subject_locks = KeyedLocks()
        self._persisting: set[asyncio.Task[Any]] = set()

    async def assess(self, subject_id: str) -> AssessmentResult:
        async with self._subject_locks.hold(subject_id):
            return await self._run(subject_id)

    async def _run(self, subject_id: str) -> AssessmentResult:
        log = logger.bind(subject_id=subject_id)
        log.info("assessment_start")

        subject = await self.subjects.get_subject(subject_id)
        if subject is None:
            log.warning("assessment_subject_missing")
            raise SubjectNotFoundError(subject_id)
        docs = await self.documents.list_documents(subject_id)

        bundle = await self._gather(subject, docs)

        request = self.scorer.build_request(subject, bundle.documents, bundle.web)
        raw = await self.providers.risk_assessment.assess(subject, request)
        assessment = self.scorer.score(raw, bundle.web)
        factors = derive_factors(assessment, bundle.web, bundle.documents)

        # Once started, all three writes are attempted even if the caller is cancelled.
        persist = asyncio.ensure_future(self._persist(subject, assessment, factors, bundle))
        self._persisting.add(persist)
        persist.add_done_callback(self._persisting.discard)
        profile, persistence = await asyncio.shield(persist)

        mirrored = await self._mirror(subject, assessment.aggregate_score)

        result = AssessmentResult(
            subject_id=subject_id,
            assessment=assessment,
            factors=factors,
            web_intelligence=bundle.web,
            document_analyses=bundle.documents,
            profile=profile,
            persistence=persistence,
            mirrored=mirrored,
        )
        log.info(
            "assessment_complete",
            aggregate_score=assessment.aggregate_score,
            aggregate_level=assessment.aggregate_level.value,
            factors=len(factors),
            fully_persisted=result.fully_persisted,
        )
        return result

    async def _gather(self, subject: Subject, docs: list[Document]) -> IntelligenceBundle:
        web, entries = await asyncio.gather(
            self.providers.web.gather(subject),
            self.providers.documents.analyze_all(docs, subject),
        )
        return IntelligenceBundle(documents=entries, web=web)

    async def _persist(
        self,
        subject: Subject,
        assessment: RiskAssessment,
        factors: list[RiskFactor],
        bundle: IntelligenceBundle,
    ) -> tuple[RiskProfile | None, list[SinkOutcome]]:
        event = AssessmentEvent.from_assessment(subject.subject_id, assessment, bundle.web)

        profile_outcome, profile = await self._write(
            PROFILE_SINK,
            subject.subject_id,
            self.profiles.upsert_profile(subject.subject_id, assessment, factors),
        )
        subject_outcome, _ = await self._write(
            SUBJECT_SINK,
            subject.subject_id,
            self.subjects.update_risk_score(subject.subject_id, assessment.aggregate_score),
        )
        audit_outcome, _ = await self._write(AUDIT_SINK, subject.subject_id, self.audit.append(event))

        return profile, [profile_outcome, subject_outcome, audit_outcome]

    async def _write(self, sink: str, subject_id: str, write: Awaitable[Any]) -> tuple[SinkOutcome, Any]:
        try:
            value = await write
        except Exception as exc:
            error = PersistenceError(sink, str(exc))
            logger.error("persistence_failed", sink=sink, subject_id=subject_id, error=str(error))
            return SinkOutcome(sink=sink, ok=False, error=str(error)), None
        return SinkOutcome(sink=sink, ok=True), value

    async def _mirror(self, subject: Subject, score: int) -> bool | None:
        if self.ledger is None or not subject.wallet_address:
            return None
        try:
            await self.ledger.mirror_score(subject.wallet_address, score)
        except Exception as exc:
            logger.warning("ledger_mirror_failed", subject_id=subject.subject_id, error=str(exc))
            return False
        return True
