from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from riskintel.domain.models import KYCStatus, RiskProfile, utcnow
from riskintel.locks import KeyedLocks

if TYPE_CHECKING:
    from collections.abc import Iterable

    from riskintel.domain.levels import RiskLevel
    from riskintel.domain.models import (
        AssessmentEvent,
        Document,
        DocumentAnalysis,
        RiskAssessment,
        RiskFactor,
        Subject,
    )

logger = structlog.get_logger(__name__)


class InMemorySubjectDirectory:
    def __init__(self, subjects: Iterable[Subject] = ()) -> None:
        self._subjects: dict[str, Subject] = {s.subject_id: s for s in subjects}

    def add(self, subject: Subject) -> None:
        self._subjects[subject.subject_id] = subject

    async def get_subject(self, subject_id: str) -> Subject | None:
        return self._subjects.get(subject_id)

    async def update_risk_score(self, subject_id: str, score: int) -> None:
        subject = self._subjects.get(subject_id)
        if subject is None:
            msg = f"Subject {subject_id} not found"
            raise KeyError(msg)
        self._subjects[subject_id] = subject.model_copy(update={"risk_score": score})

    async def list_pending(self, limit: int, max_risk_score: int) -> list[Subject]:
        pending = [
            s
            for s in self._subjects.values()
            if s.kyc_status is KYCStatus.IN_PROGRESS and s.risk_score < max_risk_score
        ]
        return pending[:limit]


class InMemoryDocumentStore:
    def __init__(self, documents: Iterable[Document] = ()) -> None:
        self._documents: dict[str, Document] = {}
        self.analyses: dict[str, DocumentAnalysis] = {}
        for document in documents:
            self.add(document)

    def add(self, document: Document) -> None:
        self._documents[document.document_id] = document

    async def list_documents(self, subject_id: str) -> list[Document]:
        return [d for d in self._documents.values() if d.subject_id == subject_id]

    async def annotate_analysis(self, document_id: str, analysis: DocumentAnalysis) -> None:
        if document_id not in self._documents:
            msg = f"Document {document_id} not found"
            raise KeyError(msg)
        self.analyses[document_id] = analysis


class InMemoryProfileStore:
    def __init__(self) -> None:
        self._profiles: dict[str, RiskProfile] = {}
        self._locks = KeyedLocks()

    async def get_profile(self, subject_id: str) -> RiskProfile | None:
        return self._profiles.get(subject_id)

    async def upsert_profile(
        self,
        subject_id: str,
        update: RiskAssessment,
        new_factors: list[RiskFactor],
    ) -> RiskProfile:
        async with self._locks.hold(subject_id):
            now = utcnow()
            existing = self._profiles.get(subject_id)
            profile = RiskProfile(
                subject_id=subject_id,
                identity=update.identity,
                industry=update.industry,
                network=update.network,
                security=update.security,
                aggregate_score=update.aggregate_score,
                aggregate_level=update.aggregate_level,
                risk_factors=[*(existing.risk_factors if existing else []), *new_factors],
                created_at=existing.created_at if existing else now,
                last_updated=now,
            )
            self._profiles[subject_id] = profile
            return profile

    async def list_profiles(
        self,
        min_score: int = 0,
        levels: Iterable[RiskLevel] | None = None,
        limit: int = 50,
    ) -> list[RiskProfile]:
        wanted = set(levels) if levels else None
        profiles = [
            p
            for p in self._profiles.values()
            if p.aggregate_score >= min_score and (wanted is None or p.aggregate_level in wanted)
        ]
        profiles.sort(key=lambda p: p.aggregate_score, reverse=True)
        return profiles[:limit]


class InMemoryAuditSink:
    def __init__(self) -> None:
        self._events: list[AssessmentEvent] = []

    async def append(self, event: AssessmentEvent) -> None:
        self._events.append(event)

    async def list_events(self, subject_id: str, limit: int = 20) -> list[AssessmentEvent]:
        events = [e for e in self._events if e.subject_id == subject_id]
        return events[-limit:][::-1]

    def __len__(self) -> int:
        return len(self._events)
