from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Iterable

    from riskintel.domain.levels import RiskLevel
    from riskintel.domain.models import (
        AssessmentEvent,
        Document,
        DocumentAnalysis,
        RiskAssessment,
        RiskFactor,
        RiskProfile,
        Subject,
    )


class SubjectDirectory(Protocol):
    async def get_subject(self, subject_id: str) -> Subject | None: ...

    async def update_risk_score(self, subject_id: str, score: int) -> None: ...

    async def list_pending(self, limit: int, max_risk_score: int) -> list[Subject]: ...


class DocumentStore(Protocol):
    async def list_documents(self, subject_id: str) -> list[Document]: ...

    async def annotate_analysis(self, document_id: str, analysis: DocumentAnalysis) -> None: ...


class ProfileStore(Protocol):
    async def get_profile(self, subject_id: str) -> RiskProfile | None: ...

    async def upsert_profile(
        self,
        subject_id: str,
        update: RiskAssessment,
        new_factors: list[RiskFactor],
    ) -> RiskProfile:
        """Overwrite the scores, append ``new_factors``, bump ``last_updated``."""
        ...

    async def list_profiles(
        self,
        min_score: int = 0,
        levels: Iterable[RiskLevel] | None = None,
        limit: int = 50,
    ) -> list[RiskProfile]: ...


class AuditSink(Protocol):
    async def append(self, event: AssessmentEvent) -> None: ...

    async def list_events(self, subject_id: str, limit: int = 20) -> list[AssessmentEvent]: ...


class LedgerMirror(Protocol):
    async def mirror_score(self, external_id: str, score: int) -> None: ...
