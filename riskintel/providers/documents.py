from __future__ import annotations

import abc
import asyncio
from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog

from riskintel.domain.models import DocumentAnalysis, DocumentAnalysisEntry
from riskintel.providers import mock_data
from riskintel.providers.base import guarded_call
from riskintel.prompts import DOCUMENT_ANALYSIS_PROMPT

if TYPE_CHECKING:
    from riskintel.domain.models import Document, Subject
    from riskintel.providers.ai import ChatCompletionClient
    from riskintel.ratelimit.limiter import RateLimiter
    from riskintel.storage.base import DocumentStore

logger = structlog.get_logger(__name__)

DOCUMENT_ANALYSIS = "document_analysis"


class DocumentAnalysisBackend(abc.ABC):
    @abc.abstractmethod
    async def analyze(self, document: Document, subject: Subject) -> DocumentAnalysis: ...


class LiveDocumentAnalysisBackend(DocumentAnalysisBackend):
    def __init__(self, client: ChatCompletionClient) -> None:
        self.client = client

    async def analyze(self, document: Document, subject: Subject) -> DocumentAnalysis:
        payload = {
            "document": {
                "documentType": document.document_type.value,
                "fileName": document.file_name,
                "ocrData": document.ocr_data,
                "verificationStatus": document.verification_status.value,
            },
            "user": subject.attributes(),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        raw = await self.client.complete_json(DOCUMENT_ANALYSIS_PROMPT, payload)
        return DocumentAnalysis.model_validate(raw)


class MockDocumentAnalysisBackend(DocumentAnalysisBackend):
    async def analyze(self, document: Document, subject: Subject) -> DocumentAnalysis:
        raw = mock_data.document_analysis_for(document.document_type.value, subject.email)
        return DocumentAnalysis.model_validate(raw)


class DocumentAnalyzer:
    """Analyzes every document of a subject, one provider call per document.

    Always returns exactly one entry per input document, in input order.
    """

    name = DOCUMENT_ANALYSIS

    def __init__(
        self,
        backend: DocumentAnalysisBackend,
        limiter: RateLimiter,
        timeout: float = 90.0,
        document_store: DocumentStore | None = None,
    ) -> None:
        self.backend = backend
        self.limiter = limiter
        self.timeout = timeout
        self.document_store = document_store

    async def analyze_one(self, document: Document, subject: Subject) -> DocumentAnalysisEntry:
        analysis, reason = await guarded_call(
            self.name,
            self.limiter,
            lambda: self.backend.analyze(document, subject),
            self.timeout,
            subject_id=subject.subject_id,
            document_id=document.document_id,
        )
        if analysis is None:
            return DocumentAnalysisEntry(
                document_id=document.document_id,
                document_type=document.document_type,
                error=reason or "no analysis returned",
            )

        if self.document_store is not None:
            try:
                await self.document_store.annotate_analysis(document.document_id, analysis)
            except Exception as exc:
                logger.warning(
                    "document_annotation_failed",
                    document_id=document.document_id,
                    error=str(exc),
                )

        return DocumentAnalysisEntry(
            document_id=document.document_id,
            document_type=document.document_type,
            analysis=analysis,
        )

    async def analyze_all(
        self,
        documents: list[Document],
        subject: Subject,
    ) -> list[DocumentAnalysisEntry]:
        slots: list[DocumentAnalysisEntry | None] = [None] * len(documents)

        async def _run(index: int, document: Document) -> None:
            slots[index] = await self.analyze_one(document, subject)

        await asyncio.gather(*(_run(i, doc) for i, doc in enumerate(documents)))

        entries = [entry for entry in slots if entry is not None]
        failed = sum(1 for entry in entries if not entry.ok)
        logger.info(
            "document_analysis_complete",
            subject_id=subject.subject_id,
            documents=len(entries),
            failed=failed,
        )
        return entries
