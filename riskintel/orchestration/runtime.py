from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING, Any

import httpx
import structlog

from riskintel.domain.models import (
    Address,
    Document,
    DocumentType,
    KYCStatus,
    Subject,
    VerificationStatus,
)
from riskintel.orchestration.orchestrator import AssessmentOrchestrator
from riskintel.orchestration.service import AssessmentService
from riskintel.providers.factory import build_provider_suite
from riskintel.storage.ledger import HttpLedgerMirror, LoggingLedgerMirror
from riskintel.storage.memory import (
    InMemoryAuditSink,
    InMemoryDocumentStore,
    InMemoryProfileStore,
    InMemorySubjectDirectory,
)
from riskintel.storage.postgres import PostgresStore
from riskintel.storage.redis_cache import RedisSummaryCache

if TYPE_CHECKING:
    from riskintel.config.settings import Settings
    from riskintel.providers.factory import ProviderSuite

logger = structlog.get_logger(__name__)

DEMO_PERSONAS = (
    ("subj-low", "John", "Smith", "john.smith@example.com", "TechCorp Ltd", "GB"),
    ("subj-medium", "Maria", "Garcia", "maria.garcia@example.com", "Global Trading Co", "ES"),
    ("subj-high", "David", "Cohen", "david.cohen@example.com", "Offshore Holdings Ltd", "CY"),
    ("subj-critical", "Vladimir", "Petrov", "vladimir.petrov@example.com", "Eastern Ventures LLC", "RU"),
)


def demo_records() -> tuple[list[Subject], list[Document]]:
    """One subject per mock scenario, each with a passport and a utility bill."""
    subjects = []
    documents = []
    for subject_id, first, last, email, company, country in DEMO_PERSONAS:
        subjects.append(
            Subject(
                subject_id=subject_id,
                first_name=first,
                last_name=last,
                email=email,
                date_of_birth=date(1985, 6, 15),
                nationality=country,
                address=Address(street="1 Main Street", city="London", postal_code="EC1A 1AA", country=country),
                company=company,
                kyc_status=KYCStatus.IN_PROGRESS,
            )
        )
        for kind in (DocumentType.PASSPORT, DocumentType.UTILITY_BILL):
            documents.append(
                Document(
                    document_id=f"{subject_id}-{kind.value}",
                    subject_id=subject_id,
                    document_type=kind,
                    storage_ref=f"memory://{subject_id}/{kind.value}",
                    file_name=f"{kind.value}.pdf",
                    verification_status=VerificationStatus.VERIFIED,
                )
            )
    return subjects, documents


@dataclass
class Runtime:
    service: AssessmentService
    providers: ProviderSuite
    _closers: list[Any] = field(default_factory=list)

    async def aclose(self) -> None:
        await _close_all(self._closers)


async def _close_all(closers: list[Any]) -> None:
    for close in reversed(closers):
        await close()


async def build_runtime(settings: Settings) -> Runtime:
    """Wire stores, providers and the service for ``settings.mode``."""
    closers: list[Any] = []
    try:
        if settings.uses_live_providers:
            store = PostgresStore(settings.postgres)
            await store.initialize()
            closers.append(store.close)
            subjects: Any = store
            documents: Any = store
            profiles: Any = store
            audit: Any = store
        else:
            seed_subjects, seed_documents = demo_records()
            subjects = InMemorySubjectDirectory(seed_subjects)
            documents = InMemoryDocumentStore(seed_documents)
            profiles = InMemoryProfileStore()
            audit = InMemoryAuditSink()

        providers = build_provider_suite(settings, document_store=documents)
        closers.append(providers.aclose)

        ledger: Any
        if settings.ledger.oracle_url:
            ledger_http = httpx.AsyncClient()
            closers.append(ledger_http.aclose)
            ledger = HttpLedgerMirror(settings.ledger, ledger_http)
        else:
            ledger = LoggingLedgerMirror()

        summary_cache = None
        if settings.redis.enabled:
            summary_cache = RedisSummaryCache(settings.redis)
            closers.append(summary_cache.close)
            await summary_cache.connect()

        orchestrator = AssessmentOrchestrator(providers, subjects, documents, profiles, audit, ledger=ledger)
        service = AssessmentService(
            orchestrator,
            settings.orchestration,
            summary_cache=summary_cache,
            summary_cache_ttl=settings.summary_cache_ttl,
        )
        logger.info("runtime_ready", mode=settings.mode.value, redis=settings.redis.enabled)
        return Runtime(service=service, providers=providers, _closers=closers)
    except BaseException:
        logger.error("runtime_build_failed", mode=settings.mode.value)
        await _close_all(closers)
        raise
