from __future__ import annotations

import copy
from typing import Any

import pytest

from riskintel.config.settings import OperationMode, OrchestrationConfig, RedisConfig, Settings
from riskintel.domain.models import Document, Subject
from riskintel.orchestration.orchestrator import AssessmentOrchestrator
from riskintel.orchestration.runtime import demo_records
from riskintel.orchestration.service import AssessmentService
from riskintel.providers.ai import RiskAssessmentProvider
from riskintel.providers.factory import ProviderSuite, build_provider_suite
from riskintel.ratelimit.limiter import RateLimiter
from riskintel.storage.ledger import LoggingLedgerMirror
from riskintel.storage.memory import (
    InMemoryAuditSink,
    InMemoryDocumentStore,
    InMemoryProfileStore,
    InMemorySubjectDirectory,
)


class FakeClock:
    """Monotonic clock whose sleep advances time instantly."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += max(seconds, 0.0)


def make_raw_assessment(
    identity: Any = 10,
    industry: Any = 10,
    network: Any = 10,
    security: Any = 10,
    overall: Any = 10,
    factors: list[str] | None = None,
) -> dict[str, Any]:
    def _dim(score: Any) -> dict[str, Any]:
        return {
            "score": score,
            "level": "low",
            "factors": list(factors or []),
            "reasoning": "stub reasoning",
        }

    return {
        "identityRisk": _dim(identity),
        "industryRisk": _dim(industry),
        "networkRisk": _dim(network),
        "securityRisk": _dim(security),
        "overallRisk": _dim(overall),
    }


class ScriptedRiskProvider(RiskAssessmentProvider):
    """Returns a fixed response, or a per-subject override (an exception is raised)."""

    def __init__(self) -> None:
        self.default: dict[str, Any] = make_raw_assessment()
        self.overrides: dict[str, Any] = {}
        self.calls: list[str] = []

    async def assess(self, subject: Subject, request: dict[str, Any]) -> dict[str, Any]:
        self.calls.append(subject.subject_id)
        response = self.overrides.get(subject.subject_id, self.default)
        if isinstance(response, Exception):
            raise response
        return copy.deepcopy(response)


@pytest.fixture  # type: ignore[misc]
def raw_assessment() -> Any:
    return make_raw_assessment


@pytest.fixture  # type: ignore[misc]
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture  # type: ignore[misc]
def limiter(fake_clock: FakeClock) -> RateLimiter:
    return RateLimiter(clock=fake_clock, sleep=fake_clock.sleep)


@pytest.fixture  # type: ignore[misc]
def settings() -> Settings:
    return Settings(
        mode=OperationMode.SIMULATION,
        orchestration=OrchestrationConfig(sweep_batch_size=10, sweep_concurrency=3),
        redis=RedisConfig(enabled=False),
    )


@pytest.fixture  # type: ignore[misc]
def demo_data() -> tuple[list[Subject], list[Document]]:
    return demo_records()


@pytest.fixture  # type: ignore[misc]
def subject_directory(demo_data: tuple[list[Subject], list[Document]]) -> InMemorySubjectDirectory:
    return InMemorySubjectDirectory(demo_data[0])


@pytest.fixture  # type: ignore[misc]
def document_store(demo_data: tuple[list[Subject], list[Document]]) -> InMemoryDocumentStore:
    return InMemoryDocumentStore(demo_data[1])


@pytest.fixture  # type: ignore[misc]
def profile_store() -> InMemoryProfileStore:
    return InMemoryProfileStore()


@pytest.fixture  # type: ignore[misc]
def audit_sink() -> InMemoryAuditSink:
    return InMemoryAuditSink()


@pytest.fixture  # type: ignore[misc]
def ledger() -> LoggingLedgerMirror:
    return LoggingLedgerMirror()


@pytest.fixture  # type: ignore[misc]
def provider_suite(
    settings: Settings,
    limiter: RateLimiter,
    document_store: InMemoryDocumentStore,
) -> ProviderSuite:
    return build_provider_suite(settings, limiter=limiter, document_store=document_store)


@pytest.fixture  # type: ignore[misc]
def scripted_provider() -> ScriptedRiskProvider:
    return ScriptedRiskProvider()


@pytest.fixture  # type: ignore[misc]
def orchestrator(
    provider_suite: ProviderSuite,
    subject_directory: InMemorySubjectDirectory,
    document_store: InMemoryDocumentStore,
    profile_store: InMemoryProfileStore,
    audit_sink: InMemoryAuditSink,
    ledger: LoggingLedgerMirror,
) -> AssessmentOrchestrator:
    return AssessmentOrchestrator(
        provider_suite,
        subject_directory,
        document_store,
        profile_store,
        audit_sink,
        ledger=ledger,
    )


@pytest.fixture  # type: ignore[misc]
def scripted_orchestrator(
    orchestrator: AssessmentOrchestrator,
    scripted_provider: ScriptedRiskProvider,
) -> AssessmentOrchestrator:
    orchestrator.providers.risk_assessment = scripted_provider
    return orchestrator


@pytest.fixture  # type: ignore[misc]
def service(orchestrator: AssessmentOrchestrator, settings: Settings) -> AssessmentService:
    return AssessmentService(orchestrator, settings.orchestration)
