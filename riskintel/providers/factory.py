from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import httpx
import structlog

from riskintel.providers.ai import (
    ChatCompletionClient,
    LiveRiskAssessmentProvider,
    MockRiskAssessmentProvider,
    RiskAssessmentProvider,
)
from riskintel.providers.documents import (
    DocumentAnalyzer,
    LiveDocumentAnalysisBackend,
    MockDocumentAnalysisBackend,
)
from riskintel.providers.web import (
    LiveBreachChecker,
    LivePersonSearch,
    LiveSanctionsChecker,
    MockBreachChecker,
    MockPersonSearch,
    MockSanctionsChecker,
    WebIntelligenceSearch,
)
from riskintel.ratelimit.limiter import RateLimiter

if TYPE_CHECKING:
    from riskintel.config.settings import Settings
    from riskintel.storage.base import DocumentStore

logger = structlog.get_logger(__name__)


@dataclass
class ProviderSuite:
    web: WebIntelligenceSearch
    documents: DocumentAnalyzer
    risk_assessment: RiskAssessmentProvider
    limiter: RateLimiter
    http: httpx.AsyncClient | None = None

    async def aclose(self) -> None:
        if self.http is not None:
            await self.http.aclose()
            self.http = None


def build_provider_suite(
    settings: Settings,
    limiter: RateLimiter | None = None,
    http: httpx.AsyncClient | None = None,
    document_store: DocumentStore | None = None,
) -> ProviderSuite:
    """Pick mock or live adapters once, from ``settings.mode``."""
    limiter = limiter or RateLimiter.from_config(settings.rate_limit)
    orch = settings.orchestration
    intel = settings.intelligence

    if not settings.uses_live_providers:
        logger.info("provider_suite_built", mode=settings.mode.value)
        web = WebIntelligenceSearch(
            MockPersonSearch(limiter, timeout=intel.provider_timeout_seconds),
            MockSanctionsChecker(limiter, timeout=intel.provider_timeout_seconds),
            MockBreachChecker(limiter, timeout=intel.provider_timeout_seconds),
            timeout=orch.web_intelligence_timeout_seconds,
        )
        documents = DocumentAnalyzer(
            MockDocumentAnalysisBackend(),
            limiter,
            timeout=orch.document_timeout_seconds,
            document_store=document_store,
        )
        return ProviderSuite(
            web=web,
            documents=documents,
            risk_assessment=MockRiskAssessmentProvider(),
            limiter=limiter,
        )

    http = http or httpx.AsyncClient(timeout=httpx.Timeout(settings.ai.timeout_seconds))
    client = ChatCompletionClient(settings.ai, http)
    web = WebIntelligenceSearch(
        LivePersonSearch(limiter, http, intel),
        LiveSanctionsChecker(limiter, http, intel),
        LiveBreachChecker(limiter, http, intel),
        timeout=orch.web_intelligence_timeout_seconds,
    )
    documents = DocumentAnalyzer(
        LiveDocumentAnalysisBackend(client),
        limiter,
        timeout=orch.document_timeout_seconds,
        document_store=document_store,
    )
    logger.info("provider_suite_built", mode=settings.mode.value, ai_base_url=settings.ai.base_url)
    return ProviderSuite(
        web=web,
        documents=documents,
        risk_assessment=LiveRiskAssessmentProvider(client, limiter),
        limiter=limiter,
        http=http,
    )
