from riskintel.providers.ai import (
    ChatCompletionClient,
    LiveRiskAssessmentProvider,
    MockRiskAssessmentProvider,
    RiskAssessmentProvider,
)
from riskintel.providers.base import ProviderAdapter, guarded_call
from riskintel.providers.documents import DocumentAnalyzer
from riskintel.providers.factory import ProviderSuite, build_provider_suite
from riskintel.providers.web import (
    BreachChecker,
    PersonSearch,
    SanctionsChecker,
    WebIntelligenceSearch,
    analyze_risk_indicators,
)

__all__ = [
    "BreachChecker",
    "ChatCompletionClient",
    "DocumentAnalyzer",
    "LiveRiskAssessmentProvider",
    "MockRiskAssessmentProvider",
    "PersonSearch",
    "ProviderAdapter",
    "ProviderSuite",
    "RiskAssessmentProvider",
    "SanctionsChecker",
    "WebIntelligenceSearch",
    "analyze_risk_indicators",
    "build_provider_suite",
    "guarded_call",
]
