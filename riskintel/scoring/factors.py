from __future__ import annotations

from typing import TYPE_CHECKING

from riskintel.domain.levels import RiskLevel
from riskintel.domain.models import DIMENSIONS, FactorType, RiskFactor

if TYPE_CHECKING:
    from riskintel.domain.models import DocumentAnalysisEntry, RiskAssessment, WebIntelligence

AI_SOURCE = "ai_risk_assessment"
WEB_SOURCE = "web_intelligence"
SANCTIONS_SOURCE = "sanctions_check"
BREACH_SOURCE = "breach_check"
DOCUMENT_SOURCE = "document_analysis"

CRITICAL_SANCTIONS_CONFIDENCE = 90

DIMENSION_FACTOR_TYPES = {
    "identity": FactorType.IDENTITY_RISK,
    "industry": FactorType.INDUSTRY_RISK,
    "network": FactorType.NETWORK_RISK,
    "security": FactorType.SECURITY_RISK,
}


def derive_factors(
    assessment: RiskAssessment,
    web: WebIntelligence,
    document_entries: list[DocumentAnalysisEntry],
) -> list[RiskFactor]:
    """Flatten one run's findings into typed, append-only risk factors.

    Order: AI dimensions, web indicators, sanctions, breaches, documents.
    """
    factors: list[RiskFactor] = []

    for name in DIMENSIONS:
        dimension = getattr(assessment, name)
        if dimension.factors:
            factors.append(
                RiskFactor(
                    type=DIMENSION_FACTOR_TYPES[name],
                    description="; ".join(dimension.factors),
                    severity=dimension.level,
                    source=AI_SOURCE,
                )
            )

    if web.person_info is not None:
        for indicator in web.person_info.risk_indicators:
            factors.append(
                RiskFactor(
                    type=indicator.type,
                    description=indicator.description,
                    severity=indicator.severity,
                    source=WEB_SOURCE,
                )
            )

    matches = [hit for hit in web.sanctions if hit.match]
    if matches:
        top = max(hit.confidence for hit in matches)
        factors.append(
            RiskFactor(
                type=FactorType.SANCTIONS_MATCH,
                description="Sanctions list match: " + ", ".join(hit.list_name for hit in matches),
                severity=RiskLevel.CRITICAL if top >= CRITICAL_SANCTIONS_CONFIDENCE else RiskLevel.HIGH,
                source=SANCTIONS_SOURCE,
            )
        )

    breaches = [name for record in web.data_breaches for name in record.breaches]
    if breaches:
        factors.append(
            RiskFactor(
                type=FactorType.DATA_BREACH,
                description=f"Found in {len(breaches)} data breaches: {', '.join(breaches)}",
                severity=RiskLevel.MEDIUM,
                source=BREACH_SOURCE,
            )
        )

    for entry in document_entries:
        if entry.analysis is None:
            continue
        fraud = entry.analysis.fraud_indicators
        if fraud.indicators:
            factors.append(
                RiskFactor(
                    type=FactorType.DOCUMENT_FRAUD,
                    description=f"Document fraud indicators ({entry.document_type.value}): "
                    + ", ".join(fraud.indicators),
                    severity=fraud.risk_level or RiskLevel.MEDIUM,
                    source=DOCUMENT_SOURCE,
                )
            )

    return factors
