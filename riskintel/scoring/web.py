from __future__ import annotations

from typing import TYPE_CHECKING

from riskintel.domain.levels import RiskLevel, clamp_score

if TYPE_CHECKING:
    from riskintel.domain.models import WebIntelligence

INDICATOR_WEIGHTS = {
    RiskLevel.CRITICAL: 25,
    RiskLevel.HIGH: 15,
    RiskLevel.MEDIUM: 10,
    RiskLevel.LOW: 5,
}
SANCTIONS_MATCH_WEIGHT = 50
BREACH_WEIGHT = 20

PERSON_CONFIDENCE = 30
SANCTIONS_CONFIDENCE = 25
BREACH_CONFIDENCE = 25


def web_risk_score(web: WebIntelligence) -> int:
    """Additive public-web risk score in [0, 100]."""
    score = 0
    if web.person_info is not None:
        score += sum(INDICATOR_WEIGHTS[ind.severity] for ind in web.person_info.risk_indicators)
    if web.sanctions_matched:
        score += SANCTIONS_MATCH_WEIGHT
    if web.breach_confirmed:
        score += BREACH_WEIGHT
    return clamp_score(score)


def web_confidence(web: WebIntelligence) -> int:
    """How much of the public-web picture was actually observed.

    Advisory only; never folded into the risk score.
    """
    confidence = 0
    if web.person_info is not None:
        confidence += PERSON_CONFIDENCE
    if web.sanctions:
        confidence += SANCTIONS_CONFIDENCE
    if web.data_breaches:
        confidence += BREACH_CONFIDENCE
    return min(confidence, 100)
