from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any

import structlog

from riskintel.domain.errors import ScoringValidationError
from riskintel.domain.levels import RiskLevel, level_for_score
from riskintel.domain.models import DIMENSIONS, DimensionalRiskScore, RiskAssessment
from riskintel.prompts import RISK_ASSESSMENT_PROMPT_VERSION
from riskintel.scoring.aggregator import ScoreAggregator

if TYPE_CHECKING:
    from riskintel.domain.models import DocumentAnalysisEntry, Subject, WebIntelligence

logger = structlog.get_logger(__name__)

# Provider JSON key per dimension, plus the provider's own overall view.
RESPONSE_KEYS = {
    "identity": "identityRisk",
    "industry": "industryRisk",
    "network": "networkRisk",
    "security": "securityRisk",
    "overall": "overallRisk",
}

_LEVEL_VALUES = {level.value for level in RiskLevel}


def _check_dimension(key: str, value: Any) -> list[str]:
    """Return the problems found in one dimension object."""
    if not isinstance(value, dict):
        return [key]

    problems = []
    score = value.get("score")
    if isinstance(score, bool) or not isinstance(score, (int, float)) or not math.isfinite(score):
        problems.append(f"{key}.score")
    if value.get("level") not in _LEVEL_VALUES:
        problems.append(f"{key}.level")
    factors = value.get("factors")
    if not isinstance(factors, list) or not all(isinstance(f, str) for f in factors):
        problems.append(f"{key}.factors")
    if not isinstance(value.get("reasoning"), str):
        problems.append(f"{key}.reasoning")
    return problems


class RiskScorer:
    """Turns a raw AI assessment into a bounded, level-consistent assessment.

    No I/O and no clock: the same input always gives the same output.
    """

    def __init__(self) -> None:
        self.aggregator = ScoreAggregator()

    def build_request(
        self,
        subject: Subject,
        document_entries: list[DocumentAnalysisEntry],
        web_intelligence: WebIntelligence,
    ) -> dict[str, Any]:
        documents = []
        for entry in document_entries:
            documents.append(
                {
                    "documentId": entry.document_id,
                    "type": entry.document_type.value,
                    "analysis": entry.analysis.model_dump(mode="json", by_alias=True) if entry.analysis else None,
                    "error": entry.error,
                }
            )

        person = web_intelligence.person_info
        return {
            "user": subject.attributes(),
            "documents": documents,
            "webData": {
                "riskScore": web_intelligence.risk_score,
                "riskLevel": web_intelligence.risk_level.value,
                "confidence": web_intelligence.confidence,
                "sources": list(web_intelligence.sources),
                "personInfo": person.model_dump(mode="json", by_alias=True) if person else None,
                "sanctions": [hit.model_dump(mode="json") for hit in web_intelligence.sanctions],
                "dataBreaches": [rec.model_dump(mode="json") for rec in web_intelligence.data_breaches],
                "riskIndicators": [
                    ind.model_dump(mode="json") for ind in (person.risk_indicators if person else [])
                ],
            },
        }

    def validate(self, raw: Any) -> dict[str, dict[str, Any]]:
        if not isinstance(raw, dict):
            msg = f"AI response must be a JSON object, got {type(raw).__name__}"
            raise ScoringValidationError(msg)

        problems: list[str] = []
        for key in RESPONSE_KEYS.values():
            if key not in raw:
                problems.append(key)
                continue
            problems.extend(_check_dimension(key, raw[key]))

        if problems:
            msg = f"AI response missing or invalid fields: {', '.join(problems)}"
            raise ScoringValidationError(msg, missing=problems)

        return {name: raw[key] for name, key in RESPONSE_KEYS.items()}

    def score(self, raw: Any, web_intelligence: WebIntelligence | None = None) -> RiskAssessment:
        validated = self.validate(raw)

        dimensions: dict[str, DimensionalRiskScore] = {}
        for name in DIMENSIONS:
            entry = validated[name]
            dimension = DimensionalRiskScore.from_score(
                entry["score"],
                factors=entry["factors"],
                reasoning=entry["reasoning"],
            )
            if dimension.level.value != entry["level"]:
                logger.debug(
                    "dimension_level_recomputed",
                    dimension=name,
                    reported=entry["level"],
                    computed=dimension.level.value,
                )
            dimensions[name] = dimension

        aggregate = self.aggregator.aggregate({name: d.score for name, d in dimensions.items()})

        logger.info(
            "risk_scoring_complete",
            aggregate_score=aggregate,
            reported_overall=validated["overall"]["score"],
            web_intelligence_score=web_intelligence.risk_score if web_intelligence else None,
        )
        return RiskAssessment(
            **dimensions,
            aggregate_score=aggregate,
            aggregate_level=level_for_score(aggregate),
            overall_reasoning=validated["overall"]["reasoning"],
            prompt_version=RISK_ASSESSMENT_PROMPT_VERSION,
        )
