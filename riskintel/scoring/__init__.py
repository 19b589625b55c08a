from riskintel.scoring.aggregator import ScoreAggregator
from riskintel.scoring.factors import derive_factors
from riskintel.scoring.risk_scorer import RiskScorer
from riskintel.scoring.web import web_confidence, web_risk_score

__all__ = ["RiskScorer", "ScoreAggregator", "derive_factors", "web_confidence", "web_risk_score"]
