from __future__ import annotations

import math
from enum import Enum


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


# Checked top-down; lower bounds are inclusive.
LEVEL_THRESHOLDS: tuple[tuple[int, RiskLevel], ...] = (
    (80, RiskLevel.CRITICAL),
    (60, RiskLevel.HIGH),
    (30, RiskLevel.MEDIUM),
)

SEVERITY_ORDER = {
    RiskLevel.LOW: 0,
    RiskLevel.MEDIUM: 1,
    RiskLevel.HIGH: 2,
    RiskLevel.CRITICAL: 3,
}


def clamp_score(score: float) -> int:
    """Round half up, then bound to [0, 100]."""
    return int(max(0, min(100, math.floor(score + 0.5))))


def level_for_score(score: float) -> RiskLevel:
    for threshold, level in LEVEL_THRESHOLDS:
        if score >= threshold:
            return level
    return RiskLevel.LOW
