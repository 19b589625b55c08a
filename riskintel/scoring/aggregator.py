from __future__ import annotations

import math

import numpy as np

from riskintel.domain.models import DIMENSIONS


class ScoreAggregator:
    def aggregate(self, scores: dict[str, float]) -> int:
        """Round-half-up of the unweighted mean of the four dimensional scores."""
        values = np.array([scores[name] for name in DIMENSIONS], dtype=float)
        values = np.clip(values, 0, 100)
        mean = float(values.mean())
        # Python's round() is banker's rounding; 42.5 must become 43.
        return int(math.floor(mean + 0.5))

    def decompose(self, scores: dict[str, float]) -> dict[str, float]:
        share = 1.0 / len(DIMENSIONS)
        breakdown: dict[str, float] = {}
        for name in DIMENSIONS:
            breakdown[f"{name}_contribution"] = round(share * scores[name], 2)
        for name in DIMENSIONS:
            breakdown[f"{name}_raw"] = round(float(scores[name]), 2)
        return breakdown
