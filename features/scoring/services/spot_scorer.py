import logging
from typing import Any, Dict, List, Optional, Sequence

from core.config import ScoringWeights, settings
from features.conditions.models.condition_types import (
    NormalizedConditions,
    RankedSelection,
    ScoredSpot
)
from features.tides.models.tide_types import TideTrend

logger = logging.getLogger(__name__)

# Report fields kept for the secondary spots in an email
ADDITIONAL_REPORT_FIELDS = ("main_alert", "wave_size", "wind", "best_time")


def _between(value: Optional[float], low: float, high: float) -> bool:
    return value is not None and low < value < high


class SpotScorer:
    """Composite desirability score and top-N ranking of candidate spots.

    Every bonus is independent and additive. A missing input withholds its
    bonus and never costs points.
    """

    def __init__(self, weights: Optional[ScoringWeights] = None, limit: Optional[int] = None):
        self.weights = weights or settings.scoring
        self.limit = limit or settings.ranked_spot_limit

    def score(self, conditions: NormalizedConditions, skill_match: float) -> float:
        w = self.weights
        tide = conditions.tide
        total = skill_match

        if tide and tide.trend == TideTrend.RISING:
            total += w.rising_tide_bonus
        if tide and tide.range and _between(tide.range.range, w.tide_range_min, w.tide_range_max):
            total += w.tide_range_bonus
        if _between(conditions.wave_height, w.wave_height_min, w.wave_height_max):
            total += w.wave_height_bonus
        if conditions.swell_period is not None and conditions.swell_period > w.swell_period_min:
            total += w.swell_period_bonus
        if conditions.wind_speed is not None and conditions.wind_speed < w.wind_speed_max:
            total += w.light_wind_bonus
        if _between(conditions.wind_direction, w.wind_direction_min, w.wind_direction_max):
            total += w.wind_direction_bonus

        return total

    def build(
        self,
        conditions: NormalizedConditions,
        skill_match: float,
        report: Optional[Dict[str, Any]] = None
    ) -> ScoredSpot:
        return ScoredSpot(
            conditions=conditions,
            skill_match=skill_match,
            score=self.score(conditions, skill_match),
            report=report or {}
        )

    @staticmethod
    def rank(candidates: Sequence[ScoredSpot]) -> List[ScoredSpot]:
        """Highest score first. Equal scores keep their fetch order."""
        # sorted() is stable; reverse=True preserves the order of equal keys
        return sorted(candidates, key=lambda c: c.score, reverse=True)

    def select_top(self, candidates: Sequence[ScoredSpot]) -> Optional[RankedSelection]:
        """Featured spot plus up to limit-1 trimmed additional spots.

        None when there is nothing to rank; callers skip the user.
        """
        ranked = self.rank(candidates)[:self.limit]
        if not ranked:
            return None

        additional = [
            spot.model_copy(update={
                "report": {k: v for k, v in spot.report.items() if k in ADDITIONAL_REPORT_FIELDS}
            })
            for spot in ranked[1:]
        ]
        logger.debug(
            "Ranked spots: " + ", ".join(f"{s.conditions.spot_name}={s.score}" for s in ranked)
        )
        return RankedSelection(featured=ranked[0], additional=additional)
