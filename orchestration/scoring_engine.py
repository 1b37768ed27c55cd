"""
🎯 COMPOSITE SCORING ENGINE
===========================
Folds factor SubScores into one composite number per entity.

TWO STRATEGIES:
1. Weighted average (qualification)
       bant    = mean(Budget, Authority, Need, Timing)
       meddic  = mean(Metrics, Economic buyer, Decision criteria,
                      Decision process, Identify pain, Champion)
       overall = bant * 0.40 + meddic * 0.35 + domain_fit * 0.25
2. Additive and capped (churn risk)
       probability = min(100, sum of risk factor points)

Both clamp to 0-100. Confidence is the mean confidence of the sub-scores
that fed the composite. Nothing here touches state.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from loguru import logger

from analyzers.base import clamp
from config.settings import Settings, settings as default_settings
from models.results import (
    BANT_DIMENSIONS,
    MEDDIC_DIMENSIONS,
    RISK_DIMENSIONS,
    Dimension,
    SubScore,
)


@dataclass(frozen=True)
class Composite:
    """A composite score with the partial sums that produced it."""
    value: float
    confidence: float
    breakdown: Dict[str, float] = field(default_factory=dict)


def _mean(values: Iterable[float]) -> float:
    values = list(values)
    return sum(values) / len(values) if values else 0.0


def _pick(sub_scores: Iterable[SubScore], dimensions) -> List[SubScore]:
    return [s for s in sub_scores if s.dimension in dimensions]


class ScoringEngine:
    """
    Calculates composite scores from factor SubScores.

    Usage:
        engine = ScoringEngine()
        composite = engine.qualification_composite(sub_scores)
        risk = engine.risk_composite(risk_sub_scores)
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or default_settings
        self.weights = self.settings.weights

        # Validate weights sum to 1.0
        if not self.weights.validate_weights():
            logger.warning("⚠️ Qualification weights don't sum to 1.0!")
            logger.info("Check WEIGHT_* settings in .env")

        logger.debug(
            f"ScoringEngine weights: BANT={self.weights.bant}, "
            f"MEDDIC={self.weights.meddic}, FIT={self.weights.domain_fit}"
        )

    def qualification_composite(self, sub_scores: List[SubScore]) -> Composite:
        """
        Weighted average of the BANT mean, MEDDIC mean and domain fit.

        Args:
            sub_scores: The 11 qualification SubScores, in any order

        Returns:
            Composite with `bant`, `meddic` and `domain_fit` in the breakdown
        """
        bant = _mean(s.value for s in _pick(sub_scores, BANT_DIMENSIONS))
        meddic = _mean(s.value for s in _pick(sub_scores, MEDDIC_DIMENSIONS))
        fit = _mean(s.value for s in _pick(sub_scores, (Dimension.DOMAIN_FIT,)))

        overall = (
            bant * self.weights.bant +
            meddic * self.weights.meddic +
            fit * self.weights.domain_fit
        )

        return Composite(
            value=round(clamp(overall), 2),
            confidence=round(_mean(s.confidence for s in sub_scores), 4),
            breakdown={
                "bant": round(bant, 2),
                "meddic": round(meddic, 2),
                "domain_fit": round(fit, 2),
            },
        )

    def risk_composite(self, sub_scores: List[SubScore]) -> Composite:
        """Sum of risk points, capped at 100."""
        risk_scores = _pick(sub_scores, RISK_DIMENSIONS)
        total = sum(s.value for s in risk_scores)

        return Composite(
            value=round(clamp(total), 2),
            confidence=round(_mean(s.confidence for s in risk_scores), 4),
            breakdown={s.dimension.value: s.value for s in risk_scores},
        )
