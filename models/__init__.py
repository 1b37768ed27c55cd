"""
📦 GTM SCORING MODELS
=====================
Shared types for the qualification and churn engines.

Usage:
    from models import EntityProfile, ScoreResult, NotFound
"""

from .errors import GTMError, NotFound, PartialData, DispatchFailure
from .profiles import (
    EntityProfile,
    Firmographics,
    Demographics,
    Behavioral,
    DigitalFootprint,
    Funding,
    HealthSnapshot,
    CompetitiveIntel,
)
from .results import (
    Dimension,
    SubScore,
    ScoreResult,
    RiskAssessment,
    RiskFactor,
    EarlyWarningSignal,
    RetentionIntervention,
    QualificationStatus,
    RiskLevel,
    Trend,
    Tier,
    Urgency,
    InterventionType,
    InterventionUrgency,
)

__all__ = [
    "GTMError",
    "NotFound",
    "PartialData",
    "DispatchFailure",
    "EntityProfile",
    "Firmographics",
    "Demographics",
    "Behavioral",
    "DigitalFootprint",
    "Funding",
    "HealthSnapshot",
    "CompetitiveIntel",
    "Dimension",
    "SubScore",
    "ScoreResult",
    "RiskAssessment",
    "RiskFactor",
    "EarlyWarningSignal",
    "RetentionIntervention",
    "QualificationStatus",
    "RiskLevel",
    "Trend",
    "Tier",
    "Urgency",
    "InterventionType",
    "InterventionUrgency",
]
