"""
📊 SCORING RESULT TYPES
=======================
Immutable value types produced by the analyzers, scoring engine and
decision engine. Results are replaced wholesale on every evaluation.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class Dimension(str, Enum):
    # BANT
    BUDGET = "budget"
    AUTHORITY = "authority"
    NEED = "need"
    TIMING = "timing"
    # MEDDIC
    METRICS = "metrics"
    ECONOMIC_BUYER = "economic_buyer"
    DECISION_CRITERIA = "decision_criteria"
    DECISION_PROCESS = "decision_process"
    PAIN = "identify_pain"
    CHAMPION = "champion"
    # Domain fit
    DOMAIN_FIT = "domain_fit"
    # Churn risk
    HEALTH = "health"
    USAGE = "usage"
    SUPPORT = "support"
    SATISFACTION = "satisfaction"
    COMPETITIVE = "competitive"
    RENEWAL = "renewal"


BANT_DIMENSIONS = (Dimension.BUDGET, Dimension.AUTHORITY, Dimension.NEED, Dimension.TIMING)
MEDDIC_DIMENSIONS = (
    Dimension.METRICS,
    Dimension.ECONOMIC_BUYER,
    Dimension.DECISION_CRITERIA,
    Dimension.DECISION_PROCESS,
    Dimension.PAIN,
    Dimension.CHAMPION,
)
RISK_DIMENSIONS = (
    Dimension.HEALTH,
    Dimension.USAGE,
    Dimension.SUPPORT,
    Dimension.SATISFACTION,
    Dimension.COMPETITIVE,
    Dimension.RENEWAL,
)


class QualificationStatus(str, Enum):
    DISQUALIFIED = "disqualified"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    PRIORITY = "priority"


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"
    IMMINENT = "imminent"


class Trend(str, Enum):
    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"


class Tier(str, Enum):
    COMMUNITY = "community"
    STARTER = "starter"
    PROFESSIONAL = "professional"
    ENTERPRISE = "enterprise"


class Urgency(str, Enum):
    IMMEDIATE = "immediate"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class InterventionUrgency(str, Enum):
    IMMEDIATE = "immediate"
    WITHIN_24H = "within_24h"
    WITHIN_WEEK = "within_week"


class InterventionType(str, Enum):
    USAGE_RECOVERY = "usage_recovery"
    VALUE_DEMONSTRATION = "value_demonstration"
    COMPETITIVE_DEFENSE = "competitive_defense"
    RELATIONSHIP_REPAIR = "relationship_repair"


@dataclass(frozen=True)
class SubScore:
    """One analyzer's view of one dimension."""
    dimension: Dimension
    value: float
    indicators: Tuple[str, ...] = ()
    confidence: float = 0.0
    details: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class QualificationDecision:
    proceed: bool
    tier: Tier
    urgency: Urgency
    suggested_approach: str


@dataclass(frozen=True)
class QualificationAction:
    action_type: str          # immediate | scheduled
    action: str
    priority: str             # critical | high | medium
    timeline: str
    assigned_to: str
    automation_confidence: float


@dataclass(frozen=True)
class ScoreResult:
    entity_id: str
    composite: float
    status: QualificationStatus
    sub_scores: Tuple[SubScore, ...]
    confidence: float
    trend: Trend
    decision: QualificationDecision
    computed_at: datetime
    bant_score: float = 0.0
    meddic_score: float = 0.0
    domain_fit_score: float = 0.0
    reasoning: Tuple[str, ...] = ()
    recommended_actions: Tuple[QualificationAction, ...] = ()
    model_score: Optional[float] = None

    def sub_score(self, dimension: Dimension) -> Optional[SubScore]:
        for sub in self.sub_scores:
            if sub.dimension == dimension:
                return sub
        return None


@dataclass(frozen=True)
class RiskFactor:
    factor: str
    dimension: Dimension
    points: float
    severity: str             # low | medium | high | critical
    impact_weight: float
    trend: str                # improving | stable | worsening


@dataclass(frozen=True)
class EarlyWarningSignal:
    signal: str
    detected_at: datetime
    strength: float
    historical_correlation: float
    actionable: bool = True


@dataclass(frozen=True)
class CompetitiveThreats:
    active_evaluation: bool = False
    competitors: Tuple[str, ...] = ()
    threat_level: str = "low"
    advantages_at_risk: Tuple[str, ...] = ()


@dataclass(frozen=True)
class CustomerSentiment:
    nps_trend: str
    satisfaction_score: Optional[float]
    support_sentiment: str


@dataclass(frozen=True)
class UsagePatterns:
    adoption_trend: Optional[str]
    feature_utilization_decline: Tuple[str, ...]
    value_realization_score: Optional[float]


@dataclass(frozen=True)
class ChurnInsights:
    primary_drivers: Tuple[str, ...]
    intervention_priority: str  # immediate | urgent | scheduled
    success_probability: float
    recommended_approach: str


@dataclass(frozen=True)
class ChurnDirective:
    """What the decision engine asks for at a given risk level."""
    urgency: Optional[InterventionUrgency] = None
    intervention_type: Optional[InterventionType] = None

    @property
    def requires_action(self) -> bool:
        return self.urgency is not None


@dataclass(frozen=True)
class RiskAssessment:
    entity_id: str
    probability: float
    risk_level: RiskLevel
    risk_factors: Tuple[RiskFactor, ...]
    early_warning_signals: Tuple[EarlyWarningSignal, ...]
    predicted_event_date: Optional[date]
    confidence: float
    sub_scores: Tuple[SubScore, ...] = ()
    trend: Trend = Trend.STABLE
    directive: ChurnDirective = ChurnDirective()
    competitive_threats: CompetitiveThreats = CompetitiveThreats()
    sentiment: Optional[CustomerSentiment] = None
    usage_patterns: Optional[UsagePatterns] = None
    insights: Optional[ChurnInsights] = None
    computed_at: Optional[datetime] = None


@dataclass
class RetentionIntervention:
    """
    A retention action the churn engine asked the dispatcher to run.

    Unlike scores this record is mutable: status and effectiveness are
    filled in as the intervention progresses.
    """
    intervention_id: str
    entity_id: str
    intervention_type: InterventionType
    urgency: InterventionUrgency
    primary_actions: Tuple[str, ...]
    escalation_level: str
    created_at: datetime
    status: str = "planned"   # planned | dispatched | duplicate | failed | completed
    effectiveness_score: Optional[float] = None

    @property
    def strategy(self) -> str:
        return f"{self.intervention_type.value}_{self.urgency.value}"
