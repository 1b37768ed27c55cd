"""
⚖️ DECISION ENGINE
==================
Maps composites to categories and categories to directives.

QUALIFICATION BANDS (composite >= edge):
- 85+:   🔥 PRIORITY
- 70-84: 👍 HIGH
- 50-69: 🤔 MEDIUM
- 30-49: 🧊 LOW
- 0-29:  ❌ DISQUALIFIED

CHURN RISK BANDS (probability >= edge):
- 90+:   🚨 IMMINENT
- 70-89: 🔴 CRITICAL
- 50-69: 🟠 HIGH
- 25-49: 🟡 MEDIUM
- 0-24:  🟢 LOW

Every edge and threshold comes from config.settings; all functions are pure.
"""

from datetime import date, timedelta
from typing import List, Optional, Sequence, Tuple

from config.settings import DecisionRules, QualificationBands, RiskBands, Settings
from models.results import (
    ChurnDirective,
    ChurnInsights,
    Dimension,
    InterventionType,
    InterventionUrgency,
    QualificationAction,
    QualificationDecision,
    QualificationStatus,
    RiskFactor,
    RiskLevel,
    SubScore,
    Tier,
    Trend,
    Urgency,
)


# ===========================================
# CLASSIFICATION
# ===========================================

def classify_qualification(composite: float, bands: QualificationBands) -> QualificationStatus:
    if composite >= bands.priority:
        return QualificationStatus.PRIORITY
    elif composite >= bands.high:
        return QualificationStatus.HIGH
    elif composite >= bands.medium:
        return QualificationStatus.MEDIUM
    elif composite >= bands.low:
        return QualificationStatus.LOW
    else:
        return QualificationStatus.DISQUALIFIED


def classify_risk(probability: float, bands: RiskBands) -> RiskLevel:
    if probability >= bands.imminent:
        return RiskLevel.IMMINENT
    elif probability >= bands.critical:
        return RiskLevel.CRITICAL
    elif probability >= bands.high:
        return RiskLevel.HIGH
    elif probability >= bands.medium:
        return RiskLevel.MEDIUM
    else:
        return RiskLevel.LOW


def score_trend(current: float, previous: Optional[float], lower_is_better: bool = False) -> Trend:
    """
    Direction of travel since the previous evaluation.

    For churn probability a falling number is an improvement, so pass
    `lower_is_better=True`.
    """
    if previous is None or current == previous:
        return Trend.STABLE
    rising = current > previous
    if lower_is_better:
        rising = not rising
    return Trend.IMPROVING if rising else Trend.DECLINING


# ===========================================
# QUALIFICATION DIRECTIVE
# ===========================================

def _value(sub_scores: Sequence[SubScore], dimension: Dimension) -> float:
    for sub in sub_scores:
        if sub.dimension == dimension:
            return sub.value
    return 0.0


def _detail(sub_scores: Sequence[SubScore], dimension: Dimension, key: str, default=None):
    for sub in sub_scores:
        if sub.dimension == dimension:
            return sub.details.get(key, default)
    return default


def recommend_tier(estimated_budget: float, authority: float, rules: DecisionRules) -> Tier:
    if estimated_budget > rules.enterprise_budget and authority > rules.enterprise_authority:
        return Tier.ENTERPRISE
    elif estimated_budget > rules.professional_budget:
        return Tier.PROFESSIONAL
    elif estimated_budget > rules.starter_budget:
        return Tier.STARTER
    return Tier.COMMUNITY


def urgency_for_timing(timing: float, rules: DecisionRules) -> Urgency:
    if timing > rules.urgency_immediate:
        return Urgency.IMMEDIATE
    elif timing > rules.urgency_high:
        return Urgency.HIGH
    elif timing > rules.urgency_medium:
        return Urgency.MEDIUM
    return Urgency.LOW


def suggested_approach(composite: float, urgency: Urgency, bands: QualificationBands) -> str:
    if composite >= bands.priority and urgency == Urgency.IMMEDIATE:
        return "Immediate enterprise demo with C-level presentation"
    elif composite >= bands.high:
        return "Technical demo focusing on alert reduction ROI"
    elif composite >= bands.medium:
        return "Educational nurturing with AIOps value demonstration"
    return "Community engagement and education pathway"


def decide_qualification(composite: float, sub_scores: Sequence[SubScore], settings: Settings) -> QualificationDecision:
    """
    Proceed/tier/urgency decision for one prospect.

    Tier crosses Budget's estimated budget with the Authority sub-score;
    urgency is read off the Timing sub-score.
    """
    rules = settings.decision
    estimated_budget = _detail(sub_scores, Dimension.BUDGET, "estimated_budget", 0.0) or 0.0
    tier = recommend_tier(estimated_budget, _value(sub_scores, Dimension.AUTHORITY), rules)
    urgency = urgency_for_timing(_value(sub_scores, Dimension.TIMING), rules)

    return QualificationDecision(
        proceed=composite >= rules.proceed_threshold,
        tier=tier,
        urgency=urgency,
        suggested_approach=suggested_approach(composite, urgency, settings.qualification_bands),
    )


def qualification_reasoning(sub_scores: Sequence[SubScore], rules: DecisionRules) -> Tuple[str, ...]:
    """One line per strong dimension (above the reasoning threshold)."""
    strong = rules.reasoning_threshold
    reasoning = []

    budget = _value(sub_scores, Dimension.BUDGET)
    if budget > strong:
        indicators = next(s.indicators for s in sub_scores if s.dimension == Dimension.BUDGET)
        reasoning.append(f"Strong budget indicators: {', '.join(indicators)}")

    if _value(sub_scores, Dimension.AUTHORITY) > strong:
        influencers = _detail(sub_scores, Dimension.AUTHORITY, "influencers_identified", [])
        reasoning.append(f"Decision-making authority confirmed: {', '.join(influencers)}")

    if _value(sub_scores, Dimension.NEED) > strong:
        pains = _detail(sub_scores, Dimension.NEED, "pain_points_identified", [])
        reasoning.append(f"Clear AIOps need: {', '.join(pains)}")

    if _value(sub_scores, Dimension.DOMAIN_FIT) > strong:
        readiness = _detail(sub_scores, Dimension.DOMAIN_FIT, "aiops_readiness", 0)
        reasoning.append(f"Excellent AIOps fit: Technology readiness {readiness:.0f}%")

    return tuple(reasoning)


def qualification_actions(decision: QualificationDecision) -> Tuple[QualificationAction, ...]:
    if decision.proceed:
        immediate = decision.urgency == Urgency.IMMEDIATE
        return (QualificationAction(
            action_type="immediate",
            action=f"Schedule {decision.tier.value} tier demo",
            priority="critical" if immediate else "high",
            timeline="Today" if immediate else "This week",
            assigned_to="gtm_engine",
            automation_confidence=0.9,
        ),)

    return (QualificationAction(
        action_type="scheduled",
        action="Initiate educational nurturing sequence",
        priority="medium",
        timeline="This week",
        assigned_to="gtm_engine",
        automation_confidence=0.85,
    ),)


# ===========================================
# CHURN DIRECTIVE
# ===========================================

def churn_directive(level: RiskLevel) -> ChurnDirective:
    if level in (RiskLevel.CRITICAL, RiskLevel.IMMINENT):
        return ChurnDirective(InterventionUrgency.IMMEDIATE, InterventionType.COMPETITIVE_DEFENSE)
    elif level == RiskLevel.HIGH:
        return ChurnDirective(InterventionUrgency.WITHIN_24H, InterventionType.VALUE_DEMONSTRATION)
    elif level == RiskLevel.MEDIUM:
        return ChurnDirective(InterventionUrgency.WITHIN_WEEK, InterventionType.USAGE_RECOVERY)
    return ChurnDirective()


def predict_event_date(
    level: RiskLevel,
    today: date,
    renewal_date: Optional[date],
    rules: DecisionRules,
) -> Optional[date]:
    """
    Expected churn date: today plus the band's offset, pulled in to the
    renewal date when that comes first. None for low risk.
    """
    if level == RiskLevel.LOW:
        return None
    predicted = today + timedelta(days=rules.event_offset_days[level.value])
    if renewal_date is not None and renewal_date < predicted:
        return renewal_date
    return predicted


def churn_insights(probability: float, factors: List[RiskFactor], rules: DecisionRules) -> ChurnInsights:
    if probability > rules.priority_immediate:
        priority = "immediate"
        approach = "Multi-stakeholder executive intervention"
    elif probability > rules.priority_urgent:
        priority = "urgent"
        approach = "Targeted customer success outreach"
    else:
        priority = "scheduled"
        approach = "Targeted customer success outreach"

    return ChurnInsights(
        primary_drivers=tuple(f.factor for f in factors[:3]),
        intervention_priority=priority,
        success_probability=max(rules.min_success_probability, 100 - probability),
        recommended_approach=approach,
    )
