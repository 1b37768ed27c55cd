"""
⚠️ CHURN RISK FACTOR ANALYZERS
==============================
Each analyzer returns the risk points one factor family contributes.

WHY ADDITIVE:
The churn engine sums these points instead of averaging them, so a
customer with several weak signals surfaces as urgently as one with a
single strong signal. The scoring engine caps the total at 100.

Every triggered rule is also reported as a RiskFactor in
`details["risk_factors"]`, described by RISK_FACTOR_CATALOG.
"""

from typing import List

from analyzers.base import FieldReader, factor_analyzer
from models.results import Dimension, RiskFactor

# key -> (description, severity, impact_weight, trend)
RISK_FACTOR_CATALOG = {
    "health_critical": ("Health score critically low", "critical", 0.40, "worsening"),
    "health_poor": ("Health score below target", "high", 0.30, "worsening"),
    "health_fair": ("Health score slipping", "low", 0.10, "stable"),
    "usage_declining": ("Declining usage pattern", "high", 0.30, "worsening"),
    "low_adoption": ("Low feature adoption", "medium", 0.20, "stable"),
    "low_value_realization": ("Low value realization achievement", "medium", 0.25, "stable"),
    "support_volume": ("High support ticket volume", "medium", 0.20, "stable"),
    "escalations": ("Frequent support escalations", "high", 0.20, "worsening"),
    "low_nps": ("Low NPS score indicating dissatisfaction", "high", 0.35, "worsening"),
    "low_satisfaction": ("Low satisfaction rating", "high", 0.30, "worsening"),
    "competitive_evaluation": ("Active competitive evaluation", "critical", 0.35, "worsening"),
    "renewal_imminent": ("Renewal due within 30 days", "medium", 0.15, "stable"),
    "renewal_approaching": ("Renewal due within 60 days", "low", 0.10, "stable"),
}


def _factor(key: str, dimension: Dimension, points: float) -> RiskFactor:
    description, severity, weight, trend = RISK_FACTOR_CATALOG[key]
    return RiskFactor(
        factor=description,
        dimension=dimension,
        points=points,
        severity=severity,
        impact_weight=weight,
        trend=trend,
    )


def _output(points: float, factors: List[RiskFactor]):
    return points, [f.factor for f in factors], {"risk_factors": factors}


def _confidence(s):
    return s.churn.factor_confidence


@factor_analyzer(Dimension.HEALTH, _confidence)
def analyze_health(reader: FieldReader):
    """Health score band - the strongest single predictor."""
    rules = reader.rules.churn
    reader.require("health.health_score")
    health = reader.get("health.health_score")

    if health < rules.health_critical_below:
        factors = [_factor("health_critical", Dimension.HEALTH, rules.health_critical_points)]
    elif health < rules.health_poor_below:
        factors = [_factor("health_poor", Dimension.HEALTH, rules.health_poor_points)]
    elif health < rules.health_fair_below:
        factors = [_factor("health_fair", Dimension.HEALTH, rules.health_fair_points)]
    else:
        factors = []

    return _output(sum(f.points for f in factors), factors)


@factor_analyzer(Dimension.USAGE, _confidence)
def analyze_usage(reader: FieldReader):
    """Usage trend, adoption and realized value."""
    rules = reader.rules.churn
    factors = []

    if reader.get("health.usage_trend") == "decreasing":
        factors.append(_factor("usage_declining", Dimension.USAGE, rules.declining_usage_points))

    adoption = reader.get("health.adoption_score")
    if adoption is not None and adoption < rules.adoption_below:
        factors.append(_factor("low_adoption", Dimension.USAGE, rules.low_adoption_points))

    # Reported for context, carries no points
    value = reader.optional("health.value_realization")
    if value is not None and value < rules.value_realization_below:
        factors.append(_factor("low_value_realization", Dimension.USAGE, 0.0))

    return _output(sum(f.points for f in factors), factors)


@factor_analyzer(Dimension.SUPPORT, _confidence)
def analyze_support(reader: FieldReader):
    """Support ticket volume and escalation frequency."""
    rules = reader.rules.churn
    factors = []

    tickets = reader.get("health.support_ticket_volume")
    if tickets is not None and tickets > rules.ticket_volume_above:
        factors.append(_factor("support_volume", Dimension.SUPPORT, rules.ticket_volume_points))

    escalations = reader.get("health.escalation_frequency")
    if escalations is not None and escalations > rules.escalation_above:
        factors.append(_factor("escalations", Dimension.SUPPORT, rules.escalation_points))

    return _output(sum(f.points for f in factors), factors)


@factor_analyzer(Dimension.SATISFACTION, _confidence)
def analyze_satisfaction(reader: FieldReader):
    """NPS and satisfaction rating."""
    rules = reader.rules.churn
    factors = []

    nps = reader.get("health.nps_score")
    if nps is not None and nps < rules.nps_below:
        factors.append(_factor("low_nps", Dimension.SATISFACTION, rules.nps_points))

    satisfaction = reader.get("health.satisfaction_rating")
    if satisfaction is not None and satisfaction < rules.satisfaction_below:
        factors.append(_factor("low_satisfaction", Dimension.SATISFACTION, rules.satisfaction_points))

    return _output(sum(f.points for f in factors), factors)


@factor_analyzer(Dimension.COMPETITIVE, _confidence)
def analyze_competitive(reader: FieldReader):
    """Competitive evaluation stage. No intel means no known threat."""
    rules = reader.rules.churn
    factors = []

    if reader.optional("intel.evaluation_stage") in rules.evaluation_stages:
        factors.append(_factor("competitive_evaluation", Dimension.COMPETITIVE, rules.competitive_points))

    return _output(sum(f.points for f in factors), factors)


@factor_analyzer(Dimension.RENEWAL, _confidence)
def analyze_renewal(reader: FieldReader):
    """Contract renewal proximity."""
    rules = reader.rules.churn
    factors = []

    renewal_date = reader.get("health.renewal_date")
    days_to_renewal = None
    if renewal_date is not None:
        days_to_renewal = (renewal_date - reader.context.now.date()).days
        if days_to_renewal < rules.renewal_imminent_days:
            factors.append(_factor("renewal_imminent", Dimension.RENEWAL, rules.renewal_imminent_points))
        elif days_to_renewal < rules.renewal_approaching_days:
            factors.append(_factor("renewal_approaching", Dimension.RENEWAL, rules.renewal_approaching_points))

    points, indicators, details = _output(sum(f.points for f in factors), factors)
    details["days_to_renewal"] = days_to_renewal
    return points, indicators, details


RISK_ANALYZERS = (
    analyze_health,
    analyze_usage,
    analyze_support,
    analyze_satisfaction,
    analyze_competitive,
    analyze_renewal,
)
