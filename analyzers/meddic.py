"""
🏛️ MEDDIC ANALYZERS
===================
Metrics, Economic buyer, Decision criteria, Decision process,
Identify pain and Champion sub-scores for enterprise qualification.

Decision criteria and decision process have no profile evidence to work
from yet, so they report configurable baselines at reduced confidence.
"""

from analyzers.base import FieldReader, factor_analyzer
from models.results import Dimension

KPI_LABELS = {
    "alert fatigue": "Alert Volume Reduction",
    "incident response": "Mean Time to Resolution (MTTR)",
    "downtime": "System Uptime",
}


def _pain_points(reader: FieldReader):
    return [p.lower() for p in reader.optional("profile.behavioral.pain_points", [])]


@factor_analyzer(Dimension.METRICS, lambda s: s.meddic.metrics_confidence)
def analyze_metrics(reader: FieldReader):
    """KPIs the prospect could measure an AIOps rollout against."""
    rules = reader.rules.meddic
    score = 0.0
    kpis = []

    pain_points = _pain_points(reader)
    for pain, points in rules.kpi_points.items():
        if pain in pain_points:
            kpis.append(KPI_LABELS.get(pain, pain.title()))
            score += points

    employees = reader.get("profile.firmographics.employee_count", 0)
    if employees > rules.scale_employees:
        kpis.append("Operational Efficiency")
        score += rules.scale_points

    return score, [f"KPI: {kpi}" for kpi in kpis], {"kpis_identified": kpis}


@factor_analyzer(Dimension.ECONOMIC_BUYER, lambda s: s.meddic.economic_buyer_confidence)
def analyze_economic_buyer(reader: FieldReader):
    """Whether the contact can sign, or at least sway, the budget."""
    rules = reader.rules.meddic
    indicators = []

    seniority = reader.get("profile.demographics.seniority")
    score = rules.buyer_points.get(seniority, 0.0)
    identified = seniority in rules.buyer_levels
    if identified:
        indicators.append(f"Economic buyer identified ({seniority})")
    elif seniority in rules.buyer_points:
        indicators.append(f"{seniority} is likely an influencer, not the buyer")

    department = reader.get("profile.demographics.department")
    if department in rules.technical_departments:
        score += rules.technical_department_points
        indicators.append("Technical influence over purchase")

    influence = reader.get("profile.demographics.influence", 0.0)
    score += influence * rules.influence_multiplier

    return score, indicators, {
        "identified": identified,
        "budget_authority": identified,
        "influence_level": influence * 100,
    }


@factor_analyzer(Dimension.DECISION_CRITERIA, lambda s: s.meddic.decision_criteria_confidence)
def analyze_decision_criteria(reader: FieldReader):
    rules = reader.rules.meddic
    criteria = ["Alert reduction capability", "Integration ease", "Enterprise security"]
    return rules.decision_criteria_baseline, ["Baseline decision criteria assumed"], {
        "criteria_identified": criteria,
    }


@factor_analyzer(Dimension.DECISION_PROCESS, lambda s: s.meddic.decision_process_confidence)
def analyze_decision_process(reader: FieldReader):
    rules = reader.rules.meddic
    stages = ["Technical evaluation", "Business case", "Procurement"]
    return rules.decision_process_baseline, ["Baseline decision process assumed"], {
        "stages_mapped": stages,
    }


@factor_analyzer(Dimension.PAIN, lambda s: s.meddic.pain_confidence)
def analyze_pain(reader: FieldReader):
    """Identified pain and its estimated annual cost."""
    rules = reader.rules.meddic
    pain_points = reader.optional("profile.behavioral.pain_points", [])
    lowered = [p.lower() for p in pain_points]

    business_impact = {
        pain.replace(" ", "_"): cost
        for pain, cost in rules.pain_cost_estimates.items()
        if pain in lowered
    }
    current_cost = sum(business_impact.values())

    score = rules.pain_present_score if pain_points else rules.pain_absent_score
    indicators = [f"Pain: {p}" for p in pain_points]

    return score, indicators, {
        "pain_points": list(pain_points),
        "business_impact": business_impact,
        "current_cost": current_cost,
        "roi_potential": current_cost * rules.roi_savings_ratio,
    }


@factor_analyzer(Dimension.CHAMPION, lambda s: s.meddic.champion_confidence)
def analyze_champion(reader: FieldReader):
    """Likelihood the contact will sell internally on our behalf."""
    rules = reader.rules.meddic
    score = 0.0
    identified = False
    indicators = []

    engagement = reader.get("profile.behavioral.engagement_level")
    if engagement == "burning":
        score += rules.burning_points
        identified = True
        indicators.append("Burning engagement - active champion")
    elif engagement == "hot":
        score += rules.hot_points
        indicators.append("Hot engagement - potential champion")

    department = reader.get("profile.demographics.department")
    influence = reader.get("profile.demographics.influence", 0.0)
    if department in rules.technical_departments and influence > rules.champion_influence:
        score += rules.champion_points
        identified = True
        indicators.append("Influential technical lead")

    return score, indicators, {
        "champion_identified": identified,
        "champion_influence": influence * 100,
        "champion_commitment": 80 if engagement == "burning" else 40,
    }


MEDDIC_ANALYZERS = (
    analyze_metrics,
    analyze_economic_buyer,
    analyze_decision_criteria,
    analyze_decision_process,
    analyze_pain,
    analyze_champion,
)
