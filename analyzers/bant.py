"""
💰 BANT ANALYZERS
=================
Budget, Authority, Need and Timing sub-scores for prospect qualification.

Each analyzer is additive: points accumulate per triggered rule and the
total is capped at 100. All point values come from config.settings.BANTRules.
"""

from loguru import logger

from analyzers.base import FieldReader, factor_analyzer, matches_any
from models.results import Dimension


@factor_analyzer(Dimension.BUDGET, lambda s: s.bant.budget_confidence)
def analyze_budget(reader: FieldReader):
    """
    Estimate budget availability from company size, funding and role.

    Also produces `estimated_budget`, which the decision engine crosses
    with Authority to pick a tier.
    """
    rules = reader.rules.bant
    indicators = []
    score = 0.0
    estimated_budget = 0.0

    employees = reader.get("profile.firmographics.employee_count", 0)
    if employees > rules.enterprise_employees:
        score += rules.enterprise_points
        estimated_budget = rules.enterprise_budget
        indicators.append("Large enterprise - significant IT budget expected")
    elif employees > rules.midmarket_employees:
        score += rules.midmarket_points
        estimated_budget = rules.midmarket_budget
        indicators.append("Mid-market company - moderate IT budget expected")
    elif employees > rules.growth_employees:
        score += rules.growth_points
        estimated_budget = rules.growth_budget
        indicators.append("Growing company - limited but adequate budget")

    funding = reader.optional("profile.firmographics.funding")
    if funding is not None:
        score += rules.funding_points
        indicators.append(f"Recent funding: {funding.stage} - budget availability high")

    budget_authority = False
    seniority = reader.get("profile.demographics.seniority")
    if seniority in rules.senior_levels:
        score += rules.senior_points
        budget_authority = True
        indicators.append("Senior role - likely budget authority")
    elif reader.get("profile.demographics.budget_authority", False):
        score += rules.budget_authority_points
        budget_authority = True
        indicators.append("Budget authority confirmed")

    technology = [t.lower() for t in reader.optional("profile.firmographics.technology", [])]
    if any(term in technology for term in rules.advanced_stack_terms):
        score += rules.advanced_stack_points
        indicators.append("Advanced technology stack indicates IT investment budget")

    return score, indicators, {
        "estimated_budget": estimated_budget,
        "budget_authority_identified": budget_authority,
    }


@factor_analyzer(Dimension.AUTHORITY, lambda s: s.bant.authority_confidence)
def analyze_authority(reader: FieldReader):
    """Decision-making authority from seniority, department and influence."""
    rules = reader.rules.bant
    indicators = []
    influencers = []
    champion_potential = 0.0

    seniority = reader.get("profile.demographics.seniority")
    score = rules.seniority_points.get(seniority, rules.default_seniority_points)
    if seniority:
        indicators.append(f"Seniority: {seniority}")

    department = reader.get("profile.demographics.department")
    if department in rules.technical_departments:
        score += rules.technical_department_points
        champion_potential += 30
        role = reader.optional("profile.demographics.role", department)
        influencers.append(f"{role} - Technical decision maker")
        indicators.append(f"{department} team owns tooling decisions")

    influence = reader.get("profile.demographics.influence", 0.0)
    score += influence * rules.influence_multiplier
    champion_potential += influence * 40

    engagement = reader.optional("profile.behavioral.engagement_level")
    if engagement in ("hot", "burning"):
        champion_potential += 20

    return score, indicators, {
        "influencers_identified": influencers,
        "champion_potential": min(100.0, champion_potential),
    }


@factor_analyzer(Dimension.NEED, lambda s: s.bant.need_confidence)
def analyze_need(reader: FieldReader):
    """AIOps need from stated pain points, monitoring stack and scale."""
    rules = reader.rules.bant
    score = 0.0
    pain_points = []
    urgency_indicators = []

    for pain_point in reader.optional("profile.behavioral.pain_points", []):
        for known_pain, points in rules.pain_point_points.items():
            if known_pain in pain_point.lower():
                score += points
                pain_points.append(pain_point)
                urgency_indicators.append(f"{known_pain} indicates immediate AIOps need")

    technology = reader.optional("profile.firmographics.technology", [])
    if matches_any(technology, rules.monitoring_tools):
        score += rules.monitoring_points
        urgency_indicators.append("Existing monitoring tools indicate alert management challenges")

    current_solutions = matches_any(technology, rules.incumbent_solutions)

    employees = reader.get("profile.firmographics.employee_count", 0)
    if employees > rules.scale_employees:
        score += rules.scale_points
        urgency_indicators.append("Enterprise scale requires advanced AIOps capabilities")

    return score, urgency_indicators, {
        "pain_points_identified": pain_points,
        "current_solutions": current_solutions,
        "business_impact_quantified": bool(pain_points),
    }


@factor_analyzer(Dimension.TIMING, lambda s: s.bant.timing_confidence)
def analyze_timing(reader: FieldReader):
    """Purchase timing from buying stage, intent, competitive stage and engagement."""
    rules = reader.rules.bant
    urgency_factors = []

    stage = reader.get("profile.behavioral.buying_stage")
    score = rules.stage_points.get(stage, rules.default_stage_points)

    intent = reader.optional("profile.behavioral.intent_score")
    if intent is not None:
        score += intent * rules.intent_multiplier
        if reader.optional("profile.behavioral.intent_trend") == "increasing":
            score += rules.intent_trend_points
            urgency_factors.append("Increasing intent trend indicates accelerating timeline")

    evaluation_stage = reader.optional("intel.evaluation_stage")
    if evaluation_stage == "final":
        score += rules.final_evaluation_points
        urgency_factors.append("Final evaluation stage - decision imminent")
    elif evaluation_stage == "active":
        score += rules.active_evaluation_points
        urgency_factors.append("Active competitive evaluation - timing critical")

    engagement = reader.get("profile.behavioral.engagement_level")
    if engagement == "burning":
        score += rules.burning_engagement_points
        urgency_factors.append("High engagement level indicates immediate timing")
    elif engagement == "hot":
        score += rules.hot_engagement_points
        urgency_factors.append("High engagement suggests near-term timing")

    logger.debug(f"Timing for {reader.context.entity_id}: stage={stage}, raw={score:.1f}")

    return score, urgency_factors, {
        "competitive_evaluation_stage": evaluation_stage or "unknown",
    }


BANT_ANALYZERS = (analyze_budget, analyze_authority, analyze_need, analyze_timing)
