"""
🛠️ DOMAIN FIT ANALYZER
======================
How well a prospect matches the AIOps ideal customer profile.

SCORE:
    readiness      * 0.30   AIOps-ready tech in the stack
  + sophistication * 0.25   team's public technical footprint
  + complexity     * 0.25   headcount and stack breadth
  + switching      * 0.20   room left by the incumbent vendor

Industry fit, monitoring maturity and company stage are reported in the
details but do not move the score.
"""

from analyzers.base import FieldReader, clamp, factor_analyzer, matches_any
from models.results import Dimension


def _company_stage(funding) -> str:
    if funding is None:
        return "mature"
    stage = funding.stage
    if "Series C" in stage:
        return "expansion"
    if "Series B" in stage:
        return "scaling"
    if "Series A" in stage:
        return "growth"
    return "mature"


@factor_analyzer(Dimension.DOMAIN_FIT, lambda s: s.domain_fit.confidence)
def analyze_domain_fit(reader: FieldReader):
    rules = reader.rules.domain_fit
    indicators = []

    technology = reader.optional("profile.firmographics.technology", [])
    employees = reader.get("profile.firmographics.employee_count", 0)

    # Technology fit
    readiness = clamp(len(matches_any(technology, rules.aiops_tech)) * rules.aiops_tech_points)
    monitoring_maturity = clamp(len(matches_any(technology, rules.monitoring_tools)) * rules.monitoring_points)
    devops_sophistication = clamp(len(matches_any(technology, rules.devops_tech)) * rules.devops_points)
    if readiness:
        indicators.append(f"AIOps readiness {readiness:.0f}%")

    # Team fit
    sophistication = clamp(
        reader.get("profile.behavioral.digital_footprint.github_activity", 0.0) * rules.github_multiplier +
        reader.get("profile.behavioral.digital_footprint.community_participation", 0.0) * rules.community_multiplier +
        reader.get("profile.behavioral.digital_footprint.content_consumption", 0.0) * rules.content_multiplier
    )

    # Business fit
    industry = (reader.get("profile.firmographics.industry") or "").lower()
    industry_fit = rules.industry_fit.get(industry, rules.default_industry_fit)
    complexity = clamp(employees / rules.employees_divisor + len(technology) * rules.stack_item_points)
    stage = _company_stage(reader.optional("profile.firmographics.funding"))

    # Competitive landscape
    competitors = reader.optional("intel.competitors_researched", [])
    switching_room = 100 - rules.incumbent_satisfaction
    if competitors:
        indicators.append("Active vendor evaluation")

    score = (
        readiness * rules.readiness_weight +
        sophistication * rules.sophistication_weight +
        complexity * rules.complexity_weight +
        switching_room * rules.switching_weight
    )

    return score, indicators, {
        "aiops_readiness": readiness,
        "monitoring_maturity": monitoring_maturity,
        "devops_sophistication": devops_sophistication,
        "technical_sophistication": sophistication,
        "industry_fit": industry_fit,
        "company_stage": stage,
        "operational_complexity": complexity,
        "current_vendors": list(competitors),
        "devops_team_size": max(1, employees // 100),
        "sre_team_size": max(0, employees // 200),
    }
