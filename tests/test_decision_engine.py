"""
Tests for composite scoring and the decision engine.
"""

from datetime import date, timedelta

import pytest

from config.settings import DecisionRules, QualificationBands, QualificationWeights, RiskBands, Settings
from models.results import (
    BANT_DIMENSIONS,
    MEDDIC_DIMENSIONS,
    RISK_DIMENSIONS,
    Dimension,
    InterventionType,
    InterventionUrgency,
    QualificationStatus,
    RiskFactor,
    RiskLevel,
    SubScore,
    Tier,
    Trend,
    Urgency,
)
from orchestration.decision_engine import (
    churn_directive,
    churn_insights,
    classify_qualification,
    classify_risk,
    decide_qualification,
    predict_event_date,
    qualification_actions,
    recommend_tier,
    score_trend,
    urgency_for_timing,
)
from orchestration.scoring_engine import ScoringEngine

ALL_QUALIFICATION = BANT_DIMENSIONS + MEDDIC_DIMENSIONS + (Dimension.DOMAIN_FIT,)
TODAY = date(2026, 3, 2)


def uniform(value, dimensions=ALL_QUALIFICATION, confidence=0.8, **details):
    return [SubScore(dimension=d, value=value, confidence=confidence, details=dict(details)) for d in dimensions]


class TestScoringEngine:

    def test_uniform_sub_scores_give_same_composite(self):
        composite = ScoringEngine(Settings()).qualification_composite(uniform(50))

        assert composite.value == 50
        assert composite.confidence == pytest.approx(0.8)
        assert composite.breakdown == {"bant": 50, "meddic": 50, "domain_fit": 50}

    def test_weighted_average_of_groups(self):
        subs = uniform(100, BANT_DIMENSIONS) + uniform(0, MEDDIC_DIMENSIONS) + uniform(40, (Dimension.DOMAIN_FIT,))
        composite = ScoringEngine(Settings()).qualification_composite(subs)
        # 100 * .40 + 0 * .35 + 40 * .25
        assert composite.value == pytest.approx(50)

    def test_bad_weights_still_clamped(self):
        settings = Settings(weights=QualificationWeights(bant=0.5))
        composite = ScoringEngine(settings).qualification_composite(uniform(100))
        assert composite.value == 100

    def test_risk_points_add_and_cap(self):
        values = [60, 45, 35, 55, 35, 15]
        subs = [SubScore(dimension=d, value=v, confidence=0.92) for d, v in zip(RISK_DIMENSIONS, values)]

        composite = ScoringEngine(Settings()).risk_composite(subs)

        assert composite.value == 100
        assert composite.confidence == pytest.approx(0.92)

    def test_risk_points_below_cap(self):
        subs = [SubScore(dimension=Dimension.HEALTH, value=30), SubScore(dimension=Dimension.RENEWAL, value=10)]
        assert ScoringEngine(Settings()).risk_composite(subs).value == 40


class TestClassification:

    @pytest.mark.parametrize("composite,status", [
        (0, QualificationStatus.DISQUALIFIED),
        (29.99, QualificationStatus.DISQUALIFIED),
        (30, QualificationStatus.LOW),
        (49.99, QualificationStatus.LOW),
        (50, QualificationStatus.MEDIUM),
        (70, QualificationStatus.HIGH),
        (84.99, QualificationStatus.HIGH),
        (85, QualificationStatus.PRIORITY),
        (100, QualificationStatus.PRIORITY),
    ])
    def test_qualification_bands(self, composite, status):
        assert classify_qualification(composite, QualificationBands()) == status

    @pytest.mark.parametrize("probability,level", [
        (0, RiskLevel.LOW),
        (24.9, RiskLevel.LOW),
        (25, RiskLevel.MEDIUM),
        (50, RiskLevel.HIGH),
        (70, RiskLevel.CRITICAL),
        (89.9, RiskLevel.CRITICAL),
        (90, RiskLevel.IMMINENT),
        (100, RiskLevel.IMMINENT),
    ])
    def test_risk_bands(self, probability, level):
        assert classify_risk(probability, RiskBands()) == level

    def test_band_edges_are_configurable(self):
        assert classify_risk(65, RiskBands(critical=65)) == RiskLevel.CRITICAL

    def test_trend(self):
        assert score_trend(60, None) == Trend.STABLE
        assert score_trend(60, 60) == Trend.STABLE
        assert score_trend(65, 60) == Trend.IMPROVING
        assert score_trend(55, 60) == Trend.DECLINING

    def test_churn_trend_improves_as_probability_falls(self):
        assert score_trend(40, 80, lower_is_better=True) == Trend.IMPROVING
        assert score_trend(80, 40, lower_is_better=True) == Trend.DECLINING


class TestQualificationDecision:

    def test_proceed_boundary_is_inclusive(self):
        subs = uniform(50)
        assert decide_qualification(50, subs, Settings()).proceed is True
        assert decide_qualification(49.99, subs, Settings()).proceed is False

    @pytest.mark.parametrize("budget,authority,tier", [
        (500_000, 97, Tier.ENTERPRISE),
        (500_000, 70, Tier.PROFESSIONAL),
        (200_000, 97, Tier.PROFESSIONAL),
        (50_000, 10, Tier.STARTER),
        (25_000, 10, Tier.COMMUNITY),
        (0, 100, Tier.COMMUNITY),
    ])
    def test_tier(self, budget, authority, tier):
        assert recommend_tier(budget, authority, DecisionRules()) == tier

    @pytest.mark.parametrize("timing,urgency", [
        (81, Urgency.IMMEDIATE),
        (80, Urgency.HIGH),
        (61, Urgency.HIGH),
        (60, Urgency.MEDIUM),
        (41, Urgency.MEDIUM),
        (40, Urgency.LOW),
    ])
    def test_urgency(self, timing, urgency):
        assert urgency_for_timing(timing, DecisionRules()) == urgency

    def test_decision_reads_budget_authority_and_timing(self):
        subs = uniform(50)
        subs[0] = SubScore(Dimension.BUDGET, 100, details={"estimated_budget": 500_000})
        subs[1] = SubScore(Dimension.AUTHORITY, 97)
        subs[3] = SubScore(Dimension.TIMING, 100)

        decision = decide_qualification(90, subs, Settings())

        assert decision.tier == Tier.ENTERPRISE
        assert decision.urgency == Urgency.IMMEDIATE
        assert decision.suggested_approach == "Immediate enterprise demo with C-level presentation"

    def test_actions_follow_decision(self):
        proceed = decide_qualification(60, uniform(50), Settings())
        hold = decide_qualification(20, uniform(50), Settings())

        assert qualification_actions(proceed)[0].action_type == "immediate"
        assert qualification_actions(hold)[0].action == "Initiate educational nurturing sequence"


class TestChurnDecision:

    @pytest.mark.parametrize("level,urgency,kind", [
        (RiskLevel.IMMINENT, InterventionUrgency.IMMEDIATE, InterventionType.COMPETITIVE_DEFENSE),
        (RiskLevel.CRITICAL, InterventionUrgency.IMMEDIATE, InterventionType.COMPETITIVE_DEFENSE),
        (RiskLevel.HIGH, InterventionUrgency.WITHIN_24H, InterventionType.VALUE_DEMONSTRATION),
        (RiskLevel.MEDIUM, InterventionUrgency.WITHIN_WEEK, InterventionType.USAGE_RECOVERY),
    ])
    def test_directive(self, level, urgency, kind):
        directive = churn_directive(level)
        assert (directive.urgency, directive.intervention_type) == (urgency, kind)

    def test_low_risk_needs_no_action(self):
        assert churn_directive(RiskLevel.LOW).requires_action is False

    @pytest.mark.parametrize("level,days", [
        (RiskLevel.IMMINENT, 7),
        (RiskLevel.CRITICAL, 21),
        (RiskLevel.HIGH, 45),
        (RiskLevel.MEDIUM, 90),
    ])
    def test_predicted_date_offsets(self, level, days):
        assert predict_event_date(level, TODAY, None, DecisionRules()) == TODAY + timedelta(days=days)

    def test_predicted_date_capped_at_renewal(self):
        renewal = TODAY + timedelta(days=10)
        assert predict_event_date(RiskLevel.HIGH, TODAY, renewal, DecisionRules()) == renewal

    def test_past_renewal_date_is_returned(self):
        renewal = TODAY - timedelta(days=3)
        assert predict_event_date(RiskLevel.MEDIUM, TODAY, renewal, DecisionRules()) == renewal

    def test_no_date_for_low_risk(self):
        assert predict_event_date(RiskLevel.LOW, TODAY, TODAY, DecisionRules()) is None

    def test_insights(self):
        factors = [RiskFactor(f"f{i}", Dimension.HEALTH, 10, "low", 0.1, "stable") for i in range(5)]

        urgent = churn_insights(95, factors, DecisionRules())
        calm = churn_insights(30, factors, DecisionRules())

        assert urgent.primary_drivers == ("f0", "f1", "f2")
        assert urgent.intervention_priority == "immediate"
        assert urgent.success_probability == 10
        assert calm.intervention_priority == "scheduled"
        assert calm.success_probability == 70
