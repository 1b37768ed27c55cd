"""
Tests for churn risk factor analyzers and early warning detection.
"""

from datetime import timedelta

import pytest

from analyzers.base import AnalysisContext
from analyzers.churn_factors import (
    RISK_ANALYZERS,
    analyze_competitive,
    analyze_health,
    analyze_renewal,
    analyze_usage,
)
from analyzers.early_warning import (
    analyze_sentiment,
    analyze_usage_patterns,
    assess_competitive_threats,
    detect_early_warning_signals,
)
from conftest import NOW, at_risk_health, healthy_health
from config.settings import Settings
from models.profiles import CompetitiveIntel, HealthSnapshot
from models.results import Dimension

ACTIVE_INTEL = CompetitiveIntel(
    entity_id="at-risk-customer",
    evaluation_stage="active",
    competitors_researched=["BigPanda", "Moogsoft"],
)


def context(health, intel=None):
    return AnalysisContext(entity_id=health.entity_id, now=NOW, health=health, intel=intel)


class TestRiskFactors:
    """Each analyzer reports the points its factor family contributes."""

    def test_at_risk_customer_points_per_factor(self):
        ctx = context(at_risk_health(), ACTIVE_INTEL)
        points = {analyze.dimension: analyze(ctx).value for analyze in RISK_ANALYZERS}

        assert points == {
            Dimension.HEALTH: 60,
            Dimension.USAGE: 45,
            Dimension.SUPPORT: 35,
            Dimension.SATISFACTION: 55,
            Dimension.COMPETITIVE: 35,
            Dimension.RENEWAL: 15,
        }

    def test_healthy_customer_contributes_nothing(self):
        ctx = context(healthy_health())
        assert all(analyze(ctx).value == 0 for analyze in RISK_ANALYZERS)

    @pytest.mark.parametrize("score,expected", [
        (39.9, 60),
        (40, 30),
        (59, 30),
        (60, 10),
        (79.9, 10),
        (80, 0),
    ])
    def test_health_bands_are_strict(self, score, expected):
        health = HealthSnapshot(entity_id="c", health_score=score)
        assert analyze_health(context(health)).value == expected

    def test_missing_health_score_is_partial_data(self):
        sub = analyze_health(context(HealthSnapshot(entity_id="c")))
        assert sub.value == 0
        assert sub.confidence == 0

    def test_low_value_realization_is_reported_without_points(self):
        sub = analyze_usage(context(HealthSnapshot(entity_id="c", value_realization=30, adoption_score=90)))

        assert sub.value == 0
        factors = sub.details["risk_factors"]
        assert [f.factor for f in factors] == ["Low value realization achievement"]
        assert factors[0].points == 0

    def test_risk_factors_carry_severity_and_dimension(self):
        sub = analyze_health(context(at_risk_health()))
        factor = sub.details["risk_factors"][0]

        assert factor.dimension == Dimension.HEALTH
        assert factor.severity == "critical"
        assert factor.points == 60

    def test_absent_intel_is_not_missing_data(self):
        sub = analyze_competitive(context(at_risk_health()))
        assert sub.value == 0
        assert sub.confidence == pytest.approx(0.92)

    @pytest.mark.parametrize("days,expected", [(29, 15), (30, 10), (59, 10), (60, 0)])
    def test_renewal_proximity(self, days, expected):
        health = HealthSnapshot(entity_id="c", renewal_date=(NOW + timedelta(days=days)).date())
        sub = analyze_renewal(context(health))
        assert sub.value == expected
        assert sub.details["days_to_renewal"] == days


class TestEarlyWarning:

    def test_all_signals_for_at_risk_customer(self):
        signals = detect_early_warning_signals(at_risk_health(), ACTIVE_INTEL, NOW, Settings())

        assert len(signals) == 4
        competitive = signals[-1]
        assert competitive.strength == 0.9
        assert competitive.historical_correlation == 0.85
        assert competitive.detected_at == NOW - timedelta(days=5)

    def test_no_signals_for_healthy_customer(self):
        assert detect_early_warning_signals(healthy_health(), None, NOW, Settings()) == []

    @pytest.mark.parametrize("stage,competitors,level", [
        ("final", [], "critical"),
        ("active", [], "high"),
        ("research", ["a", "b", "c"], "medium"),
        ("research", ["a"], "low"),
    ])
    def test_competitive_threat_level(self, stage, competitors, level):
        intel = CompetitiveIntel(entity_id="c", evaluation_stage=stage, competitors_researched=competitors)
        assert assess_competitive_threats(intel, Settings()).threat_level == level

    def test_no_intel_means_low_threat(self):
        threats = assess_competitive_threats(None, Settings())
        assert threats.threat_level == "low"
        assert threats.active_evaluation is False

    def test_sentiment(self):
        unhappy = analyze_sentiment(at_risk_health(), Settings())
        happy = analyze_sentiment(healthy_health(), Settings())

        assert (unhappy.nps_trend, unhappy.support_sentiment) == ("declining", "negative")
        assert (happy.nps_trend, happy.support_sentiment) == ("stable", "positive")

    def test_usage_patterns_list_underused_features(self):
        patterns = analyze_usage_patterns(at_risk_health(), Settings())

        assert patterns.feature_utilization_decline == ("alert_correlation",)
        assert patterns.adoption_trend == "decreasing"
        assert patterns.value_realization_score == 40
