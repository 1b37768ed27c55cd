"""
Tests for tabular reports and score explanations.
"""

import pandas as pd

from orchestration.reports import (
    RISK_COLUMNS,
    SCORE_COLUMNS,
    explain_score,
    risk_frame,
    score_frame,
    status_counts,
)


class TestFrames:

    def test_score_frame_sorted_best_first(self, qualification_engine):
        results = [qualification_engine.qualify("cold-prospect"), qualification_engine.qualify("enterprise-prospect")]

        df = score_frame(results)

        assert list(df.columns) == SCORE_COLUMNS
        assert list(df["entity_id"]) == ["enterprise-prospect", "cold-prospect"]
        assert df.loc[0, "tier"] == "enterprise"
        assert bool(df.loc[1, "proceed"]) is False

    def test_risk_frame(self, churn_engine):
        churn_engine.run_risk_scan()
        churn_engine.process_risk_queue()

        df = risk_frame(churn_engine.all_assessments())

        assert list(df.columns) == RISK_COLUMNS
        assert df.loc[0, "risk_level"] == "imminent"
        assert df.loc[0, "intervention"] == "competitive_defense"
        assert pd.isna(df.loc[2, "intervention"])
        assert status_counts(df, "risk_level") == {"imminent": 1, "medium": 1, "low": 1}

    def test_empty_frames_keep_columns(self):
        assert list(score_frame([]).columns) == SCORE_COLUMNS
        assert list(risk_frame([]).columns) == RISK_COLUMNS
        assert status_counts(score_frame([]), "status") == {}


class TestExplainScore:

    def test_explanation_lists_breakdown_and_decision(self, qualification_engine):
        text = explain_score(qualification_engine.qualify("enterprise-prospect"))

        assert text.startswith("📊 QUALIFICATION SCORE: 82.9/100 (HIGH)")
        assert "Prospect: enterprise-prospect" in text
        assert "PROCEED" in text
        assert "enterprise tier" in text
        assert "✓ Strong budget indicators" in text
