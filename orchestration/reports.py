"""
📋 SCORE REPORTS
================
Tabular views of the current scores and risk assessments, plus a
human-readable breakdown of a single qualification score.
"""

from typing import Iterable

import pandas as pd

from models.results import RiskAssessment, ScoreResult

SCORE_COLUMNS = [
    "entity_id", "composite", "status", "confidence", "trend",
    "bant", "meddic", "domain_fit", "proceed", "tier", "urgency", "computed_at",
]

RISK_COLUMNS = [
    "entity_id", "probability", "risk_level", "confidence", "trend",
    "factors", "warnings", "predicted_event_date", "intervention", "computed_at",
]

DIMENSION_EMOJI = {
    "budget": "💰",
    "authority": "👔",
    "need": "🔥",
    "timing": "⏱️",
    "domain_fit": "🛠️",
}


def score_frame(results: Iterable[ScoreResult]) -> pd.DataFrame:
    """One row per qualification result, best composite first."""
    rows = [
        {
            "entity_id": r.entity_id,
            "composite": r.composite,
            "status": r.status.value,
            "confidence": r.confidence,
            "trend": r.trend.value,
            "bant": r.bant_score,
            "meddic": r.meddic_score,
            "domain_fit": r.domain_fit_score,
            "proceed": r.decision.proceed,
            "tier": r.decision.tier.value,
            "urgency": r.decision.urgency.value,
            "computed_at": r.computed_at,
        }
        for r in results
    ]
    if not rows:
        return pd.DataFrame(columns=SCORE_COLUMNS)
    df = pd.DataFrame.from_records(rows, columns=SCORE_COLUMNS)
    return df.sort_values("composite", ascending=False, ignore_index=True)


def risk_frame(assessments: Iterable[RiskAssessment]) -> pd.DataFrame:
    """One row per churn assessment, highest probability first."""
    rows = [
        {
            "entity_id": a.entity_id,
            "probability": a.probability,
            "risk_level": a.risk_level.value,
            "confidence": a.confidence,
            "trend": a.trend.value,
            "factors": len(a.risk_factors),
            "warnings": len(a.early_warning_signals),
            "predicted_event_date": a.predicted_event_date,
            "intervention": a.directive.intervention_type.value if a.directive.intervention_type else None,
            "computed_at": a.computed_at,
        }
        for a in assessments
    ]
    if not rows:
        return pd.DataFrame(columns=RISK_COLUMNS)
    df = pd.DataFrame.from_records(rows, columns=RISK_COLUMNS)
    return df.sort_values("probability", ascending=False, ignore_index=True)


def status_counts(df: pd.DataFrame, column: str) -> dict:
    """Count rows per category, e.g. status_counts(score_frame(...), "status")."""
    if df.empty:
        return {}
    return {str(k): int(v) for k, v in df[column].value_counts().items()}


def explain_score(result: ScoreResult) -> str:
    """
    Generate a human-readable explanation of a qualification score.

    Args:
        result: A ScoreResult from QualificationEngine.qualify()

    Returns:
        Formatted explanation string
    """
    decision = result.decision
    lines = [
        f"📊 QUALIFICATION SCORE: {result.composite:.1f}/100 ({result.status.value.upper()})",
        "",
        f"Prospect: {result.entity_id}",
        f"Confidence: {result.confidence:.0%}  Trend: {result.trend.value}",
        "",
        "📈 Score Breakdown:",
        f"  • BANT:       {result.bant_score:.1f}",
        f"  • MEDDIC:     {result.meddic_score:.1f}",
        f"  • Domain fit: {result.domain_fit_score:.1f}",
        "",
        "🔍 Strongest factors:",
    ]

    for sub in sorted(result.sub_scores, key=lambda s: s.value, reverse=True)[:5]:
        emoji = DIMENSION_EMOJI.get(sub.dimension.value, "•")
        lines.append(f"  {emoji} {sub.dimension.value.replace('_', ' ').title()}: {sub.value:.0f}")

    lines.append("")
    lines.append(
        f"🎯 Decision: {'PROCEED' if decision.proceed else 'HOLD'} · "
        f"{decision.tier.value} tier · {decision.urgency.value} urgency"
    )
    lines.append(f"💡 Approach: {decision.suggested_approach}")
    for reason in result.reasoning:
        lines.append(f"  ✓ {reason}")
    lines.append(f"📅 Scored: {result.computed_at.isoformat()[:10]}")

    return "\n".join(lines)
