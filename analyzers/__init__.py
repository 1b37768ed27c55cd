"""
🔍 FACTOR ANALYZERS
===================
Pure functions that turn one entity snapshot into SubScores.

Usage:
    from analyzers import AnalysisContext, QUALIFICATION_ANALYZERS

    ctx = AnalysisContext(entity_id="p-1", now=datetime.now(), profile=profile)
    sub_scores = [analyze(ctx) for analyze in QUALIFICATION_ANALYZERS]
"""

from .base import AnalysisContext, FieldReader, clamp, factor_analyzer
from .bant import BANT_ANALYZERS
from .meddic import MEDDIC_ANALYZERS
from .domain_fit import analyze_domain_fit
from .churn_factors import RISK_ANALYZERS, RISK_FACTOR_CATALOG
from .early_warning import (
    detect_early_warning_signals,
    assess_competitive_threats,
    analyze_sentiment,
    analyze_usage_patterns,
)

QUALIFICATION_ANALYZERS = BANT_ANALYZERS + MEDDIC_ANALYZERS + (analyze_domain_fit,)

__all__ = [
    "AnalysisContext",
    "FieldReader",
    "clamp",
    "factor_analyzer",
    "BANT_ANALYZERS",
    "MEDDIC_ANALYZERS",
    "QUALIFICATION_ANALYZERS",
    "RISK_ANALYZERS",
    "RISK_FACTOR_CATALOG",
    "analyze_domain_fit",
    "detect_early_warning_signals",
    "assess_competitive_threats",
    "analyze_sentiment",
    "analyze_usage_patterns",
]
