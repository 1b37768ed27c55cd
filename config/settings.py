"""
⚙️ GTM SCORING ENGINE SETTINGS
===============================
Central configuration for the qualification and churn engines.
Loads values from environment variables with sensible defaults.

Every weight, band edge and analyzer heuristic lives here so it can be
overridden per deployment (env vars) or per engine (keyword overrides).
None of these numbers are calibrated; they are the business rules the
sales team signed off on.
"""

from pathlib import Path
from typing import Dict, List

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file from project root
PROJECT_ROOT = Path(__file__).parent.parent
ENV_FILE = PROJECT_ROOT / ".env"
if ENV_FILE.exists():
    load_dotenv(ENV_FILE)
else:
    # Try config directory
    load_dotenv(PROJECT_ROOT / "config" / ".env")


class DatabaseSettings(BaseSettings):
    """Supabase profile store configuration."""
    model_config = SettingsConfigDict(env_prefix="SUPABASE_", extra="ignore")

    url: str = ""
    key: str = ""
    profiles_table: str = "entity_profiles"
    health_table: str = "health_snapshots"
    intel_table: str = "competitive_intelligence"

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.key)


class QualificationWeights(BaseSettings):
    """Overall qualification composite weights."""
    model_config = SettingsConfigDict(env_prefix="WEIGHT_", extra="ignore")

    bant: float = 0.40
    meddic: float = 0.35
    domain_fit: float = 0.25

    def validate_weights(self) -> bool:
        """Ensure weights sum to 1.0."""
        total = self.bant + self.meddic + self.domain_fit
        return abs(total - 1.0) < 0.001


class QualificationBands(BaseSettings):
    """Lower edges of each qualification status (composite >= edge)."""
    model_config = SettingsConfigDict(env_prefix="QUAL_BAND_", extra="ignore")

    low: float = 30
    medium: float = 50
    high: float = 70
    priority: float = 85


class RiskBands(BaseSettings):
    """Lower edges of each churn risk level (probability >= edge)."""
    model_config = SettingsConfigDict(env_prefix="RISK_BAND_", extra="ignore")

    medium: float = 25
    high: float = 50
    critical: float = 70
    imminent: float = 90


class DecisionRules(BaseSettings):
    """Directive thresholds for qualification and churn decisions."""
    model_config = SettingsConfigDict(env_prefix="DECISION_", extra="ignore")

    proceed_threshold: float = 50

    # Tier: estimated budget crossed with the Authority sub-score
    enterprise_budget: float = 200_000
    enterprise_authority: float = 70
    professional_budget: float = 50_000
    starter_budget: float = 25_000

    # Urgency from the Timing sub-score (strictly greater than)
    urgency_immediate: float = 80
    urgency_high: float = 60
    urgency_medium: float = 40

    # Strong-dimension threshold used for reasoning lines
    reasoning_threshold: float = 70

    # Days from evaluation to the predicted churn event, per risk level
    event_offset_days: Dict[str, int] = {
        "imminent": 7,
        "critical": 21,
        "high": 45,
        "medium": 90,
    }

    # Churn insight priority (strictly greater than)
    priority_immediate: float = 70
    priority_urgent: float = 50
    min_success_probability: float = 10


class BANTRules(BaseSettings):
    """Budget / Authority / Need / Timing heuristics."""
    model_config = SettingsConfigDict(env_prefix="BANT_", extra="ignore")

    # Budget: employee count bands (strictly greater than)
    enterprise_employees: int = 1000
    enterprise_points: float = 40
    enterprise_budget: float = 500_000
    midmarket_employees: int = 500
    midmarket_points: float = 30
    midmarket_budget: float = 200_000
    growth_employees: int = 100
    growth_points: float = 20
    growth_budget: float = 50_000
    funding_points: float = 20
    senior_levels: List[str] = ["c_level", "vp"]
    senior_points: float = 25
    budget_authority_points: float = 15
    advanced_stack_terms: List[str] = ["kubernetes", "microservices"]
    advanced_stack_points: float = 15
    budget_confidence: float = 0.8

    # Authority
    seniority_points: Dict[str, float] = {
        "c_level": 50,
        "vp": 40,
        "director": 30,
        "manager": 20,
        "ic": 10,
    }
    default_seniority_points: float = 10
    technical_departments: List[str] = ["devops", "sre"]
    technical_department_points: float = 20
    influence_multiplier: float = 30
    authority_confidence: float = 0.75

    # Need
    pain_point_points: Dict[str, float] = {
        "alert fatigue": 40,
        "false positives": 35,
        "incident response": 30,
        "monitoring complexity": 25,
        "tool sprawl": 20,
        "manual processes": 25,
        "downtime costs": 35,
        "compliance requirements": 30,
    }
    monitoring_tools: List[str] = ["prometheus", "grafana", "elk", "splunk", "datadog"]
    monitoring_points: float = 20
    incumbent_solutions: List[str] = ["pagerduty", "opsgenie", "victorops"]
    scale_employees: int = 500
    scale_points: float = 15
    need_confidence: float = 0.8

    # Timing
    stage_points: Dict[str, float] = {
        "awareness": 10,
        "consideration": 30,
        "evaluation": 60,
        "purchase": 90,
        "expansion": 70,
    }
    default_stage_points: float = 10
    intent_multiplier: float = 0.3
    intent_trend_points: float = 20
    final_evaluation_points: float = 30
    active_evaluation_points: float = 20
    burning_engagement_points: float = 25
    hot_engagement_points: float = 15
    timing_confidence: float = 0.75


class MEDDICRules(BaseSettings):
    """Metrics / Economic buyer / Decision criteria / Decision process / Pain / Champion heuristics."""
    model_config = SettingsConfigDict(env_prefix="MEDDIC_", extra="ignore")

    # Metrics: exact pain point -> (points)
    kpi_points: Dict[str, float] = {
        "alert fatigue": 30,
        "incident response": 25,
        "downtime": 20,
    }
    scale_employees: int = 500
    scale_points: float = 15
    metrics_confidence: float = 0.8

    # Economic buyer
    buyer_points: Dict[str, float] = {
        "c_level": 50,
        "vp": 40,
        "director": 25,
    }
    buyer_levels: List[str] = ["c_level", "vp"]
    technical_departments: List[str] = ["devops", "sre"]
    technical_department_points: float = 15
    influence_multiplier: float = 20
    economic_buyer_confidence: float = 0.75

    # Decision criteria / process have no profile evidence yet
    decision_criteria_baseline: float = 65
    decision_criteria_confidence: float = 0.7
    decision_process_baseline: float = 70
    decision_process_confidence: float = 0.75

    # Pain
    pain_present_score: float = 80
    pain_absent_score: float = 20
    pain_cost_estimates: Dict[str, float] = {
        "alert fatigue": 200_000,
        "downtime": 500_000,
    }
    roi_savings_ratio: float = 0.6
    pain_confidence: float = 0.8

    # Champion
    burning_points: float = 40
    hot_points: float = 25
    champion_influence: float = 0.7
    champion_points: float = 30
    champion_confidence: float = 0.75


class DomainFitRules(BaseSettings):
    """AIOps domain-fit heuristics."""
    model_config = SettingsConfigDict(env_prefix="FIT_", extra="ignore")

    readiness_weight: float = 0.30
    sophistication_weight: float = 0.25
    complexity_weight: float = 0.25
    switching_weight: float = 0.20

    aiops_tech: List[str] = ["kubernetes", "docker", "microservices", "prometheus", "grafana"]
    aiops_tech_points: float = 20
    monitoring_tools: List[str] = ["prometheus", "grafana", "elk", "splunk", "datadog", "newrelic"]
    monitoring_points: float = 25
    devops_tech: List[str] = ["jenkins", "gitlab", "github", "terraform", "ansible"]
    devops_points: float = 20

    github_multiplier: float = 30
    community_multiplier: float = 25
    content_multiplier: float = 20

    employees_divisor: float = 10
    stack_item_points: float = 5

    incumbent_satisfaction: float = 60
    industry_fit: Dict[str, float] = {
        "technology": 90,
        "financial_services": 85,
        "healthcare": 80,
        "retail": 70,
        "manufacturing": 75,
        "telecommunications": 85,
    }
    default_industry_fit: float = 60
    confidence: float = 0.85


class ChurnRules(BaseSettings):
    """Additive churn risk points and early-warning thresholds."""
    model_config = SettingsConfigDict(env_prefix="CHURN_", extra="ignore")

    # Health band (strictly less than)
    health_critical_below: float = 40
    health_critical_points: float = 60
    health_poor_below: float = 60
    health_poor_points: float = 30
    health_fair_below: float = 80
    health_fair_points: float = 10

    # Usage
    declining_usage_points: float = 25
    adoption_below: float = 50
    low_adoption_points: float = 20
    value_realization_below: float = 60

    # Support
    ticket_volume_above: int = 5
    ticket_volume_points: float = 15
    escalation_above: float = 0.2
    escalation_points: float = 20

    # Satisfaction
    nps_below: float = 5
    nps_points: float = 25
    satisfaction_below: float = 3.0
    satisfaction_points: float = 30

    # Competitive
    evaluation_stages: List[str] = ["active", "final"]
    competitive_points: float = 35

    # Renewal proximity (strictly less than)
    renewal_imminent_days: int = 30
    renewal_imminent_points: float = 15
    renewal_approaching_days: int = 60
    renewal_approaching_points: float = 10

    factor_confidence: float = 0.92

    # Early warning thresholds
    warning_adoption_below: float = 60
    warning_escalation_above: float = 0.15
    threat_competitor_count: int = 2
    sentiment_nps_above: float = 7
    negative_support_above: int = 3
    feature_utilization_below: float = 0.5


class AnalysisSettings(BaseSettings):
    """Shared analyzer behaviour."""
    model_config = SettingsConfigDict(env_prefix="ANALYSIS_", extra="ignore")

    # Fraction of confidence lost when every consulted field is missing
    missing_field_penalty: float = 0.5


class SchedulerSettings(BaseSettings):
    """Maintenance timers, batch sizes and dispatch dedupe window."""
    model_config = SettingsConfigDict(env_prefix="SCHEDULER_", extra="ignore")

    requalify_interval_seconds: int = 120
    requalify_batch_size: int = Field(default=5, gt=0)
    pattern_refresh_interval_seconds: int = 24 * 60 * 60
    stale_score_hours: int = 24

    risk_scan_interval_seconds: int = 4 * 60 * 60
    risk_check_interval_seconds: int = 5 * 60
    risk_batch_size: int = Field(default=100, gt=0)
    intervention_interval_seconds: int = 2 * 60 * 60
    intervention_batch_size: int = Field(default=10, gt=0)
    competitive_interval_seconds: int = 6 * 60 * 60
    optimization_interval_seconds: int = 24 * 60 * 60

    misfire_grace_seconds: int = 5 * 60
    dispatch_dedupe_hours: int = 24

    # Intervention effectiveness cut-offs for the optimization pass
    effective_above: float = 70
    ineffective_below: float = 30


class Settings:
    """
    Master settings class that combines all configuration.

    Usage:
        from config.settings import settings

        # Access weights
        w = settings.weights.bant

        # Override one group for a single engine
        custom = Settings(risk_bands=RiskBands(critical=65))
    """

    def __init__(self, **overrides):
        self.database = overrides.pop("database", None) or DatabaseSettings()
        self.weights = overrides.pop("weights", None) or QualificationWeights()
        self.qualification_bands = overrides.pop("qualification_bands", None) or QualificationBands()
        self.risk_bands = overrides.pop("risk_bands", None) or RiskBands()
        self.decision = overrides.pop("decision", None) or DecisionRules()
        self.bant = overrides.pop("bant", None) or BANTRules()
        self.meddic = overrides.pop("meddic", None) or MEDDICRules()
        self.domain_fit = overrides.pop("domain_fit", None) or DomainFitRules()
        self.churn = overrides.pop("churn", None) or ChurnRules()
        self.analysis = overrides.pop("analysis", None) or AnalysisSettings()
        self.scheduler = overrides.pop("scheduler", None) or SchedulerSettings()
        self.project_root = PROJECT_ROOT

        if overrides:
            raise TypeError(f"Unknown settings groups: {sorted(overrides)}")

    def validate(self) -> dict:
        """
        Validate all settings and return status.
        Returns dict with validation results.
        """
        q = self.qualification_bands
        r = self.risk_bands
        fit = self.domain_fit
        fit_total = (
            fit.readiness_weight + fit.sophistication_weight +
            fit.complexity_weight + fit.switching_weight
        )
        results = {
            "database_configured": self.database.is_configured,
            "weights_valid": self.weights.validate_weights(),
            "domain_fit_weights_valid": abs(fit_total - 1.0) < 0.001,
            "qualification_bands_ordered": q.low < q.medium < q.high < q.priority,
            "risk_bands_ordered": r.medium < r.high < r.critical < r.imminent,
        }
        results["all_valid"] = all([
            results["weights_valid"],
            results["domain_fit_weights_valid"],
            results["qualification_bands_ordered"],
            results["risk_bands_ordered"],
        ])
        return results

    def print_status(self):
        """Print configuration status to console."""
        validation = self.validate()

        print("\n" + "=" * 50)
        print("⚙️  GTM SCORING ENGINE CONFIGURATION STATUS")
        print("=" * 50)

        print("\n📡 Profile Store:")
        print(f"  • Supabase: {'✅ Configured' if validation['database_configured'] else '⚠️  Not configured (in-memory only)'}")

        print("\n⚖️  Scoring Weights:")
        print(f"  • BANT {self.weights.bant:.2f} / MEDDIC {self.weights.meddic:.2f} / Domain fit {self.weights.domain_fit:.2f}")
        print(f"  • Valid: {'✅ Yes' if validation['weights_valid'] else '❌ No (must sum to 1.0)'}")

        print("\n🎚️  Bands:")
        print(f"  • Qualification ordered: {'✅' if validation['qualification_bands_ordered'] else '❌'}")
        print(f"  • Churn risk ordered:    {'✅' if validation['risk_bands_ordered'] else '❌'}")

        print("\n" + "=" * 50)
        if validation["all_valid"]:
            print("✅ All scoring settings valid! Ready to run.")
        else:
            print("❌ Some settings are invalid. Check your .env file.")
        print("=" * 50 + "\n")

        return validation


# Singleton instance - default for engines that are not given one
settings = Settings()


if __name__ == "__main__":
    # Test configuration when run directly
    settings.print_status()
