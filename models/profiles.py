"""
👤 EXTERNAL PROFILE RECORDS
===========================
Read-only snapshots owned by the profile store. The core never writes them.

Every field is optional or defaulted: upstream systems routinely send partial
records, and analyzers degrade confidence instead of failing on them.
"""

from datetime import date
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _Record(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class Funding(_Record):
    stage: str
    amount: Optional[float] = None
    announced_on: Optional[date] = None


class Firmographics(_Record):
    employee_count: Optional[int] = Field(default=None, ge=0)
    industry: Optional[str] = None
    technology: List[str] = Field(default_factory=list)
    funding: Optional[Funding] = None


class Demographics(_Record):
    role: Optional[str] = None
    seniority: Optional[str] = None      # c_level | vp | director | manager | ic
    department: Optional[str] = None
    influence: Optional[float] = Field(default=None, ge=0, le=1)
    budget_authority: Optional[bool] = None


class DigitalFootprint(_Record):
    github_activity: Optional[float] = Field(default=None, ge=0, le=1)
    community_participation: Optional[float] = Field(default=None, ge=0, le=1)
    content_consumption: Optional[float] = Field(default=None, ge=0, le=1)


class Behavioral(_Record):
    intent_score: Optional[float] = Field(default=None, ge=0, le=100)
    intent_trend: Optional[str] = None   # increasing | stable | decreasing
    engagement_level: Optional[str] = None  # cold | warm | hot | burning
    pain_points: List[str] = Field(default_factory=list)
    buying_stage: Optional[str] = None
    digital_footprint: Optional[DigitalFootprint] = None


class EntityProfile(_Record):
    """Firmographic, demographic and behavioral snapshot of a prospect or customer."""
    entity_id: str
    firmographics: Firmographics = Field(default_factory=Firmographics)
    demographics: Demographics = Field(default_factory=Demographics)
    behavioral: Behavioral = Field(default_factory=Behavioral)


class HealthSnapshot(_Record):
    """Product health and usage telemetry for a customer."""
    entity_id: str
    health_score: Optional[float] = Field(default=None, ge=0, le=100)
    adoption_score: Optional[float] = Field(default=None, ge=0, le=100)
    usage_trend: Optional[str] = None    # increasing | stable | decreasing
    support_ticket_volume: Optional[int] = Field(default=None, ge=0)
    escalation_frequency: Optional[float] = Field(default=None, ge=0, le=1)
    satisfaction_rating: Optional[float] = Field(default=None, ge=0, le=5)
    nps_score: Optional[float] = Field(default=None, ge=0, le=10)
    renewal_date: Optional[date] = None
    value_realization: Optional[float] = Field(default=None, ge=0, le=100)
    feature_utilization: Dict[str, float] = Field(default_factory=dict)


class CompetitiveIntel(_Record):
    """What we know about an entity's evaluation of competing vendors."""
    entity_id: str
    evaluation_stage: Optional[str] = None  # none | research | active | final
    competitors_researched: List[str] = Field(default_factory=list)
    competitive_advantage_areas: List[str] = Field(default_factory=list)
