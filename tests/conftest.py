"""
Pytest fixtures for the GTM scoring engine.

Provides:
- A fixed, advanceable clock
- An in-memory profile store seeded with prospects and customers
- A recording downstream dispatcher behind the idempotent gate
- Qualification and churn engines wired to all of the above
"""

from datetime import datetime, timedelta
from typing import Any, Dict, List, Tuple

import pytest

from config.settings import Settings
from database.profile_store import InMemoryProfileStore
from models.profiles import CompetitiveIntel, EntityProfile, HealthSnapshot
from orchestration.churn_engine import ChurnEngine
from orchestration.dispatcher import ActionKind, IdempotentDispatcher
from orchestration.qualification_engine import QualificationEngine

NOW = datetime(2026, 3, 2, 9, 0, 0)


class FixedClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


class RecordingDispatcher:
    """Downstream dispatcher that remembers every call and can be told to fail."""

    def __init__(self):
        self.calls: List[Tuple[str, ActionKind, Dict[str, Any]]] = []
        self.fail = False

    def trigger(self, entity_id: str, action_kind: ActionKind, payload: Dict[str, Any]) -> None:
        if self.fail:
            raise ConnectionError("downstream unavailable")
        self.calls.append((entity_id, action_kind, payload))

    def kinds(self, entity_id: str = None) -> List[ActionKind]:
        return [kind for eid, kind, _ in self.calls if entity_id is None or eid == entity_id]


def enterprise_profile(entity_id: str = "enterprise-prospect") -> EntityProfile:
    return EntityProfile.model_validate({
        "entity_id": entity_id,
        "firmographics": {
            "employee_count": 1200,
            "industry": "technology",
            "technology": ["kubernetes", "prometheus", "grafana", "docker", "terraform"],
            "funding": {"stage": "Series B", "amount": 40_000_000},
        },
        "demographics": {
            "role": "CTO",
            "seniority": "c_level",
            "department": "devops",
            "influence": 0.9,
            "budget_authority": True,
        },
        "behavioral": {
            "intent_score": 90,
            "intent_trend": "increasing",
            "engagement_level": "burning",
            "pain_points": ["alert fatigue", "incident response"],
            "buying_stage": "purchase",
            "digital_footprint": {
                "github_activity": 0.8,
                "community_participation": 0.6,
                "content_consumption": 0.5,
            },
        },
    })


def cold_profile(entity_id: str = "cold-prospect") -> EntityProfile:
    return EntityProfile.model_validate({
        "entity_id": entity_id,
        "firmographics": {"employee_count": 20, "industry": "retail", "technology": []},
        "demographics": {
            "role": "Analyst",
            "seniority": "ic",
            "department": "marketing",
            "influence": 0.1,
            "budget_authority": False,
        },
        "behavioral": {
            "engagement_level": "cold",
            "buying_stage": "awareness",
            "digital_footprint": {
                "github_activity": 0.0,
                "community_participation": 0.0,
                "content_consumption": 0.0,
            },
        },
    })


def at_risk_health(entity_id: str = "at-risk-customer", now: datetime = NOW) -> HealthSnapshot:
    return HealthSnapshot(
        entity_id=entity_id,
        health_score=35,
        adoption_score=40,
        usage_trend="decreasing",
        support_ticket_volume=7,
        escalation_frequency=0.3,
        satisfaction_rating=2.5,
        nps_score=3,
        renewal_date=(now + timedelta(days=20)).date(),
        value_realization=40,
        feature_utilization={"alert_correlation": 0.3, "runbooks": 0.8},
    )


def healthy_health(entity_id: str = "healthy-customer", now: datetime = NOW) -> HealthSnapshot:
    return HealthSnapshot(
        entity_id=entity_id,
        health_score=90,
        adoption_score=85,
        usage_trend="stable",
        support_ticket_volume=1,
        escalation_frequency=0.05,
        satisfaction_rating=4.6,
        nps_score=9,
        renewal_date=(now + timedelta(days=200)).date(),
        value_realization=80,
        feature_utilization={"alert_correlation": 0.9},
    )


def medium_health(entity_id: str = "medium-customer", now: datetime = NOW) -> HealthSnapshot:
    # Only the health band (<60) contributes: 30 points
    return HealthSnapshot(
        entity_id=entity_id,
        health_score=55,
        adoption_score=70,
        usage_trend="stable",
        support_ticket_volume=2,
        escalation_frequency=0.1,
        satisfaction_rating=4.0,
        nps_score=8,
        renewal_date=(now + timedelta(days=120)).date(),
        value_realization=70,
    )


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def store():
    store = InMemoryProfileStore()
    store.add_profile(enterprise_profile())
    store.add_profile(cold_profile())
    store.add_health_snapshot(at_risk_health())
    store.add_health_snapshot(healthy_health())
    store.add_health_snapshot(medium_health())
    store.add_competitive_intelligence(CompetitiveIntel(
        entity_id="at-risk-customer",
        evaluation_stage="active",
        competitors_researched=["BigPanda", "Moogsoft"],
        competitive_advantage_areas=["Open source foundation", "Alert correlation"],
    ))
    return store


@pytest.fixture
def downstream():
    return RecordingDispatcher()


@pytest.fixture
def dispatcher(downstream, clock):
    return IdempotentDispatcher(downstream, window=timedelta(hours=24), clock=clock)


@pytest.fixture
def qualification_engine(store, dispatcher, settings, clock):
    return QualificationEngine(store, dispatcher=dispatcher, settings=settings, clock=clock)


@pytest.fixture
def churn_engine(store, dispatcher, settings, clock):
    return ChurnEngine(store, dispatcher=dispatcher, settings=settings, clock=clock)
