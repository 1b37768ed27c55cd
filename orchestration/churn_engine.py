"""
🛡️ CHURN PREVENTION ENGINE
==========================
Assesses churn risk for customers and runs retention interventions.

HOW IT WORKS:
1. Loads the customer's health snapshot (and competitive intel, if any)
2. Runs the six risk factor analyzers and sums their points
3. Classifies the probability into a risk level and predicts an event date
4. Attaches early warnings, competitive threats, sentiment and usage patterns
5. Replaces the stored assessment; when the risk level changes into a
   level that needs action, dispatches the matching retention intervention

RISK LEVEL → INTERVENTION:
- 🚨 imminent / critical: competitive defense, immediately
- 🟠 high:                value demonstration, within 24 hours
- 🟡 medium:              usage recovery, within a week
- 🟢 low:                 nothing
"""

import threading
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Tuple

from loguru import logger

from analyzers import (
    RISK_ANALYZERS,
    AnalysisContext,
    analyze_sentiment,
    analyze_usage_patterns,
    assess_competitive_threats,
    clamp,
    detect_early_warning_signals,
)
from config.settings import Settings, settings as default_settings
from database.profile_store import ProfileStore
from database.state_store import StateStore
from models.errors import NotFound
from models.results import (
    InterventionType,
    InterventionUrgency,
    RetentionIntervention,
    RiskAssessment,
    RiskLevel,
)
from orchestration.decision_engine import (
    churn_directive,
    churn_insights,
    classify_risk,
    predict_event_date,
    score_trend,
)
from orchestration.dispatcher import ActionKind, DispatchOutcome, IdempotentDispatcher, LoggingDispatcher
from orchestration.queues import DedupQueue
from orchestration.scoring_engine import ScoringEngine

INTERVENTION_PLANS = {
    InterventionType.USAGE_RECOVERY: {
        "primary_actions": (
            "Analyze usage patterns and identify optimization opportunities",
            "Provide personalized training on underutilized features",
            "Schedule usage optimization session",
            "Implement usage tracking and gamification",
        ),
        "escalation_level": "customer_success",
    },
    InterventionType.VALUE_DEMONSTRATION: {
        "primary_actions": (
            "Compile delivered ROI and alert reduction metrics",
            "Schedule executive business review",
            "Preview upcoming roadmap capabilities",
        ),
        "escalation_level": "customer_success",
    },
    InterventionType.COMPETITIVE_DEFENSE: {
        "primary_actions": (
            "Identify competitive evaluation criteria",
            "Prepare competitive battle card presentation",
            "Schedule competitive positioning session",
            "Provide competitive advantage documentation",
        ),
        "escalation_level": "account_executive",
    },
    InterventionType.RELATIONSHIP_REPAIR: {
        "primary_actions": (
            "Executive sponsor outreach to acknowledge issues",
            "Review open support escalations with the customer",
            "Agree a remediation plan with named owners",
        ),
        "escalation_level": "executive",
    },
}

DEFAULT_ADVANTAGES = ("Open source advantage", "Alert correlation superiority")

_STATUS_FOR_OUTCOME = {
    DispatchOutcome.SENT: "dispatched",
    DispatchOutcome.DUPLICATE: "duplicate",
    DispatchOutcome.FAILED: "failed",
}


@dataclass(frozen=True)
class CompetitiveResponse:
    threats_detected: int
    responses_executed: int
    mitigation_score: float
    advantages_reinforced: Tuple[str, ...]


@dataclass(frozen=True)
class OptimizationReport:
    evaluated: int
    successful: int
    deprecated_strategies: Tuple[str, ...]


class ChurnEngine:
    """
    Usage:
        engine = ChurnEngine(store)
        assessment = engine.assess_churn_risk("acme")

        engine.run_risk_scan()
        engine.process_risk_queue()
        engine.process_intervention_queue()
    """

    def __init__(
        self,
        store: ProfileStore,
        dispatcher: Optional[IdempotentDispatcher] = None,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.settings = settings or default_settings
        self.store = store
        self.clock = clock
        self.scoring = ScoringEngine(self.settings)
        self.dispatcher = dispatcher or IdempotentDispatcher(
            LoggingDispatcher(),
            window=timedelta(hours=self.settings.scheduler.dispatch_dedupe_hours),
            clock=clock,
        )
        self.state: StateStore[RiskAssessment] = StateStore("churn", lambda a: a.risk_level.value)
        self.risk_queue = DedupQueue("risk_check", clock=clock)
        self.intervention_queue = DedupQueue("intervention", clock=clock)
        self._interventions: Dict[str, RetentionIntervention] = {}
        self._interventions_lock = threading.Lock()

    # ===================================
    # RISK ASSESSMENT
    # ===================================

    def assess_churn_risk(self, entity_id: str) -> RiskAssessment:
        """
        Assess one customer and store the result.

        Raises:
            NotFound: the customer has no health snapshot
        """
        token = self.state.begin(entity_id)
        health = self.store.get_health_snapshot(entity_id)
        intel = self.store.get_competitive_intelligence(entity_id)
        now = self.clock()

        context = AnalysisContext(
            entity_id=entity_id,
            now=now,
            health=health,
            intel=intel,
            settings=self.settings,
        )
        sub_scores = tuple(analyze(context) for analyze in RISK_ANALYZERS)
        composite = self.scoring.risk_composite(list(sub_scores))
        probability = composite.value

        level = classify_risk(probability, self.settings.risk_bands)
        factors = tuple(f for sub in sub_scores for f in sub.details.get("risk_factors", ()))
        drivers = sorted(factors, key=lambda f: f.points, reverse=True)
        previous = self.state.get(entity_id)

        assessment = RiskAssessment(
            entity_id=entity_id,
            probability=probability,
            risk_level=level,
            risk_factors=factors,
            early_warning_signals=tuple(detect_early_warning_signals(health, intel, now, self.settings)),
            predicted_event_date=predict_event_date(level, now.date(), health.renewal_date, self.settings.decision),
            confidence=composite.confidence,
            sub_scores=sub_scores,
            trend=score_trend(probability, previous.probability if previous else None, lower_is_better=True),
            directive=churn_directive(level),
            competitive_threats=assess_competitive_threats(intel, self.settings),
            sentiment=analyze_sentiment(health, self.settings),
            usage_patterns=analyze_usage_patterns(health, self.settings),
            insights=churn_insights(probability, drivers, self.settings.decision),
            computed_at=now,
        )

        update = self.state.replace(entity_id, assessment, token, at=now)
        if update.accepted and update.transition is not None and assessment.directive.requires_action:
            self.execute_retention_intervention(
                entity_id,
                assessment.directive.intervention_type,
                assessment.directive.urgency,
            )

        logger.info(
            f"🛡️ {entity_id}: churn {probability:.0f}% ({level.value.upper()}), "
            f"{len(factors)} factors, {len(assessment.early_warning_signals)} warnings"
        )
        return assessment

    def get_risk(self, entity_id: str) -> Optional[RiskAssessment]:
        return self.state.get(entity_id)

    def all_assessments(self) -> List[RiskAssessment]:
        return sorted(self.state.values(), key=lambda a: a.probability, reverse=True)

    def high_risk_customers(self) -> List[RiskAssessment]:
        """Customers at high risk or worse, most at risk first."""
        wanted = (RiskLevel.HIGH, RiskLevel.CRITICAL, RiskLevel.IMMINENT)
        return [a for a in self.all_assessments() if a.risk_level in wanted]

    def enqueue_for_risk_check(self, entity_id: str, reason: str = "") -> bool:
        return self.risk_queue.enqueue(entity_id, reason)

    def process_risk_queue(self, batch_size: Optional[int] = None) -> Dict[str, int]:
        """Assess the next batch of queued customers, isolating failures."""
        batch = self.risk_queue.drain(batch_size or self.settings.scheduler.risk_batch_size)
        stats = {"processed": 0, "failed": 0}

        for entry in batch:
            try:
                self.assess_churn_risk(entry.entity_id)
                stats["processed"] += 1
            except NotFound as e:
                logger.warning(f"Skipping {entry.entity_id}: {e}")
                stats["failed"] += 1
            except Exception as e:
                logger.error(f"Error assessing churn risk for {entry.entity_id}: {e}")
                stats["failed"] += 1

        return stats

    def run_risk_scan(self) -> int:
        """
        Periodic scan: queue every known customer for a risk check.
        The risk check job then assesses them one batch per tick.

        Returns:
            Number of customers newly enqueued
        """
        try:
            customer_ids = self.store.list_customer_ids()
        except Exception as e:
            logger.error(f"Could not list customers: {e}")
            customer_ids = []

        enqueued = sum(1 for entity_id in customer_ids if self.enqueue_for_risk_check(entity_id, "scheduled scan"))
        logger.info(f"Risk scan queued {enqueued} customers ({len(self.risk_queue)} waiting)")
        return enqueued

    # ===================================
    # INTERVENTIONS
    # ===================================

    def execute_retention_intervention(
        self,
        entity_id: str,
        intervention_type: InterventionType,
        urgency: InterventionUrgency = InterventionUrgency.WITHIN_WEEK,
    ) -> RetentionIntervention:
        """
        Record an intervention and hand it to the dispatcher.

        An intervention the dispatcher drops as a duplicate is returned with
        status "duplicate" but not recorded.

        Raises:
            NotFound: the customer has no current risk assessment
        """
        assessment = self.state.get(entity_id)
        if assessment is None:
            raise NotFound("risk assessment", entity_id)

        plan = INTERVENTION_PLANS[intervention_type]
        intervention = RetentionIntervention(
            intervention_id=f"intervention_{uuid.uuid4().hex[:12]}",
            entity_id=entity_id,
            intervention_type=intervention_type,
            urgency=urgency,
            primary_actions=plan["primary_actions"],
            escalation_level=plan["escalation_level"],
            created_at=self.clock(),
        )

        outcome = self.dispatcher.trigger(entity_id, ActionKind.for_intervention(urgency), {
            "intervention_id": intervention.intervention_id,
            "intervention_type": intervention_type.value,
            "probability": assessment.probability,
            "risk_level": assessment.risk_level.value,
            "primary_actions": list(plan["primary_actions"]),
            "escalation_level": plan["escalation_level"],
        })
        intervention.status = _STATUS_FOR_OUTCOME[outcome]
        if outcome == DispatchOutcome.DUPLICATE:
            logger.debug(f"{intervention.strategy} for {entity_id} already dispatched, not recorded")
            return intervention

        with self._interventions_lock:
            self._interventions[intervention.intervention_id] = intervention

        logger.info(f"🧰 {intervention.strategy} for {entity_id}: {intervention.status}")
        return intervention

    def select_intervention_type(self, assessment: RiskAssessment) -> InterventionType:
        if assessment.competitive_threats.active_evaluation:
            return InterventionType.COMPETITIVE_DEFENSE
        if assessment.usage_patterns and assessment.usage_patterns.adoption_trend == "decreasing":
            return InterventionType.USAGE_RECOVERY
        satisfaction = assessment.sentiment.satisfaction_score if assessment.sentiment else None
        if satisfaction is not None and satisfaction < self.settings.churn.satisfaction_below:
            return InterventionType.RELATIONSHIP_REPAIR
        return InterventionType.VALUE_DEMONSTRATION

    def enqueue_for_intervention(self, entity_id: str, reason: str = "") -> bool:
        return self.intervention_queue.enqueue(entity_id, reason)

    def process_intervention_queue(self, batch_size: Optional[int] = None) -> List[RetentionIntervention]:
        """Run interventions for the next batch of queued customers that are not low risk."""
        batch = self.intervention_queue.drain(batch_size or self.settings.scheduler.intervention_batch_size)
        executed = []

        for entry in batch:
            assessment = self.get_risk(entry.entity_id)
            if assessment is None or assessment.risk_level == RiskLevel.LOW:
                logger.debug(f"No intervention needed for {entry.entity_id}")
                continue
            try:
                executed.append(self.execute_retention_intervention(
                    entry.entity_id,
                    self.select_intervention_type(assessment),
                    assessment.directive.urgency or InterventionUrgency.WITHIN_WEEK,
                ))
            except Exception as e:
                logger.error(f"Error executing intervention for {entry.entity_id}: {e}")

        return executed

    def get_interventions(self, entity_id: str) -> List[RetentionIntervention]:
        with self._interventions_lock:
            found = [i for i in self._interventions.values() if i.entity_id == entity_id]
        return sorted(found, key=lambda i: i.created_at)

    def record_intervention_outcome(self, intervention_id: str, effectiveness: float) -> RetentionIntervention:
        """Mark an intervention completed with a 0-100 effectiveness score."""
        with self._interventions_lock:
            intervention = self._interventions.get(intervention_id)
            if intervention is None:
                raise NotFound("intervention", intervention_id)
            intervention.effectiveness_score = clamp(effectiveness)
            intervention.status = "completed"
        return intervention

    # ===================================
    # COMPETITIVE THREATS
    # ===================================

    def respond_to_competitive_threats(self, entity_id: str) -> CompetitiveResponse:
        """Dispatch a competitive response covering every researched competitor."""
        assessment = self.state.get(entity_id)
        intel = self.store.get_competitive_intelligence(entity_id)

        if assessment is None or intel is None:
            return CompetitiveResponse(0, 0, 100.0, ())

        competitors = tuple(intel.competitors_researched)
        advantages = tuple(intel.competitive_advantage_areas) or DEFAULT_ADVANTAGES
        responses = 0

        if competitors:
            outcome = self.dispatcher.trigger(entity_id, ActionKind.COMPETITIVE_RESPONSE, {
                "competitors": list(competitors),
                "threat_level": assessment.competitive_threats.threat_level,
                "advantages": list(advantages),
            })
            if outcome == DispatchOutcome.SENT:
                responses = len(competitors)

        mitigation = clamp(100 - len(competitors) * 10 + responses * 15)
        logger.info(
            f"Competitive threat response for {entity_id}: {len(competitors)} threats, "
            f"{responses} responses, {mitigation:.0f}% mitigation"
        )
        return CompetitiveResponse(
            threats_detected=len(competitors),
            responses_executed=responses,
            mitigation_score=mitigation,
            advantages_reinforced=advantages if responses else (),
        )

    def monitor_competitive_threats(self) -> int:
        """Respond for every assessed customer in an active evaluation."""
        responded = 0
        for assessment in self.state.values():
            if not assessment.competitive_threats.active_evaluation:
                continue
            try:
                result = self.respond_to_competitive_threats(assessment.entity_id)
                if result.responses_executed:
                    responded += 1
            except Exception as e:
                logger.error(f"Error responding to threats for {assessment.entity_id}: {e}")
        logger.info(f"Competitive monitoring: responded for {responded} customers")
        return responded

    # ===================================
    # OPTIMIZATION
    # ===================================

    def optimize_churn_prevention(self) -> OptimizationReport:
        """
        Review completed interventions: count the effective ones and flag
        intervention strategies that keep failing.
        """
        rules = self.settings.scheduler
        with self._interventions_lock:
            scored = [i for i in self._interventions.values() if i.effectiveness_score is not None]

        successful = [i for i in scored if i.effectiveness_score > rules.effective_above]
        deprecated = []
        for intervention in scored:
            if intervention.effectiveness_score < rules.ineffective_below and intervention.strategy not in deprecated:
                deprecated.append(intervention.strategy)

        logger.info(
            f"Churn prevention optimization: {len(scored)} evaluated, {len(successful)} effective, "
            f"deprecated {deprecated or 'none'}"
        )
        return OptimizationReport(
            evaluated=len(scored),
            successful=len(successful),
            deprecated_strategies=tuple(deprecated),
        )
