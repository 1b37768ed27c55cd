"""
🎯 PROSPECT QUALIFICATION ENGINE
================================
Scores prospects with BANT, MEDDIC and domain fit, then decides whether
sales should engage.

HOW IT WORKS:
1. Loads the prospect's profile (and competitive intel, if any)
2. Runs the 11 qualification analyzers
3. Folds them into a weighted composite (see scoring_engine.py)
4. Classifies the composite and builds the proceed/tier/urgency decision
5. Replaces the stored result and, on a transition, triggers the
   conversion or nurturing workflow

Re-qualification is queue driven: callers enqueue ids, the scheduler drains
them in small batches.
"""

from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Protocol

from loguru import logger

from analyzers import QUALIFICATION_ANALYZERS, AnalysisContext
from config.settings import Settings, settings as default_settings
from database.profile_store import ProfileStore
from database.state_store import StateStore
from models.errors import NotFound
from models.profiles import EntityProfile
from models.results import QualificationStatus, ScoreResult, Urgency
from orchestration.decision_engine import (
    classify_qualification,
    decide_qualification,
    qualification_actions,
    qualification_reasoning,
    score_trend,
)
from orchestration.dispatcher import ActionKind, IdempotentDispatcher, LoggingDispatcher
from orchestration.queues import DedupQueue
from orchestration.scoring_engine import ScoringEngine


class ScoreModel(Protocol):
    """External model whose prediction is recorded next to the composite."""

    def predict(self, profile: EntityProfile) -> float: ...


class QualificationEngine:
    """
    Usage:
        engine = QualificationEngine(store)
        result = engine.qualify("acme")

        engine.enqueue_for_requalification("acme", reason="intent spike")
        engine.process_queue()
    """

    def __init__(
        self,
        store: ProfileStore,
        dispatcher: Optional[IdempotentDispatcher] = None,
        settings: Optional[Settings] = None,
        model: Optional[ScoreModel] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.settings = settings or default_settings
        self.store = store
        self.model = model
        self.clock = clock
        self.scoring = ScoringEngine(self.settings)
        self.dispatcher = dispatcher or IdempotentDispatcher(
            LoggingDispatcher(),
            window=timedelta(hours=self.settings.scheduler.dispatch_dedupe_hours),
            clock=clock,
        )
        self.state: StateStore[ScoreResult] = StateStore("qualification", lambda r: r.status.value)
        self.queue = DedupQueue("requalification", clock=clock)

    # ===================================
    # SCORING
    # ===================================

    def qualify(self, entity_id: str) -> ScoreResult:
        """
        Score one prospect and store the result.

        Raises:
            NotFound: the prospect has no profile
        """
        token = self.state.begin(entity_id)
        profile = self.store.get_profile(entity_id)
        intel = self.store.get_competitive_intelligence(entity_id)
        now = self.clock()

        context = AnalysisContext(
            entity_id=entity_id,
            now=now,
            profile=profile,
            intel=intel,
            settings=self.settings,
        )
        sub_scores = tuple(analyze(context) for analyze in QUALIFICATION_ANALYZERS)
        composite = self.scoring.qualification_composite(list(sub_scores))

        previous = self.state.get(entity_id)
        decision = decide_qualification(composite.value, sub_scores, self.settings)

        result = ScoreResult(
            entity_id=entity_id,
            composite=composite.value,
            status=classify_qualification(composite.value, self.settings.qualification_bands),
            sub_scores=sub_scores,
            confidence=composite.confidence,
            trend=score_trend(composite.value, previous.composite if previous else None),
            decision=decision,
            computed_at=now,
            bant_score=composite.breakdown["bant"],
            meddic_score=composite.breakdown["meddic"],
            domain_fit_score=composite.breakdown["domain_fit"],
            reasoning=qualification_reasoning(sub_scores, self.settings.decision),
            recommended_actions=qualification_actions(decision),
            model_score=self._predict(profile),
        )

        update = self.state.replace(entity_id, result, token, at=now)
        if update.accepted and self._is_transition(update.previous, result):
            self._execute_workflow(result)

        logger.info(
            f"🎯 {entity_id}: {result.composite:.1f}/100 ({result.status.value.upper()}) "
            f"proceed={decision.proceed} tier={decision.tier.value} urgency={decision.urgency.value}"
        )
        return result

    def _predict(self, profile: EntityProfile) -> Optional[float]:
        if self.model is None:
            return None
        try:
            return float(self.model.predict(profile))
        except Exception as e:
            logger.warning(f"Score model failed for {profile.entity_id}: {e}")
            return None

    @staticmethod
    def _is_transition(previous: Optional[ScoreResult], current: ScoreResult) -> bool:
        if previous is None:
            return True
        return previous.status != current.status or previous.decision != current.decision

    def _execute_workflow(self, result: ScoreResult):
        decision = result.decision
        if not decision.proceed:
            return

        payload = {
            "composite": result.composite,
            "status": result.status.value,
            "tier": decision.tier.value,
            "urgency": decision.urgency.value,
            "approach": decision.suggested_approach,
        }
        if decision.urgency == Urgency.IMMEDIATE:
            self.dispatcher.trigger(result.entity_id, ActionKind.CONVERSION, payload)
        else:
            track = "demo_drive" if result.status == QualificationStatus.PRIORITY else "education"
            self.dispatcher.trigger(result.entity_id, ActionKind.NURTURING, {**payload, "track": track})

    # ===================================
    # QUERIES
    # ===================================

    def get_score(self, entity_id: str) -> Optional[ScoreResult]:
        return self.state.get(entity_id)

    def all_scores(self) -> List[ScoreResult]:
        return sorted(self.state.values(), key=lambda r: r.composite, reverse=True)

    def high_priority_prospects(self) -> List[ScoreResult]:
        """Prospects in the HIGH or PRIORITY band, best first."""
        wanted = (QualificationStatus.HIGH, QualificationStatus.PRIORITY)
        return [r for r in self.all_scores() if r.status in wanted]

    # ===================================
    # QUEUE PROCESSING
    # ===================================

    def enqueue_for_requalification(self, entity_id: str, reason: str = "") -> bool:
        return self.queue.enqueue(entity_id, reason)

    def process_queue(self, batch_size: Optional[int] = None) -> Dict[str, int]:
        """
        Qualify the next batch of queued prospects.

        One prospect failing never stops the rest of the batch.
        """
        batch = self.queue.drain(batch_size or self.settings.scheduler.requalify_batch_size)
        stats = {"processed": 0, "failed": 0}

        for entry in batch:
            try:
                self.qualify(entry.entity_id)
                stats["processed"] += 1
            except NotFound as e:
                logger.warning(f"Skipping {entry.entity_id}: {e}")
                stats["failed"] += 1
            except Exception as e:
                logger.error(f"Error qualifying prospect {entry.entity_id}: {e}")
                stats["failed"] += 1

        if batch:
            logger.info(f"Requalification batch: {stats['processed']} scored, {stats['failed']} failed")
        return stats

    def refresh_patterns(self) -> int:
        """
        Daily pass: refresh the score model and re-queue prospects whose
        score is stale or missing.

        Returns:
            Number of prospects newly enqueued
        """
        refresh = getattr(self.model, "refresh", None)
        if callable(refresh):
            try:
                refresh()
                logger.info("🔄 Score model patterns refreshed")
            except Exception as e:
                logger.error(f"Score model refresh failed: {e}")

        cutoff = self.clock() - timedelta(hours=self.settings.scheduler.stale_score_hours)
        enqueued = 0

        for result in self.state.values():
            if result.computed_at < cutoff and self.enqueue_for_requalification(result.entity_id, "stale score"):
                enqueued += 1

        try:
            prospect_ids = self.store.list_prospect_ids()
        except Exception as e:
            logger.error(f"Could not list prospects: {e}")
            prospect_ids = []

        for entity_id in prospect_ids:
            if entity_id not in self.state and self.enqueue_for_requalification(entity_id, "never scored"):
                enqueued += 1

        logger.info(f"Pattern refresh queued {enqueued} prospects for requalification")
        return enqueued
