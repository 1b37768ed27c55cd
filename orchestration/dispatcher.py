"""
📤 ACTION DISPATCHER
====================
Hands decisions to downstream GTM workflows.

The downstream side only has to implement `trigger(entity_id, action_kind, payload)`.
The engines always go through IdempotentDispatcher, which:
- drops repeats of the same (entity, action kind) inside the dedupe window
- turns downstream exceptions into logged DispatchFailures instead of raising
- never retries; a later transition may trigger the action again
"""

import threading
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple

from loguru import logger

from models.errors import DispatchFailure
from models.results import InterventionUrgency


class ActionKind(str, Enum):
    CONVERSION = "conversion"
    NURTURING = "nurturing"
    INTERVENTION_IMMEDIATE = "intervention_immediate"
    INTERVENTION_WITHIN_24H = "intervention_within_24h"
    INTERVENTION_WITHIN_WEEK = "intervention_within_week"
    COMPETITIVE_RESPONSE = "competitive_response"

    @classmethod
    def for_intervention(cls, urgency: InterventionUrgency) -> "ActionKind":
        return cls(f"intervention_{urgency.value}")


class DispatchOutcome(str, Enum):
    SENT = "sent"
    DUPLICATE = "duplicate"
    FAILED = "failed"


class ActionDispatcher(Protocol):
    def trigger(self, entity_id: str, action_kind: ActionKind, payload: Dict[str, Any]) -> None: ...


class LoggingDispatcher:
    """Default downstream: records the action in the log and does nothing else."""

    EMOJI = {
        ActionKind.CONVERSION: "💰",
        ActionKind.NURTURING: "🌱",
        ActionKind.INTERVENTION_IMMEDIATE: "🚨",
        ActionKind.INTERVENTION_WITHIN_24H: "⏰",
        ActionKind.INTERVENTION_WITHIN_WEEK: "📅",
        ActionKind.COMPETITIVE_RESPONSE: "🛡️",
    }

    def trigger(self, entity_id: str, action_kind: ActionKind, payload: Dict[str, Any]) -> None:
        emoji = self.EMOJI.get(action_kind, "•")
        logger.info(f"{emoji} {action_kind.value} → {entity_id} {payload}")


class IdempotentDispatcher:
    """
    Dedupe gate in front of a downstream dispatcher.

    Usage:
        dispatcher = IdempotentDispatcher(LoggingDispatcher(), window=timedelta(hours=24))
        outcome = dispatcher.trigger("acme", ActionKind.CONVERSION, {"tier": "enterprise"})
    """

    def __init__(
        self,
        downstream: ActionDispatcher,
        window: timedelta = timedelta(hours=24),
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.downstream = downstream
        self.window = window
        self._clock = clock
        self._lock = threading.Lock()
        self._ledger: Dict[Tuple[str, ActionKind], datetime] = {}
        self.failures: List[DispatchFailure] = []

    def trigger(self, entity_id: str, action_kind: ActionKind, payload: Optional[Dict[str, Any]] = None) -> DispatchOutcome:
        key = (entity_id, action_kind)
        now = self._clock()

        with self._lock:
            last = self._ledger.get(key)
            if last is not None and now - last < self.window:
                logger.debug(f"Skipping duplicate {action_kind.value} for {entity_id} (sent {last:%Y-%m-%d %H:%M})")
                return DispatchOutcome.DUPLICATE
            self._prune(now)
            self._ledger[key] = now

        try:
            self.downstream.trigger(entity_id, action_kind, payload or {})
        except Exception as e:
            failure = DispatchFailure(entity_id, action_kind.value, e)
            logger.error(f"❌ {failure}")
            with self._lock:
                # Release the slot so a later transition can try again
                if self._ledger.get(key) == now:
                    del self._ledger[key]
                self.failures.append(failure)
            return DispatchOutcome.FAILED

        return DispatchOutcome.SENT

    def _prune(self, now: datetime):
        # Caller holds the lock
        expired = [key for key, sent_at in self._ledger.items() if now - sent_at >= self.window]
        for key in expired:
            del self._ledger[key]

    def ledger_size(self) -> int:
        """Number of (entity, action kind) pairs tracked for dedupe."""
        with self._lock:
            return len(self._ledger)

    def last_sent(self, entity_id: str, action_kind: ActionKind) -> Optional[datetime]:
        with self._lock:
            return self._ledger.get((entity_id, action_kind))
