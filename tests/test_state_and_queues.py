"""
Tests for the state store, dedupe queues and the idempotent dispatcher.
"""

from datetime import timedelta

import pytest

from conftest import NOW, FixedClock, RecordingDispatcher
from database.state_store import StateStore
from orchestration.dispatcher import ActionKind, DispatchOutcome, IdempotentDispatcher
from orchestration.queues import DedupQueue, drain_until_empty


class TestStateStore:

    def make(self):
        return StateStore("qualification", lambda value: value["status"])

    def test_first_write_records_transition(self):
        store = self.make()
        token = store.begin("acme")

        update = store.replace("acme", {"status": "high"}, token, at=NOW)

        assert update.accepted
        assert update.previous is None
        assert update.transition.previous is None
        assert update.transition.current == "high"
        assert store.get("acme") == {"status": "high"}

    def test_same_category_records_no_transition(self):
        store = self.make()
        store.replace("acme", {"status": "high"}, store.begin("acme"), at=NOW)

        update = store.replace("acme", {"status": "high", "v": 2}, store.begin("acme"), at=NOW)

        assert update.accepted
        assert update.transition is None
        assert len(store.history("acme")) == 1

    def test_category_change_appends_history(self):
        store = self.make()
        store.replace("acme", {"status": "low"}, store.begin("acme"), at=NOW)
        store.replace("acme", {"status": "high"}, store.begin("acme"), at=NOW)

        history = store.history("acme")

        assert [(t.previous, t.current) for t in history] == [(None, "low"), ("low", "high")]

    def test_stale_evaluation_is_discarded(self):
        store = self.make()
        slow = store.begin("acme")
        fast = store.begin("acme")

        assert store.replace("acme", {"status": "high"}, fast, at=NOW).accepted
        assert not store.replace("acme", {"status": "low"}, slow, at=NOW).accepted
        assert store.get("acme") == {"status": "high"}

    def test_unknown_entity_is_none(self):
        assert self.make().get("nobody") is None


class TestDedupQueue:

    def test_enqueue_is_idempotent(self):
        queue = DedupQueue("requalification", clock=FixedClock())

        assert queue.enqueue("acme", "first") is True
        assert queue.enqueue("acme", "again") is False
        assert len(queue) == 1
        assert queue.peek()[0].reason == "first"

    def test_drain_is_fifo_and_bounded(self):
        queue = DedupQueue("requalification")
        for entity_id in ["a", "b", "c", "d"]:
            queue.enqueue(entity_id)

        first = queue.drain(3)

        assert [e.entity_id for e in first] == ["a", "b", "c"]
        assert [e.entity_id for e in queue.drain(3)] == ["d"]
        assert queue.drain(3) == []

    @pytest.mark.parametrize("limit", [0, -1])
    def test_non_positive_drain_limit_is_rejected(self, limit):
        queue = DedupQueue("risk_check")
        queue.enqueue("acme")

        with pytest.raises(ValueError):
            queue.drain(limit)
        assert len(queue) == 1

    def test_drain_until_empty_runs_batches(self):
        queue = DedupQueue("risk_check")
        for entity_id in ["a", "b", "c", "d", "e"]:
            queue.enqueue(entity_id)

        def process_two():
            return {"processed": len(queue.drain(2)), "failed": 0}

        assert drain_until_empty(queue, process_two) == {"processed": 5, "failed": 0}
        assert len(queue) == 0

    def test_drain_until_empty_stops_without_progress(self):
        queue = DedupQueue("risk_check")
        queue.enqueue("stuck")
        calls = []

        def process_nothing():
            calls.append(1)
            return {"processed": 0, "failed": 0}

        assert drain_until_empty(queue, process_nothing) == {"processed": 0, "failed": 0}
        assert len(calls) == 1
        assert len(queue) == 1

    def test_drained_entity_can_be_queued_again(self):
        queue = DedupQueue("requalification")
        queue.enqueue("acme")
        queue.drain()

        assert queue.enqueue("acme") is True
        assert "acme" in queue


class TestIdempotentDispatcher:

    def make(self):
        clock = FixedClock()
        downstream = RecordingDispatcher()
        return IdempotentDispatcher(downstream, window=timedelta(hours=24), clock=clock), downstream, clock

    def test_duplicate_within_window_is_dropped(self):
        dispatcher, downstream, _ = self.make()

        assert dispatcher.trigger("acme", ActionKind.CONVERSION, {}) == DispatchOutcome.SENT
        assert dispatcher.trigger("acme", ActionKind.CONVERSION, {}) == DispatchOutcome.DUPLICATE
        assert len(downstream.calls) == 1

    def test_different_kind_or_entity_is_not_duplicate(self):
        dispatcher, downstream, _ = self.make()

        dispatcher.trigger("acme", ActionKind.CONVERSION, {})
        dispatcher.trigger("acme", ActionKind.NURTURING, {})
        dispatcher.trigger("globex", ActionKind.CONVERSION, {})

        assert len(downstream.calls) == 3

    def test_sends_again_after_window(self):
        dispatcher, downstream, clock = self.make()
        dispatcher.trigger("acme", ActionKind.CONVERSION, {})

        clock.advance(hours=25)

        assert dispatcher.trigger("acme", ActionKind.CONVERSION, {}) == DispatchOutcome.SENT
        assert len(downstream.calls) == 2

    def test_failure_is_recorded_not_raised(self):
        dispatcher, downstream, _ = self.make()
        downstream.fail = True

        outcome = dispatcher.trigger("acme", ActionKind.INTERVENTION_IMMEDIATE, {})

        assert outcome == DispatchOutcome.FAILED
        assert dispatcher.failures[0].entity_id == "acme"
        assert dispatcher.failures[0].action_kind == "intervention_immediate"
        assert dispatcher.last_sent("acme", ActionKind.INTERVENTION_IMMEDIATE) is None

    def test_failed_action_can_be_triggered_later(self):
        dispatcher, downstream, _ = self.make()
        downstream.fail = True
        dispatcher.trigger("acme", ActionKind.CONVERSION, {})

        downstream.fail = False

        assert dispatcher.trigger("acme", ActionKind.CONVERSION, {}) == DispatchOutcome.SENT

    def test_expired_ledger_entries_are_pruned(self):
        dispatcher, downstream, clock = self.make()
        for entity_id in ["a", "b", "c"]:
            dispatcher.trigger(entity_id, ActionKind.CONVERSION, {})
        assert dispatcher.ledger_size() == 3

        clock.advance(hours=25)
        dispatcher.trigger("d", ActionKind.CONVERSION, {})

        assert dispatcher.ledger_size() == 1
        assert dispatcher.last_sent("a", ActionKind.CONVERSION) is None
        assert dispatcher.last_sent("d", ActionKind.CONVERSION) == NOW + timedelta(hours=25)
