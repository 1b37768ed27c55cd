"""
📥 DEDUPE QUEUES
================
FIFO work queues that hold each entity at most once.

Enqueueing an entity that is already waiting is a no-op, so callers can
enqueue freely from webhooks, scans and retries without piling up work.
"""

import threading
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, List, Optional

from loguru import logger


@dataclass(frozen=True)
class QueueEntry:
    entity_id: str
    reason: str
    enqueued_at: datetime


class DedupQueue:
    """
    Thread-safe FIFO keyed by entity id.

    Usage:
        queue = DedupQueue("requalification")
        queue.enqueue("acme", reason="profile updated")
        for entry in queue.drain(5):
            ...
    """

    def __init__(self, name: str, clock: Callable[[], datetime] = datetime.now):
        self.name = name
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: "OrderedDict[str, QueueEntry]" = OrderedDict()

    def enqueue(self, entity_id: str, reason: str = "") -> bool:
        """Add an entity. Returns False if it was already queued."""
        with self._lock:
            if entity_id in self._entries:
                return False
            self._entries[entity_id] = QueueEntry(entity_id, reason, self._clock())
        logger.debug(f"Queued {entity_id} on {self.name} ({reason or 'no reason'})")
        return True

    def drain(self, limit: Optional[int] = None) -> List[QueueEntry]:
        """Remove and return up to `limit` entries, oldest first."""
        if limit is not None and limit <= 0:
            raise ValueError(f"drain limit must be positive, got {limit}")
        with self._lock:
            count = len(self._entries) if limit is None else min(limit, len(self._entries))
            return [self._entries.popitem(last=False)[1] for _ in range(count)]

    def peek(self) -> List[QueueEntry]:
        with self._lock:
            return list(self._entries.values())

    def __contains__(self, entity_id: str) -> bool:
        with self._lock:
            return entity_id in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def drain_until_empty(queue: DedupQueue, process_batch: Callable[[], Dict[str, int]]) -> Dict[str, int]:
    """
    Call `process_batch` until `queue` is empty. For one-shot runs only;
    scheduled jobs process a single batch per tick.

    Stops early if a batch takes nothing off the queue.
    """
    totals = {"processed": 0, "failed": 0}
    while len(queue):
        stats = process_batch()
        if not stats["processed"] and not stats["failed"]:
            logger.warning(f"{queue.name} batch made no progress, {len(queue)} entries left")
            break
        totals["processed"] += stats["processed"]
        totals["failed"] += stats["failed"]
    return totals
