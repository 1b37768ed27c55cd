"""
🗃️ STATE STORE
==============
Current result per entity plus an append-only log of category transitions.

RULES:
- Results are replaced whole, never mutated in place
- Every evaluation takes a token from begin(); a write carrying a token
  older than the entity's latest one is dropped, so a slow evaluation can
  never overwrite a newer result
- A Transition is appended whenever the entity's category changes,
  including its first evaluation
"""

import itertools
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, Generic, List, Optional, TypeVar

from loguru import logger

T = TypeVar("T")


@dataclass(frozen=True)
class Transition:
    entity_id: str
    kind: str                 # qualification | churn
    previous: Optional[str]
    current: str
    at: datetime


@dataclass(frozen=True)
class Update(Generic[T]):
    """Outcome of StateStore.replace."""
    accepted: bool
    previous: Optional[T] = None
    transition: Optional[Transition] = None


class StateStore(Generic[T]):
    """
    Thread-safe current-result map.

    Usage:
        store = StateStore("qualification", lambda r: r.status.value)
        token = store.begin("acme")
        update = store.replace("acme", result, token, at=now)
    """

    def __init__(self, kind: str, category_of: Callable[[T], str]):
        self.kind = kind
        self._category_of = category_of
        self._lock = threading.Lock()
        self._current: Dict[str, T] = {}
        self._tokens: Dict[str, int] = {}
        self._counter = itertools.count(1)
        self._history: List[Transition] = []

    def begin(self, entity_id: str) -> int:
        """Start an evaluation; only the latest token per entity may write."""
        with self._lock:
            token = next(self._counter)
            self._tokens[entity_id] = token
            return token

    def replace(self, entity_id: str, value: T, token: int, at: datetime) -> Update:
        with self._lock:
            if self._tokens.get(entity_id) != token:
                logger.warning(f"Discarding stale {self.kind} result for {entity_id} (token {token})")
                return Update(accepted=False)

            previous = self._current.get(entity_id)
            self._current[entity_id] = value

            before = self._category_of(previous) if previous is not None else None
            after = self._category_of(value)
            transition = None
            if before != after:
                transition = Transition(entity_id, self.kind, before, after, at)
                self._history.append(transition)

        if transition:
            logger.info(f"🔀 {self.kind} {entity_id}: {before or 'new'} → {after}")
        return Update(accepted=True, previous=previous, transition=transition)

    def get(self, entity_id: str) -> Optional[T]:
        with self._lock:
            return self._current.get(entity_id)

    def values(self) -> List[T]:
        with self._lock:
            return list(self._current.values())

    def history(self, entity_id: Optional[str] = None) -> List[Transition]:
        with self._lock:
            if entity_id is None:
                return list(self._history)
            return [t for t in self._history if t.entity_id == entity_id]

    def __len__(self) -> int:
        with self._lock:
            return len(self._current)

    def __contains__(self, entity_id: str) -> bool:
        with self._lock:
            return entity_id in self._current
