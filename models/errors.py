"""
🚨 ERROR TAXONOMY
=================
Failures the scoring core can raise or log.

- NotFound:        a required upstream record is missing; aborts one entity
- PartialData:     analyzer input is incomplete; converted to lower confidence
- DispatchFailure: a downstream action call failed; logged, never retried here
"""

from typing import Iterable, Optional


class GTMError(Exception):
    """Base class for scoring engine errors."""


class NotFound(GTMError):
    """A required record (profile, health snapshot, assessment) is missing."""

    def __init__(self, record: str, entity_id: str):
        self.record = record
        self.entity_id = entity_id
        super().__init__(f"{record} not found for {entity_id}")


class PartialData(GTMError):
    """Analyzer input is missing fields it cannot score without."""

    def __init__(self, fields: Iterable[str]):
        self.fields = tuple(fields)
        super().__init__(f"missing fields: {', '.join(self.fields) or 'unknown'}")


class DispatchFailure(GTMError):
    """A downstream action trigger raised."""

    def __init__(self, entity_id: str, action_kind: str, cause: Optional[BaseException] = None):
        self.entity_id = entity_id
        self.action_kind = action_kind
        self.cause = cause
        super().__init__(f"dispatch of {action_kind} for {entity_id} failed: {cause}")
