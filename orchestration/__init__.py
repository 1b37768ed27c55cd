"""
🤖 GTM ENGINE ORCHESTRATION
===========================
Scoring, decisions, queues, dispatch and scheduling.

Components:
- ScoringEngine: Folds factor sub-scores into composites
- QualificationEngine: Scores prospects and triggers sales workflows
- ChurnEngine: Assesses churn risk and runs retention interventions
- MaintenanceScheduler: Re-evaluates entities on recurring timers

Usage:
    from orchestration import QualificationEngine, ChurnEngine, MaintenanceScheduler

    qualification = QualificationEngine(store)
    churn = ChurnEngine(store)
    MaintenanceScheduler(qualification, churn).start()
"""

from .scoring_engine import ScoringEngine, Composite
from .dispatcher import ActionKind, DispatchOutcome, IdempotentDispatcher, LoggingDispatcher
from .queues import DedupQueue, QueueEntry
from .qualification_engine import QualificationEngine
from .churn_engine import ChurnEngine
from .scheduler import MaintenanceScheduler

__all__ = [
    "ScoringEngine",
    "Composite",
    "ActionKind",
    "DispatchOutcome",
    "IdempotentDispatcher",
    "LoggingDispatcher",
    "DedupQueue",
    "QueueEntry",
    "QualificationEngine",
    "ChurnEngine",
    "MaintenanceScheduler",
]
