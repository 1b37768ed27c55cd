"""
⏰ MAINTENANCE SCHEDULER
========================
Keeps scores and risk assessments fresh in the background.

JOBS (intervals from SchedulerSettings):
- requalification:       every 2 min, next 5 queued prospects
- pattern_refresh:       daily, refresh the model and re-queue stale scores
- risk_scan:             every 4 h, queue every customer for a risk check
- risk_checks:           every 5 min, next 100 queued customers
- interventions:         every 2 h, next 10 queued customers
- competitive_monitor:   every 6 h
- prevention_optimizer:  daily

Each job is skip-if-busy: APScheduler never runs two copies of a job, and a
per-job guard makes a manual run_once() skip a job the scheduler is
already running.
"""

import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from loguru import logger

from config.settings import Settings, settings as default_settings
from orchestration.churn_engine import ChurnEngine
from orchestration.qualification_engine import QualificationEngine


@dataclass(frozen=True)
class MaintenanceJob:
    name: str
    func: Callable[[], Any]
    interval_seconds: int


class MaintenanceScheduler:
    """
    Usage:
        scheduler = MaintenanceScheduler(qualification_engine, churn_engine)
        scheduler.start()
        ...
        scheduler.shutdown()
    """

    def __init__(
        self,
        qualification: QualificationEngine,
        churn: ChurnEngine,
        settings: Optional[Settings] = None,
        scheduler: Optional[BackgroundScheduler] = None,
    ):
        self.settings = settings or default_settings
        self.qualification = qualification
        self.churn = churn
        self.scheduler = scheduler or BackgroundScheduler(daemon=True, timezone="UTC")
        self.jobs = self._build_jobs()
        self._guards: Dict[str, threading.Lock] = {job.name: threading.Lock() for job in self.jobs}

    def _build_jobs(self) -> List[MaintenanceJob]:
        s = self.settings.scheduler
        return [
            MaintenanceJob("requalification", self.qualification.process_queue, s.requalify_interval_seconds),
            MaintenanceJob("pattern_refresh", self.qualification.refresh_patterns, s.pattern_refresh_interval_seconds),
            MaintenanceJob("risk_scan", self.churn.run_risk_scan, s.risk_scan_interval_seconds),
            MaintenanceJob("risk_checks", self.churn.process_risk_queue, s.risk_check_interval_seconds),
            MaintenanceJob("interventions", self.churn.process_intervention_queue, s.intervention_interval_seconds),
            MaintenanceJob("competitive_monitor", self.churn.monitor_competitive_threats, s.competitive_interval_seconds),
            MaintenanceJob("prevention_optimizer", self.churn.optimize_churn_prevention, s.optimization_interval_seconds),
        ]

    def register_jobs(self, run_immediately: bool = False):
        for job in self.jobs:
            extra = {"next_run_time": datetime.now(timezone.utc)} if run_immediately else {}
            self.scheduler.add_job(
                self._run_guarded,
                "interval",
                seconds=job.interval_seconds,
                args=(job,),
                id=job.name,
                replace_existing=True,
                max_instances=1,
                coalesce=True,
                misfire_grace_time=self.settings.scheduler.misfire_grace_seconds,
                **extra,
            )
            logger.info(f"  -> Scheduled {job.name}: every {job.interval_seconds}s")

    def _run_guarded(self, job: MaintenanceJob) -> bool:
        """Run a job unless it is already running. Returns False when skipped."""
        guard = self._guards[job.name]
        if not guard.acquire(blocking=False):
            logger.warning(f"⏭️ {job.name} still running, skipping this tick")
            return False
        try:
            logger.debug(f"▶️ {job.name} started")
            job.func()
        except Exception as e:
            logger.error(f"❌ Maintenance job {job.name} failed: {e}")
        finally:
            guard.release()
        return True

    def run_once(self, name: Optional[str] = None) -> Dict[str, bool]:
        """Run every job (or just `name`) synchronously, in schedule order."""
        selected = [job for job in self.jobs if name is None or job.name == name]
        if not selected:
            raise KeyError(f"Unknown maintenance job: {name}")
        return {job.name: self._run_guarded(job) for job in selected}

    def start(self, run_immediately: bool = True):
        logger.info("Starting maintenance scheduler...")
        self.register_jobs(run_immediately=run_immediately)
        self.scheduler.start()
        logger.info("✅ Scheduler is running in the background.")

    def shutdown(self, wait: bool = True):
        if self.scheduler.running:
            self.scheduler.shutdown(wait=wait)
            logger.info("🛑 Scheduler stopped")
