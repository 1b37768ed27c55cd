"""
Tests for the maintenance scheduler.
"""

from unittest.mock import MagicMock

import pytest
from apscheduler.schedulers.background import BackgroundScheduler

from orchestration.scheduler import MaintenanceScheduler

JOB_NAMES = [
    "requalification",
    "pattern_refresh",
    "risk_scan",
    "risk_checks",
    "interventions",
    "competitive_monitor",
    "prevention_optimizer",
]


@pytest.fixture
def maintenance(qualification_engine, churn_engine, settings):
    return MaintenanceScheduler(qualification_engine, churn_engine, settings=settings, scheduler=MagicMock())


class TestRegistration:

    def test_every_job_is_registered_skip_if_busy(self, maintenance):
        maintenance.register_jobs()

        calls = maintenance.scheduler.add_job.call_args_list
        assert [c.kwargs["id"] for c in calls] == JOB_NAMES
        for c in calls:
            assert c.args[1] == "interval"
            assert c.kwargs["max_instances"] == 1
            assert c.kwargs["coalesce"] is True
            assert c.kwargs["replace_existing"] is True
            assert "next_run_time" not in c.kwargs

    def test_intervals_come_from_settings(self, maintenance):
        maintenance.register_jobs()

        seconds = {c.kwargs["id"]: c.kwargs["seconds"] for c in maintenance.scheduler.add_job.call_args_list}
        assert seconds["requalification"] == 120
        assert seconds["risk_scan"] == 4 * 60 * 60
        assert seconds["risk_checks"] == 5 * 60
        assert seconds["pattern_refresh"] == 24 * 60 * 60

    def test_run_immediately_sets_next_run_time(self, maintenance):
        maintenance.register_jobs(run_immediately=True)
        assert all("next_run_time" in c.kwargs for c in maintenance.scheduler.add_job.call_args_list)

    def test_real_scheduler_holds_pending_jobs(self, qualification_engine, churn_engine, settings):
        scheduler = BackgroundScheduler(timezone="UTC")
        maintenance = MaintenanceScheduler(qualification_engine, churn_engine, settings=settings, scheduler=scheduler)

        maintenance.register_jobs()

        assert {job.id for job in scheduler.get_jobs()} == set(JOB_NAMES)
        maintenance.shutdown()


class TestRunOnce:

    def test_runs_all_jobs(self, maintenance, churn_engine):
        results = maintenance.run_once()

        assert results == {name: True for name in JOB_NAMES}
        assert len(churn_engine.all_assessments()) == 3

    def test_busy_job_is_skipped(self, maintenance):
        maintenance._guards["risk_scan"].acquire()
        try:
            assert maintenance.run_once("risk_scan") == {"risk_scan": False}
        finally:
            maintenance._guards["risk_scan"].release()

    def test_failing_job_does_not_raise(self, maintenance, churn_engine, monkeypatch):
        def boom(*args, **kwargs):
            raise RuntimeError("store offline")

        monkeypatch.setattr(churn_engine, "optimize_churn_prevention", boom)
        maintenance.jobs = maintenance._build_jobs()

        assert maintenance.run_once("prevention_optimizer") == {"prevention_optimizer": True}

    def test_unknown_job(self, maintenance):
        with pytest.raises(KeyError):
            maintenance.run_once("vacuum")

    def test_risk_scan_tick_only_queues(self, maintenance, churn_engine):
        maintenance.run_once("risk_scan")

        assert len(churn_engine.risk_queue) == 3
        assert churn_engine.all_assessments() == []

        maintenance.run_once("risk_checks")

        assert len(churn_engine.risk_queue) == 0
        assert len(churn_engine.all_assessments()) == 3
