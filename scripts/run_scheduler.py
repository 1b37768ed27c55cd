#!/usr/bin/env python3
"""
🚀 RUN GTM SCHEDULER
====================
Long-running process that keeps qualification scores and churn risk
assessments fresh.

WHAT IT DOES:
1. Connects to the profile store (Supabase, or a local JSON file)
2. Queues every known prospect for qualification
3. Starts the maintenance jobs (requalification, risk scans,
   interventions, competitive monitoring, optimization)
4. Runs until interrupted, then shuts the scheduler down cleanly

USAGE:
    python scripts/run_scheduler.py

    # With options:
    python scripts/run_scheduler.py --data data/entities.json --once
"""

import argparse
import signal
import sys
import threading
from datetime import datetime
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from loguru import logger


def setup_logging(verbose: bool = False):
    """Configure logging."""
    logger.remove()

    level = "DEBUG" if verbose else "INFO"

    # Console output
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}",
        level=level
    )

    # File output
    log_dir = PROJECT_ROOT / "logs"
    log_dir.mkdir(exist_ok=True)

    log_file = log_dir / f"scheduler_run_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"
    logger.add(log_file, level="DEBUG")

    return log_file


def validate_environment(use_supabase: bool) -> bool:
    """Check that the configuration is usable."""
    from config.settings import settings

    validation = settings.validate()

    if use_supabase and not validation["database_configured"]:
        logger.error("❌ Supabase not configured!")
        logger.info("   Set SUPABASE_URL and SUPABASE_KEY in .env, or pass --data")
        return False

    if not validation["weights_valid"]:
        logger.error("❌ Qualification weights don't sum to 1.0!")
        return False

    if not validation["qualification_bands_ordered"] or not validation["risk_bands_ordered"]:
        logger.error("❌ Band edges must be strictly increasing!")
        return False

    logger.info("✅ Environment validated")
    return True


def build_store(data_file):
    from database.profile_store import InMemoryProfileStore, SupabaseProfileStore

    if data_file:
        return InMemoryProfileStore.from_json(data_file)
    return SupabaseProfileStore()


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Run the GTM qualification and churn maintenance scheduler"
    )
    parser.add_argument(
        "--data",
        help="Load profiles from a JSON file instead of Supabase"
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run every maintenance job once and exit"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )

    args = parser.parse_args()

    # Setup
    log_file = setup_logging(args.verbose)

    logger.info("🚀 GTM SCORING ENGINE")
    logger.info(f"📅 {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    logger.info(f"📝 Log file: {log_file}")

    if not validate_environment(use_supabase=not args.data):
        logger.error("Environment validation failed. Exiting.")
        sys.exit(1)

    from orchestration import ChurnEngine, MaintenanceScheduler, QualificationEngine
    from orchestration.queues import drain_until_empty

    store = build_store(args.data)
    qualification = QualificationEngine(store)
    churn = ChurnEngine(store)
    scheduler = MaintenanceScheduler(qualification, churn)

    # Seed the requalification queue; pattern_refresh picks up newcomers later
    for entity_id in store.list_prospect_ids():
        qualification.enqueue_for_requalification(entity_id, reason="startup")

    if args.once:
        results = scheduler.run_once()
        # Drain what the single pass left queued
        drain_until_empty(qualification.queue, qualification.process_queue)
        drain_until_empty(churn.risk_queue, churn.process_risk_queue)
        logger.info(f"✅ Single pass complete: {results}")
        return

    stop = threading.Event()
    signal.signal(signal.SIGINT, lambda *_: stop.set())
    signal.signal(signal.SIGTERM, lambda *_: stop.set())

    scheduler.start()
    try:
        stop.wait()
    finally:
        scheduler.shutdown()
        logger.info("\n✅ Scheduler exited cleanly")


if __name__ == "__main__":
    main()
