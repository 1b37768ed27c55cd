#!/usr/bin/env python3
"""Standalone scoring script for GitHub Actions."""

import json
import os
import sys


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    try:
        from database.profile_store import InMemoryProfileStore, SupabaseProfileStore
        from orchestration import ChurnEngine, QualificationEngine
        from orchestration.queues import drain_until_empty
        from orchestration.reports import risk_frame, score_frame, status_counts

        data_file = argv[0] if argv else os.environ.get("GTM_DATA_FILE", "")
        store = InMemoryProfileStore.from_json(data_file) if data_file else SupabaseProfileStore()

        qualification = QualificationEngine(store)
        churn = ChurnEngine(store)

        for entity_id in store.list_prospect_ids():
            qualification.enqueue_for_requalification(entity_id, reason="scheduled run")
        drain_until_empty(qualification.queue, qualification.process_queue)
        churn.run_risk_scan()
        drain_until_empty(churn.risk_queue, churn.process_risk_queue)

        scores = score_frame(qualification.all_scores())
        risks = risk_frame(churn.all_assessments())
        statuses = status_counts(scores, "status")
        levels = status_counts(risks, "risk_level")

        priority = statuses.get("priority", 0) + statuses.get("high", 0)
        at_risk = len(churn.high_risk_customers())

        print(f"Total scored: {len(scores)}")
        print(", ".join(f"{k.title()}: {v}" for k, v in sorted(statuses.items())) or "No prospects scored")
        print(f"Total assessed: {len(risks)}, high risk or worse: {at_risk}")

        # Write results to file
        with open("scoring_results.json", "w") as f:
            json.dump({
                "total_scored": len(scores),
                "qualification": statuses,
                "total_assessed": len(risks),
                "churn_risk": levels,
                "high_priority_prospects": priority,
                "high_risk_customers": at_risk,
            }, f, indent=2)

        # Write to GitHub output file
        github_output = os.environ.get("GITHUB_OUTPUT", "")
        if github_output:
            with open(github_output, "a") as f:
                f.write(f"high_priority_prospects={priority}\n")
                f.write(f"high_risk_customers={at_risk}\n")
                f.write(f"total_scored={len(scores)}\n")

        return 0

    except Exception as e:
        print(f"Error: {e}")
        import traceback
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
