"""
Tests for the one-shot scoring script.
"""

import json

from conftest import at_risk_health, cold_profile, enterprise_profile, healthy_health
from run_scoring import main


def test_scores_fixture_file_and_writes_outputs(tmp_path, monkeypatch):
    data = tmp_path / "entities.json"
    data.write_text(json.dumps({
        "profiles": [enterprise_profile().model_dump(mode="json"), cold_profile().model_dump(mode="json")],
        "health": [at_risk_health().model_dump(mode="json"), healthy_health().model_dump(mode="json")],
    }))
    github_output = tmp_path / "github_output"
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("GITHUB_OUTPUT", str(github_output))

    assert main([str(data)]) == 0

    results = json.loads((tmp_path / "scoring_results.json").read_text())
    assert results["total_scored"] == 2
    assert results["high_priority_prospects"] == 1
    assert results["high_risk_customers"] == 1
    assert "total_scored=2" in github_output.read_text().splitlines()


def test_unreadable_data_file_fails(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert main([str(tmp_path / "missing.json")]) == 1
