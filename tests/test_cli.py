"""Tests for the pb-portal CLI."""

import json

import pytest

from pb_portal import cli
from pb_portal.scorers.criteria_registry import DEFAULT_CRITERIA
from pb_portal.utils.logger import reset_logger

APPLICATION_DOCS = [
    {
        "id": "app_PBBLN001",
        "ref": "PBBLN001",
        "area": "Blaenavon",
        "projectTitle": "Community Garden",
        "amountRequested": 4000,
        "status": "Funded",
        "priority": "Health & Wellbeing",
        "formData": {"budgetBreakdown": []},
    },
    {
        "id": "app_PBBLN002",
        "ref": "PBBLN002",
        "area": "Blaenavon",
        "projectTitle": "Heritage Trail",
        "amountRequested": 30000,
        "status": "Submitted-Stage2",
        "priority": "Heritage & Tourism",
    },
]


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    """Keep the CLI from reconfiguring the root logger during tests."""
    monkeypatch.setattr(cli, "configure_global_logging", lambda log_level="INFO": None)
    reset_logger()
    yield
    reset_logger()


@pytest.fixture
def applications_file(tmp_path):
    path = tmp_path / "applications.json"
    path.write_text(json.dumps(APPLICATION_DOCS))
    return path


class TestScoreCommand:
    def test_full_marks(self, capsys):
        breakdown = json.dumps({cid: 3 for cid, _, _ in DEFAULT_CRITERIA})
        assert cli.main(["score", breakdown]) == 0
        out = capsys.readouterr().out
        assert "Weighted total: 100%" in out
        assert "meets threshold" in out

    def test_partial(self, capsys):
        assert cli.main(["score", '{"overview_objectives": 3}']) == 0
        assert "Weighted total: 15%" in capsys.readouterr().out

    def test_nan_score_counts_as_zero(self, capsys):
        breakdown = '{"overview_objectives": "nan", "local_priorities": 3}'
        assert cli.main(["score", breakdown]) == 0
        assert "Weighted total: 15%" in capsys.readouterr().out

    def test_breakdown_file(self, tmp_path, capsys):
        path = tmp_path / "breakdown.json"
        path.write_text(json.dumps({"local_priorities": 100}))
        assert cli.main(["score", str(path), "--scale", "slider"]) == 0
        assert "Weighted total: 15%" in capsys.readouterr().out

    def test_strict_rejects(self, capsys):
        assert cli.main(["score", '{"overview_objectives": 5}', "--strict"]) == 2
        assert "Error" in capsys.readouterr().out

    def test_not_an_object(self, capsys):
        assert cli.main(["score", "[1, 2]"]) == 2

    def test_bad_json(self, capsys):
        assert cli.main(["score", "{not json"]) == 2


class TestTierCommand:
    def test_small_reach(self, capsys):
        assert cli.main(["tier", "50", "--votes", "100"]) == 0
        out = capsys.readouterr().out
        assert "Small (0-50)" in out
        assert "×1.5" in out
        assert "100 -> 150" in out

    def test_large_reach(self, capsys):
        assert cli.main(["tier", "500"]) == 0
        assert "Large (201+)" in capsys.readouterr().out

    def test_disabled(self, capsys):
        assert cli.main(["tier", "10", "--votes", "7", "--disabled"]) == 0
        out = capsys.readouterr().out
        assert "×1.0" in out
        assert "7 -> 7" in out

    def test_settings_file(self, tmp_path, capsys):
        path = tmp_path / "coefficients.yaml"
        path.write_text(
            "tiers:\n  small: {maxReach: 10, factor: 2.0}\n  medium: {maxReach: 20, factor: 1.5}\n  large: {factor: 1}\n"
        )
        assert cli.main(["tier", "15", "--settings", str(path)]) == 0
        assert "Medium (11-20)" in capsys.readouterr().out

    def test_negative_reach(self, capsys):
        assert cli.main(["tier", "-5"]) == 2


class TestFinanceCommand:
    def test_tables(self, applications_file, capsys):
        assert cli.main(["finance", str(applications_file)]) == 0
        out = capsys.readouterr().out
        assert "Spend by Area" in out
        assert "Spend by Priority" in out
        assert "£4,000.00" in out

    def test_simulate_over_budget(self, applications_file, capsys):
        assert cli.main(["finance", str(applications_file), "--simulate", "app_PBBLN002"]) == 0
        out = capsys.readouterr().out
        assert "Funding Simulation" in out
        assert "Over budget!" in out

    def test_simulate_unknown(self, applications_file, capsys):
        assert cli.main(["finance", str(applications_file), "--simulate", "app_missing"]) == 1

    def test_output_report(self, applications_file, tmp_path):
        output = tmp_path / "reports" / "finance.json"
        assert cli.main(["finance", str(applications_file), "--area", "Blaenavon", "--output", str(output)]) == 0
        report = json.loads(output.read_text())
        assert [row["area"] for row in report["areas"]] == ["Blaenavon"]
        assert report["areas"][0]["projectCount"] == 1
        assert report["areas"][0]["pendingRequests"] == 30000
        assert report["spendByPriority"]["Health & Wellbeing"] == 4000
        assert report["totalSpent"] == 4000

    def test_stored_financials(self, applications_file, tmp_path):
        financials = tmp_path / "round.json"
        financials.write_text(
            json.dumps({"id": "round_2026", "budgetByArea": {"Blaenavon": 10000}, "spendByArea": {"Blaenavon": 2500}})
        )
        output = tmp_path / "finance.json"
        assert cli.main(["finance", str(applications_file), "--financials", str(financials), "--output", str(output)]) == 0
        report = json.loads(output.read_text())
        assert report["totalFunding"] == 10000
        assert report["totalSpent"] == 2500
        assert report["remaining"] == 7500


class TestPostcodeCommand:
    def test_eligible(self, capsys):
        assert cli.main(["postcode", "np4 9aa"]) == 0
        out = capsys.readouterr().out
        assert "NP49AA" in out
        assert "Blaenavon" in out

    def test_not_eligible(self, capsys):
        assert cli.main(["postcode", "CF10 1AA"]) == 1
        assert "not in a participating area" in capsys.readouterr().out
