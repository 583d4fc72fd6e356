"""Integration tests for the command line entry points.

Tests the complete workflow from raw JSON records through the CLI to the
exported cohort reports.
"""

import csv
import json

import pytest

from revenue_cohorts.cli import analyze_cohorts_cli, generate_demo_data_cli


@pytest.fixture(autouse=True)
def run_in_tmp_path(tmp_path, monkeypatch):
    """Run each command from tmp_path so output paths resolve inside it."""
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def transactions_json(tmp_path):
    """Transaction history for two quarterly cohorts."""
    transactions = [
        # A: acquired Q1, expands in April
        {"customer_id": "A", "effective_date": "2023-01-01", "revenue_amount": 1000, "kind": "new"},
        {"customer_id": "A", "effective_date": "2023-04-01", "revenue_amount": 1500, "kind": "expansion"},
        # B: acquired Q1, churns in June
        {"customer_id": "B", "effective_date": "2023-02-10", "revenue_amount": 500, "kind": "new"},
        {"customer_id": "B", "effective_date": "2023-06-01", "revenue_amount": 0, "kind": "churn"},
        # C: acquired Q2
        {"customer_id": "C", "effective_date": "2023-05-20", "revenue_amount": "2,000", "kind": "new"},
    ]
    path = tmp_path / "transactions.json"
    path.write_text(json.dumps(transactions), encoding="utf-8")
    return path


@pytest.fixture
def snapshots_json(tmp_path):
    snapshots = [
        {"customer_id": "CUST-001", "close_date": "2023-01-15", "revenue_amount": "12000"},
        {"customer_id": "CUST-002", "close_date": "2023-04-28", "revenue_amount": "8500"},
    ]
    path = tmp_path / "snapshots.json"
    path.write_text(json.dumps(snapshots), encoding="utf-8")
    return path


class TestAnalyzeCohortsCLI:
    """Test the analyze command."""

    def test_json_to_stdout(self, transactions_json, capsys):
        exit_code = analyze_cohorts_cli([str(transactions_json)])

        assert exit_code == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["granularity"] == "quarter"
        assert [c["label"] for c in payload["cohorts"]] == ["Q1 2023", "Q2 2023"]
        q1 = payload["cohorts"][0]
        assert q1["initial_revenue"] == "1500"
        assert q1["retention_by_month"]["3"] == "2000"
        assert q1["retention_by_month"]["5"] == "1500"

    def test_csv_export_with_adjustments(self, transactions_json, tmp_path):
        output = tmp_path / "out" / "report.csv"
        exit_code = analyze_cohorts_cli(
            [
                str(transactions_json),
                "--granularity",
                "month",
                "--exclude-expansion",
                "--exclude-churned",
                "--output",
                str(output),
            ]
        )

        assert exit_code == 0
        with output.open(newline="", encoding="utf-8") as fh:
            rows = list(csv.DictReader(fh))
        assert [row["Cohort"] for row in rows] == ["2023-01", "2023-02", "2023-05"]
        assert rows[0]["Month 3 Adjusted NRR (%)"] == "100.0"
        assert rows[0]["Month 3 Revenue ($)"] == "1000.00"

    def test_json_file_output(self, transactions_json, tmp_path):
        output = tmp_path / "report.json"
        assert analyze_cohorts_cli([str(transactions_json), "--output", str(output)]) == 0
        payload = json.loads(output.read_text(encoding="utf-8"))
        assert payload["metadata"]["source"] == str(transactions_json)

    def test_snapshots(self, snapshots_json, capsys):
        exit_code = analyze_cohorts_cli([str(snapshots_json), "--snapshots", "--granularity", "year"])

        assert exit_code == 0
        payload = json.loads(capsys.readouterr().out)
        assert len(payload["cohorts"]) == 1
        assert payload["cohorts"][0]["initial_revenue"] == "20500"

    def test_empty_input_returns_error_code(self, tmp_path):
        path = tmp_path / "empty.json"
        path.write_text("[]", encoding="utf-8")
        assert analyze_cohorts_cli([str(path)]) == 1

    def test_rejects_non_list_payload(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text('{"customer_id": "A"}', encoding="utf-8")
        with pytest.raises(ValueError, match="Expected a list"):
            analyze_cohorts_cli([str(path)])

    def test_invalid_granularity_is_rejected_by_parser(self, transactions_json):
        with pytest.raises(SystemExit):
            analyze_cohorts_cli([str(transactions_json), "--granularity", "week"])

    def test_relative_output_resolves_against_cwd(self, transactions_json, tmp_path):
        assert analyze_cohorts_cli([str(transactions_json), "--output", "report.csv"]) == 0
        assert (tmp_path / "report.csv").exists()

    def test_rejects_output_outside_cwd(self, transactions_json, tmp_path, monkeypatch):
        workdir = tmp_path / "work"
        workdir.mkdir()
        monkeypatch.chdir(workdir)

        with pytest.raises(ValueError, match="must reside within the current working directory"):
            analyze_cohorts_cli([str(transactions_json), "--output", str(tmp_path / "report.csv")])
        assert not (tmp_path / "report.csv").exists()


class TestGenerateDemoDataCLI:
    def test_generated_data_feeds_analysis(self, tmp_path, capsys):
        data_path = tmp_path / "demo.json"
        assert generate_demo_data_cli([str(data_path), "--customers", "25", "--seed", "7"]) == 0

        records = json.loads(data_path.read_text(encoding="utf-8"))
        assert len({r["customer_id"] for r in records}) == 25

        assert analyze_cohorts_cli([str(data_path), "--granularity", "month"]) == 0
        payload = json.loads(capsys.readouterr().out)
        members = sum(c["customer_count"] for c in payload["cohorts"])
        assert members == 25

    def test_rejects_output_outside_cwd(self, tmp_path, monkeypatch):
        workdir = tmp_path / "work"
        workdir.mkdir()
        monkeypatch.chdir(workdir)

        with pytest.raises(ValueError, match="must reside within the current working directory"):
            generate_demo_data_cli([str(tmp_path / "demo.json"), "--customers", "5"])
