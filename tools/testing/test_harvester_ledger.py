"""
Run ledger and DuckDB report sink tests.

Run: pytest tools/testing/test_harvester_ledger.py
"""

import sys
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import Mock

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from act_harvester.errors import ReportSinkUnavailable
from act_harvester.ledger import LOG_SECTION_HEADER, REPORT_HEADER, RunLedger
from act_harvester.report_sink import DuckDBReportSink, report_table_name

from harvester_fakes import FixedClock

RUN_AT = datetime(2026, 10, 19, 6, 30, 5, tzinfo=timezone.utc)


def test_log_lines_are_timestamped_in_order():
    ledger = RunLedger(clock=FixedClock(RUN_AT))
    ledger.log("first")
    ledger.warning("second")

    assert ledger.log_lines == ["06:30:05 - first", "06:30:05 - second"]


def test_table_rows_layout():
    ledger = RunLedger(clock=FixedClock(RUN_AT))
    ledger.record_report_row("Brand-FR", "chaussures femme", '[escarpins], "escarpins"')
    ledger.log("hello")

    rows = ledger.table_rows()

    assert rows[0] == REPORT_HEADER
    assert rows[1] == ["Brand-FR", "chaussures femme", '[escarpins], "escarpins"']
    assert rows[2] == []
    assert rows[3] == [LOG_SECTION_HEADER]
    assert rows[4] == ["06:30:05 - hello"]


def test_flush_without_sink_warns_and_returns():
    ledger = RunLedger()
    assert ledger.flush(None, "Acme") is None
    assert any("not configured" in line for line in ledger.log_lines)


def test_flush_sink_failure_does_not_raise():
    sink = Mock()
    sink.write_report.side_effect = ReportSinkUnavailable("disk full")
    ledger = RunLedger()

    assert ledger.flush(sink, "Acme") is None
    assert "disk full" in ledger.log_lines[-1]


def test_flush_only_once():
    ledger = RunLedger()
    ledger.flush(None, "Acme")
    with pytest.raises(RuntimeError):
        ledger.flush(None, "Acme")


def test_table_name_from_account_and_run_time():
    assert report_table_name("Acme Ltd", RUN_AT) == "Acme Ltd 2026-10-19 06:30"


def test_duckdb_sink_writes_one_table_per_run(tmp_path):
    sink = DuckDBReportSink(str(tmp_path / "reports.duckdb"))
    ledger = RunLedger(clock=FixedClock(RUN_AT))
    ledger.record_report_row("Brand-Summer", "Shoes", '[red shoes], "red shoes"')
    ledger.log("Processing Campaign: Brand-Summer")

    table = ledger.flush(sink, "Acme Ltd")

    assert table == "Acme Ltd 2026-10-19 06:30"
    rows = sink.read_report(table)
    assert [r["row_no"] for r in rows] == [1, 2, 3, 4, 5]
    assert (rows[0]["campaign_name"], rows[0]["ad_group_name"], rows[0]["keywords_added"]) == tuple(REPORT_HEADER)
    assert rows[1]["keywords_added"] == '[red shoes], "red shoes"'
    assert rows[2]["campaign_name"] is None
    assert rows[3]["campaign_name"] == LOG_SECTION_HEADER
    assert rows[4]["campaign_name"] == "06:30:05 - Processing Campaign: Brand-Summer"
    assert ledger.log_lines[-1].endswith(f"Report successfully written to table: {table}")


def test_duckdb_sink_same_minute_gets_suffix(tmp_path):
    sink = DuckDBReportSink(str(tmp_path / "reports.duckdb"))
    first = sink.write_report("Acme", RUN_AT, [REPORT_HEADER])
    second = sink.write_report("Acme", RUN_AT, [REPORT_HEADER])
    assert first == "Acme 2026-10-19 06:30"
    assert second == "Acme 2026-10-19 06:30 (2)"


def test_duckdb_sink_unwritable_path(tmp_path):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("x")
    sink = DuckDBReportSink(str(blocker / "reports.duckdb"))
    with pytest.raises(ReportSinkUnavailable):
        sink.write_report("Acme", RUN_AT, [REPORT_HEADER])
