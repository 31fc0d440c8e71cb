"""
End-to-end harvester runs against the in-memory platform and scripted oracle.

Run: pytest tools/testing/test_harvester_engine.py
"""

import sys
from datetime import date, datetime, timezone
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from act_harvester.config import parse_harvester_config
from act_harvester.engine import KeywordHarvester
from act_harvester.errors import OracleUnavailable
from act_harvester.models import Campaign, MatchType
from act_harvester.report_sink import DuckDBReportSink

from harvester_fakes import FakePlatform, FixedClock, ScriptedOracle

RUN_AT = datetime(2026, 10, 19, 6, 30, tzinfo=timezone.utc)
TODAY = date(2026, 10, 19)


def _config(**overrides):
    data = {"customer_id": "123-456-7890", "campaign_name_filter": "Brand", "lookback_days": 7}
    data.update(overrides)
    return parse_harvester_config(data)


def _platform():
    campaigns = [
        Campaign("1", "Brand-FR-Search"),
        Campaign("2", "Brand-FR-Shopping"),
        Campaign("3", "Brand-Search"),
        Campaign("4", "Generic-Search"),
    ]
    ad_groups = {
        "1": [("11", "Chaussures Homme"), ("12", "Chaussures Femme")],
        "2": [("21", "chaussures femme")],
        "3": [("31", "Shoes - Red"), ("32", "Shoes - Blue")],
        "4": [("41", "Anything")],
    }
    keywords = {"32": [("blue shoes", "EXACT")]}
    search_terms = {
        "1": ["escarpins noirs", "  ", "Escarpins Noirs"],
        "3": ["Blue Shoes", "xyz123"],
        "4": ["never looked at"],
    }
    return FakePlatform(campaigns, ad_groups, keywords=keywords, search_terms=search_terms, account_name="Acme")


def _oracle():
    return ScriptedOracle(
        languages={"escarpins noirs": "fr", "Blue Shoes": "en", "xyz123": OracleUnavailable("status 500")},
        matches={
            "escarpins noirs": "I'd recommend chaussures femme",
            "Blue Shoes": "shoes - blue",
        },
    )


def _harvester(platform, oracle, sink=None, **config):
    return KeywordHarvester(_config(**config), platform, oracle, report_sink=sink, clock=FixedClock(RUN_AT))


def test_full_run_creates_keywords_and_report_rows():
    platform = _platform()
    harvester = _harvester(platform, _oracle())

    summary = harvester.run(today=TODAY)

    assert summary.campaigns_processed == 3
    assert summary.terms_processed == 3  # blank and repeated terms skipped
    assert platform.date_ranges == ["20261012,20261019"] * 3

    created = [(r.ad_group_id, r.match_type, r.text) for r in platform.mutation_calls]
    # French term fans out to both "chaussures femme" ad groups
    assert ("12", MatchType.EXACT, "escarpins noirs") in created
    assert ("21", MatchType.PHRASE, "escarpins noirs") in created
    # Existing exact keyword: only phrase added
    assert ("32", MatchType.PHRASE, "Blue Shoes") in created
    assert ("32", MatchType.EXACT, "Blue Shoes") not in created
    # Unavailable classifier -> other -> unavailable matcher -> first candidate
    assert ("31", MatchType.EXACT, "xyz123") in created

    assert summary.keywords_created == 7
    assert summary.report_rows == 4
    assert summary.label_name == "Converted_20261019"
    assert summary.keywords_labeled == 7


def test_report_rows_and_log_lines():
    platform = _platform()
    platform.keywords["31"] = [("xyz123", "EXACT"), ("xyz123", "PHRASE")]
    sink_rows = []

    class ListSink:
        def write_report(self, account_name, run_started_at, rows):
            sink_rows.extend(rows)
            return f"{account_name} run"

    summary = _harvester(platform, _oracle(), sink=ListSink()).run(today=TODAY)

    assert summary.report_table == "Acme run"
    report = [r for r in sink_rows[1:sink_rows.index([])]]
    assert ["Brand-Search", "Shoes - Blue", '"Blue Shoes"'] in report
    # Both xyz123 variants pre-exist: no report row, but the term is in the log
    assert not any(r[1] == "Shoes - Red" for r in report)
    log = [r[0] for r in sink_rows[sink_rows.index(["Execution Log"]) + 1:]]
    assert any('"xyz123"' in line for line in log)
    assert any("No keywords added for \"xyz123\"" in line for line in log)


def test_second_run_makes_no_mutation_calls():
    platform = _platform()
    _harvester(platform, _oracle()).run(today=TODAY)
    first_calls = len(platform.mutation_calls)

    summary = _harvester(platform, _oracle()).run(today=TODAY)

    assert len(platform.mutation_calls) == first_calls
    assert summary.keywords_created == 0
    assert summary.report_rows == 0
    assert summary.label_name is None


def test_reused_harvester_rereads_account_state():
    platform = FakePlatform(
        [Campaign("3", "Brand-Search")],
        {"3": [("31", "Shoes")]},
        search_terms={"3": ["red shoes"]},
    )
    oracle = ScriptedOracle(matches={"red shoes": "shoes", "leather boots": "boots"})
    harvester = _harvester(platform, oracle)
    assert harvester.run(today=TODAY).keywords_created == 2

    # Keywords removed from the account, plus a new campaign and ad group
    platform.keywords["31"] = []
    platform.ad_groups["3"].append(("32", "Boots"))
    platform.campaigns.append(Campaign("5", "Brand-Outlet"))
    platform.ad_groups["5"] = [("51", "Boots")]
    platform.search_terms["5"] = ["leather boots"]

    summary = harvester.run(today=TODAY)

    assert summary.campaigns_processed == 2
    assert summary.keywords_created == 6
    second_run = [(r.ad_group_id, r.match_type) for r in platform.mutation_calls[2:]]
    assert second_run == [
        ("31", MatchType.EXACT),
        ("31", MatchType.PHRASE),
        ("32", MatchType.EXACT),
        ("32", MatchType.PHRASE),
        ("51", MatchType.EXACT),
        ("51", MatchType.PHRASE),
    ]


def test_two_runs_same_day_one_label():
    platform = _platform()
    _harvester(platform, _oracle()).run(today=TODAY)
    platform.search_terms["3"].append("red shoes sale")
    _harvester(platform, _oracle()).run(today=TODAY)

    assert list(platform.labels) == ["Converted_20261019"]
    labeled = {resource for resource, _ in platform.label_applications}
    assert len(labeled) == len(platform.mutation_calls)


def test_no_matching_campaigns_still_flushes():
    platform = _platform()
    sink_calls = []

    class ListSink:
        def write_report(self, account_name, run_started_at, rows):
            sink_calls.append(rows)
            return "t"

    summary = _harvester(platform, _oracle(), sink=ListSink(), campaign_name_filter="Nope").run(today=TODAY)

    assert summary.campaigns_processed == 0
    assert platform.mutation_calls == []
    assert len(sink_calls) == 1
    assert any("No enabled campaigns found containing 'Nope'" in r[0] for r in sink_calls[0] if r)


def test_no_eligible_ad_groups_skips_term():
    platform = _platform()
    oracle = ScriptedOracle(languages={"Blue Shoes": "zh", "xyz123": "zh"})

    summary = _harvester(platform, oracle, campaign_name_filter="Brand-Search").run(today=TODAY)

    assert summary.terms_processed == 2
    assert platform.mutation_calls == []
    # Only classification calls; the matcher is never asked
    assert len(oracle.calls) == 2


def test_crash_still_flushes_and_propagates():
    platform = _platform()
    sink_calls = []

    class ListSink:
        def write_report(self, account_name, run_started_at, rows):
            sink_calls.append(rows)
            return "t"

    def broken(campaign_id, date_range):
        raise RuntimeError("quota exhausted")

    platform.get_search_terms = broken

    with pytest.raises(RuntimeError):
        _harvester(platform, _oracle(), sink=ListSink()).run(today=TODAY)
    assert len(sink_calls) == 1
    assert any("quota exhausted" in r[0] for r in sink_calls[0] if r)


def test_duckdb_report_end_to_end(tmp_path):
    sink = DuckDBReportSink(str(tmp_path / "reports.duckdb"))
    summary = _harvester(_platform(), _oracle(), sink=sink).run(today=TODAY)

    rows = sink.read_report(summary.report_table)
    assert summary.report_table == "Acme 2026-10-19 06:30"
    assert rows[0]["keywords_added"] == "Keywords Added"
    assert sum(1 for r in rows if r["campaign_name"] == "Execution Log") == 1
