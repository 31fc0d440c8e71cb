"""
Harvester CLI - add converting search terms as keywords.

Usage:
    python -m act_harvester.cli run configs/harvester.yaml
    python -m act_harvester.cli run configs/harvester.yaml --live --report-db reports/harvester.duckdb
"""
from __future__ import annotations

import argparse

from pydantic import ValidationError

from .config import load_harvester_config
from .engine import KeywordHarvester
from .google_ads_api import GoogleAdsPlatform, load_google_ads_client
from .logging_config import set_level, setup_logging
from .oracle import build_oracle
from .report_sink import DuckDBReportSink
from .settings import get_settings

logger = setup_logging(__name__)


def cmd_run(args: argparse.Namespace) -> int:
    settings = get_settings()
    set_level(args.log_level or settings.log_level)

    try:
        config = load_harvester_config(args.config_path)
    except (FileNotFoundError, ValueError, ValidationError) as e:
        print(f"[Harvester] ERROR: Invalid config {args.config_path}: {e}")
        return 1

    report_db = args.report_db or config.report_db_path
    sink = DuckDBReportSink(report_db) if report_db else None

    try:
        client = load_google_ads_client(args.google_ads_config or settings.google_ads_config)
        oracle = build_oracle(
            api_key=settings.openai_api_key,
            model=config.model,
            temperature=config.temperature,
            max_tokens=config.max_output_tokens,
            base_url=settings.openai_base_url,
        )
    except Exception as e:
        logger.error(f"Bootstrap failed: {e}")
        print(f"[Harvester] ERROR: {e}")
        return 1

    dry_run = not args.live
    platform = GoogleAdsPlatform(client, config.customer_id, dry_run=dry_run)
    harvester = KeywordHarvester(config, platform, oracle, report_sink=sink)

    print(f"[Harvester] Mode: {'DRY-RUN' if dry_run else 'LIVE'}")
    summary = harvester.run()

    print(f"[Harvester]   campaigns processed: {summary.campaigns_processed}")
    print(f"[Harvester]   search terms:        {summary.terms_processed}")
    print(f"[Harvester]   keywords created:    {summary.keywords_created}")
    print(f"[Harvester]   report rows:         {summary.report_rows}")
    if summary.label_name:
        print(f"[Harvester]   label:               {summary.label_name} ({summary.keywords_labeled} keywords)")
    if summary.report_table:
        print(f"[Harvester] Report saved: {report_db} :: {summary.report_table}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="act_harvester")
    sub = p.add_subparsers(dest="command", required=True)

    r = sub.add_parser("run", help="Harvest converting search terms into keywords")
    r.add_argument("config_path", help="Path to harvester config YAML")
    r.add_argument("--live", action="store_true", help="Create keywords/labels via API (default: dry-run)")
    r.add_argument("--google-ads-config", default=None, help="Path to google-ads.yaml (default: $GOOGLE_ADS_CONFIG)")
    r.add_argument("--report-db", default=None, help="DuckDB file for the run report (overrides config)")
    r.add_argument("--log-level", default=None, choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    r.set_defaults(func=cmd_run)

    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        return int(e.code or 0)
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
