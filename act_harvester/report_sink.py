"""
Run report persistence in DuckDB.

Each run gets its own table in the harvester_reports schema, named after the
account and the run timestamp, e.g. "Acme Ltd 2026-10-19 06:30". Rows are stored
in write order with up to three text columns, so the table reads top to bottom
as: header, report rows, blank separator, "Execution Log", log lines.
"""
from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Sequence

import duckdb

from .errors import ReportSinkUnavailable
from .logging_config import setup_logging

logger = setup_logging(__name__)

SCHEMA = "harvester_reports"


def _quote_ident(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def report_table_name(account_name: str, run_started_at: datetime) -> str:
    if run_started_at.tzinfo is not None:
        run_started_at = run_started_at.astimezone(timezone.utc)
    return f"{account_name} {run_started_at.strftime('%Y-%m-%d %H:%M')}"


class DuckDBReportSink:
    """Writes one table per run to a DuckDB file."""

    def __init__(self, db_path: str = "harvester_reports.duckdb"):
        self.db_path = Path(db_path)

    def _get_connection(self):
        return duckdb.connect(str(self.db_path))

    def write_report(self, account_name: str, run_started_at: datetime, rows: Sequence[Sequence[str]]) -> str:
        """
        Create the run table and append all rows.

        Returns the table name. Raises ReportSinkUnavailable on any database or
        filesystem error.
        """
        base_name = report_table_name(account_name, run_started_at)
        payload = [
            [i + 1] + [(list(row) + [None, None, None])[c] for c in range(3)]
            for i, row in enumerate(rows)
        ]

        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = self._get_connection()
        except (duckdb.Error, OSError) as e:
            raise ReportSinkUnavailable(f"cannot open {self.db_path}: {e}") from e

        try:
            conn.execute(f"CREATE SCHEMA IF NOT EXISTS {SCHEMA};")
            table_name = self._free_table_name(conn, base_name)
            qualified = f"{SCHEMA}.{_quote_ident(table_name)}"
            conn.execute(
                f"""
                CREATE TABLE {qualified} (
                  row_no INTEGER NOT NULL,
                  campaign_name TEXT,
                  ad_group_name TEXT,
                  keywords_added TEXT
                );
                """
            )
            if payload:
                conn.executemany(f"INSERT INTO {qualified} VALUES (?, ?, ?, ?)", payload)
        except duckdb.Error as e:
            raise ReportSinkUnavailable(f"cannot write report table: {e}") from e
        finally:
            conn.close()

        logger.info(f"Wrote {len(payload)} rows to {SCHEMA}.{table_name}")
        return table_name

    @staticmethod
    def _free_table_name(conn, base_name: str) -> str:
        # Two runs in the same minute get "(2)", "(3)", ... suffixes
        existing = {
            r[0]
            for r in conn.execute(
                "SELECT table_name FROM information_schema.tables WHERE table_schema = ?",
                [SCHEMA],
            ).fetchall()
        }
        name = base_name
        n = 2
        while name in existing:
            name = f"{base_name} ({n})"
            n += 1
        return name

    def read_report(self, table_name: str) -> List[Dict[str, Any]]:
        """Rows of a report table in write order."""
        conn = self._get_connection()
        try:
            cur = conn.execute(
                f"SELECT * FROM {SCHEMA}.{_quote_ident(table_name)} ORDER BY row_no"
            )
            cols = [c[0] for c in cur.description]
            return [dict(zip(cols, r)) for r in cur.fetchall()]
        finally:
            conn.close()
