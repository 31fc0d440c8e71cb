"""
Run ledger - the chronological execution log and the keyword-addition report for
one harvester run, written to the report sink once at the very end.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable, List, Optional

from .errors import ReportSinkUnavailable
from .logging_config import setup_logging
from .models import KeywordRecord, ReportRow

if TYPE_CHECKING:
    from .resolver import CandidateResolver

logger = setup_logging(__name__)

REPORT_HEADER = ["Campaign Name", "Ad Group Name", "Keywords Added"]
LOG_SECTION_HEADER = "Execution Log"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RunLedger:
    """
    Append-only log lines and report rows for a single run.

    Every log line is stamped HH:MM:SS (UTC) and mirrored to the module logger.
    flush() hands everything to the report sink exactly once.
    """

    def __init__(self, clock: Callable[[], datetime] = _utc_now):
        self._clock = clock
        self.started_at = clock()
        self.log_lines: List[str] = []
        self.report_rows: List[ReportRow] = []
        self._flushed = False

    def log(self, message: str, level: int = logging.INFO) -> str:
        entry = f"{self._clock().strftime('%H:%M:%S')} - {message}"
        self.log_lines.append(entry)
        logger.log(level, message)
        return entry

    def warning(self, message: str) -> str:
        return self.log(message, level=logging.WARNING)

    def error(self, message: str) -> str:
        return self.log(message, level=logging.ERROR)

    def record_report_row(self, campaign_name: str, ad_group_name: str, summary: str) -> None:
        self.report_rows.append(ReportRow(campaign_name, ad_group_name, summary))

    def table_rows(self) -> List[List[str]]:
        """Header, report rows, separator, log header, log lines."""
        rows: List[List[str]] = [list(REPORT_HEADER)]
        for r in self.report_rows:
            rows.append([r.campaign_name, r.ad_group_name, r.keywords_added])
        rows.append([])
        rows.append([LOG_SECTION_HEADER])
        for line in self.log_lines:
            rows.append([line])
        return rows

    @property
    def flushed(self) -> bool:
        return self._flushed

    def flush(self, sink, account_name: str) -> Optional[str]:
        """
        Write the report to the sink.

        Returns the table name written, or None when the sink is missing or failed.
        Never raises for sink problems: all mutating work is already done by now.
        """
        if self._flushed:
            raise RuntimeError("RunLedger has already been flushed")
        self._flushed = True

        if sink is None:
            self.warning("Report sink is not configured. Skipping report generation.")
            self.log("--- RUN FINISHED ---")
            return None

        try:
            table_name = sink.write_report(account_name, self.started_at, self.table_rows())
        except ReportSinkUnavailable as e:
            self.error(
                f"ERROR: Could not write the run report. Check the report database path and permissions. Details: {e}"
            )
            return None

        self.log(f"Report successfully written to table: {table_name}")
        return table_name


@dataclass
class RunContext:
    """Run-scoped state threaded through every component call."""
    ledger: RunLedger = field(default_factory=RunLedger)
    created_keywords: List[KeywordRecord] = field(default_factory=list)
    terms_processed: int = 0
    # Campaign, ad-group and keyword-inventory caches for this run only
    resolver: Optional["CandidateResolver"] = None
