"""
Harvester error types.

None of these abort a run: each is caught where it is raised and routed to its
fallback (oracles), logged and skipped (mutations), or logged as a final warning
(report sink).
"""
from __future__ import annotations

from typing import List, Optional


class HarvesterError(Exception):
    """Base class for harvester errors."""


class OracleUnavailable(HarvesterError):
    """Transport error, non-success status or malformed body from an oracle."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class MutationRejected(HarvesterError):
    """The ads platform refused a keyword creation."""

    def __init__(self, reasons: Optional[List[str]] = None):
        self.reasons = list(reasons or [])
        super().__init__(", ".join(self.reasons) or "unknown error")


class ReportSinkUnavailable(HarvesterError):
    """The report table could not be written."""
