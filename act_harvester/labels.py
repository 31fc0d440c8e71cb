"""Day-scoped labeling of keywords created during a run."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, Sequence
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .errors import MutationRejected
from .ledger import RunLedger
from .logging_config import setup_logging
from .models import KeywordRecord, Label

logger = setup_logging(__name__)


def build_label_name(prefix: str, time_zone: Optional[str] = None, now: Optional[datetime] = None) -> str:
    """prefix + YYYYMMDD in the account time zone, e.g. Converted_20261019."""
    if now is None:
        now = datetime.now(timezone.utc)
    tz = timezone.utc
    if time_zone:
        try:
            tz = ZoneInfo(time_zone)
        except ZoneInfoNotFoundError:
            logger.warning(f"Unknown account time zone '{time_zone}', using UTC for label date")
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return f"{prefix}{now.astimezone(tz).strftime('%Y%m%d')}"


def get_or_create_label(platform, name: str, description: str, ledger: RunLedger) -> Optional[Label]:
    label = platform.find_label(name)
    if label is not None:
        return label

    try:
        platform.create_label(name, description)
    except MutationRejected as e:
        # Someone else may have created it between lookup and create
        logger.info(f"Label '{name}' create rejected ({e}), re-resolving")

    label = platform.find_label(name)
    if label is None:
        ledger.error(f"ERROR: Could not find or create label '{name}'.")
    return label


def apply_run_label(
    platform,
    created: Sequence[KeywordRecord],
    ledger: RunLedger,
    label_name: str,
    description: str,
) -> int:
    """
    Apply the run label to every keyword created in this run.

    Returns the number of keywords labeled.
    """
    if not created:
        ledger.log("No new keywords were created. Skipping labeling.")
        return 0

    label = get_or_create_label(platform, label_name, description, ledger)
    if label is None:
        return 0

    ledger.log(f"Applying label '{label_name}' to {len(created)} new keywords.")
    applied = 0
    for record in created:
        try:
            platform.apply_label(record, label)
            applied += 1
        except MutationRejected as e:
            ledger.error(f"Failed to label keyword {record.display_text} in ad group {record.ad_group_id}: {e}")
    return applied
