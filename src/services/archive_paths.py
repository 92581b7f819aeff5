"""Archive path derivation for Slack events."""

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Optional

from src.models.slack_event import event_channel_id, event_ts

META_CHANNEL = "META"
FILES_DIR = "FILES"

# Day bucket used when an event carries no usable timestamp (2024-12-17 UTC).
FALLBACK_TS = "1734425456.329100"


def ts_to_datetime(ts: str) -> datetime:
    """Convert a Slack ``seconds.micros`` timestamp to an aware UTC datetime."""
    seconds = Decimal(ts)
    return datetime.fromtimestamp(int(seconds), tz=timezone.utc)


def day_bucket(ts: Optional[str]) -> str:
    """Calendar day (UTC, ``YYYY-MM-DD``) of a Slack timestamp."""
    try:
        moment = ts_to_datetime(ts) if ts else ts_to_datetime(FALLBACK_TS)
    except (InvalidOperation, ValueError, OverflowError, OSError):
        moment = ts_to_datetime(FALLBACK_TS)
    return moment.strftime("%Y-%m-%d")


def resolve_archive_path(team_id: Optional[str], event: Optional[dict]) -> Optional[str]:
    """
    Relative archive path for an event, or None when it cannot be archived.

    Pure function of team id, channel id and event timestamp. Events
    without a channel (workspace-level events) go to the META channel.
    """
    if not team_id:
        return None
    channel = event_channel_id(event) or META_CHANNEL
    return f"{team_id}/{channel}/{day_bucket(event_ts(event))}.jsonl"


def attachment_paths(team_id: str, file_id: str) -> tuple[str, str]:
    """Relative (metadata, data) paths for an attachment."""
    base = f"{team_id}/{FILES_DIR}/{file_id}"
    return f"{base}.json", base
