"""
Time helpers for the HoopTime session tracker.

The clock engine works in integer wall-clock milliseconds; archived records
carry ISO-8601 UTC timestamps.
"""
import time
from datetime import datetime, timezone
from typing import Optional


def now_ts() -> float:
    """
    Get current timestamp in epoch seconds.

    Returns:
        Current time as floating point epoch seconds
    """
    return time.time()


def now_ms() -> int:
    """Current wall-clock time in whole epoch milliseconds."""
    return int(now_ts() * 1000)


def utc_iso(ts: Optional[float] = None) -> str:
    """
    Format an epoch timestamp as an ISO-8601 UTC string.

    Args:
        ts: Epoch seconds; defaults to now

    Returns:
        ISO timestamp such as ``2024-03-01T18:30:00+00:00``
    """
    if ts is None:
        ts = now_ts()
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()


def parse_iso(value: str) -> float:
    """
    Parse an ISO-8601 timestamp back to epoch seconds.

    Naive timestamps are read as UTC. Unparseable values sort as oldest (0.0).
    """
    if not value:
        return 0.0
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (TypeError, ValueError):
        return 0.0
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()
