"""
Utilities package for the HoopTime session tracker.

This package contains utility functions and constants used throughout the application.
"""
from .time_utils import now_ts, now_ms, utc_iso, parse_iso
from .formatters import (
    format_seconds, format_period_duration, format_player_name,
    period_label, period_short_label
)
from .constants import (
    APP_TITLE, DEFAULT_PERIOD_COUNT, DEFAULT_PERIOD_MINUTES, DEFAULT_PERIOD_SECONDS,
    DEFAULT_PERIOD_TYPE, MIN_PERIOD_COUNT, MAX_PERIOD_COUNT, MIN_PERIOD_MINUTES,
    MAX_PERIOD_MINUTES, ALLOWED_PERIOD_SECONDS, PERIOD_TYPE_COUNTS, LINEUP_SIZE,
    TICK_INTERVAL_MS, MS_PER_SECOND, HISTORY_LIMIT, SESSION_FILE_NAME,
    HISTORY_FILE_NAME, ANALYSIS_UNAVAILABLE, FAIRNESS_THRESHOLD_SECONDS
)

__all__ = [
    "now_ts", "now_ms", "utc_iso", "parse_iso",
    "format_seconds", "format_period_duration", "format_player_name",
    "period_label", "period_short_label",
    "APP_TITLE", "DEFAULT_PERIOD_COUNT", "DEFAULT_PERIOD_MINUTES", "DEFAULT_PERIOD_SECONDS",
    "DEFAULT_PERIOD_TYPE", "MIN_PERIOD_COUNT", "MAX_PERIOD_COUNT", "MIN_PERIOD_MINUTES",
    "MAX_PERIOD_MINUTES", "ALLOWED_PERIOD_SECONDS", "PERIOD_TYPE_COUNTS", "LINEUP_SIZE",
    "TICK_INTERVAL_MS", "MS_PER_SECOND", "HISTORY_LIMIT", "SESSION_FILE_NAME",
    "HISTORY_FILE_NAME", "ANALYSIS_UNAVAILABLE", "FAIRNESS_THRESHOLD_SECONDS",
]
