"""
Constants for the HoopTime session tracker.

This module contains configuration constants used throughout the application.
"""

# Application metadata
APP_TITLE = "HoopTime Tracker"

# Session configuration defaults
DEFAULT_PERIOD_COUNT = 4
DEFAULT_PERIOD_MINUTES = 7
DEFAULT_PERIOD_SECONDS = 30
DEFAULT_PERIOD_TYPE = "Quarters"
MIN_PERIOD_COUNT = 1
MAX_PERIOD_COUNT = 8
MIN_PERIOD_MINUTES = 0
MAX_PERIOD_MINUTES = 60

# Period length seconds are picked from a fixed set
ALLOWED_PERIOD_SECONDS = (0, 15, 30, 45)

# Period count implied by each period type
PERIOD_TYPE_COUNTS = {
    "Quarters": 4,
    "Halves": 2,
}

# Players on court at once while a session is live
LINEUP_SIZE = 5

# Clock scheduling
TICK_INTERVAL_MS = 200
MS_PER_SECOND = 1000

# History retention
HISTORY_LIMIT = 20

# Storage file names used by the JSON persistence backend
SESSION_FILE_NAME = "hooptime_session.json"
HISTORY_FILE_NAME = "hooptime_history.json"

# Shown in place of an analysis when the analyzer fails
ANALYSIS_UNAVAILABLE = "Could not generate analysis at this time."

# Players within +/- this many seconds of their fair share are "ok"
FAIRNESS_THRESHOLD_SECONDS = 60
