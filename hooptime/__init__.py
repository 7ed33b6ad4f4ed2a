"""
HoopTime Session Tracker

Game clock and playing-time accounting for team sports: a drift-corrected
period clock, a per-player time ledger, live substitutions and an archive of
finished sessions.

The engine is a library; a Flask JSON API is included as a host.
"""
from .models import Player, SessionConfig, PeriodType, SessionRecord, SessionOutcome
from .services import GameSession, ManualTickScheduler, ServiceFactory
from .ui import create_app, run_web_app
from .utils import format_seconds, now_ms, APP_TITLE

__version__ = "1.0.0"
__author__ = "HoopTime Development Team"

__all__ = [
    "Player", "SessionConfig", "PeriodType", "SessionRecord", "SessionOutcome",
    "GameSession", "ManualTickScheduler", "ServiceFactory",
    "create_app", "run_web_app", "format_seconds", "now_ms", "APP_TITLE"
]
