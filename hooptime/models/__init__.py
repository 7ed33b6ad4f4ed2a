"""
Models package for the HoopTime session tracker.

This package contains the core data models used throughout the application.
"""
from .player import Player, generate_id
from .session_config import SessionConfig, PeriodType
from .time_record import ParticipantTimeRecord
from .game_state import ClockState, GameState
from .session_record import SessionRecord, SessionOutcome
from .game_report import GameReport, PlayerTimeSummary

__all__ = [
    "Player", "generate_id", "SessionConfig", "PeriodType", "ParticipantTimeRecord",
    "ClockState", "GameState", "SessionRecord", "SessionOutcome",
    "GameReport", "PlayerTimeSummary"
]
