"""
Serializable session state for the HoopTime session tracker.

This module contains :class:`ClockState`, owned by the clock engine, and
:class:`GameState`, the flat record the persistence collaborator stores
between runs.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .player import Player
from .session_config import SessionConfig
from .time_record import ParticipantTimeRecord


@dataclass
class ClockState:
    """
    State of the countdown for the current period.

    Attributes:
        current_period: 1-indexed period number
        remaining_seconds: Seconds left in the current period
        period_length_seconds: Length the current period was entered with
        is_running: Whether the clock is counting down
        last_resume_ms: Wall-clock ms of the last resume or tick re-stamp;
            set only while running
    """
    current_period: int = 1
    remaining_seconds: int = 0
    period_length_seconds: int = 0
    is_running: bool = False
    last_resume_ms: Optional[int] = None

    def to_json(self) -> dict:
        return {
            "current_period": self.current_period,
            "remaining_seconds": self.remaining_seconds,
            "period_length_seconds": self.period_length_seconds,
            "is_running": self.is_running,
            "last_resume_ms": self.last_resume_ms,
        }

    @staticmethod
    def from_json(data: dict) -> "ClockState":
        """Restore a clock state. A reloaded clock is always stopped."""
        length = max(0, int(data.get("period_length_seconds", data.get("remaining_seconds", 0))))
        remaining = int(data.get("remaining_seconds", length))
        return ClockState(
            current_period=max(1, int(data.get("current_period", 1))),
            remaining_seconds=max(0, min(remaining, length)),
            period_length_seconds=length,
            is_running=False,
            last_resume_ms=None,
        )


@dataclass
class GameState:
    """
    Flat snapshot of a live session for persistence.

    Attributes:
        config: Session configuration
        roster: Players available for the session
        on_court_ids: Presence set as an ordered id list
        stats: Ledger records, one per roster player
        clock: Clock state (always reloaded stopped)
        expired_periods: Periods that have run out at least once
        phase: Session phase name
        is_complete: Whether the final period has been completed
        archived: Whether the session has already produced a history record
        analysis: Post-game analysis text, if any
        elapsed_seconds: Net game seconds consumed so far
    """
    config: SessionConfig = field(default_factory=SessionConfig)
    roster: List[Player] = field(default_factory=list)
    on_court_ids: List[str] = field(default_factory=list)
    stats: List[ParticipantTimeRecord] = field(default_factory=list)
    clock: ClockState = field(default_factory=ClockState)
    expired_periods: List[int] = field(default_factory=list)
    phase: str = "setup"
    is_complete: bool = False
    archived: bool = False
    analysis: Optional[str] = None
    elapsed_seconds: int = 0

    def to_json(self) -> dict:
        """
        Convert GameState to JSON-serializable dictionary.

        Returns:
            Dictionary representation suitable for JSON serialization
        """
        return {
            "config": self.config.to_dict(),
            "roster": [p.to_dict() for p in self.roster],
            "on_court_ids": list(self.on_court_ids),
            "stats": [s.to_dict() for s in self.stats],
            "clock": self.clock.to_json(),
            "expired_periods": sorted(self.expired_periods),
            "phase": self.phase,
            "is_complete": self.is_complete,
            "archived": self.archived,
            "analysis": self.analysis,
            "elapsed_seconds": self.elapsed_seconds,
        }

    @staticmethod
    def from_json(data: Dict[str, Any]) -> "GameState":
        """
        Create GameState from JSON dictionary.

        Args:
            data: Dictionary with game state data

        Returns:
            New GameState instance

        Raises:
            ValueError: If the payload is not a mapping or holds an invalid config
        """
        if not isinstance(data, dict):
            raise ValueError("Saved session must be a JSON object")

        config = SessionConfig.from_dict(data.get("config"))
        gs = GameState(config=config)
        gs.roster = [Player.from_dict(p) for p in data.get("roster", []) or [] if isinstance(p, dict)]
        gs.on_court_ids = [str(pid) for pid in data.get("on_court_ids", []) or []]
        gs.stats = [
            ParticipantTimeRecord.from_dict(s, config.period_count)
            for s in data.get("stats", []) or []
            if isinstance(s, dict) and s.get("player_id")
        ]
        gs.clock = ClockState.from_json(data.get("clock") or {})
        if gs.clock.current_period > config.period_count:
            gs.clock.current_period = config.period_count
        gs.expired_periods = sorted(
            {int(p) for p in data.get("expired_periods", []) or [] if 1 <= int(p) <= config.period_count}
        )
        gs.phase = str(data.get("phase", "setup"))
        gs.is_complete = bool(data.get("is_complete", False))
        gs.archived = bool(data.get("archived", False))
        gs.analysis = data.get("analysis")
        gs.elapsed_seconds = max(0, int(data.get("elapsed_seconds", 0)))
        return gs
