"""
Archived session record.

A :class:`SessionRecord` is created once per session by the archiver and is
never modified afterwards; it can only be deleted as a whole.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .player import Player
from .session_config import SessionConfig
from .time_record import ParticipantTimeRecord
from ..utils import parse_iso


class SessionOutcome(Enum):
    """How a session ended."""
    COMPLETE = "complete"
    EARLY = "early"

    @classmethod
    def parse(cls, value: Any) -> "SessionOutcome":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.EARLY


@dataclass(frozen=True)
class SessionRecord:
    """
    Immutable snapshot of a finished session.

    Attributes:
        id: Unique record id
        completed_at: ISO-8601 UTC completion timestamp
        outcome: Normal completion or early termination
        config: Configuration the session ran with
        roster: Players at the time of archiving
        stats: Per-player time records
        duration_seconds: Net game time played
        analysis: Post-game analysis text, if any
    """
    id: str
    completed_at: str
    outcome: SessionOutcome
    config: SessionConfig
    roster: Tuple[Player, ...] = field(default_factory=tuple)
    stats: Tuple[ParticipantTimeRecord, ...] = field(default_factory=tuple)
    duration_seconds: int = 0
    analysis: Optional[str] = None

    @property
    def completed_ts(self) -> float:
        return parse_iso(self.completed_at)

    @property
    def total_player_seconds(self) -> int:
        return sum(s.total_seconds for s in self.stats)

    def stats_for(self, player_id: str) -> Optional[ParticipantTimeRecord]:
        for record in self.stats:
            if record.player_id == player_id:
                return record
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "completed_at": self.completed_at,
            "outcome": self.outcome.value,
            "config": self.config.to_dict(),
            "roster": [p.to_dict() for p in self.roster],
            "stats": [s.to_dict() for s in self.stats],
            "duration_seconds": self.duration_seconds,
            "analysis": self.analysis,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionRecord":
        """
        Rebuild a record from stored data, normalizing missing fields.

        Raises:
            ValueError: If the payload is not a mapping, or carries neither an
                id nor a completion time to identify it by
        """
        if not isinstance(data, dict):
            raise ValueError("History entry must be a JSON object")
        completed_at = str(data.get("completed_at") or "")
        record_id = data.get("id")
        if not record_id:
            if not completed_at:
                raise ValueError("History entry has no id")
            # Same entry, same id on every load
            record_id = f"history-{completed_at}"
        try:
            config = SessionConfig.from_dict(data.get("config"))
        except ValueError:
            config = SessionConfig()
        return cls(
            id=str(record_id),
            completed_at=completed_at,
            outcome=SessionOutcome.parse(data.get("outcome")),
            config=config,
            roster=tuple(Player.from_dict(p) for p in data.get("roster", []) or [] if isinstance(p, dict)),
            stats=tuple(
                ParticipantTimeRecord.from_dict(s, config.period_count)
                for s in data.get("stats", []) or []
                if isinstance(s, dict) and s.get("player_id")
            ),
            duration_seconds=max(0, int(data.get("duration_seconds", 0) or 0)),
            analysis=data.get("analysis"),
        )
