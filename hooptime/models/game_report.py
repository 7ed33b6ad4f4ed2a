"""Dataclasses representing playing time reports."""

from dataclasses import dataclass, field
from typing import Dict, List


@dataclass
class PlayerTimeSummary:
    """Aggregated playing time information for a single player."""

    player_id: str
    name: str
    number: str
    on_court: bool
    total_seconds: int
    period_seconds: List[int]
    share_of_game: float
    target_seconds: int
    delta_seconds: int
    fairness: str


@dataclass
class GameReport:
    """Snapshot of playing time distribution for a session."""

    roster_size: int
    lineup_size: int
    elapsed_seconds: int
    target_seconds_per_player: int
    players: List[PlayerTimeSummary] = field(default_factory=list)
    average_seconds: float = 0.0
    median_seconds: float = 0.0
    min_seconds: int = 0
    max_seconds: int = 0
    fairness_counts: Dict[str, int] = field(default_factory=dict)
