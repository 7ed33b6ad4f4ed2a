"""Per-participant playing time record."""
from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class ParticipantTimeRecord:
    """
    Seconds played by one participant.

    ``period_seconds`` is dense: index 0 holds period 1 and the list always has
    one slot per configured period. ``total_seconds`` must equal the sum of
    ``period_seconds`` after every ledger update.
    """
    player_id: str
    period_seconds: List[int] = field(default_factory=list)
    total_seconds: int = 0

    @classmethod
    def empty(cls, player_id: str, period_count: int) -> "ParticipantTimeRecord":
        return cls(player_id=player_id, period_seconds=[0] * period_count)

    def seconds_in(self, period: int) -> int:
        """Seconds played in a 1-indexed period; zero when out of range."""
        if 1 <= period <= len(self.period_seconds):
            return self.period_seconds[period - 1]
        return 0

    def is_consistent(self) -> bool:
        return self.total_seconds == sum(self.period_seconds)

    def copy(self) -> "ParticipantTimeRecord":
        return ParticipantTimeRecord(
            player_id=self.player_id,
            period_seconds=list(self.period_seconds),
            total_seconds=self.total_seconds,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "player_id": self.player_id,
            "period_seconds": list(self.period_seconds),
            "total_seconds": self.total_seconds,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], period_count: int) -> "ParticipantTimeRecord":
        """
        Rebuild a record, padding or truncating the per-period list.

        The total is recomputed from the per-period values so a reloaded
        record is always consistent.
        """
        raw = [max(0, int(v)) for v in (data.get("period_seconds") or [])]
        if len(raw) < period_count:
            raw = raw + [0] * (period_count - len(raw))
        else:
            raw = raw[:period_count]
        return cls(player_id=str(data["player_id"]), period_seconds=raw, total_seconds=sum(raw))
