"""
Time ledger for the HoopTime session tracker.

Keeps one :class:`ParticipantTimeRecord` per player. The ledger never decides
who is on court; every call carries the presence snapshot it applies to.
"""
import logging
from typing import Dict, Iterable, List, Optional

from ..models import ParticipantTimeRecord

logger = logging.getLogger(__name__)


class TimeLedger:
    """Per-player, per-period seconds played."""

    def __init__(self, period_count: int, records: Optional[Iterable[ParticipantTimeRecord]] = None):
        if period_count < 1:
            raise ValueError("period_count must be at least 1")
        self.period_count = period_count
        self._records: Dict[str, ParticipantTimeRecord] = {}
        for record in records or []:
            self._records[record.player_id] = record.copy()

    def ensure_participant(self, player_id: str) -> None:
        """Create an empty record for ``player_id`` if it has none."""
        if player_id not in self._records:
            self._records[player_id] = ParticipantTimeRecord.empty(player_id, self.period_count)

    def apply_elapsed(self, seconds: int, present_ids: Iterable[str], period: int) -> int:
        """
        Credit ``seconds`` in ``period`` to every record in ``present_ids``.

        Negative ``seconds`` debit time (manual rewind); a record's seconds in
        the period never drop below zero and its total moves by exactly the
        amount applied to the period.

        Args:
            seconds: Signed seconds to apply
            present_ids: Players on court for this step
            period: 1-indexed period

        Returns:
            Sum of the seconds actually applied across all records
        """
        present = list(present_ids)
        if seconds == 0 or not present:
            return 0
        if not 1 <= period <= self.period_count:
            logger.warning("Ignoring ledger update for out-of-range period %s", period)
            return 0

        index = period - 1
        applied_total = 0
        for player_id in present:
            record = self._records.get(player_id)
            if record is None:
                continue
            before = record.period_seconds[index]
            after = max(0, before + seconds)
            record.period_seconds[index] = after
            record.total_seconds += after - before
            applied_total += after - before
        return applied_total

    def record_for(self, player_id: str) -> Optional[ParticipantTimeRecord]:
        record = self._records.get(player_id)
        return record.copy() if record is not None else None

    def records(self) -> List[ParticipantTimeRecord]:
        """Copies of all records in insertion order."""
        return [r.copy() for r in self._records.values()]

    def total_seconds(self) -> int:
        """Seconds played summed over every player."""
        return sum(r.total_seconds for r in self._records.values())

    def is_consistent(self) -> bool:
        return all(r.is_consistent() for r in self._records.values())

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, player_id: object) -> bool:
        return player_id in self._records
