"""Session archiver: turns a finished session into one history record."""
import logging
from typing import Callable, Iterable, Optional, Protocol

from ..models import Player, SessionConfig, SessionOutcome, SessionRecord, generate_id
from ..utils import now_ts, utc_iso
from .time_ledger import TimeLedger

logger = logging.getLogger(__name__)


class HistorySink(Protocol):
    def append(self, record: SessionRecord) -> None:
        ...


class SessionArchiver:
    """
    Archive a session at most once.

    The single-use flag is set before the history sink is called, so a second
    trigger racing the first (time running out while the user ends the game)
    finds the flag set and does nothing.
    """

    def __init__(
        self,
        ledger: TimeLedger,
        sink: Optional[HistorySink] = None,
        *,
        archived: bool = False,
        clock: Callable[[], float] = now_ts,
    ):
        self._ledger = ledger
        self._sink = sink
        self._archived = archived
        self._clock = clock
        self.record: Optional[SessionRecord] = None

    @property
    def archived(self) -> bool:
        return self._archived

    def can_archive(self) -> bool:
        return not self._archived and self._ledger.total_seconds() > 0

    def archive(
        self,
        outcome: SessionOutcome,
        *,
        config: SessionConfig,
        roster: Iterable[Player],
        duration_seconds: int,
        analysis: Optional[str] = None,
    ) -> Optional[SessionRecord]:
        """
        Snapshot the session into a :class:`SessionRecord`.

        Returns:
            The new record, or None when the session was already archived or
            no playing time was ever recorded
        """
        if self._archived:
            return None
        if self._ledger.total_seconds() <= 0:
            logger.info("Not archiving session with no recorded playing time")
            return None

        self._archived = True
        record = SessionRecord(
            id=generate_id("history"),
            completed_at=utc_iso(self._clock()),
            outcome=SessionOutcome.parse(outcome),
            config=config,
            roster=tuple(roster),
            stats=tuple(self._ledger.records()),
            duration_seconds=max(0, int(duration_seconds)),
            analysis=analysis,
        )
        self.record = record
        logger.info("Archived session %s (%s)", record.id, record.outcome.value)

        if self._sink is not None:
            try:
                self._sink.append(record)
            except Exception:
                logger.exception("Failed to persist history entry %s", record.id)
        return record
