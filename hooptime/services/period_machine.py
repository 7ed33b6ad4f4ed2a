"""
Period state machine for the HoopTime session tracker.

Governs movement between periods ``1..N`` and into the terminal complete
state. The clock engine owns the clock itself; this machine tells it which
period to load and with how much time.
"""
import logging
from typing import Callable, Iterable, List, Optional, Set

from .clock_engine import ClockEngine

logger = logging.getLogger(__name__)


class PeriodStateMachine:
    """
    Period progression with expiry bookkeeping.

    A period that has run out is remembered in the expired set. Re-entering it
    loads zero remaining time, and the clock cannot be started there.
    """

    def __init__(
        self,
        clock: ClockEngine,
        period_count: int,
        period_length: Callable[[], int],
        *,
        expired_periods: Iterable[int] = (),
        complete: bool = False,
        on_complete: Optional[Callable[[], None]] = None,
    ):
        """
        Args:
            clock: Clock engine to drive
            period_count: Number of periods N
            period_length: Returns the length in seconds for periods entered from
                now on, so a length change affects only upcoming periods
            expired_periods: Restored expired set
            complete: Restored complete flag
            on_complete: Called once when the machine reaches the complete state
        """
        self._clock = clock
        self.period_count = period_count
        self._period_length = period_length
        self._expired: Set[int] = {p for p in expired_periods if 1 <= p <= period_count}
        self._complete = complete
        self._on_complete = on_complete

    @property
    def current_period(self) -> int:
        return self._clock.current_period

    @property
    def is_complete(self) -> bool:
        return self._complete

    @property
    def expired_periods(self) -> List[int]:
        return sorted(self._expired)

    def is_expired(self, period: Optional[int] = None) -> bool:
        return (period if period is not None else self.current_period) in self._expired

    def has_unspent_time(self) -> bool:
        """True when moving away now would leave time on the clock."""
        return not self._complete and self._clock.remaining_seconds > 0

    def can_start_clock(self) -> bool:
        return (
            not self._complete
            and not self.is_expired()
            and self._clock.remaining_seconds > 0
        )

    def mark_expired(self, period: Optional[int] = None) -> bool:
        """
        Record that a period ran out. Idempotent.

        Returns:
            True if the period was newly added
        """
        period = period if period is not None else self.current_period
        if period in self._expired or not 1 <= period <= self.period_count:
            return False
        self._expired.add(period)
        logger.info("Period %s expired", period)
        return True

    def advance(self) -> bool:
        """
        Move to the next period, or complete the session from the last one.

        Returns:
            False only when already complete
        """
        if self._complete:
            return False
        current = self.current_period
        if current < self.period_count:
            self._enter(current + 1)
            return True

        self._clock.cancel()
        self._complete = True
        logger.info("Session complete after period %s", current)
        if self._on_complete is not None:
            self._on_complete()
        return True

    def retreat(self) -> bool:
        """Move back one period. Returns False on period 1 or when complete."""
        if self._complete or self.current_period <= 1:
            return False
        self._enter(self.current_period - 1)
        return True

    def _enter(self, period: int) -> None:
        length = self._period_length()
        remaining = 0 if period in self._expired else length
        self._clock.enter_period(period, remaining, length)
        logger.info("Entered period %s with %ss remaining", period, remaining)
