"""
Clock engine for the HoopTime session tracker.

Owns the countdown for the current period. Elapsed time is computed from
wall-clock deltas, and the sub-second remainder of each delta is carried into
the next tick, so irregular tick delivery never accumulates drift.
"""
import logging
from dataclasses import replace
from typing import Optional

from ..models import ClockState
from ..utils import MS_PER_SECOND, TICK_INTERVAL_MS
from .scheduler import TickCallback, TickScheduler

logger = logging.getLogger(__name__)


class ClockEngine:
    """
    Authoritative countdown for one period.

    All transitions are no-ops when their preconditions are not met; callers
    read the return value instead of catching exceptions.
    """

    def __init__(
        self,
        period_length_seconds: int,
        *,
        scheduler: Optional[TickScheduler] = None,
        interval_ms: int = TICK_INTERVAL_MS,
        state: Optional[ClockState] = None,
    ):
        self._scheduler = scheduler
        self._interval_ms = interval_ms
        self._handle: Optional[int] = None
        if state is None:
            state = ClockState(
                current_period=1,
                remaining_seconds=period_length_seconds,
                period_length_seconds=period_length_seconds,
            )
        # Owned copy; restored clocks never resume on their own
        self._state = replace(state, is_running=False, last_resume_ms=None)

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------
    @property
    def state(self) -> ClockState:
        """A copy of the clock state."""
        s = self._state
        return ClockState(
            s.current_period, s.remaining_seconds, s.period_length_seconds,
            s.is_running, s.last_resume_ms,
        )

    @property
    def current_period(self) -> int:
        return self._state.current_period

    @property
    def remaining_seconds(self) -> int:
        return self._state.remaining_seconds

    @property
    def period_length_seconds(self) -> int:
        return self._state.period_length_seconds

    @property
    def is_running(self) -> bool:
        return self._state.is_running

    @property
    def has_pending_tick(self) -> bool:
        return self._handle is not None

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def start(self, now_ms: int, on_tick: Optional[TickCallback] = None) -> bool:
        """
        Start the countdown.

        Args:
            now_ms: Current wall-clock time
            on_tick: Callback registered with the scheduler; defaults to
                :meth:`tick`. The session passes its own pipeline here.

        Returns:
            True if the clock went from stopped to running
        """
        if self._state.is_running or self._state.remaining_seconds <= 0:
            return False
        self._state.is_running = True
        self._state.last_resume_ms = now_ms
        if self._scheduler is not None:
            self._handle = self._scheduler.schedule(self._interval_ms, on_tick or self.tick)
        return True

    def stop(self) -> bool:
        """Stop the countdown and cancel the scheduler registration."""
        if not self._state.is_running:
            return False
        self._halt()
        return True

    def tick(self, now_ms: int) -> int:
        """
        Consume whole seconds elapsed since the last resume stamp.

        Returns:
            Seconds actually taken off the clock (0 when stopped or when less
            than a second has passed)
        """
        s = self._state
        if not s.is_running or s.last_resume_ms is None:
            return 0
        if s.remaining_seconds <= 0:
            self._halt()
            return 0

        elapsed_ms = now_ms - s.last_resume_ms
        elapsed_seconds = elapsed_ms // MS_PER_SECOND
        if elapsed_seconds < 1:
            return 0

        consumed = min(elapsed_seconds, s.remaining_seconds)
        s.remaining_seconds -= consumed
        if s.remaining_seconds == 0:
            self._halt()
            logger.debug("Clock reached zero in period %s", s.current_period)
        else:
            s.last_resume_ms = now_ms - (elapsed_ms % MS_PER_SECOND)
        return consumed

    def adjust_manually(self, delta_seconds: int) -> int:
        """
        Move the clock by ``delta_seconds`` while stopped.

        Remaining time is clamped to ``[0, period length]``.

        Returns:
            The signed delta actually applied to remaining time; 0 while running
        """
        if self._state.is_running or delta_seconds == 0:
            return 0
        s = self._state
        target = max(0, min(s.period_length_seconds, s.remaining_seconds + delta_seconds))
        applied = target - s.remaining_seconds
        s.remaining_seconds = target
        return applied

    def enter_period(self, period: int, remaining_seconds: int, period_length_seconds: int) -> None:
        """Stop the clock and load a new period."""
        self._halt()
        self._state.current_period = period
        self._state.period_length_seconds = period_length_seconds
        self._state.remaining_seconds = max(0, min(remaining_seconds, period_length_seconds))

    def cancel(self) -> None:
        """Stop and release the scheduler registration; used when the session ends."""
        self._halt()

    def _halt(self) -> None:
        self._state.is_running = False
        self._state.last_resume_ms = None
        if self._handle is not None and self._scheduler is not None:
            self._scheduler.cancel(self._handle)
        self._handle = None
