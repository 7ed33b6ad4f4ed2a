"""
Tick scheduling for the clock engine.

The clock engine never owns a process-wide timer. It is handed a
:class:`TickScheduler` and registers one repeating callback per running
stretch, cancelling it when the clock stops or the session ends.
"""
import itertools
import logging
from typing import Callable, Dict, List, Protocol

logger = logging.getLogger(__name__)

TickCallback = Callable[[int], None]


class TickScheduler(Protocol):
    """Repeating-callback scheduler contract."""

    def schedule(self, interval_ms: int, callback: TickCallback) -> int:
        """Register ``callback(now_ms)`` to fire every ``interval_ms``; return a handle."""
        ...

    def cancel(self, handle: int) -> None:
        """Cancel a registration. Unknown handles are ignored."""
        ...


class _Registration:
    __slots__ = ("interval_ms", "callback", "next_due_ms")

    def __init__(self, interval_ms: int, callback: TickCallback, next_due_ms: int):
        self.interval_ms = interval_ms
        self.callback = callback
        self.next_due_ms = next_due_ms


class ManualTickScheduler:
    """
    Host-driven scheduler.

    Nothing fires on its own: the host calls :meth:`advance_to` with the
    current wall-clock time (the web host does so on every request, tests do
    so explicitly). Several missed intervals are coalesced into a single
    callback at ``now_ms``, the way a backgrounded browser tab delivers a
    late interval; the clock engine's wall-clock delta makes that lossless.
    """

    def __init__(self, start_ms: int = 0):
        self._now_ms = start_ms
        self._handles = itertools.count(1)
        self._registrations: Dict[int, _Registration] = {}

    @property
    def now_ms(self) -> int:
        return self._now_ms

    @property
    def active_count(self) -> int:
        return len(self._registrations)

    def schedule(self, interval_ms: int, callback: TickCallback) -> int:
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        handle = next(self._handles)
        self._registrations[handle] = _Registration(
            interval_ms, callback, self._now_ms + interval_ms
        )
        logger.debug("Scheduled tick handle %s every %sms", handle, interval_ms)
        return handle

    def cancel(self, handle: int) -> None:
        if self._registrations.pop(handle, None) is not None:
            logger.debug("Cancelled tick handle %s", handle)

    def advance_to(self, now_ms: int) -> int:
        """
        Move the scheduler clock forward and fire due callbacks.

        Args:
            now_ms: Current wall-clock time; earlier values are ignored

        Returns:
            Number of callbacks fired
        """
        if now_ms < self._now_ms:
            return 0
        self._now_ms = now_ms
        fired = 0
        due: List[int] = [
            handle for handle, reg in self._registrations.items() if reg.next_due_ms <= now_ms
        ]
        for handle in due:
            reg = self._registrations.get(handle)
            # A callback earlier in this pass may have cancelled this one
            if reg is None:
                continue
            reg.next_due_ms = now_ms + reg.interval_ms
            reg.callback(now_ms)
            fired += 1
        return fired

    def advance(self, delta_ms: int) -> int:
        """Advance by ``delta_ms`` in a single step."""
        return self.advance_to(self._now_ms + delta_ms)

    def run_for(self, duration_ms: int, step_ms: int) -> int:
        """Advance in fixed steps, firing at every step boundary."""
        fired = 0
        target = self._now_ms + duration_ms
        while self._now_ms < target:
            fired += self.advance_to(min(target, self._now_ms + step_ms))
        return fired
