"""
Game session orchestrator for the HoopTime session tracker.

A :class:`GameSession` wires one clock engine, time ledger, presence tracker,
period state machine and archiver together. Every event runs to completion in
a fixed order:

    clock -> ledger -> period bookkeeping -> persistence

so the ledger always reflects the clock's latest committed state and a
reader never sees a decremented clock with a stale ledger.
"""
import logging
from enum import Enum
from typing import Callable, List, Optional, Sequence

from ..models import (
    ClockState, GameReport, GameState, ParticipantTimeRecord, Player, SessionConfig,
    SessionOutcome, SessionRecord,
)
from ..utils import ANALYSIS_UNAVAILABLE, LINEUP_SIZE, now_ms, period_label
from .analytics_service import AnalyticsService, AnalyzerInterface
from .clock_engine import ClockEngine
from .period_machine import PeriodStateMachine
from .persistence_service import PersistenceInterface
from .presence_tracker import PresenceTracker
from .scheduler import TickScheduler
from .session_archiver import HistorySink, SessionArchiver
from .time_ledger import TimeLedger

logger = logging.getLogger(__name__)


class SessionPhase(Enum):
    SETUP = "setup"
    LIVE = "live"
    COMPLETE = "complete"
    ENDED = "ended"

    @classmethod
    def parse(cls, value: str) -> "SessionPhase":
        try:
            return cls(value)
        except ValueError:
            return cls.SETUP


class GameSession:
    """
    One game from lineup selection to archiving.

    User actions return ``True``/``False`` (or the seconds applied) instead of
    raising; a rejected action leaves every store unchanged.
    """

    def __init__(
        self,
        config: SessionConfig,
        roster: Sequence[Player],
        *,
        lineup_size: int = LINEUP_SIZE,
        scheduler: Optional[TickScheduler] = None,
        persistence: Optional[PersistenceInterface] = None,
        history: Optional[HistorySink] = None,
        analyzer: Optional[AnalyzerInterface] = None,
        auto_resume_after_substitution: bool = False,
        clock: Callable[[], int] = now_ms,
        state: Optional[GameState] = None,
    ):
        """
        Args:
            config: Session configuration; validated here
            roster: Players available for this session
            lineup_size: Players on court at once
            scheduler: Tick source for the running clock
            persistence: Store for the live session; saved after every event
            history: Receives the archived record
            analyzer: Called once when the final period completes
            auto_resume_after_substitution: Restart the clock after a
                substitution that paused it
            clock: Wall-clock source in epoch milliseconds
            state: Saved state to restore instead of starting fresh

        Raises:
            ValueError: If the configuration is invalid
        """
        config.validate()
        self.config = config
        self.roster: List[Player] = list(roster)
        self.lineup_size = lineup_size
        self.persistence = persistence
        self.analyzer = analyzer
        self.auto_resume_after_substitution = auto_resume_after_substitution
        self._scheduler = scheduler
        self._history = history
        self._now = clock

        state = state or GameState(config=config, roster=self.roster)
        self.phase = SessionPhase.parse(state.phase)
        self.analysis: Optional[str] = state.analysis
        self.elapsed_seconds = state.elapsed_seconds
        self._build(state)

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------
    def _build(self, state: GameState) -> None:
        clock_state = state.clock
        if clock_state.period_length_seconds <= 0:
            length = self.config.period_length_seconds
            clock_state = ClockState(
                current_period=clock_state.current_period,
                remaining_seconds=length,
                period_length_seconds=length,
            )
        self.clock = ClockEngine(
            clock_state.period_length_seconds, scheduler=self._scheduler, state=clock_state
        )
        self.ledger = TimeLedger(self.config.period_count, state.stats)
        self.presence = PresenceTracker(self.lineup_size, state.on_court_ids)
        self.periods = PeriodStateMachine(
            self.clock,
            self.config.period_count,
            lambda: self.config.period_length_seconds,
            expired_periods=state.expired_periods,
            complete=state.is_complete,
            on_complete=self._on_complete,
        )
        self.archiver = SessionArchiver(self.ledger, self._history, archived=state.archived)

    @classmethod
    def from_state(cls, state: GameState, **kwargs) -> "GameSession":
        """Restore a saved session. The clock always comes back stopped."""
        return cls(state.config, state.roster, state=state, **kwargs)

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------
    @property
    def current_period(self) -> int:
        return self.clock.current_period

    @property
    def remaining_seconds(self) -> int:
        return self.clock.remaining_seconds

    @property
    def is_running(self) -> bool:
        return self.clock.is_running

    @property
    def is_complete(self) -> bool:
        return self.periods.is_complete

    @property
    def on_court_ids(self) -> List[str]:
        return self.presence.current()

    @property
    def bench_ids(self) -> List[str]:
        on_court = set(self.presence.current())
        return [p.id for p in self.roster if p.id not in on_court]

    @property
    def period_label(self) -> str:
        return period_label(self.current_period, self.config.period_type.value)

    def records(self) -> List[ParticipantTimeRecord]:
        return self.ledger.records()

    def has_unspent_time(self) -> bool:
        """Whether a period change now would abandon time left on the clock."""
        return self.phase is SessionPhase.LIVE and self.periods.has_unspent_time()

    def can_start_clock(self) -> bool:
        return (
            self.phase is SessionPhase.LIVE
            and not self.clock.is_running
            and self.periods.can_start_clock()
        )

    def report(self, analytics: Optional[AnalyticsService] = None) -> GameReport:
        analytics = analytics or AnalyticsService(self.lineup_size)
        return analytics.generate_report(
            self.roster,
            self.ledger.records(),
            elapsed_seconds=self.elapsed_seconds,
            on_court_ids=self.presence.current(),
        )

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------
    def configure(self, config: SessionConfig) -> bool:
        """
        Replace the configuration before the game starts.

        Raises:
            ValueError: If the configuration is invalid
        """
        config.validate()
        if self.phase is not SessionPhase.SETUP:
            return False
        self.config = config
        self._build(GameState(config=config, roster=self.roster))
        self._persist()
        return True

    def update_period_length(self, minutes: int, seconds: int) -> bool:
        """
        Change the period length.

        During setup the displayed clock follows the new length. Once live,
        only periods entered afterwards use it; the current period keeps the
        length it started with and no elapsed time changes.

        Raises:
            ValueError: If the new length is invalid
        """
        updated = self.config.with_period_length(minutes, seconds)
        if self.phase not in (SessionPhase.SETUP, SessionPhase.LIVE):
            return False
        self.config = updated
        if self.phase is SessionPhase.SETUP:
            length = updated.period_length_seconds
            self.clock.enter_period(self.clock.current_period, length, length)
        self._persist()
        return True

    def start_game(self, lineup_ids: Sequence[str]) -> bool:
        """
        Lock in the starting lineup and open the ledger.

        Returns:
            False if the game already started, an id is not on the roster, or
            the lineup is the wrong size
        """
        if self.phase is not SessionPhase.SETUP:
            return False
        roster_ids = {p.id for p in self.roster}
        if not set(lineup_ids).issubset(roster_ids):
            logger.debug("Rejected lineup with unknown players")
            return False
        if not self.presence.set_initial_lineup(lineup_ids):
            return False
        for player in self.roster:
            self.ledger.ensure_participant(player.id)
        self.phase = SessionPhase.LIVE
        logger.info("Game started with %s players on court", len(lineup_ids))
        self._persist()
        return True

    # ------------------------------------------------------------------
    # Clock control
    # ------------------------------------------------------------------
    def start_clock(self, now: Optional[int] = None) -> bool:
        if not self.can_start_clock():
            return False
        started = self.clock.start(self._resolve(now), self._on_scheduled_tick)
        if started:
            self._persist()
        return started

    def stop_clock(self, now: Optional[int] = None) -> bool:
        """
        Stop the clock, first crediting whole seconds since the last tick.

        Returns:
            True if the clock was running
        """
        if not self.clock.is_running:
            return False
        self.tick(now)
        self.clock.stop()
        self._persist()
        return True

    def toggle_clock(self, now: Optional[int] = None) -> bool:
        if self.clock.is_running:
            return self.stop_clock(now)
        return self.start_clock(now)

    def tick(self, now: Optional[int] = None) -> int:
        """
        Run one clock step and credit the on-court players.

        Returns:
            Seconds consumed by this step
        """
        if self.phase is not SessionPhase.LIVE:
            return 0
        consumed = self.clock.tick(self._resolve(now))
        if consumed == 0:
            return 0

        self.ledger.apply_elapsed(consumed, self.presence.current(), self.clock.current_period)
        self.elapsed_seconds += consumed
        if self.clock.remaining_seconds == 0:
            self.periods.mark_expired(self.clock.current_period)
        self._persist()
        return consumed

    def _on_scheduled_tick(self, now: int) -> None:
        self.tick(now)

    def adjust_clock(self, delta_seconds: int) -> int:
        """
        Move the stopped clock by ``delta_seconds`` of remaining time.

        Taking time off the clock credits the on-court players in the current
        period; putting time back debits them by the same amount.

        Returns:
            The signed change to remaining time actually applied
        """
        if self.phase is not SessionPhase.LIVE or self.clock.is_running:
            return 0
        if self.periods.is_expired():
            return 0
        applied = self.clock.adjust_manually(delta_seconds)
        if applied == 0:
            return 0

        self.ledger.apply_elapsed(-applied, self.presence.current(), self.clock.current_period)
        self.elapsed_seconds = max(0, self.elapsed_seconds - applied)
        self._persist()
        return applied

    # ------------------------------------------------------------------
    # Roster presence
    # ------------------------------------------------------------------
    def substitute(
        self,
        outgoing_ids: Sequence[str],
        incoming_ids: Sequence[str],
        now: Optional[int] = None,
    ) -> bool:
        """
        Swap players with the clock stopped.

        A running clock is stopped first; it is restarted afterwards only when
        ``auto_resume_after_substitution`` is set.
        """
        if self.phase is not SessionPhase.LIVE:
            return False
        roster_ids = {p.id for p in self.roster}
        if not set(incoming_ids).issubset(roster_ids):
            return False
        if not self.presence.can_substitute(outgoing_ids, incoming_ids):
            return False

        was_running = self.clock.is_running
        if was_running:
            self.stop_clock(now)
        self.presence.substitute(outgoing_ids, incoming_ids)
        logger.info("Substitution out=%s in=%s", list(outgoing_ids), list(incoming_ids))
        if was_running and self.auto_resume_after_substitution:
            self.start_clock(now)
        self._persist()
        return True

    # ------------------------------------------------------------------
    # Periods
    # ------------------------------------------------------------------
    def advance_period(self, now: Optional[int] = None) -> bool:
        """
        Go to the next period, or complete the game from the last one.

        Callers should check :meth:`has_unspent_time` and confirm with the
        user first.
        """
        if self.phase is not SessionPhase.LIVE:
            return False
        if self.clock.is_running:
            self.stop_clock(now)
        moved = self.periods.advance()
        if moved:
            self._persist()
        return moved

    def retreat_period(self, now: Optional[int] = None) -> bool:
        if self.phase is not SessionPhase.LIVE:
            return False
        if self.clock.is_running:
            self.stop_clock(now)
        moved = self.periods.retreat()
        if moved:
            self._persist()
        return moved

    def _on_complete(self) -> None:
        self.phase = SessionPhase.COMPLETE
        self.analysis = self._run_analysis()
        self.archive(SessionOutcome.COMPLETE)

    def _run_analysis(self) -> Optional[str]:
        if self.analyzer is None:
            return None
        try:
            return self.analyzer.analyze(list(self.roster), self.ledger.records())
        except Exception:
            logger.exception("Analysis failed")
            return ANALYSIS_UNAVAILABLE

    # ------------------------------------------------------------------
    # Archiving
    # ------------------------------------------------------------------
    def archive(self, outcome: SessionOutcome) -> Optional[SessionRecord]:
        """Archive the session once; later calls return None."""
        return self.archiver.archive(
            SessionOutcome.parse(outcome),
            config=self.config,
            roster=self.roster,
            duration_seconds=self.elapsed_seconds,
            analysis=self.analysis,
        )

    def end_session(self, now: Optional[int] = None) -> Optional[SessionRecord]:
        """
        Finish the session now.

        A completed game is archived as complete, anything earlier as an early
        termination. The saved live session is cleared.

        Returns:
            The new record, or None if nothing was archived
        """
        if self.phase is SessionPhase.ENDED:
            return None
        if self.clock.is_running:
            self.stop_clock(now)
        self.clock.cancel()

        outcome = SessionOutcome.COMPLETE if self.periods.is_complete else SessionOutcome.EARLY
        record = self.archive(outcome)
        self.phase = SessionPhase.ENDED
        logger.info("Session ended (%s)", outcome.value)

        if self.persistence is not None:
            try:
                self.persistence.clear_session()
            except Exception:
                logger.exception("Failed to clear saved session")
        return record

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def to_state(self) -> GameState:
        clock_state = self.clock.state
        clock_state.is_running = False
        clock_state.last_resume_ms = None
        return GameState(
            config=self.config,
            roster=list(self.roster),
            on_court_ids=self.presence.current(),
            stats=self.ledger.records(),
            clock=clock_state,
            expired_periods=self.periods.expired_periods,
            phase=self.phase.value,
            is_complete=self.periods.is_complete,
            archived=self.archiver.archived,
            analysis=self.analysis,
            elapsed_seconds=self.elapsed_seconds,
        )

    def save(self) -> bool:
        """
        Write the session to the persistence collaborator.

        Returns:
            False if there is no collaborator or the write failed; the
            in-memory session is unaffected either way
        """
        if self.persistence is None:
            return False
        try:
            self.persistence.save_session(self.to_state())
        except Exception:
            logger.exception("Failed to save session")
            return False
        return True

    def _persist(self) -> None:
        if self.persistence is not None and self.phase is not SessionPhase.ENDED:
            self.save()

    def _resolve(self, now: Optional[int]) -> int:
        return self._now() if now is None else now
