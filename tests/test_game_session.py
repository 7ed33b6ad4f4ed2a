"""Scenario tests for the game session pipeline."""
import unittest

from hooptime.models import GameState, Player, SessionConfig, SessionOutcome
from hooptime.services import (
    GameSession, HistoryService, InMemoryPersistence, ManualTickScheduler, SessionPhase,
)
from hooptime.utils import ANALYSIS_UNAVAILABLE

ROSTER = [Player(id=f"p{i}", name=f"Player {i}", number=str(i)) for i in range(1, 9)]
LINEUP = ["p1", "p2", "p3", "p4", "p5"]


class CountingAnalyzer:
    def __init__(self, result="Balanced rotation.", fail=False):
        self.calls = 0
        self.result = result
        self.fail = fail

    def analyze(self, roster, records):
        self.calls += 1
        if self.fail:
            raise RuntimeError("analysis service down")
        return self.result


class FailingPersistence(InMemoryPersistence):
    def save_session(self, state):
        raise OSError("disk full")


class GameSessionTests(unittest.TestCase):
    def setUp(self) -> None:
        self.persistence = InMemoryPersistence()
        self.history = HistoryService(self.persistence)
        self.analyzer = CountingAnalyzer()
        self.session = self._make_session(SessionConfig())

    def _make_session(self, config, **kwargs) -> GameSession:
        kwargs.setdefault("persistence", self.persistence)
        kwargs.setdefault("history", self.history)
        kwargs.setdefault("analyzer", self.analyzer)
        return GameSession(config, ROSTER, clock=lambda: 0, **kwargs)

    def _seconds(self, player_id, period=1):
        return self.session.ledger.record_for(player_id).seconds_in(period)

    def test_setup_phase_and_lineup_validation(self) -> None:
        self.assertEqual(self.session.phase, SessionPhase.SETUP)
        self.assertEqual(self.session.remaining_seconds, 450)
        self.assertFalse(self.session.start_clock(0))
        self.assertFalse(self.session.start_game(["p1", "p2", "p3", "p4", "zz"]))
        self.assertFalse(self.session.start_game(LINEUP[:4]))
        self.assertTrue(self.session.start_game(LINEUP))
        self.assertEqual(self.session.phase, SessionPhase.LIVE)
        self.assertEqual(len(self.session.ledger), len(ROSTER))
        self.assertFalse(self.session.start_game(LINEUP))

    def test_period_runs_out_and_expires(self) -> None:
        self.session.start_game(LINEUP)
        self.session.start_clock(0)
        for step in range(1, 2251):
            self.session.tick(step * 200)
        self.assertEqual(self.session.remaining_seconds, 0)
        self.assertFalse(self.session.is_running)
        self.assertEqual(self.session.periods.expired_periods, [1])
        self.assertEqual(self._seconds("p1"), 450)
        self.assertEqual(self._seconds("p6"), 0)
        self.assertFalse(self.session.can_start_clock())
        self.assertFalse(self.session.has_unspent_time())

    def test_substitution_pauses_and_does_not_resume(self) -> None:
        self.session.start_game(LINEUP)
        self.session.start_clock(0)
        self.session.tick(30_000)
        self.assertTrue(self.session.substitute(["p1", "p2"], ["p6", "p7"], now=30_000))

        self.assertFalse(self.session.is_running)
        self.assertEqual(self._seconds("p1"), 30)
        self.assertEqual(self._seconds("p2"), 30)
        self.assertEqual(self._seconds("p6"), 0)
        self.assertEqual(self._seconds("p7"), 0)
        self.assertEqual(self.session.on_court_ids, ["p6", "p7", "p3", "p4", "p5"])

        self.session.start_clock(40_000)
        self.session.tick(50_000)
        self.assertEqual(self._seconds("p1"), 30)
        self.assertEqual(self._seconds("p6"), 10)

    def test_auto_resume_policy(self) -> None:
        session = self._make_session(SessionConfig(), auto_resume_after_substitution=True)
        session.start_game(LINEUP)
        session.start_clock(0)
        self.assertTrue(session.substitute(["p1"], ["p6"], now=5_000))
        self.assertTrue(session.is_running)
        self.assertEqual(session.ledger.record_for("p1").total_seconds, 5)

    def test_invalid_substitution_changes_nothing(self) -> None:
        self.session.start_game(LINEUP)
        self.session.start_clock(0)
        self.assertFalse(self.session.substitute(["p1"], ["zz"], now=1_000))
        self.assertFalse(self.session.substitute(["p1"], ["p2"], now=1_000))
        self.assertTrue(self.session.is_running)
        self.assertEqual(self.session.on_court_ids, LINEUP)

    def test_stop_credits_whole_seconds_since_last_tick(self) -> None:
        self.session.start_game(LINEUP)
        self.session.start_clock(0)
        self.assertEqual(self.session.tick(800), 0)
        self.assertTrue(self.session.stop_clock(1_500))
        self.assertEqual(self._seconds("p1"), 1)
        self.assertEqual(self.session.remaining_seconds, 449)

    def test_manual_adjustment_moves_ledger_with_clock(self) -> None:
        """
        Seconds taken off the clock count as played, seconds put back do not.

        `adjust_clock(-10)` deliberately credits the players on court instead
        of debiting them. The ledger tracks the net seconds the clock consumed,
        so only putting time back on the clock debits anyone.
        """
        session = self._make_session(SessionConfig(period_minutes=2, period_seconds=30))
        self.session = session
        session.start_game(LINEUP)
        session.start_clock(0)
        session.tick(30_000)
        session.stop_clock(30_000)
        self.assertEqual(session.remaining_seconds, 120)

        # taking time off the clock credits the players on court
        self.assertEqual(session.adjust_clock(-10), -10)
        self.assertEqual(session.remaining_seconds, 110)
        self.assertEqual(self._seconds("p1"), 40)

        # putting it back debits them
        self.assertEqual(session.adjust_clock(10), 10)
        self.assertEqual(session.remaining_seconds, 120)
        self.assertEqual(self._seconds("p1"), 30)
        self.assertEqual(self._seconds("p6"), 0)
        self.assertEqual(session.elapsed_seconds, 30)

        # clamped at the period length
        self.assertEqual(session.adjust_clock(500), 30)
        self.assertEqual(self._seconds("p1"), 0)

    def test_adjustment_refused_while_running_or_expired(self) -> None:
        self.session.start_game(LINEUP)
        self.session.start_clock(0)
        self.assertEqual(self.session.adjust_clock(-5), 0)
        self.session.tick(450_000)
        self.assertEqual(self.session.adjust_clock(30), 0)
        self.assertEqual(self.session.remaining_seconds, 0)

    def test_expired_period_stays_at_zero_when_revisited(self) -> None:
        self.session.start_game(LINEUP)
        self.session.start_clock(0)
        self.session.tick(450_000)
        self.assertTrue(self.session.advance_period())
        self.assertEqual(self.session.current_period, 2)
        self.assertEqual(self.session.remaining_seconds, 450)
        self.assertTrue(self.session.retreat_period())
        self.assertEqual(self.session.current_period, 1)
        self.assertEqual(self.session.remaining_seconds, 0)
        self.assertFalse(self.session.start_clock(500_000))

    def test_advance_while_running_flushes_first(self) -> None:
        self.session.start_game(LINEUP)
        self.session.start_clock(0)
        self.assertTrue(self.session.has_unspent_time())
        self.assertTrue(self.session.advance_period(now=12_400))
        self.assertEqual(self._seconds("p1", 1), 12)
        self.assertFalse(self.session.is_running)

    def test_early_termination_archives_once(self) -> None:
        self.session.start_game(LINEUP)
        self.session.start_clock(0)
        self.session.tick(20_000)
        self.session.advance_period(now=20_000)
        self.session.start_clock(30_000)
        self.session.tick(52_000)

        record = self.session.end_session(now=52_000)
        self.assertIsNotNone(record)
        self.assertEqual(record.outcome, SessionOutcome.EARLY)
        self.assertEqual(record.duration_seconds, 42)
        self.assertEqual(record.total_player_seconds, 42 * 5)
        self.assertEqual(record.stats_for("p1").period_seconds, [20, 22, 0, 0])
        self.assertIsNone(record.analysis)
        self.assertEqual(self.analyzer.calls, 0)

        self.assertIsNone(self.session.end_session())
        self.assertIsNone(self.session.archive(SessionOutcome.EARLY))
        self.assertEqual(len(self.history.entries()), 1)
        self.assertEqual(self.session.phase, SessionPhase.ENDED)
        self.assertIsNone(self.persistence.load_session())

    def _play_to_completion(self, session) -> None:
        session.start_game(LINEUP)
        now = 0
        for _ in range(session.config.period_count):
            session.start_clock(now)
            now += 60_000
            session.tick(now)
            session.advance_period(now)

    def test_completion_runs_analysis_once_and_archives(self) -> None:
        self._play_to_completion(self.session)
        self.assertTrue(self.session.is_complete)
        self.assertEqual(self.session.phase, SessionPhase.COMPLETE)
        self.assertEqual(self.analyzer.calls, 1)

        history = self.history.entries()
        self.assertEqual(len(history), 1)
        self.assertEqual(history[0].outcome, SessionOutcome.COMPLETE)
        self.assertEqual(history[0].analysis, "Balanced rotation.")
        self.assertEqual(history[0].duration_seconds, 240)

        # the end-game click racing completion must not add a second record
        self.assertIsNone(self.session.end_session())
        self.assertEqual(len(self.history.entries()), 1)
        self.assertEqual(self.analyzer.calls, 1)

        self.assertEqual(self.session.tick(999_999), 0)
        self.assertFalse(self.session.substitute(["p1"], ["p6"]))
        self.assertFalse(self.session.start_clock())

    def test_failed_analysis_stores_placeholder(self) -> None:
        self.analyzer.fail = True
        self._play_to_completion(self.session)
        self.assertEqual(self.session.analysis, ANALYSIS_UNAVAILABLE)
        self.assertEqual(self.history.entries()[0].analysis, ANALYSIS_UNAVAILABLE)

    def test_nothing_archived_when_no_time_played(self) -> None:
        self.session.start_game(LINEUP)
        for _ in range(4):
            self.session.advance_period()
        self.assertTrue(self.session.is_complete)
        self.assertEqual(self.history.entries(), [])
        self.assertIsNone(self.session.end_session())

    def test_persistence_failure_does_not_disturb_session(self) -> None:
        session = self._make_session(SessionConfig(), persistence=FailingPersistence())
        self.assertTrue(session.start_game(LINEUP))
        self.assertTrue(session.start_clock(0))
        self.assertEqual(session.tick(3_000), 3)
        self.assertFalse(session.save())
        self.assertEqual(session.ledger.total_seconds(), 15)

    def test_save_and_restore_round_trip(self) -> None:
        self.session.start_game(LINEUP)
        self.session.start_clock(0)
        self.session.tick(450_000)
        self.session.advance_period()
        self.session.start_clock(500_000)
        self.session.tick(510_000)
        self.session.substitute(["p5"], ["p8"], now=510_000)
        self.session.start_clock(511_000)

        state = self.persistence.load_session()
        restored = GameSession.from_state(GameState.from_json(state.to_json()))
        self.assertFalse(restored.is_running)
        self.assertEqual(restored.phase, SessionPhase.LIVE)
        self.assertEqual(restored.current_period, 2)
        self.assertEqual(restored.remaining_seconds, 440)
        self.assertEqual(restored.on_court_ids, ["p1", "p2", "p3", "p4", "p8"])
        self.assertEqual(restored.periods.expired_periods, [1])
        self.assertEqual(restored.elapsed_seconds, 460)
        self.assertEqual(
            [r.to_dict() for r in restored.records()],
            [r.to_dict() for r in self.session.records()],
        )

    def test_archived_flag_survives_reload(self) -> None:
        self._play_to_completion(self.session)
        restored = GameSession.from_state(self.session.to_state(), history=self.history)
        self.assertTrue(restored.archiver.archived)
        self.assertIsNone(restored.end_session())
        self.assertEqual(len(self.history.entries()), 1)

    def test_update_period_length(self) -> None:
        self.assertTrue(self.session.update_period_length(8, 0))
        self.assertEqual(self.session.remaining_seconds, 480)
        with self.assertRaises(ValueError):
            self.session.update_period_length(8, 10)

        self.session.start_game(LINEUP)
        self.session.start_clock(0)
        self.session.tick(10_000)
        self.assertTrue(self.session.update_period_length(6, 0))
        self.assertEqual(self.session.remaining_seconds, 470)
        self.session.advance_period(now=10_000)
        self.assertEqual(self.session.remaining_seconds, 360)
        self.assertEqual(self._seconds("p1"), 10)

    def test_configure_only_during_setup(self) -> None:
        halves = SessionConfig().with_period_type("Halves")
        self.assertTrue(self.session.configure(halves))
        self.assertEqual(self.session.periods.period_count, 2)
        self.session.start_game(LINEUP)
        self.assertFalse(self.session.configure(SessionConfig()))

    def test_scheduler_drives_pipeline_and_is_cancelled(self) -> None:
        scheduler = ManualTickScheduler(start_ms=0)
        session = self._make_session(SessionConfig(), scheduler=scheduler)
        session.start_game(LINEUP)
        session.start_clock(0)
        scheduler.run_for(10_000, 200)
        self.assertEqual(session.ledger.record_for("p3").total_seconds, 10)
        self.assertEqual(session.remaining_seconds, 440)

        session.stop_clock(10_000)
        self.assertEqual(scheduler.active_count, 0)
        scheduler.run_for(5_000, 200)
        self.assertEqual(session.remaining_seconds, 440)

        session.start_clock(15_000)
        self.assertEqual(scheduler.active_count, 1)
        session.end_session(now=15_000)
        self.assertEqual(scheduler.active_count, 0)


if __name__ == "__main__":
    unittest.main()
