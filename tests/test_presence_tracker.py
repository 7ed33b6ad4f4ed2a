import unittest

from hooptime.services import PresenceTracker

LINEUP = ["p1", "p2", "p3", "p4", "p5"]


class PresenceTrackerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tracker = PresenceTracker(5)

    def test_initial_lineup_requires_exact_unique_size(self) -> None:
        self.assertFalse(self.tracker.set_initial_lineup(LINEUP[:4]))
        self.assertFalse(self.tracker.set_initial_lineup(["p1", "p1", "p2", "p3", "p4"]))
        self.assertEqual(self.tracker.current(), [])
        self.assertTrue(self.tracker.set_initial_lineup(LINEUP))
        self.assertEqual(self.tracker.current(), LINEUP)

    def test_initial_lineup_only_once(self) -> None:
        self.tracker.set_initial_lineup(LINEUP)
        self.assertFalse(self.tracker.set_initial_lineup(["p6", "p7", "p8", "p9", "p10"]))
        self.assertEqual(self.tracker.current(), LINEUP)

    def test_many_for_many_substitution(self) -> None:
        self.tracker.set_initial_lineup(LINEUP)
        self.assertTrue(self.tracker.substitute(["p2", "p4"], ["p6", "p7"]))
        self.assertEqual(self.tracker.current(), ["p1", "p6", "p3", "p7", "p5"])
        self.assertEqual(len(self.tracker), 5)

    def test_rejected_substitutions_leave_presence_unchanged(self) -> None:
        self.tracker.set_initial_lineup(LINEUP)
        before = self.tracker.current()
        rejected = [
            (["p1"], ["p6", "p7"]),          # count mismatch
            ([], []),                        # empty
            (["p1", "p1"], ["p6", "p7"]),    # duplicate outgoing
            (["p1", "p2"], ["p6", "p6"]),    # duplicate incoming
            (["p9"], ["p6"]),                # outgoing not on court
            (["p1"], ["p2"]),                # incoming already on court
        ]
        for outgoing, incoming in rejected:
            with self.subTest(outgoing=outgoing, incoming=incoming):
                self.assertFalse(self.tracker.substitute(outgoing, incoming))
                self.assertEqual(self.tracker.current(), before)

    def test_player_can_come_straight_back(self) -> None:
        self.tracker.set_initial_lineup(LINEUP)
        self.assertTrue(self.tracker.substitute(["p1"], ["p1"]))
        self.assertEqual(self.tracker.current(), LINEUP)


if __name__ == "__main__":
    unittest.main()
