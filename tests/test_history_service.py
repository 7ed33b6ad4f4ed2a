import unittest

from hooptime.models import SessionConfig, SessionOutcome, SessionRecord
from hooptime.services import HistoryService, InMemoryPersistence, merge_history


def _record(record_id: str, completed_at: str, analysis=None) -> SessionRecord:
    return SessionRecord(
        id=record_id,
        completed_at=completed_at,
        outcome=SessionOutcome.EARLY,
        config=SessionConfig(),
        analysis=analysis,
    )


class FakeRemote:
    def __init__(self, records=(), fail=False):
        self.records = {r.id: r for r in records}
        self.fail = fail
        self.deleted = []
        self.on_fetch = None

    def fetch_history(self):
        if self.fail:
            raise ConnectionError("offline")
        fetched = list(self.records.values())
        if self.on_fetch is not None:
            self.on_fetch()
        return fetched

    def save_history_entry(self, record):
        if self.fail:
            raise ConnectionError("offline")
        self.records[record.id] = record

    def delete_history_entry(self, record_id):
        if self.fail:
            raise ConnectionError("offline")
        self.deleted.append(record_id)


class MergeHistoryTests(unittest.TestCase):
    def test_newer_copy_wins_and_remote_wins_ties(self) -> None:
        local = [
            _record("a", "2024-01-02T00:00:00+00:00", analysis="local"),
            _record("b", "2024-01-01T00:00:00+00:00", analysis="local"),
        ]
        remote = [
            _record("a", "2024-01-01T00:00:00+00:00", analysis="remote"),
            _record("b", "2024-01-01T00:00:00+00:00", analysis="remote"),
            _record("c", "2024-01-03T00:00:00+00:00", analysis="remote"),
        ]

        merged = merge_history(remote, local)

        self.assertEqual([r.id for r in merged], ["c", "a", "b"])
        by_id = {r.id: r.analysis for r in merged}
        self.assertEqual(by_id, {"a": "local", "b": "remote", "c": "remote"})

    def test_limit_keeps_newest(self) -> None:
        records = [_record(str(day), f"2024-01-{day:02d}T00:00:00+00:00") for day in range(1, 26)]

        merged = merge_history(records, [], limit=20)

        self.assertEqual(len(merged), 20)
        self.assertEqual(merged[0].id, "25")
        self.assertEqual(merged[-1].id, "6")


class HistoryServiceTests(unittest.TestCase):
    def setUp(self) -> None:
        self.persistence = InMemoryPersistence()

    def test_local_only_append_get_delete(self) -> None:
        service = HistoryService(self.persistence)
        service.append(_record("a", "2024-01-01T00:00:00+00:00"))

        self.assertEqual([r.id for r in service.entries()], ["a"])
        self.assertEqual(service.get("a").id, "a")
        self.assertIsNone(service.get("missing"))
        self.assertTrue(service.delete("a"))
        self.assertFalse(service.delete("a"))
        self.assertEqual(service.sync(), [])

    def test_append_pushes_to_remote(self) -> None:
        remote = FakeRemote()
        service = HistoryService(self.persistence, remote)

        service.append(_record("a", "2024-01-01T00:00:00+00:00"))

        self.assertIn("a", remote.records)

    def test_remote_failures_do_not_block_local_use(self) -> None:
        service = HistoryService(self.persistence, FakeRemote(fail=True))

        with self.assertLogs("hooptime.services.history_service", level="ERROR"):
            service.append(_record("a", "2024-01-01T00:00:00+00:00"))
            synced = service.sync()
            deleted = service.delete("a")

        self.assertEqual([r.id for r in synced], ["a"])
        self.assertTrue(deleted)

    def test_sync_merges_and_pushes_local_only_records(self) -> None:
        self.persistence.append_history(_record("local", "2024-01-01T00:00:00+00:00"))
        remote = FakeRemote([_record("remote", "2024-01-02T00:00:00+00:00")])
        service = HistoryService(self.persistence, remote)

        merged = service.sync()

        self.assertEqual([r.id for r in merged], ["remote", "local"])
        self.assertEqual([r.id for r in self.persistence.load_history()], ["remote", "local"])
        self.assertIn("local", remote.records)

    def test_record_appended_while_fetching_is_kept(self) -> None:
        self.persistence.append_history(_record("old", "2024-01-01T00:00:00+00:00"))
        remote = FakeRemote([_record("remote", "2024-01-02T00:00:00+00:00")])
        service = HistoryService(self.persistence, remote)
        remote.on_fetch = lambda: service.append(_record("new", "2024-01-03T00:00:00+00:00"))

        merged = service.sync()

        self.assertEqual([r.id for r in merged], ["new", "remote", "old"])
        self.assertEqual([r.id for r in service.entries()], ["new", "remote", "old"])

    def test_delete_forwards_to_remote(self) -> None:
        remote = FakeRemote()
        service = HistoryService(self.persistence, remote)
        service.append(_record("a", "2024-01-01T00:00:00+00:00"))

        service.delete("a")

        self.assertEqual(remote.deleted, ["a"])


if __name__ == "__main__":
    unittest.main()
