"""
History service: archived sessions, local first with optional remote sync.

The local store is authoritative for the running app. A remote store, when
configured, is merged in by record id; its failures are logged and never
interrupt local use.
"""
import logging
import threading
from typing import Iterable, List, Optional, Protocol

from ..models import SessionRecord
from ..utils import HISTORY_LIMIT
from .persistence_service import PersistenceInterface, sort_history

logger = logging.getLogger(__name__)


class RemoteHistoryInterface(Protocol):
    """Remote sync collaborator. Any method may raise."""

    def fetch_history(self) -> List[SessionRecord]:
        ...

    def save_history_entry(self, record: SessionRecord) -> None:
        ...

    def delete_history_entry(self, record_id: str) -> None:
        ...


def merge_history(
    remote: Iterable[SessionRecord],
    local: Iterable[SessionRecord],
    limit: int = HISTORY_LIMIT,
) -> List[SessionRecord]:
    """
    Merge two record lists by id.

    When both sides hold the same id the newer ``completed_at`` wins and the
    remote copy wins a tie. The result is newest first and capped at ``limit``.
    """
    merged = {}
    for record in local:
        merged[record.id] = record
    for record in remote:
        existing = merged.get(record.id)
        if existing is None or record.completed_ts >= existing.completed_ts:
            merged[record.id] = record
    return sort_history(list(merged.values()))[: max(0, limit)]


class HistoryService:
    """Read, append, delete and sync archived session records."""

    def __init__(
        self,
        persistence: PersistenceInterface,
        remote: Optional[RemoteHistoryInterface] = None,
        limit: int = HISTORY_LIMIT,
    ):
        self.persistence = persistence
        self.remote = remote
        self.limit = limit
        # Guards every read-modify-write of the local store
        self._lock = threading.RLock()

    def entries(self) -> List[SessionRecord]:
        try:
            return self.persistence.load_history()
        except Exception:
            logger.exception("Failed to load history")
            return []

    def get(self, record_id: str) -> Optional[SessionRecord]:
        for record in self.entries():
            if record.id == record_id:
                return record
        return None

    def append(self, record: SessionRecord) -> None:
        """
        Store a new record locally, then push it to the remote.

        Raises:
            Exception: Whatever the local store raises; the archiver logs it
        """
        with self._lock:
            self.persistence.append_history(record, self.limit)
        if self.remote is not None:
            try:
                self.remote.save_history_entry(record)
            except Exception:
                logger.exception("Failed to sync history entry %s", record.id)

    def delete(self, record_id: str) -> bool:
        try:
            with self._lock:
                deleted = self.persistence.delete_history(record_id)
        except Exception:
            logger.exception("Failed to delete history entry %s", record_id)
            return False
        if self.remote is not None:
            try:
                self.remote.delete_history_entry(record_id)
            except Exception:
                logger.exception("Failed to delete remote history entry %s", record_id)
        return deleted

    def sync(self) -> List[SessionRecord]:
        """
        Merge remote history into local and push local-only records up.

        Returns:
            The merged local history; the unchanged local history when there
            is no remote or the remote fetch fails
        """
        if self.remote is None:
            return self.entries()
        try:
            remote_records = list(self.remote.fetch_history())
        except Exception:
            logger.exception("Failed to sync history")
            return self.entries()

        with self._lock:
            # Read local only after the fetch so records archived meanwhile are kept
            local = self.entries()
            merged = merge_history(remote_records, local, self.limit)
            try:
                self.persistence.save_history(merged)
            except Exception:
                logger.exception("Failed to persist merged history")

        remote_ids = {r.id for r in remote_records}
        for record in local:
            if record.id in remote_ids:
                continue
            try:
                self.remote.save_history_entry(record)
            except Exception:
                logger.exception("Failed to sync history entry %s", record.id)
        return merged
