"""
Persistence service for the HoopTime session tracker.

This module handles saving and loading the live session and the archived
history. Storage is treated as an opaque key-value store; the only schema is
what the models' ``to_json``/``to_dict`` produce.
"""
import json
import logging
import os
from typing import Dict, List, Optional, Protocol

from ..models import GameState, SessionRecord
from ..utils import HISTORY_FILE_NAME, HISTORY_LIMIT, SESSION_FILE_NAME

logger = logging.getLogger(__name__)


class PersistenceInterface(Protocol):
    """Storage contract used by the session and the history service."""

    def load_session(self) -> Optional[GameState]:
        ...

    def save_session(self, state: GameState) -> None:
        ...

    def clear_session(self) -> None:
        ...

    def load_history(self) -> List[SessionRecord]:
        ...

    def save_history(self, records: List[SessionRecord]) -> None:
        ...

    def append_history(self, record: SessionRecord, limit: int = HISTORY_LIMIT) -> List[SessionRecord]:
        ...

    def delete_history(self, record_id: str) -> bool:
        ...


def sort_history(records: List[SessionRecord]) -> List[SessionRecord]:
    """Newest first by completion time."""
    return sorted(records, key=lambda r: r.completed_ts, reverse=True)


def append_with_limit(
    records: List[SessionRecord], record: SessionRecord, limit: int
) -> List[SessionRecord]:
    """Insert ``record`` (replacing any with the same id) and evict the oldest past ``limit``."""
    kept = [r for r in records if r.id != record.id]
    return sort_history([record] + kept)[: max(0, limit)]


class InMemoryPersistence:
    """Dictionary-backed storage; used when no data directory is configured."""

    def __init__(self):
        self._store: Dict[str, object] = {}

    def load_session(self) -> Optional[GameState]:
        data = self._store.get(SESSION_FILE_NAME)
        return GameState.from_json(data) if data is not None else None

    def save_session(self, state: GameState) -> None:
        self._store[SESSION_FILE_NAME] = state.to_json()

    def clear_session(self) -> None:
        self._store.pop(SESSION_FILE_NAME, None)

    def load_history(self) -> List[SessionRecord]:
        raw = self._store.get(HISTORY_FILE_NAME) or []
        return sort_history([SessionRecord.from_dict(entry) for entry in raw])

    def save_history(self, records: List[SessionRecord]) -> None:
        self._store[HISTORY_FILE_NAME] = [r.to_dict() for r in sort_history(records)]

    def append_history(self, record: SessionRecord, limit: int = HISTORY_LIMIT) -> List[SessionRecord]:
        updated = append_with_limit(self.load_history(), record, limit)
        self.save_history(updated)
        return updated

    def delete_history(self, record_id: str) -> bool:
        records = self.load_history()
        kept = [r for r in records if r.id != record_id]
        if len(kept) == len(records):
            return False
        self.save_history(kept)
        return True


class JsonFilePersistence(InMemoryPersistence):
    """
    Store the live session and the history as JSON files in one directory.

    Unreadable or corrupt files are logged and treated as empty so a bad file
    never blocks a new session.
    """

    def __init__(self, directory: str):
        super().__init__()
        self.directory = directory
        self.session_path = os.path.join(directory, SESSION_FILE_NAME)
        self.history_path = os.path.join(directory, HISTORY_FILE_NAME)

    def load_session(self) -> Optional[GameState]:
        data = self._read_json(self.session_path)
        if data is None:
            return None
        try:
            return GameState.from_json(data)
        except (KeyError, TypeError, ValueError):
            logger.exception("Failed to recover session from %s", self.session_path)
            return None

    def save_session(self, state: GameState) -> None:
        """
        Save session state to the session file.

        Raises:
            OSError: If the file cannot be written
        """
        self._write_json(self.session_path, state.to_json())

    def clear_session(self) -> None:
        try:
            os.remove(self.session_path)
        except FileNotFoundError:
            pass

    def load_history(self) -> List[SessionRecord]:
        raw = self._read_json(self.history_path)
        if not isinstance(raw, list):
            return []
        records = []
        for entry in raw:
            if not isinstance(entry, dict):
                continue
            try:
                records.append(SessionRecord.from_dict(entry))
            except (TypeError, ValueError):
                logger.warning("Skipping unreadable history entry %r", entry.get("id"))
        return sort_history(records)

    def save_history(self, records: List[SessionRecord]) -> None:
        self._write_json(self.history_path, [r.to_dict() for r in sort_history(records)])

    def _read_json(self, file_path: str):
        if not os.path.exists(file_path):
            return None
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError):
            logger.exception("Failed to read %s", file_path)
            return None

    def _write_json(self, file_path: str, payload) -> None:
        # Ensure directory exists
        if self.directory and not os.path.exists(self.directory):
            os.makedirs(self.directory)

        tmp_path = f"{file_path}.tmp"
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2)
            os.replace(tmp_path, file_path)
        finally:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
