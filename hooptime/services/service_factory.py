"""
Service Factory for dependency injection.

This module builds a :class:`GameSession` with its collaborators wired in, so
hosts never assemble the clock, ledger and stores by hand.
"""
from typing import Optional, Sequence

from ..models import Player, SessionConfig
from .analytics_service import AnalyzerInterface, HistoryExporter, RotationAnalyzer
from .game_session import GameSession
from .history_service import HistoryService, RemoteHistoryInterface
from .persistence_service import InMemoryPersistence, JsonFilePersistence, PersistenceInterface
from .scheduler import ManualTickScheduler, TickScheduler


class ServiceFactory:
    """
    Factory for sessions and the services around them.

    Persistence, history and scheduler are created once per factory and shared
    by every session it builds.
    """

    def __init__(
        self,
        data_dir: Optional[str] = None,
        remote: Optional[RemoteHistoryInterface] = None,
        scheduler: Optional[TickScheduler] = None,
    ):
        """
        Args:
            data_dir: Directory for JSON storage; in-memory storage when None
            remote: Optional remote history collaborator
            scheduler: Tick scheduler; a host-driven one when None
        """
        self._data_dir = data_dir
        self._remote = remote
        self._scheduler = scheduler
        self._persistence: Optional[PersistenceInterface] = None
        self._history_service: Optional[HistoryService] = None
        self._analyzer: Optional[AnalyzerInterface] = None
        self._exporter: Optional[HistoryExporter] = None

    def get_persistence(self) -> PersistenceInterface:
        if self._persistence is None:
            if self._data_dir:
                self._persistence = JsonFilePersistence(self._data_dir)
            else:
                self._persistence = InMemoryPersistence()
        return self._persistence

    def get_scheduler(self) -> TickScheduler:
        if self._scheduler is None:
            self._scheduler = ManualTickScheduler()
        return self._scheduler

    def get_history_service(self) -> HistoryService:
        if self._history_service is None:
            self._history_service = HistoryService(self.get_persistence(), remote=self._remote)
        return self._history_service

    def get_analyzer(self) -> AnalyzerInterface:
        if self._analyzer is None:
            self._analyzer = RotationAnalyzer()
        return self._analyzer

    def get_exporter(self) -> HistoryExporter:
        if self._exporter is None:
            self._exporter = HistoryExporter()
        return self._exporter

    def configure_custom_analyzer(self, analyzer: AnalyzerInterface) -> None:
        self._analyzer = analyzer

    def create_session(
        self,
        config: SessionConfig,
        roster: Sequence[Player],
        *,
        auto_resume_after_substitution: bool = False,
    ) -> GameSession:
        """Create a fresh session in the setup phase."""
        return GameSession(
            config,
            roster,
            scheduler=self.get_scheduler(),
            persistence=self.get_persistence(),
            history=self.get_history_service(),
            analyzer=self.get_analyzer(),
            auto_resume_after_substitution=auto_resume_after_substitution,
        )

    def restore_session(self, *, auto_resume_after_substitution: bool = False) -> Optional[GameSession]:
        """Load the saved live session, if any. Its clock comes back stopped."""
        state = self.get_persistence().load_session()
        if state is None:
            return None
        return GameSession.from_state(
            state,
            scheduler=self.get_scheduler(),
            persistence=self.get_persistence(),
            history=self.get_history_service(),
            analyzer=self.get_analyzer(),
            auto_resume_after_substitution=auto_resume_after_substitution,
        )
