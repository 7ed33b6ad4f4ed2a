"""
Services package for the HoopTime session tracker.

This package contains the clock and time-accounting engine plus the services
that persist, archive and report on sessions.
"""
from .scheduler import TickScheduler, ManualTickScheduler
from .clock_engine import ClockEngine
from .time_ledger import TimeLedger
from .presence_tracker import PresenceTracker
from .period_machine import PeriodStateMachine
from .session_archiver import SessionArchiver
from .persistence_service import PersistenceInterface, InMemoryPersistence, JsonFilePersistence
from .history_service import HistoryService, RemoteHistoryInterface, merge_history
from .analytics_service import AnalyticsService, RotationAnalyzer, HistoryExporter
from .game_session import GameSession, SessionPhase
from .service_factory import ServiceFactory

__all__ = [
    "TickScheduler", "ManualTickScheduler", "ClockEngine", "TimeLedger",
    "PresenceTracker", "PeriodStateMachine", "SessionArchiver",
    "PersistenceInterface", "InMemoryPersistence", "JsonFilePersistence",
    "HistoryService", "RemoteHistoryInterface", "merge_history",
    "AnalyticsService", "RotationAnalyzer", "HistoryExporter",
    "GameSession", "SessionPhase", "ServiceFactory"
]
