"""Roster presence tracker: who is on court right now."""
import logging
from typing import Iterable, List, Sequence

from ..utils import LINEUP_SIZE

logger = logging.getLogger(__name__)


class PresenceTracker:
    """
    Owns the set of on-court player ids.

    The set only changes through :meth:`set_initial_lineup` and
    :meth:`substitute`. Rejected requests leave it untouched. Insertion order
    is kept so the serialized lineup is stable.
    """

    def __init__(self, lineup_size: int = LINEUP_SIZE, on_court: Iterable[str] = ()):
        self.lineup_size = lineup_size
        self._on_court: List[str] = list(dict.fromkeys(on_court))
        self._lineup_set = bool(self._on_court)

    @property
    def lineup_set(self) -> bool:
        return self._lineup_set

    def current(self) -> List[str]:
        """Snapshot of the on-court ids."""
        return list(self._on_court)

    def is_on_court(self, player_id: str) -> bool:
        return player_id in self._on_court

    def __len__(self) -> int:
        return len(self._on_court)

    def set_initial_lineup(self, ids: Sequence[str]) -> bool:
        """
        Set the starting lineup. Allowed once per session.

        Returns:
            False if a lineup is already set, ids repeat, or the count is not
            exactly the lineup size
        """
        ids = list(ids)
        if self._lineup_set:
            logger.debug("Rejected lineup: already set")
            return False
        if len(ids) != self.lineup_size or len(set(ids)) != len(ids):
            logger.debug("Rejected lineup of %s ids (need %s unique)", len(ids), self.lineup_size)
            return False
        self._on_court = ids
        self._lineup_set = True
        return True

    def can_substitute(self, outgoing_ids: Sequence[str], incoming_ids: Sequence[str]) -> bool:
        """Whether :meth:`substitute` would accept this request."""
        outgoing = list(outgoing_ids)
        incoming = list(incoming_ids)
        if not outgoing or len(outgoing) != len(incoming):
            return False
        if len(set(outgoing)) != len(outgoing) or len(set(incoming)) != len(incoming):
            return False
        if not set(outgoing).issubset(self._on_court):
            return False
        remaining = set(self._on_court) - set(outgoing)
        return remaining.isdisjoint(incoming)

    def substitute(self, outgoing_ids: Sequence[str], incoming_ids: Sequence[str]) -> bool:
        """
        Swap ``outgoing_ids`` for ``incoming_ids`` in one step.

        Incoming players take the outgoing players' slots in order.

        Returns:
            True if the swap was applied
        """
        if not self.can_substitute(outgoing_ids, incoming_ids):
            logger.debug("Rejected substitution out=%s in=%s", list(outgoing_ids), list(incoming_ids))
            return False
        replacements = dict(zip(outgoing_ids, incoming_ids))
        self._on_court = [replacements.get(pid, pid) for pid in self._on_court]
        return True
