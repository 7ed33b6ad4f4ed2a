"""
Player model for the HoopTime session tracker.

Roster management lives in the host application; the core only needs a
stable identifier plus display fields for archived snapshots.
"""
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Optional


def generate_id(prefix: str) -> str:
    """Return a unique identifier such as ``player-1b4e28ba...``."""
    return f"{prefix}-{uuid.uuid4()}"


@dataclass(frozen=True)
class Player:
    """
    A roster member.

    Attributes:
        id: Unique identifier used by the ledger and presence tracker
        name: Display name (may be empty)
        number: Jersey number as entered (free text)
    """
    id: str
    name: str = ""
    number: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"id": self.id, "name": self.name, "number": self.number}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Player":
        """Create from a possibly partial dictionary, generating a missing id."""
        data = data or {}
        player_id = data.get("id")
        name = data.get("name")
        number = data.get("number")
        return cls(
            id=player_id if isinstance(player_id, str) and player_id else generate_id("player"),
            name=name if isinstance(name, str) else "",
            number=number if isinstance(number, str) else "",
        )
