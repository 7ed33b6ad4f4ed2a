"""
Session configuration model.

A :class:`SessionConfig` is immutable; changes produce a new instance through
``dataclasses.replace`` so a running session can never see a half-updated
configuration.
"""
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional

from ..utils import (
    ALLOWED_PERIOD_SECONDS, DEFAULT_PERIOD_COUNT, DEFAULT_PERIOD_MINUTES,
    DEFAULT_PERIOD_SECONDS, DEFAULT_PERIOD_TYPE, MAX_PERIOD_COUNT, MAX_PERIOD_MINUTES,
    MIN_PERIOD_COUNT, MIN_PERIOD_MINUTES, PERIOD_TYPE_COUNTS,
)


class PeriodType(Enum):
    """How periods are labelled. Purely cosmetic apart from the default count."""
    QUARTERS = "Quarters"
    HALVES = "Halves"

    @classmethod
    def parse(cls, value: Any) -> "PeriodType":
        if isinstance(value, cls):
            return value
        for member in cls:
            if member.value == value:
                return member
        return cls(DEFAULT_PERIOD_TYPE)


@dataclass(frozen=True)
class SessionConfig:
    """
    Configuration for one game session.

    Attributes:
        period_count: Number of timed periods
        period_minutes: Whole minutes of each period
        period_seconds: Extra seconds of each period, one of ALLOWED_PERIOD_SECONDS
        period_type: Label style for periods
        opponent_name: Free text
    """
    period_count: int = DEFAULT_PERIOD_COUNT
    period_minutes: int = DEFAULT_PERIOD_MINUTES
    period_seconds: int = DEFAULT_PERIOD_SECONDS
    period_type: PeriodType = PeriodType(DEFAULT_PERIOD_TYPE)
    opponent_name: str = ""

    @property
    def period_length_seconds(self) -> int:
        return self.period_minutes * 60 + self.period_seconds

    def validate(self) -> None:
        """
        Check the configuration.

        Raises:
            ValueError: If any field is out of range or the period length is zero
        """
        if not MIN_PERIOD_COUNT <= self.period_count <= MAX_PERIOD_COUNT:
            raise ValueError(
                f"Period count must be between {MIN_PERIOD_COUNT} and {MAX_PERIOD_COUNT}"
            )
        if not MIN_PERIOD_MINUTES <= self.period_minutes <= MAX_PERIOD_MINUTES:
            raise ValueError(
                f"Period minutes must be between {MIN_PERIOD_MINUTES} and {MAX_PERIOD_MINUTES}"
            )
        if self.period_seconds not in ALLOWED_PERIOD_SECONDS:
            raise ValueError(f"Period seconds must be one of {ALLOWED_PERIOD_SECONDS}")
        if self.period_length_seconds <= 0:
            raise ValueError("Period length must be greater than zero")

    def with_period_type(self, period_type: PeriodType) -> "SessionConfig":
        """Switch label style, re-deriving the period count from it."""
        period_type = PeriodType.parse(period_type)
        return replace(
            self,
            period_type=period_type,
            period_count=PERIOD_TYPE_COUNTS.get(period_type.value, self.period_count),
        )

    def with_period_length(self, minutes: int, seconds: int) -> "SessionConfig":
        updated = replace(self, period_minutes=int(minutes), period_seconds=int(seconds))
        updated.validate()
        return updated

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "period_count": self.period_count,
            "period_minutes": self.period_minutes,
            "period_seconds": self.period_seconds,
            "period_type": self.period_type.value,
            "opponent_name": self.opponent_name,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "SessionConfig":
        """
        Create from a possibly partial dictionary.

        Missing keys fall back to the defaults; the result is validated.

        Raises:
            ValueError: If the merged values do not form a valid configuration
        """
        data = data or {}
        defaults = cls()
        try:
            config = cls(
                period_count=int(data.get("period_count", defaults.period_count)),
                period_minutes=int(data.get("period_minutes", defaults.period_minutes)),
                period_seconds=int(data.get("period_seconds", defaults.period_seconds)),
                period_type=PeriodType.parse(data.get("period_type", defaults.period_type)),
                opponent_name=str(data.get("opponent_name") or ""),
            )
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid session configuration: {exc}") from exc
        config.validate()
        return config
