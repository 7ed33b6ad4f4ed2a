"""Playing-time analytics for the HoopTime session tracker."""

from __future__ import annotations

import csv
import io
import statistics
from collections import Counter
from typing import Dict, Iterable, List, Optional, Protocol, Sequence

from ..models import GameReport, ParticipantTimeRecord, Player, PlayerTimeSummary, SessionRecord
from ..utils import (
    FAIRNESS_THRESHOLD_SECONDS, LINEUP_SIZE, format_player_name, format_seconds,
    period_short_label,
)

FAIRNESS_ORDER = {"under": 0, "ok": 1, "over": 2}


class AnalyzerInterface(Protocol):
    """Analysis collaborator invoked once when a session completes."""

    def analyze(
        self, roster: Sequence[Player], records: Sequence[ParticipantTimeRecord]
    ) -> Optional[str]:
        ...


class AnalyticsService:
    """Generate reports describing playing time distribution."""

    def __init__(self, lineup_size: int = LINEUP_SIZE, threshold_seconds: int = FAIRNESS_THRESHOLD_SECONDS):
        self.lineup_size = lineup_size
        self.threshold_seconds = threshold_seconds

    def generate_report(
        self,
        roster: Sequence[Player],
        records: Iterable[ParticipantTimeRecord],
        *,
        elapsed_seconds: Optional[int] = None,
        on_court_ids: Iterable[str] = (),
    ) -> GameReport:
        """
        Build a :class:`GameReport` from ledger records.

        Args:
            roster: Players to report on, in display order
            records: Ledger records keyed by player id
            elapsed_seconds: Game seconds played; derived from the records and
                lineup size when omitted
            on_court_ids: Players currently on court
        """
        by_id: Dict[str, ParticipantTimeRecord] = {r.player_id: r for r in records}
        on_court = set(on_court_ids)
        roster_size = len(roster)

        if elapsed_seconds is None:
            total = sum(r.total_seconds for r in by_id.values())
            elapsed_seconds = int(round(total / self.lineup_size)) if self.lineup_size else 0

        # Everyone shares lineup_size court slots for the whole game
        target = 0
        if roster_size:
            target = int(round(elapsed_seconds * min(self.lineup_size, roster_size) / roster_size))

        summaries: List[PlayerTimeSummary] = []
        for player in roster:
            record = by_id.get(player.id)
            total = record.total_seconds if record else 0
            delta = total - target
            summaries.append(
                PlayerTimeSummary(
                    player_id=player.id,
                    name=player.name,
                    number=player.number,
                    on_court=player.id in on_court,
                    total_seconds=total,
                    period_seconds=list(record.period_seconds) if record else [],
                    share_of_game=(total / elapsed_seconds) if elapsed_seconds > 0 else 0.0,
                    target_seconds=target,
                    delta_seconds=delta,
                    fairness=self._classify_fairness(delta),
                )
            )

        summaries.sort(key=lambda s: (FAIRNESS_ORDER[s.fairness], s.total_seconds, s.name))
        totals = [s.total_seconds for s in summaries]
        counts = Counter(s.fairness for s in summaries)

        return GameReport(
            roster_size=roster_size,
            lineup_size=self.lineup_size,
            elapsed_seconds=elapsed_seconds,
            target_seconds_per_player=target,
            players=summaries,
            average_seconds=statistics.mean(totals) if totals else 0.0,
            median_seconds=statistics.median(totals) if totals else 0.0,
            min_seconds=min(totals) if totals else 0,
            max_seconds=max(totals) if totals else 0,
            fairness_counts={key: counts.get(key, 0) for key in FAIRNESS_ORDER},
        )

    def _classify_fairness(self, delta: int) -> str:
        if delta < -self.threshold_seconds:
            return "under"
        if delta > self.threshold_seconds:
            return "over"
        return "ok"


class RotationAnalyzer:
    """
    Local analysis collaborator.

    Summarizes the rotation as plain text: minutes range, players who sat
    noticeably more or less than a fair share.
    """

    def __init__(self, analytics: Optional[AnalyticsService] = None):
        self.analytics = analytics or AnalyticsService()

    def analyze(
        self, roster: Sequence[Player], records: Sequence[ParticipantTimeRecord]
    ) -> Optional[str]:
        report = self.analytics.generate_report(roster, records)
        if not report.players or report.elapsed_seconds <= 0:
            return None

        lines = [
            f"Game time tracked: {format_seconds(report.elapsed_seconds)}. "
            f"Fair share per player: {format_seconds(report.target_seconds_per_player)}.",
            f"Playing time ranged from {format_seconds(report.min_seconds)} "
            f"to {format_seconds(report.max_seconds)}.",
        ]
        over = [s for s in report.players if s.fairness == "over"]
        under = [s for s in report.players if s.fairness == "under"]
        if over:
            lines.append("Heavy minutes: " + ", ".join(self._describe(s) for s in over) + ".")
        if under:
            lines.append("Light minutes: " + ", ".join(self._describe(s) for s in under) + ".")
        if not over and not under:
            lines.append("Minutes were evenly distributed.")
        else:
            lines.append("Consider shifting rotation time from the heavy group to the light group next game.")
        return "\n".join(lines)

    @staticmethod
    def _describe(summary: PlayerTimeSummary) -> str:
        label = format_player_name(summary.name)
        if summary.number:
            label = f"#{summary.number} {label}"
        return f"{label} ({format_seconds(summary.total_seconds)})"


class HistoryExporter:
    """Render archived records for download."""

    def export_to_csv(self, record: SessionRecord) -> str:
        """One row per roster player with per-period and total seconds."""
        config = record.config
        period_type = config.period_type.value
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(
            ["Number", "Name"]
            + [period_short_label(p, period_type) for p in range(1, config.period_count + 1)]
            + ["Total"]
        )
        for player in record.roster:
            stats = record.stats_for(player.id)
            per_period = [stats.seconds_in(p) if stats else 0 for p in range(1, config.period_count + 1)]
            writer.writerow(
                [player.number, player.name]
                + [format_seconds(s) for s in per_period]
                + [format_seconds(stats.total_seconds if stats else 0)]
            )
        return buffer.getvalue()
