"""Read-only statistics over persisted timer data."""
import logging
from datetime import datetime
from typing import List

from ..models import TimerSession, UserTagStats
from ..timers.repository import TagTotalsRow, TimerRepository
from ..timers.service import normalize_tag
from .schemas import StatsSummaryPublic, TagStatsPublic

logger = logging.getLogger(__name__)


def summarize(rows: List[TagTotalsRow]) -> StatsSummaryPublic:
    """Build a summary from per-tag totals already sorted by total descending."""
    grand_total = sum(total for _, total, _ in rows)
    total_sessions = sum(count for _, _, count in rows)

    breakdown = []
    for tag, total, count in rows:
        breakdown.append(
            TagStatsPublic(
                tag=tag,
                total_duration=total,
                session_count=count,
                average_session=total // count if count > 0 else 0,
                percentage_of_total=(
                    total / grand_total * 100 if grand_total > 0 else 0.0
                ),
            )
        )

    return StatsSummaryPublic(
        total_duration=grand_total,
        total_sessions=total_sessions,
        average_session=grand_total // total_sessions if total_sessions > 0 else 0,
        most_used_tag=breakdown[0].tag if breakdown else "",
        tag_breakdown=breakdown,
    )


class StatsService:
    def __init__(self, repository: TimerRepository):
        self.repository = repository

    def get_stats_summary(
        self, user_id: int, start: datetime, end: datetime
    ) -> StatsSummaryPublic:
        rows = self.repository.get_stats_summary(user_id, start, end)
        logger.debug(
            "Stats summary for user %s between %s and %s: %d tag(s)",
            user_id,
            start,
            end,
            len(rows),
        )
        return summarize(rows)

    def get_tag_sessions(
        self, user_id: int, tag: str, start: datetime, end: datetime
    ) -> List[TimerSession]:
        tag = normalize_tag(tag)
        return self.repository.get_tag_sessions(user_id, tag, start, end)

    def list_tag_stats(self, user_id: int) -> List[UserTagStats]:
        return self.repository.find_all_user_tag_stats(user_id)

    def delete_tag(self, user_id: int, tag: str) -> None:
        """Remove a tag's stats row and all of its sessions.

        The two deletes commit separately; a failure in between leaves
        sessions without a stats row.
        """
        tag = normalize_tag(tag)
        stats_deleted = self.repository.delete_user_tag_stats(user_id, tag)
        sessions_deleted = self.repository.delete_timer_sessions(user_id, tag)
        logger.info(
            "Deleted tag '%s' for user %s (%d stats row(s), %d session(s))",
            tag,
            user_id,
            stats_deleted,
            sessions_deleted,
        )
