"""SQLModel-backed storage for timer sessions and per-tag statistics.

Every method is a single round-trip unit of work: it reads or writes, commits,
and returns. Nothing here spans more than one commit, so callers that
read-modify-write (start/stop) race last-write-wins against concurrent
requests for the same (user, tag).
"""
import logging
from contextlib import contextmanager
from datetime import datetime
from typing import List, Tuple

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from ..errors import NotFoundError, PersistenceError
from ..models import TimerSession, TimerStatus, UserTagStats

logger = logging.getLogger(__name__)

# (tag, total_duration, session_count)
TagTotalsRow = Tuple[str, int, int]


class TimerRepository:
    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _unit_of_work(self, action: str):
        try:
            yield
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Persistence failure while trying to %s", action)
            raise PersistenceError(f"Failed to {action}") from e

    def _save(self, row, action: str):
        with self._unit_of_work(action):
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
        return row

    # Timer sessions

    def find_timer_session(
        self, user_id: int, tag: str, status: TimerStatus
    ) -> TimerSession:
        with self._unit_of_work("find timer session"):
            timer_session = self.db.exec(
                select(TimerSession)
                .where(
                    TimerSession.user_id == user_id,
                    TimerSession.tag == tag,
                    TimerSession.status == status,
                )
                .order_by(TimerSession.created_at.desc(), TimerSession.id.desc())
            ).first()

        if timer_session is None:
            raise NotFoundError(f"No {status.value} timer for tag '{tag}'")
        return timer_session

    def create_timer_session(self, timer_session: TimerSession) -> TimerSession:
        return self._save(timer_session, "create timer session")

    def update_timer_session(self, timer_session: TimerSession) -> TimerSession:
        return self._save(timer_session, "update timer session")

    def abandon_running_timers(self, user_id: int, tag: str, now: datetime) -> int:
        """Force every ``running`` row for (user, tag) to ``completed``.

        Duration is left as it was at the last stop; the orphaned interval
        is never counted. Returns how many rows were flipped.
        """
        with self._unit_of_work("abandon running timers"):
            running = self.db.exec(
                select(TimerSession).where(
                    TimerSession.user_id == user_id,
                    TimerSession.tag == tag,
                    TimerSession.status == TimerStatus.RUNNING,
                )
            ).all()
            for timer_session in running:
                timer_session.status = TimerStatus.COMPLETED
                timer_session.end_time = now
                timer_session.last_updated = now
                self.db.add(timer_session)
            if running:
                self.db.commit()

        return len(running)

    def delete_timer_sessions(self, user_id: int, tag: str) -> int:
        with self._unit_of_work("delete timer sessions"):
            timer_sessions = self.db.exec(
                select(TimerSession).where(
                    TimerSession.user_id == user_id, TimerSession.tag == tag
                )
            ).all()
            for timer_session in timer_sessions:
                self.db.delete(timer_session)
            self.db.commit()
        return len(timer_sessions)

    # Tag statistics

    def find_user_tag_stats(self, user_id: int, tag: str) -> UserTagStats:
        with self._unit_of_work("find tag stats"):
            stats = self.db.exec(
                select(UserTagStats).where(
                    UserTagStats.user_id == user_id, UserTagStats.tag == tag
                )
            ).first()

        if stats is None:
            raise NotFoundError(f"No stats for tag '{tag}'")
        return stats

    def create_user_tag_stats(self, stats: UserTagStats) -> UserTagStats:
        return self._save(stats, "create tag stats")

    def update_user_tag_stats(self, stats: UserTagStats) -> UserTagStats:
        return self._save(stats, "update tag stats")

    def find_or_create_user_tag_stats(
        self, user_id: int, tag: str, now: datetime
    ) -> Tuple[UserTagStats, bool]:
        """Return the stats row for (user, tag) and whether it was just created."""
        try:
            return self.find_user_tag_stats(user_id, tag), False
        except NotFoundError:
            stats = UserTagStats(
                user_id=user_id,
                tag=tag,
                total_duration=0,
                session_count=1,
                last_updated=now,
            )
            return self.create_user_tag_stats(stats), True

    def find_all_user_tag_stats(self, user_id: int) -> List[UserTagStats]:
        with self._unit_of_work("list tag stats"):
            return list(
                self.db.exec(
                    select(UserTagStats)
                    .where(UserTagStats.user_id == user_id)
                    .order_by(UserTagStats.tag)
                ).all()
            )

    def delete_user_tag_stats(self, user_id: int, tag: str) -> int:
        with self._unit_of_work("delete tag stats"):
            rows = self.db.exec(
                select(UserTagStats).where(
                    UserTagStats.user_id == user_id, UserTagStats.tag == tag
                )
            ).all()
            for stats in rows:
                self.db.delete(stats)
            self.db.commit()
        return len(rows)

    # Read-only aggregation over completed sessions

    def get_stats_summary(
        self, user_id: int, start: datetime, end: datetime
    ) -> List[TagTotalsRow]:
        """Per-tag (total duration, session count) of completed sessions in range.

        Sorted by total duration descending, then tag name.
        """
        total = func.sum(TimerSession.duration).label("total_duration")
        with self._unit_of_work("aggregate stats"):
            rows = self.db.exec(
                select(TimerSession.tag, total, func.count(TimerSession.id))
                .where(
                    TimerSession.user_id == user_id,
                    TimerSession.status == TimerStatus.COMPLETED,
                    TimerSession.start_time >= start,
                    TimerSession.start_time <= end,
                )
                .group_by(TimerSession.tag)
                .order_by(total.desc(), TimerSession.tag)
            ).all()

        return [(tag, int(total or 0), int(count)) for tag, total, count in rows]

    def get_tag_sessions(
        self, user_id: int, tag: str, start: datetime, end: datetime
    ) -> List[TimerSession]:
        with self._unit_of_work("list tag sessions"):
            return list(
                self.db.exec(
                    select(TimerSession)
                    .where(
                        TimerSession.user_id == user_id,
                        TimerSession.tag == tag,
                        TimerSession.status == TimerStatus.COMPLETED,
                        TimerSession.start_time >= start,
                        TimerSession.start_time <= end,
                    )
                    .order_by(TimerSession.start_time.desc(), TimerSession.id.desc())
                ).all()
            )
