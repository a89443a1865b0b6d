import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List

from ..clock import Clock, as_utc, utcnow
from ..errors import ClockAnomalyError, NotFoundError, ValidationError
from ..models import TimerSession, TimerStatus
from .repository import TimerRepository

logger = logging.getLogger(__name__)


def normalize_tag(tag: str) -> str:
    """Strip surrounding whitespace; reject a tag that ends up empty."""
    cleaned = (tag or "").strip()
    if not cleaned:
        raise ValidationError("Tag cannot be empty")
    return cleaned


def elapsed_seconds(since: datetime, now: datetime) -> int:
    """Whole seconds between two timestamps. Negative means the clock went backwards."""
    delta = as_utc(now) - as_utc(since)
    if delta < timedelta(0):
        logger.warning("Negative elapsed time: last update %s is after now %s", since, now)
        raise ClockAnomalyError(
            f"Elapsed time is negative ({delta.total_seconds()}s); refusing to record it"
        )
    return int(delta.total_seconds())


@dataclass
class TimerState:
    """A session plus the duration to display for it right now."""

    session: TimerSession
    duration: int

    @property
    def status(self) -> TimerStatus:
        return self.session.status


class TimerService:
    """Per-(user, tag) timer transitions: idle -> running -> stopped -> completed.

    Each transition updates the session row and the tag's lifetime stats row
    through the repository. No state is kept between calls.
    """

    def __init__(self, repository: TimerRepository, now: Clock = utcnow):
        self.repository = repository
        self.now = now

    def start(self, user_id: int, tag: str) -> TimerState:
        tag = normalize_tag(tag)
        now = self.now()

        abandoned = self.repository.abandon_running_timers(user_id, tag, now)
        if abandoned:
            logger.info(
                "Completed %d orphaned running timer(s) for user %s tag '%s'",
                abandoned,
                user_id,
                tag,
            )

        try:
            timer_session = self.repository.find_timer_session(
                user_id, tag, TimerStatus.STOPPED
            )
        except NotFoundError:
            return self._start_fresh_run(user_id, tag, now)

        # Resume: keep the accumulated duration, do not count a new run
        timer_session.status = TimerStatus.RUNNING
        timer_session.last_updated = now
        timer_session = self.repository.update_timer_session(timer_session)
        logger.info(
            "Resumed timer %s for user %s tag '%s' at %ss",
            timer_session.id,
            user_id,
            tag,
            timer_session.duration,
        )
        return TimerState(session=timer_session, duration=timer_session.duration)

    def _start_fresh_run(self, user_id: int, tag: str, now: datetime) -> TimerState:
        timer_session = self.repository.create_timer_session(
            TimerSession(
                user_id=user_id,
                tag=tag,
                start_time=now,
                duration=0,
                status=TimerStatus.RUNNING,
                created_at=now,
                last_updated=now,
            )
        )

        stats, created = self.repository.find_or_create_user_tag_stats(
            user_id, tag, now
        )
        if not created:
            stats.session_count += 1
            stats.last_updated = now
            self.repository.update_user_tag_stats(stats)

        logger.info(
            "Started timer %s for user %s tag '%s' (run #%d)",
            timer_session.id,
            user_id,
            tag,
            stats.session_count,
        )
        return TimerState(session=timer_session, duration=0)

    def stop(self, user_id: int, tag: str) -> TimerState:
        tag = normalize_tag(tag)
        timer_session = self.repository.find_timer_session(
            user_id, tag, TimerStatus.RUNNING
        )

        now = self.now()
        elapsed = elapsed_seconds(timer_session.last_updated, now)

        timer_session.duration += elapsed
        timer_session.status = TimerStatus.STOPPED
        timer_session.last_updated = now
        timer_session = self.repository.update_timer_session(timer_session)

        stats = self.repository.find_user_tag_stats(user_id, tag)
        stats.total_duration += elapsed
        stats.last_updated = now
        self.repository.update_user_tag_stats(stats)

        logger.info(
            "Stopped timer %s for user %s tag '%s': +%ss, %ss total",
            timer_session.id,
            user_id,
            tag,
            elapsed,
            timer_session.duration,
        )
        return TimerState(session=timer_session, duration=timer_session.duration)

    def reset(self, user_id: int, tag: str) -> List[str]:
        """Complete the stopped session and return every tag the user has used."""
        tag = normalize_tag(tag)
        timer_session = self.repository.find_timer_session(
            user_id, tag, TimerStatus.STOPPED
        )

        now = self.now()
        timer_session.status = TimerStatus.COMPLETED
        timer_session.end_time = now
        timer_session.last_updated = now
        timer_session = self.repository.update_timer_session(timer_session)
        logger.info(
            "Completed timer %s for user %s tag '%s' with %ss",
            timer_session.id,
            user_id,
            tag,
            timer_session.duration,
        )

        return [
            stats.tag for stats in self.repository.find_all_user_tag_stats(user_id)
        ]

    def current(self, user_id: int, tag: str) -> TimerState:
        """Read-only view of the active session, including time since the last start."""
        tag = normalize_tag(tag)
        try:
            timer_session = self.repository.find_timer_session(
                user_id, tag, TimerStatus.RUNNING
            )
        except NotFoundError:
            try:
                timer_session = self.repository.find_timer_session(
                    user_id, tag, TimerStatus.STOPPED
                )
            except NotFoundError as e:
                raise NotFoundError(f"No active timer for tag '{tag}'") from e
            return TimerState(session=timer_session, duration=timer_session.duration)

        elapsed = elapsed_seconds(timer_session.last_updated, self.now())
        return TimerState(
            session=timer_session, duration=timer_session.duration + elapsed
        )
