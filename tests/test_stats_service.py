"""
Tests for the read-only statistics: range summaries, per-tag session
history, lifetime tag listing and tag deletion.
"""
import unittest
from datetime import datetime, timedelta, timezone

from sqlmodel import Session, select

from support import FakeClock, make_engine, make_user

from productivity_timer.errors import ValidationError
from productivity_timer.models import TimerSession, TimerStatus
from productivity_timer.stats.service import StatsService, summarize
from productivity_timer.timers.repository import TimerRepository
from productivity_timer.timers.service import TimerService

RANGE_START = datetime(2026, 3, 1, 0, 0, tzinfo=timezone.utc)
RANGE_END = datetime(2026, 3, 31, 23, 59, tzinfo=timezone.utc)


class StatsServiceTestCase(unittest.TestCase):
    def setUp(self):
        self.engine = make_engine()
        self.db = Session(self.engine)
        self.user = make_user(self.db)
        self.repo = TimerRepository(self.db)
        self.stats = StatsService(self.repo)

    def tearDown(self):
        self.db.close()
        self.engine.dispose()

    def add_session(
        self,
        tag,
        duration,
        start_time=datetime(2026, 3, 10, 9, 0, tzinfo=timezone.utc),
        status=TimerStatus.COMPLETED,
        user_id=None,
    ):
        session = TimerSession(
            user_id=user_id or self.user.id,
            tag=tag,
            start_time=start_time,
            end_time=start_time + timedelta(seconds=duration)
            if status == TimerStatus.COMPLETED
            else None,
            duration=duration,
            status=status,
            created_at=start_time,
            last_updated=start_time,
        )
        return self.repo.create_timer_session(session)


class TestStatsSummary(StatsServiceTestCase):
    def test_summary_scenario(self):
        self.add_session("writing", 15)
        self.add_session("writing", 30, start_time=datetime(2026, 3, 11, 9, 0, tzinfo=timezone.utc))
        self.add_session("reading", 5)

        summary = self.stats.get_stats_summary(self.user.id, RANGE_START, RANGE_END)

        self.assertEqual(summary.total_duration, 50)
        self.assertEqual(summary.total_sessions, 3)
        self.assertEqual(summary.average_session, 16)
        self.assertEqual(summary.most_used_tag, "writing")
        self.assertEqual([t.tag for t in summary.tag_breakdown], ["writing", "reading"])

        writing, reading = summary.tag_breakdown
        self.assertEqual(writing.total_duration, 45)
        self.assertEqual(writing.session_count, 2)
        self.assertEqual(writing.average_session, 22)
        self.assertAlmostEqual(writing.percentage_of_total, 90.0)
        self.assertAlmostEqual(reading.percentage_of_total, 10.0)

    def test_only_completed_sessions_in_range_are_counted(self):
        self.add_session("writing", 15)
        self.add_session("writing", 100, status=TimerStatus.RUNNING)
        self.add_session("writing", 200, status=TimerStatus.STOPPED)
        self.add_session("writing", 400, start_time=datetime(2026, 2, 28, 23, 59, tzinfo=timezone.utc))
        self.add_session("writing", 800, start_time=datetime(2026, 4, 1, 0, 0, tzinfo=timezone.utc))

        summary = self.stats.get_stats_summary(self.user.id, RANGE_START, RANGE_END)

        self.assertEqual(summary.total_duration, 15)
        self.assertEqual(summary.total_sessions, 1)

    def test_range_bounds_are_inclusive(self):
        self.add_session("writing", 10, start_time=RANGE_START)
        self.add_session("writing", 20, start_time=RANGE_END)

        summary = self.stats.get_stats_summary(self.user.id, RANGE_START, RANGE_END)
        self.assertEqual(summary.total_duration, 30)

    def test_other_users_sessions_are_ignored(self):
        bob = make_user(self.db, provider_id="bob-1", email="bob@example.com")
        self.add_session("writing", 15)
        self.add_session("writing", 99, user_id=bob.id)

        summary = self.stats.get_stats_summary(self.user.id, RANGE_START, RANGE_END)
        self.assertEqual(summary.total_duration, 15)

    def test_empty_range(self):
        summary = self.stats.get_stats_summary(self.user.id, RANGE_START, RANGE_END)

        self.assertEqual(summary.total_duration, 0)
        self.assertEqual(summary.total_sessions, 0)
        self.assertEqual(summary.average_session, 0)
        self.assertEqual(summary.most_used_tag, "")
        self.assertEqual(summary.tag_breakdown, [])

    def test_zero_duration_sessions_do_not_divide_by_zero(self):
        self.add_session("writing", 0)

        summary = self.stats.get_stats_summary(self.user.id, RANGE_START, RANGE_END)

        self.assertEqual(summary.total_sessions, 1)
        self.assertEqual(summary.tag_breakdown[0].percentage_of_total, 0.0)
        self.assertEqual(summary.most_used_tag, "writing")

    def test_summary_is_idempotent(self):
        self.add_session("writing", 15)
        self.add_session("reading", 5)

        first = self.stats.get_stats_summary(self.user.id, RANGE_START, RANGE_END)
        second = self.stats.get_stats_summary(self.user.id, RANGE_START, RANGE_END)

        self.assertEqual(first, second)


class TestSummarize(unittest.TestCase):
    def test_ties_keep_repository_order(self):
        summary = summarize([("coding", 10, 1), ("reading", 10, 2)])

        self.assertEqual(summary.most_used_tag, "coding")
        self.assertEqual(summary.tag_breakdown[1].average_session, 5)

    def test_zero_count_skips_average(self):
        summary = summarize([("writing", 0, 0)])
        self.assertEqual(summary.tag_breakdown[0].average_session, 0)
        self.assertEqual(summary.average_session, 0)


class TestTagSessions(StatsServiceTestCase):
    def test_sessions_are_most_recent_first(self):
        older = self.add_session("writing", 15, start_time=datetime(2026, 3, 5, 9, 0, tzinfo=timezone.utc))
        newer = self.add_session("writing", 30, start_time=datetime(2026, 3, 20, 9, 0, tzinfo=timezone.utc))
        self.add_session("reading", 5)
        self.add_session("writing", 60, status=TimerStatus.STOPPED)

        sessions = self.stats.get_tag_sessions(
            self.user.id, "writing", RANGE_START, RANGE_END
        )

        self.assertEqual([s.id for s in sessions], [newer.id, older.id])

    def test_sessions_outside_range_are_excluded(self):
        self.add_session("writing", 15, start_time=datetime(2026, 5, 1, 9, 0, tzinfo=timezone.utc))

        self.assertEqual(
            self.stats.get_tag_sessions(self.user.id, "writing", RANGE_START, RANGE_END),
            [],
        )

    def test_tag_sessions_are_idempotent(self):
        self.add_session("writing", 15)

        first = self.stats.get_tag_sessions(self.user.id, "writing", RANGE_START, RANGE_END)
        second = self.stats.get_tag_sessions(self.user.id, "writing", RANGE_START, RANGE_END)

        self.assertEqual([(s.id, s.duration) for s in first], [(s.id, s.duration) for s in second])

    def test_empty_tag_is_rejected(self):
        with self.assertRaises(ValidationError):
            self.stats.get_tag_sessions(self.user.id, " ", RANGE_START, RANGE_END)


class TestTagLifecycle(StatsServiceTestCase):
    def setUp(self):
        super().setUp()
        self.clock = FakeClock(datetime(2026, 3, 10, 9, 0, tzinfo=timezone.utc))
        self.timers = TimerService(self.repo, now=self.clock)

    def run_timer(self, tag, seconds):
        self.timers.start(self.user.id, tag)
        self.clock.advance(seconds)
        self.timers.stop(self.user.id, tag)
        self.timers.reset(self.user.id, tag)

    def test_list_tag_stats(self):
        self.run_timer("writing", 15)
        self.run_timer("writing", 30)
        self.run_timer("reading", 5)

        rows = self.stats.list_tag_stats(self.user.id)

        self.assertEqual(
            [(r.tag, r.total_duration, r.session_count) for r in rows],
            [("reading", 5, 1), ("writing", 45, 2)],
        )

    def test_completed_timers_feed_the_summary(self):
        self.run_timer("writing", 15)
        self.run_timer("writing", 30)
        self.run_timer("reading", 5)

        summary = self.stats.get_stats_summary(self.user.id, RANGE_START, RANGE_END)

        self.assertEqual(summary.total_duration, 50)
        self.assertEqual(summary.most_used_tag, "writing")

    def test_delete_tag_removes_stats_and_sessions(self):
        self.run_timer("writing", 15)
        self.run_timer("reading", 5)
        self.timers.start(self.user.id, "writing")

        self.stats.delete_tag(self.user.id, "writing")

        self.assertEqual([r.tag for r in self.stats.list_tag_stats(self.user.id)], ["reading"])
        self.assertEqual(
            self.stats.get_tag_sessions(self.user.id, "writing", RANGE_START, RANGE_END),
            [],
        )
        remaining = self.db.exec(select(TimerSession)).all()
        self.assertEqual({s.tag for s in remaining}, {"reading"})

    def test_deleting_unknown_tag_is_a_no_op(self):
        self.run_timer("reading", 5)

        self.stats.delete_tag(self.user.id, "writing")

        self.assertEqual([r.tag for r in self.stats.list_tag_stats(self.user.id)], ["reading"])

    def test_tag_can_be_started_again_after_delete(self):
        self.run_timer("writing", 15)
        self.stats.delete_tag(self.user.id, "writing")

        self.timers.start(self.user.id, "writing")

        stats = self.repo.find_user_tag_stats(self.user.id, "writing")
        self.assertEqual((stats.session_count, stats.total_duration), (1, 0))


if __name__ == "__main__":
    unittest.main()
