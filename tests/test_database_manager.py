"""
Tests for practice session persistence, progress and statistics.
"""

from datetime import datetime, timedelta

import pytest

from speech_practice.managers.database_manager import DatabaseManager
from speech_practice.models.database import DEMO_USER


USER_ID = DEMO_USER["id"]


class TestSessions:

    async def test_demo_user_seeded(self, db_manager):
        user = await db_manager.get_user(USER_ID)
        assert user.name == "Demo User"
        assert user.email == "demo@example.com"

    async def test_create_session(self, db_manager, make_session):
        session = await db_manager.create_session(USER_ID, make_session())
        data = session.to_dict()

        assert len(data["id"]) == 36
        assert data["user_id"] == USER_ID
        assert data["category_id"] == "interview"
        assert data["metrics"] == {"fillerWords": 2, "speechRate": 120, "pauseDuration": 8.5, "confidence": 0.82}
        assert data["feedback"]["summary"] == "Clear answer with a confident close."
        assert data["confidence_score"] == 0.82
        assert data["duration_seconds"] == 45

    async def test_sessions_newest_first(self, db_manager, make_session):
        first = await db_manager.create_session(USER_ID, make_session(question_id="biggest-weakness"))
        second = await db_manager.create_session(USER_ID, make_session(question_id="why-should-we-hire-you"))

        sessions = await db_manager.get_user_sessions(USER_ID)
        assert [s.id for s in sessions] == [second.id, first.id]

        limited = await db_manager.get_user_sessions(USER_ID, limit=1)
        assert [s.id for s in limited] == [second.id]

    async def test_get_and_delete(self, db_manager, make_session):
        created = await db_manager.create_session(USER_ID, make_session())

        fetched = await db_manager.get_session(created.id)
        assert fetched.transcript == "I led the migration to the new billing system."

        assert await db_manager.delete_session(created.id) is True
        assert await db_manager.get_session(created.id) is None
        assert await db_manager.delete_session(created.id) is False

    async def test_sessions_scoped_to_user(self, db_manager, make_session):
        await db_manager.create_session(USER_ID, make_session())
        assert await db_manager.get_user_sessions(999) == []


class TestProgress:

    async def test_empty_progress(self, db_manager):
        assert await db_manager.get_user_progress(USER_ID) == []

        stats = await db_manager.get_session_stats(USER_ID)
        assert stats["total_sessions"] == 0
        assert stats["current_streak_days"] == 0

    async def test_progress_by_category(self, db_manager, make_session):
        await db_manager.create_session(USER_ID, make_session(confidence=0.6))
        await db_manager.create_session(USER_ID, make_session(confidence=0.8))
        await db_manager.create_session(USER_ID, make_session(question_id="biggest-weakness", confidence=0.7))
        await db_manager.create_session(USER_ID, make_session(
            category_id="networking", question_id="ice-breaker", confidence=0.9
        ))

        progress = {p["category_id"]: p for p in await db_manager.get_user_progress(USER_ID)}

        assert set(progress) == {"interview", "networking"}
        assert progress["interview"]["sessions"] == 3
        assert progress["interview"]["questions_practiced"] == 2
        assert progress["interview"]["average_confidence"] == pytest.approx(0.7)
        assert progress["interview"]["best_confidence"] == 0.8
        assert progress["networking"]["sessions"] == 1
        assert progress["networking"]["last_practiced_at"] is not None

    async def test_session_stats(self, db_manager, make_session):
        await db_manager.create_session(USER_ID, make_session(duration_seconds=30, confidence=0.5))
        await db_manager.create_session(USER_ID, make_session(duration_seconds=60, confidence=0.9))

        stats = await db_manager.get_session_stats(USER_ID)

        assert stats["total_sessions"] == 2
        assert stats["total_practice_seconds"] == 90
        assert stats["average_confidence"] == pytest.approx(0.7)
        assert stats["average_filler_words"] == 2.0
        assert stats["average_speech_rate"] == 120.0
        assert stats["sessions_this_week"] == 2
        assert stats["current_streak_days"] == 1


class TestStreak:

    def test_consecutive_days_ending_today(self):
        today = datetime(2024, 3, 10, 12, 0)
        timestamps = [today, today - timedelta(days=1), today - timedelta(days=2), today - timedelta(days=4)]
        assert DatabaseManager._current_streak(timestamps, today=today.date()) == 3

    def test_streak_may_end_yesterday(self):
        today = datetime(2024, 3, 10, 12, 0)
        timestamps = [today - timedelta(days=1), today - timedelta(days=2)]
        assert DatabaseManager._current_streak(timestamps, today=today.date()) == 2

    def test_broken_streak(self):
        today = datetime(2024, 3, 10, 12, 0)
        assert DatabaseManager._current_streak([today - timedelta(days=3)], today=today.date()) == 0

    def test_no_sessions(self):
        assert DatabaseManager._current_streak([]) == 0
