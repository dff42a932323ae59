from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy import select, delete
from speech_practice.models.database import User, PracticeSession
from speech_practice.models.schemas import SessionCreate
from typing import Optional, List, Dict, Any
import uuid
from datetime import datetime, timedelta
import logging

logger = logging.getLogger(__name__)

class DatabaseManager:
    def __init__(self, database_url: str, engine=None):
        self.engine = engine or create_async_engine(database_url, echo=False)
        self.async_session = sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )

    async def get_user(self, user_id: int) -> Optional[User]:
        async with self.async_session() as session:
            result = await session.execute(select(User).where(User.id == user_id))
            return result.scalars().first()

    # === PRACTICE SESSION MANAGEMENT ===

    async def create_session(self, user_id: int, data: SessionCreate) -> PracticeSession:
        """Store a practice session; confidence_score mirrors metrics.confidence"""
        metrics = data.metrics.model_dump(by_alias=True)
        async with self.async_session() as session:
            practice_session = PracticeSession(
                id=str(uuid.uuid4()),
                user_id=user_id,
                category_id=data.category_id,
                question_id=data.question_id,
                transcript=data.transcript,
                metrics=metrics,
                feedback=data.feedback.model_dump(),
                duration_seconds=data.duration_seconds,
                confidence_score=metrics["confidence"],
                created_at=datetime.utcnow(),
            )
            session.add(practice_session)
            await session.commit()
            await session.refresh(practice_session)

            logger.info(f"Created practice session {practice_session.id} for user {user_id}")
            return practice_session

    async def get_user_sessions(self, user_id: int, limit: Optional[int] = None) -> List[PracticeSession]:
        """Sessions for a user, newest first"""
        async with self.async_session() as session:
            query = (
                select(PracticeSession)
                .where(PracticeSession.user_id == user_id)
                .order_by(PracticeSession.created_at.desc())
            )
            if limit is not None:
                query = query.limit(limit)
            result = await session.execute(query)
            return list(result.scalars().all())

    async def get_session(self, session_id: str) -> Optional[PracticeSession]:
        async with self.async_session() as session:
            result = await session.execute(
                select(PracticeSession).where(PracticeSession.id == session_id)
            )
            return result.scalars().first()

    async def delete_session(self, session_id: str) -> bool:
        """Delete a session; False when it does not exist"""
        async with self.async_session() as session:
            result = await session.execute(
                delete(PracticeSession).where(PracticeSession.id == session_id)
            )
            await session.commit()
            deleted = result.rowcount > 0
            if deleted:
                logger.info(f"Deleted practice session {session_id}")
            return deleted

    # === PROGRESS AND STATISTICS ===

    async def get_user_progress(self, user_id: int) -> List[Dict[str, Any]]:
        """Per-category aggregates over the user's sessions"""
        sessions = await self.get_user_sessions(user_id)

        by_category: Dict[str, Dict[str, Any]] = {}
        for s in sessions:
            entry = by_category.setdefault(s.category_id, {
                "category_id": s.category_id,
                "sessions": 0,
                "questions_practiced": set(),
                "total_confidence": 0.0,
                "best_confidence": 0.0,
                "last_practiced_at": None,
            })
            entry["sessions"] += 1
            entry["questions_practiced"].add(s.question_id)
            entry["total_confidence"] += s.confidence_score or 0.0
            entry["best_confidence"] = max(entry["best_confidence"], s.confidence_score or 0.0)
            if entry["last_practiced_at"] is None or s.created_at > entry["last_practiced_at"]:
                entry["last_practiced_at"] = s.created_at

        progress = []
        for entry in by_category.values():
            progress.append({
                "category_id": entry["category_id"],
                "sessions": entry["sessions"],
                "questions_practiced": len(entry["questions_practiced"]),
                "average_confidence": round(entry["total_confidence"] / entry["sessions"], 2),
                "best_confidence": round(entry["best_confidence"], 2),
                "last_practiced_at": entry["last_practiced_at"].isoformat() if entry["last_practiced_at"] else None,
            })

        progress.sort(key=lambda p: p["category_id"])
        return progress

    async def get_session_stats(self, user_id: int) -> Dict[str, Any]:
        """Overall practice statistics for a user"""
        sessions = await self.get_user_sessions(user_id)
        total = len(sessions)

        if total == 0:
            return {
                "total_sessions": 0,
                "total_practice_seconds": 0,
                "average_confidence": 0.0,
                "average_filler_words": 0.0,
                "average_speech_rate": 0.0,
                "sessions_this_week": 0,
                "current_streak_days": 0,
            }

        week_ago = datetime.utcnow() - timedelta(days=7)

        def metric(s, key):
            return (s.metrics or {}).get(key, 0) or 0

        return {
            "total_sessions": total,
            "total_practice_seconds": sum(s.duration_seconds or 0 for s in sessions),
            "average_confidence": round(sum(s.confidence_score or 0.0 for s in sessions) / total, 2),
            "average_filler_words": round(sum(metric(s, "fillerWords") for s in sessions) / total, 1),
            "average_speech_rate": round(sum(metric(s, "speechRate") for s in sessions) / total, 1),
            "sessions_this_week": len([s for s in sessions if s.created_at >= week_ago]),
            "current_streak_days": self._current_streak([s.created_at for s in sessions]),
        }

    @staticmethod
    def _current_streak(timestamps: List[datetime], today=None) -> int:
        """Consecutive days with practice, ending today or yesterday"""
        days = {t.date() for t in timestamps}
        if not days:
            return 0

        day = today or datetime.utcnow().date()
        if day not in days:
            day = day - timedelta(days=1)
            if day not in days:
                return 0

        streak = 0
        while day in days:
            streak += 1
            day = day - timedelta(days=1)
        return streak

    async def close(self):
        await self.engine.dispose()
