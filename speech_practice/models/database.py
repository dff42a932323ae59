# speech_practice/models/database.py

from sqlalchemy import Column, String, Integer, DateTime, JSON, ForeignKey, Float, Text, select
from sqlalchemy.orm import declarative_base, sessionmaker, relationship
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from datetime import datetime
import logging
import os

logger = logging.getLogger(__name__)

Base = declarative_base()

DEMO_USER = {"id": 1, "name": "Demo User", "email": "demo@example.com"}

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    sessions = relationship("PracticeSession", back_populates="user", cascade="all, delete-orphan")

class PracticeSession(Base):
    __tablename__ = "practice_sessions"

    id = Column(String, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True)
    category_id = Column(String, nullable=False)
    question_id = Column(String, nullable=False)

    transcript = Column(Text, default="")
    metrics = Column(JSON, default=dict)    # fillerWords, speechRate, pauseDuration, confidence
    feedback = Column(JSON, default=dict)   # summary, suggestions

    duration_seconds = Column(Integer, default=0)
    confidence_score = Column(Float, default=0.0)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    user = relationship("User", back_populates="sessions")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "category_id": self.category_id,
            "question_id": self.question_id,
            "transcript": self.transcript or "",
            "metrics": self.metrics or {},
            "feedback": self.feedback or {},
            "duration_seconds": self.duration_seconds or 0,
            "confidence_score": self.confidence_score or 0.0,
            "created_at": self.created_at,
        }

def _ensure_sqlite_directory(database_url: str):
    """Create the directory of a file-backed SQLite database"""
    if not database_url.startswith("sqlite"):
        return
    path = database_url.split(":///", 1)[-1]
    if not path or path == ":memory:":
        return
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)

async def init_db(database_url: str):
    """Create tables and seed the demo user"""
    logger.info("Initializing database...")
    _ensure_sqlite_directory(database_url)
    engine = create_async_engine(database_url, echo=False)

    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created successfully")

        async_session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
        async with async_session() as session:
            result = await session.execute(select(User).where(User.id == DEMO_USER["id"]))
            if not result.scalars().first():
                session.add(User(**DEMO_USER))
                await session.commit()
                logger.info("Seeded demo user")

        logger.info("Database initialization completed")
        return engine
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        await engine.dispose()
        raise
