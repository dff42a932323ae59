from pydantic import BaseModel, Field, validator
from typing import Optional, Dict, List, Any, Literal
from datetime import datetime

class CamelModel(BaseModel):
    """Accepts both camelCase aliases and field names"""

    class Config:
        populate_by_name = True

class PracticeCategory(BaseModel):
    id: str
    name: str
    description: str
    icon: str

class PracticeQuestion(CamelModel):
    id: str
    question: str
    audio_url: str = Field(alias="audioUrl")
    duration: int
    tips: str
    category_id: str = Field(alias="categoryId")

class ConversationTopic(CamelModel):
    id: str
    title: str
    description: str
    difficulty: Literal["beginner", "intermediate", "advanced"]
    category: str
    prompt: str
    opening_line: str = Field(alias="openingLine")

class SpeechMetrics(CamelModel):
    filler_words: int = Field(alias="fillerWords", ge=0)
    speech_rate: int = Field(alias="speechRate", ge=0)
    pause_duration: float = Field(alias="pauseDuration", ge=0)
    confidence: float = Field(ge=0, le=1)

class SpeechFeedback(BaseModel):
    summary: str
    suggestions: List[str]

class SpeechAnalysis(CamelModel):
    transcript: str
    metrics: SpeechMetrics
    feedback: SpeechFeedback
    session_id: Optional[str] = Field(default=None, alias="sessionId")

class AnalyzeSpeechRequest(CamelModel):
    audio_data: Optional[str] = Field(default=None, alias="audioData")
    question_id: Optional[str] = Field(default=None, alias="questionId")
    category_id: Optional[str] = Field(default=None, alias="categoryId")
    duration_seconds: Optional[float] = Field(default=None, alias="durationSeconds")

class SessionCreate(CamelModel):
    category_id: str = Field(alias="categoryId")
    question_id: str = Field(alias="questionId")
    transcript: str = ""
    metrics: SpeechMetrics
    feedback: SpeechFeedback
    duration_seconds: int = Field(default=0, alias="durationSeconds", ge=0)

    @validator("category_id", "question_id")
    def validate_ids(cls, v):
        if not v or not v.strip():
            raise ValueError("must not be empty")
        return v.strip()

class SessionResponse(BaseModel):
    id: str
    user_id: int
    category_id: str
    question_id: str
    transcript: str
    metrics: Dict[str, Any]
    feedback: Dict[str, Any]
    duration_seconds: int
    confidence_score: float
    created_at: datetime
    categories: Optional[Dict[str, Any]] = None  # name, icon
    questions: Optional[Dict[str, Any]] = None   # question

class UserResponse(BaseModel):
    id: int
    name: str
    email: str

class CreateRoomRequest(CamelModel):
    topic_id: Optional[str] = Field(default=None, alias="topicId")

class EndConversationRequest(CamelModel):
    room_name: Optional[str] = Field(default=None, alias="roomName")

class RoomResponse(CamelModel):
    room_name: str = Field(alias="roomName")
    token: str
    server_url: str = Field(alias="serverUrl")
    topic: ConversationTopic
