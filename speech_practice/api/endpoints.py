# speech_practice/api/endpoints.py - Practice content, speech analysis and session history

from fastapi import APIRouter, HTTPException, Depends, Query, Body
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from typing import List, Dict, Any, Optional
from speech_practice.models.database import DEMO_USER
from speech_practice.models.schemas import (
    AnalyzeSpeechRequest, PracticeCategory, PracticeQuestion, SessionCreate,
    SessionResponse, SpeechAnalysis, UserResponse
)
from speech_practice.managers.analysis_manager import SpeechAnalysisError
from speech_practice.utils.audio import AudioDecodeError
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["api"])

# Dependency injection - This will be overridden in main.py
async def get_managers() -> Dict[str, Any]:
    """Get managers - will be overridden with actual implementation"""
    raise HTTPException(status_code=500, detail="Managers not initialized")

async def _with_content(session, content) -> Dict[str, Any]:
    """Session row plus the category name/icon and question text the history view shows"""
    data = session.to_dict()
    category = await content.get_category(session.category_id)
    question = await content.get_question(session.category_id, session.question_id)
    data["categories"] = {"name": category.get("name"), "icon": category.get("icon")} if category else None
    data["questions"] = {"question": question.get("question")} if question else None
    return data

def _validation_errors(error: ValidationError) -> List[Dict[str, str]]:
    return [
        {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
        for err in error.errors()
    ]

# ============================================================================
# PRACTICE CONTENT
# ============================================================================

@router.get("/categories", response_model=List[PracticeCategory])
async def get_categories(managers: Dict = Depends(get_managers)):
    """Practice categories"""
    try:
        return await managers['content'].get_categories()
    except Exception as e:
        logger.error(f"Error getting categories: {e}")
        raise HTTPException(status_code=500, detail=str(e))

@router.get("/categories/{category_id}/questions", response_model=List[PracticeQuestion])
async def get_category_questions(category_id: str, managers: Dict = Depends(get_managers)):
    """Questions for a category (empty for unknown categories)"""
    try:
        return await managers['content'].get_questions(category_id)
    except Exception as e:
        logger.error(f"Error getting questions for {category_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))

# ============================================================================
# SPEECH ANALYSIS
# ============================================================================

@router.post("/analyze-speech", response_model=SpeechAnalysis, response_model_exclude_none=True)
async def analyze_speech(payload: AnalyzeSpeechRequest, managers: Dict = Depends(get_managers)):
    """Transcribe a base64 recording and return metrics and coaching feedback"""
    if not payload.audio_data:
        return JSONResponse(status_code=400, content={"error": "Audio data is required"})

    try:
        analysis = await managers['analysis'].analyze_speech(
            payload.audio_data,
            payload.question_id,
            payload.category_id,
            duration_seconds=payload.duration_seconds,
        )
    except AudioDecodeError as e:
        logger.warning(f"Rejected audio upload: {e}")
        return JSONResponse(status_code=400, content={"error": "Invalid audio data", "details": str(e)})
    except SpeechAnalysisError as e:
        logger.error(f"Error analyzing speech: {e}")
        return JSONResponse(status_code=500, content={"error": "Failed to analyze speech"})

    settings = managers['settings']
    if settings.persistence_enabled and 'database' in managers:
        try:
            saved = await managers['database'].create_session(DEMO_USER["id"], SessionCreate(
                category_id=payload.category_id or "general",
                question_id=payload.question_id or "free-practice",
                transcript=analysis.transcript,
                metrics=analysis.metrics,
                feedback=analysis.feedback,
                duration_seconds=int(round(payload.duration_seconds or 0)),
            ))
            analysis.session_id = saved.id
        except Exception as e:
            # The analysis itself succeeded; persistence is best effort
            logger.error(f"Failed to persist analysis: {e}")

    return analysis

# ============================================================================
# USER
# ============================================================================

@router.get("/user/current", response_model=UserResponse)
async def get_current_user(managers: Dict = Depends(get_managers)):
    """The demo user"""
    try:
        user = await managers['database'].get_user(DEMO_USER["id"])
        if user:
            return UserResponse(id=user.id, name=user.name, email=user.email)
    except Exception as e:
        logger.error(f"Error loading demo user: {e}")
    return UserResponse(**DEMO_USER)

@router.get("/user/progress")
async def get_user_progress(managers: Dict = Depends(get_managers)):
    """Per-category progress and overall statistics"""
    try:
        db_manager = managers['database']
        progress = await db_manager.get_user_progress(DEMO_USER["id"])
        stats = await db_manager.get_session_stats(DEMO_USER["id"])
        return {"progress": progress, "stats": stats}
    except Exception as e:
        logger.error(f"Error getting user progress: {e}")
        return JSONResponse(status_code=500, content={"message": "Failed to fetch progress"})

# ============================================================================
# PRACTICE SESSIONS
# ============================================================================

@router.post("/sessions", status_code=201, response_model=SessionResponse)
async def create_session(payload: Dict[str, Any] = Body(...), managers: Dict = Depends(get_managers)):
    """Store a practice session for the demo user"""
    try:
        data = SessionCreate.model_validate(payload)
    except ValidationError as e:
        return JSONResponse(
            status_code=400,
            content={"message": "Invalid session data", "errors": _validation_errors(e)},
        )

    try:
        session = await managers['database'].create_session(DEMO_USER["id"], data)
        return await _with_content(session, managers['content'])
    except Exception as e:
        logger.error(f"Error creating session: {e}")
        return JSONResponse(status_code=500, content={"message": "Failed to create session"})

@router.get("/sessions", response_model=List[SessionResponse])
async def get_sessions(
    limit: Optional[int] = Query(None, ge=1, description="Maximum number of sessions"),
    managers: Dict = Depends(get_managers)
):
    """Sessions for the demo user, newest first"""
    try:
        sessions = await managers['database'].get_user_sessions(DEMO_USER["id"], limit)
        return [await _with_content(s, managers['content']) for s in sessions]
    except Exception as e:
        logger.error(f"Error getting sessions: {e}")
        return JSONResponse(status_code=500, content={"message": "Failed to fetch sessions"})

@router.get("/sessions/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str, managers: Dict = Depends(get_managers)):
    try:
        session = await managers['database'].get_session(session_id)
    except Exception as e:
        logger.error(f"Error getting session {session_id}: {e}")
        return JSONResponse(status_code=500, content={"message": "Failed to fetch session"})

    if not session:
        return JSONResponse(status_code=404, content={"message": "Session not found"})
    return await _with_content(session, managers['content'])

@router.delete("/sessions/{session_id}")
async def delete_session(session_id: str, managers: Dict = Depends(get_managers)):
    try:
        deleted = await managers['database'].delete_session(session_id)
    except Exception as e:
        logger.error(f"Error deleting session {session_id}: {e}")
        return JSONResponse(status_code=500, content={"message": "Failed to delete session"})

    if not deleted:
        return JSONResponse(status_code=404, content={"message": "Session not found"})
    return {"message": "Session deleted successfully"}
