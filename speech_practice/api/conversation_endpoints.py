# speech_practice/api/conversation_endpoints.py - Live AI conversation rooms

from fastapi import APIRouter, HTTPException, Depends
from fastapi.responses import JSONResponse
from typing import Dict, Any, List
from speech_practice.models.schemas import ConversationTopic, CreateRoomRequest, EndConversationRequest, RoomResponse
from speech_practice.models.database import DEMO_USER
import logging

logger = logging.getLogger(__name__)

conversation_router = APIRouter(prefix="/api/conversation", tags=["conversation"])

NOT_CONFIGURED_MESSAGE = "Please set up your LiveKit credentials in the .env file to use AI conversation features."

async def get_managers() -> Dict[str, Any]:
    """Get managers - will be overridden with actual implementation"""
    raise HTTPException(status_code=500, detail="Managers not initialized")

def _not_configured(setup_required: bool = False) -> JSONResponse:
    content = {"error": "LiveKit is not configured", "message": NOT_CONFIGURED_MESSAGE}
    if setup_required:
        content["setupRequired"] = True
    return JSONResponse(status_code=503, content=content)

@conversation_router.get("/topics", response_model=List[ConversationTopic])
async def get_topics(managers: Dict = Depends(get_managers)):
    """Topics available for AI conversations"""
    try:
        topics = await managers['content'].get_topics()
        logger.info(f"Fetching conversation topics: {len(topics)} topics available")
        return topics
    except Exception as e:
        logger.error(f"Error getting conversation topics: {e}")
        raise HTTPException(status_code=500, detail=str(e))

@conversation_router.post("/create-room", response_model=RoomResponse)
async def create_room(payload: CreateRoomRequest, managers: Dict = Depends(get_managers)):
    """Create a LiveKit room with the voice agent and return a join token"""
    topic_id = payload.topic_id
    logger.info(f"Creating conversation room for topic ID: {topic_id}")

    if not topic_id:
        return JSONResponse(status_code=400, content={"error": "Topic ID is required"})

    livekit = managers['livekit']
    if not livekit.is_configured():
        logger.info("LiveKit not configured")
        return _not_configured(setup_required=True)

    topic = await managers['content'].get_topic(topic_id)
    if not topic:
        logger.info(f"Topic not found for ID: {topic_id}")
        return JSONResponse(status_code=404, content={"error": "Topic not found"})

    try:
        room_name, token = await livekit.create_conversation_room(
            topic,
            identity=f"user-{DEMO_USER['id']}",
            user_info={"name": DEMO_USER["name"]},
        )
    except Exception as e:
        logger.error(f"Error creating conversation room: {e}")
        return JSONResponse(status_code=500, content={"error": "Failed to create conversation room"})

    if await livekit.wait_for_agent(room_name):
        logger.info(f"AI conversation started in room: {room_name}")
        return {
            "roomName": room_name,
            "token": token,
            "serverUrl": livekit.get_connection_url(),
            "topic": topic,
        }

    logger.error(f"Failed to start AI conversation in room: {room_name}")
    try:
        await livekit.stop_voice_agent(room_name)
    except Exception as e:
        logger.error(f"Error tearing down room {room_name}: {e}")

    return JSONResponse(status_code=500, content={
        "error": "Failed to start AI conversation",
        "message": "The AI agent failed to connect. Please try again.",
    })

@conversation_router.post("/end")
async def end_conversation(payload: EndConversationRequest, managers: Dict = Depends(get_managers)):
    if not payload.room_name:
        return JSONResponse(status_code=400, content={"error": "Room name is required"})

    livekit = managers['livekit']
    if not livekit.is_configured():
        return _not_configured()

    try:
        await livekit.stop_voice_agent(payload.room_name)
        return {"success": True}
    except Exception as e:
        logger.error(f"Error ending conversation: {e}")
        return JSONResponse(status_code=500, content={"error": "Failed to end conversation"})

@conversation_router.get("/status/{room_name}")
async def get_conversation_status(room_name: str, managers: Dict = Depends(get_managers)):
    livekit = managers['livekit']
    if not livekit.is_configured():
        return _not_configured()

    try:
        return {"isActive": await livekit.is_agent_active(room_name)}
    except Exception as e:
        logger.error(f"Error getting conversation status: {e}")
        return JSONResponse(status_code=500, content={"error": "Failed to get conversation status"})
