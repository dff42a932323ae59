# speech_practice/managers/livekit_manager.py - LiveKit rooms for AI voice conversations

import asyncio
import json
import logging
import time
import uuid
from datetime import datetime
from typing import Dict, Any, Optional, Tuple

from livekit import api

from speech_practice.agents.agent_configs import get_conversation_agent_config

logger = logging.getLogger(__name__)

AGENT_KIND = getattr(api.ParticipantInfo, "AGENT", None)

class LiveKitError(Exception):
    """A LiveKit server API call failed"""

class LiveKitManager:
    """Provisions conversation rooms and dispatches the voice agent into them"""

    def __init__(self, settings, cache_manager=None):
        self.settings = settings
        self.cache_manager = cache_manager
        logger.info(f"LiveKitManager initialized (configured={self.is_configured()})")

    def is_configured(self) -> bool:
        return self.settings.livekit_configured()

    def get_connection_url(self) -> Optional[str]:
        """URL the browser connects to"""
        return self.settings.livekit_url

    def _api(self) -> api.LiveKitAPI:
        return api.LiveKitAPI(
            url=self.settings.livekit_http_url(),
            api_key=self.settings.livekit_api_key,
            api_secret=self.settings.livekit_api_secret,
        )

    def create_access_token(self, room_name: str, identity: str, name: str = None) -> str:
        """Participant token for the browser client"""
        grants = api.VideoGrants(
            room_join=True,
            room=room_name,
            can_publish=True,
            can_subscribe=True,
            can_publish_data=True,
        )
        token = api.AccessToken(self.settings.livekit_api_key, self.settings.livekit_api_secret) \
            .with_identity(identity) \
            .with_name(name or identity) \
            .with_grants(grants)
        return token.to_jwt()

    async def create_conversation_room(self, topic: Dict[str, Any], identity: str = "user-1",
                                       user_info: Dict[str, Any] = None) -> Tuple[str, str]:
        """Create a room, dispatch the agent and return (room name, participant token)"""
        if not self.is_configured():
            raise LiveKitError("LiveKit is not configured")

        room_name = f"conversation-{topic['id']}-{uuid.uuid4().hex[:8]}"
        agent_config = get_conversation_agent_config(topic, user_info)
        metadata = json.dumps({"topic": topic, "agent": agent_config})

        lkapi = self._api()
        room_created = False
        try:
            await lkapi.room.create_room(api.CreateRoomRequest(
                name=room_name,
                empty_timeout=self.settings.room_empty_timeout,
                metadata=metadata,
            ))
            room_created = True
            logger.info(f"Created LiveKit room {room_name}")

            await lkapi.agent_dispatch.create_dispatch(api.CreateAgentDispatchRequest(
                agent_name=self.settings.livekit_agent_name,
                room=room_name,
                metadata=metadata,
            ))
            logger.info(f"Dispatched {self.settings.livekit_agent_name} to {room_name}")
        except Exception as e:
            logger.error(f"Failed to create conversation room {room_name}: {e}")
            if room_created:
                try:
                    await lkapi.room.delete_room(api.DeleteRoomRequest(room=room_name))
                    logger.info(f"Deleted LiveKit room {room_name} after failed dispatch")
                except Exception as cleanup_error:
                    logger.warning(f"Could not delete room {room_name}: {cleanup_error}")
            raise LiveKitError(f"Failed to create conversation room: {e}") from e
        finally:
            await lkapi.aclose()

        token = self.create_access_token(room_name, identity, (user_info or {}).get("name"))

        if self.cache_manager:
            await self.cache_manager.set_room(room_name, {
                "room_name": room_name,
                "topic_id": topic["id"],
                "identity": identity,
                "created_at": datetime.utcnow().isoformat(),
            })

        return room_name, token

    @staticmethod
    def _is_agent(participant) -> bool:
        if AGENT_KIND is not None and getattr(participant, "kind", None) == AGENT_KIND:
            return True
        return (participant.identity or "").startswith("agent")

    async def is_agent_active(self, room_name: str) -> bool:
        """True when an agent participant is in the room"""
        if not self.is_configured():
            return False

        lkapi = self._api()
        try:
            response = await lkapi.room.list_participants(api.ListParticipantsRequest(room=room_name))
            return any(self._is_agent(p) for p in response.participants)
        except Exception as e:
            logger.warning(f"Could not list participants for {room_name}: {e}")
            return False
        finally:
            await lkapi.aclose()

    async def wait_for_agent(self, room_name: str, timeout: float = None, poll_interval: float = None) -> bool:
        """Poll until the agent joins or the timeout passes"""
        timeout = self.settings.agent_connect_timeout if timeout is None else timeout
        poll_interval = self.settings.agent_poll_interval if poll_interval is None else poll_interval

        start_time = time.monotonic()
        while time.monotonic() - start_time < timeout:
            if await self.is_agent_active(room_name):
                logger.info(f"Agent joined room {room_name}")
                return True
            await asyncio.sleep(poll_interval)

        logger.error(f"Timeout waiting for agent in room {room_name}")
        return False

    async def stop_voice_agent(self, room_name: str):
        """Delete the room, which disconnects the agent and any participants"""
        lkapi = self._api()
        try:
            await lkapi.room.delete_room(api.DeleteRoomRequest(room=room_name))
            logger.info(f"Deleted LiveKit room {room_name}")
        except Exception as e:
            if getattr(e, "code", None) != "not_found":
                logger.error(f"Failed to delete room {room_name}: {e}")
                raise LiveKitError(f"Failed to end conversation: {e}") from e
            logger.info(f"Room {room_name} was already closed")
        finally:
            await lkapi.aclose()

        if self.cache_manager:
            await self.cache_manager.delete_room(room_name)
