# speech_practice/managers/cache_manager.py
import redis.asyncio as redis
import json
import asyncio
import logging
import time
from typing import Optional, Dict, Any, Tuple
from datetime import datetime
from speech_practice.config import settings

logger = logging.getLogger(__name__)

ROOM_TTL_SECONDS = 3600

class InMemoryCache:
    """Process-local stand-in for the few Redis string commands the app uses"""

    def __init__(self):
        # key -> (value, monotonic deadline or None)
        self._entries: Dict[str, Tuple[str, Optional[float]]] = {}

    async def set(self, key: str, value: str, ex: int = None):
        self._entries[key] = (value, time.monotonic() + ex if ex else None)

    async def get(self, key: str) -> Optional[str]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, deadline = entry
        if deadline is not None and time.monotonic() >= deadline:
            del self._entries[key]
            return None
        return value

    async def delete(self, key: str):
        self._entries.pop(key, None)

    async def close(self):
        self._entries.clear()

class CacheManager:
    """JSON values in Redis, or in process memory when Redis cannot be reached"""

    def __init__(self, host: str = None, port: int = None, db: int = None):
        self.redis: Optional[redis.Redis] = None
        self.fallback_cache = InMemoryCache()
        self.using_fallback = False
        self.connection_tested = False

        self.host = host or settings.redis_host
        self.port = port or settings.redis_port
        self.db = db or settings.redis_db

        logger.info(f"Cache manager initialized with Redis target: {self.host}:{self.port}")

    async def _connect(self, host: str) -> Optional[redis.Redis]:
        """A connected client for host, or None"""
        client = redis.Redis(
            host=host,
            port=self.port,
            db=self.db,
            password=settings.redis_password,
            ssl=settings.redis_ssl,
            decode_responses=True,
            socket_timeout=settings.redis_socket_timeout,
            socket_connect_timeout=settings.redis_connection_timeout,
        )
        try:
            await asyncio.wait_for(client.ping(), timeout=settings.redis_connection_timeout)
        except Exception as e:
            logger.debug(f"Redis at {host}:{self.port} unavailable: {e}")
            await client.aclose()
            return None
        logger.info(f"Connected to Redis at {host}:{self.port}")
        return client

    async def _ensure_redis(self):
        if self.connection_tested:
            return
        self.connection_tested = True

        if settings.mock_redis:
            logger.info("MOCK_REDIS set, using in-memory cache")
            self.using_fallback = True
            return

        hosts = [self.host] + [h for h in settings.get_redis_hosts_to_try() if h != self.host]
        for host in hosts:
            self.redis = await self._connect(host)
            if self.redis:
                return

        logger.warning(f"Redis unreachable on {', '.join(hosts)}, using in-memory cache")
        self.using_fallback = True

    def _store(self):
        """Active backend; both expose set/get/delete with Redis semantics"""
        return self.fallback_cache if self.using_fallback or not self.redis else self.redis

    def _fail_over(self, operation: str, key: str, error: Exception) -> bool:
        """Switch to memory after a Redis error; True when a retry makes sense"""
        logger.error(f"Cache {operation} failed for {key}: {error}")
        if self.using_fallback:
            return False
        logger.warning("Redis error, continuing with in-memory cache")
        self.using_fallback = True
        return True

    async def set_json(self, key: str, value: Dict[str, Any], ex: int = None):
        await self._ensure_redis()
        payload = json.dumps(value, default=str)
        try:
            await self._store().set(key, payload, ex=ex)
        except Exception as e:
            if self._fail_over("set", key, e):
                await self.fallback_cache.set(key, payload, ex=ex)

    async def get_json(self, key: str) -> Optional[Dict[str, Any]]:
        await self._ensure_redis()
        try:
            payload = await self._store().get(key)
        except Exception as e:
            if not self._fail_over("get", key, e):
                return None
            payload = await self.fallback_cache.get(key)
        return json.loads(payload) if payload else None

    async def delete(self, key: str):
        await self._ensure_redis()
        try:
            await self._store().delete(key)
        except Exception as e:
            self._fail_over("delete", key, e)

    # === CONVERSATION ROOMS ===

    async def set_room(self, room_name: str, room_data: Dict[str, Any]):
        room_data["last_activity"] = datetime.utcnow().isoformat()
        await self.set_json(f"room:{room_name}", room_data, ex=ROOM_TTL_SECONDS)

    async def get_room(self, room_name: str) -> Optional[Dict[str, Any]]:
        return await self.get_json(f"room:{room_name}")

    async def delete_room(self, room_name: str):
        await self.delete(f"room:{room_name}")

    async def get_connection_status(self) -> Dict[str, Any]:
        """Get cache connection status"""
        await self._ensure_redis()

        status = {
            "type": "fallback" if self.using_fallback else "redis",
            "connected": True,  # Fallback is always "connected"
        }

        if not self.using_fallback and self.redis:
            try:
                await self.redis.ping()
                status["host"] = self.host
                status["port"] = self.port
            except Exception as e:
                status["connected"] = False
                status["error"] = str(e)

        return status

    async def close(self):
        """Close connections and cleanup"""
        try:
            if self.redis:
                await self.redis.aclose()
                logger.info("Redis connection closed")
        except Exception as e:
            logger.error(f"Error closing Redis connection: {e}")

        await self.fallback_cache.close()
