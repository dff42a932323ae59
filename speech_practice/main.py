# speech_practice/main.py

import os
import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import Dict, Any
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse, RedirectResponse, Response
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn

from speech_practice import __version__
from speech_practice.config import settings

from speech_practice.managers.analysis_manager import SpeechAnalysisService
from speech_practice.managers.cache_manager import CacheManager
from speech_practice.managers.content_manager import ContentManager
from speech_practice.managers.database_manager import DatabaseManager
from speech_practice.managers.livekit_manager import LiveKitManager

from speech_practice.api.endpoints import router as api_router, get_managers as endpoints_get_managers
from speech_practice.api.conversation_endpoints import (
    conversation_router, get_managers as conversation_get_managers
)

# Configure logging with UTF-8 encoding to handle emojis
log_handlers = [logging.StreamHandler()]
if settings.log_file:
    log_handlers.append(logging.FileHandler(settings.log_file, encoding='utf-8'))

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=log_handlers
)
logger = logging.getLogger(__name__)

MAX_LOG_LINE = 80

CSP_DIRECTIVES = [
    "default-src 'self'",
    "script-src 'self' 'unsafe-inline' 'unsafe-eval'",
    "style-src 'self' 'unsafe-inline'",
    "img-src 'self' data: https:",
    "font-src 'self' data:",
    "connect-src 'self' ws: wss:",
    "media-src 'self' blob:",
    "object-src 'none'",
    "base-uri 'self'",
    "form-action 'self'",
    "frame-ancestors 'self'",
    "upgrade-insecure-requests",
]

SECURITY_HEADERS = {
    "Content-Security-Policy": "; ".join(CSP_DIRECTIVES),
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}

# Global managers storage
managers: Dict[str, Any] = {}

def get_managers_instance():
    """Get the global managers instance"""
    return managers

async def initialize_managers():
    """Initialize all managers"""
    logger.info("Initializing managers...")
    managers['settings'] = settings

    logger.info("  Initializing database manager...")
    from speech_practice.models.database import init_db
    engine = await init_db(settings.database_url)
    managers['database'] = DatabaseManager(settings.database_url, engine=engine)

    logger.info("  Initializing cache manager...")
    managers['cache'] = CacheManager()

    logger.info("  Initializing content manager...")
    managers['content'] = ContentManager(settings.firebase_credentials_path)

    logger.info("  Initializing speech analysis service...")
    managers['analysis'] = SpeechAnalysisService(settings, content_manager=managers['content'])

    logger.info("  Initializing LiveKit manager...")
    managers['livekit'] = LiveKitManager(settings, cache_manager=managers['cache'])

    logger.info("  All managers initialized successfully")

async def shutdown_managers():
    if 'cache' in managers:
        try:
            await managers['cache'].close()
        except Exception as e:
            logger.warning(f"Error closing cache manager: {e}")

    if 'database' in managers:
        try:
            await managers['database'].close()
        except Exception as e:
            logger.warning(f"Error closing database manager: {e}")

    managers.clear()

def log_startup_banner():
    missing = settings.missing_required_env()
    if missing:
        logger.warning("Missing required environment variables:")
        for var in missing:
            logger.warning(f"   - {var}")
        logger.warning("The app will still start, but some features may not work properly.")

    logger.info("=" * 60)
    logger.info(f"Speech Practice server v{__version__}")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Listening on http://{settings.server_host}:{settings.server_port}")
    logger.info(f"LiveKit conversations: {'enabled' if settings.livekit_configured() else 'disabled'}")
    if missing:
        logger.info(f"Missing environment variables: {', '.join(missing)}")
    logger.info("=" * 60)

@asynccontextmanager
async def lifespan(app: FastAPI):
    log_startup_banner()
    try:
        await initialize_managers()
    except Exception as e:
        logger.error(f"Startup failed: {e}")
        raise

    yield

    logger.info("Speech Practice server shutting down...")
    await shutdown_managers()
    logger.info("Shutdown complete")

REQUEST_TOO_LARGE = "Request body too large"

class RequestSizeLimitMiddleware:
    """Rejects bodies over max_request_bytes, declared or streamed"""

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        limit = settings.max_request_bytes
        content_length = dict(scope.get("headers") or []).get(b"content-length", b"")
        if content_length.isdigit() and int(content_length) > limit:
            response = JSONResponse(status_code=413, content={"error": REQUEST_TOO_LARGE})
            await response(scope, receive, send)
            return

        received = 0

        async def limited_receive():
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > limit:
                    logger.warning(f"Rejected {scope.get('path')}: body exceeded {limit} bytes")
                    raise HTTPException(status_code=413, detail=REQUEST_TOO_LARGE)
            return message

        await self.app(scope, limited_receive, send)

# Initialize FastAPI app
app = FastAPI(
    title="Speech Practice API",
    description="Speech practice with Whisper transcription, delivery metrics, AI coaching and live conversations",
    version=__version__,
    lifespan=lifespan
)

# Added first so it sits innermost, next to the routes that read the body
app.add_middleware(RequestSizeLimitMiddleware)

# Enable CORS
if settings.is_production:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.production_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
else:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_origin_regex=settings.cors_origin_regex,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

@app.middleware("http")
async def security_headers(request: Request, call_next):
    response = await call_next(request)
    if settings.is_production:
        for header, value in SECURITY_HEADERS.items():
            response.headers[header] = value
    return response

@app.middleware("http")
async def log_api_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    path = request.url.path
    if path.startswith("/api"):
        duration_ms = int((time.time() - start) * 1000)
        log_line = f"{request.method} {path} {response.status_code} in {duration_ms}ms"
        if response.headers.get("content-type", "").startswith("application/json"):
            body = b"".join([chunk async for chunk in response.body_iterator])
            log_line += f" :: {body.decode('utf-8', errors='replace')}"
            response = Response(content=body, status_code=response.status_code, headers=dict(response.headers))
        if len(log_line) > MAX_LOG_LINE:
            log_line = log_line[:MAX_LOG_LINE - 1] + "…"
        logger.info(log_line)
    return response

app.dependency_overrides[endpoints_get_managers] = get_managers_instance
app.dependency_overrides[conversation_get_managers] = get_managers_instance

app.include_router(api_router)
app.include_router(conversation_router)

# Health check endpoints
@app.get("/api/health")
async def health_check():
    return {
        "status": "ok",
        "message": "Speech Practice API is running",
        "environment": settings.environment,
        "timestamp": datetime.utcnow().isoformat() + "Z",
    }

@app.get("/api/status")
async def server_status():
    """Availability of each feature"""
    cache_status = "unknown"
    if 'cache' in managers:
        try:
            cache_info = await managers['cache'].get_connection_status()
            cache_status = cache_info['type']
        except Exception as e:
            logger.warning(f"Cache status check failed: {e}")
            cache_status = "error"

    analysis_status = managers['analysis'].status() if 'analysis' in managers else {}

    return {
        "status": "healthy",
        "version": __version__,
        "environment": settings.environment,
        "features": {
            "transcription": analysis_status.get("transcription", "unavailable"),
            "feedback_provider": analysis_status.get("feedback_provider", "unavailable"),
            "persistence": settings.persistence_enabled and 'database' in managers,
            "live_conversation": settings.livekit_configured(),
            "content_source": managers['content'].source if 'content' in managers else "unavailable",
            "cache": cache_status,
        },
        "missing_environment": settings.missing_required_env(),
    }

@app.get("/favicon.ico", include_in_schema=False)
async def favicon():
    return RedirectResponse(url="/vite.svg")

@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    """JSON bodies for HTTP errors"""
    if exc.status_code == 404:
        index_file = CLIENT_BUILD_PATH / "index.html"
        if settings.is_production and request.method == "GET" and not request.url.path.startswith("/api") \
                and index_file.exists():
            return FileResponse(str(index_file))
        return JSONResponse(
            status_code=404,
            content={"error": "Endpoint not found", "path": request.url.path}
        )
    if exc.status_code == 413:
        return JSONResponse(status_code=413, content={"error": exc.detail})
    return JSONResponse(status_code=exc.status_code, content={"message": exc.detail})

@app.exception_handler(Exception)
async def internal_error_handler(request: Request, exc: Exception):
    logger.error(f"Server error: {exc}")
    return JSONResponse(
        status_code=500,
        content={"message": "Internal Server Error"}
    )

# Serve the built client in production
CLIENT_BUILD_PATH = Path(os.getcwd()) / "dist"
if settings.is_production and CLIENT_BUILD_PATH.exists():
    app.mount("/", StaticFiles(directory=str(CLIENT_BUILD_PATH), html=True), name="client")

def main():
    uvicorn.run(
        "speech_practice.main:app",
        host=settings.server_host,
        port=int(os.getenv("PORT", settings.server_port)),
        log_level=settings.log_level.lower(),
        reload=False,
        access_log=False
    )

if __name__ == "__main__":
    main()
