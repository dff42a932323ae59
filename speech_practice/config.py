# speech_practice/config.py
from pydantic_settings import BaseSettings
from typing import Optional, List
import os

class Settings(BaseSettings):
    # Server
    server_host: str = "0.0.0.0"
    server_port: int = 5000
    environment: str = "development"
    max_request_bytes: int = 50 * 1024 * 1024  # base64 audio uploads

    # CORS
    cors_origins: List[str] = [
        "http://localhost:3000",
        "http://localhost:5000",
        "http://127.0.0.1:3000",
    ]
    cors_origin_regex: str = r"https://.*\.(app\.)?github\.dev"  # GitHub Codespaces
    production_origins: List[str] = []

    # Database
    database_url: str = "sqlite+aiosqlite:///./data/speech_practice.db"
    persistence_enabled: bool = True

    # Redis Configuration
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: Optional[str] = None
    redis_ssl: bool = False
    redis_connection_timeout: int = 5
    redis_socket_timeout: int = 5
    mock_redis: bool = False  # Fallback to in-memory cache

    # Firebase
    firebase_credentials_path: str = "firebase-credentials.json"

    # OpenAI
    openai_api_key: Optional[str] = None
    openai_transcription_model: str = "whisper-1"
    openai_feedback_model: str = "gpt-4"

    # OpenRouter fallback
    openrouter_api_key: Optional[str] = None
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    openrouter_model: str = "mistralai/mistral-7b-instruct"

    feedback_max_tokens: int = 300
    feedback_temperature: float = 0.7

    # LiveKit
    livekit_url: Optional[str] = None
    livekit_api_key: Optional[str] = None
    livekit_api_secret: Optional[str] = None
    livekit_agent_name: str = "speech-coach-agent"
    agent_connect_timeout: float = 10.0
    agent_poll_interval: float = 0.5
    room_empty_timeout: int = 300

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = "server.log"

    class Config:
        env_file = ".env"
        extra = "ignore"

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    def missing_required_env(self) -> List[str]:
        """Required environment variables that are not set"""
        missing = []
        if not self.openai_api_key:
            missing.append("OPENAI_API_KEY")
        return missing

    def livekit_configured(self) -> bool:
        return bool(self.livekit_url and self.livekit_api_key and self.livekit_api_secret)

    def livekit_http_url(self) -> Optional[str]:
        """LiveKit server API URL (ws/wss rewritten to http/https)"""
        if not self.livekit_url:
            return None
        if self.livekit_url.startswith("wss://"):
            return "https://" + self.livekit_url[len("wss://"):]
        if self.livekit_url.startswith("ws://"):
            return "http://" + self.livekit_url[len("ws://"):]
        return self.livekit_url

    def get_redis_url(self) -> str:
        """Generate Redis URL with proper formatting"""
        auth = f":{self.redis_password}@" if self.redis_password else ""
        protocol = "rediss" if self.redis_ssl else "redis"
        return f"{protocol}://{auth}{self.redis_host}:{self.redis_port}/{self.redis_db}"

    def get_redis_hosts_to_try(self) -> List[str]:
        """Get list of Redis hosts to try in order of preference"""
        hosts = [self.redis_host]

        # Common alternatives when running next to Docker
        if self.redis_host in ["localhost", "127.0.0.1"]:
            hosts.extend(["127.0.0.1", "localhost", "host.docker.internal"])

        return list(dict.fromkeys(hosts))  # Remove duplicates while preserving order

    def validate_config(self) -> List[str]:
        """Return configuration problems, prefixed with ERROR or WARNING"""
        issues = []

        for var in self.missing_required_env():
            issues.append(f"WARNING: {var} is not set - transcription and AI feedback will use development fallbacks")

        if not self.openrouter_api_key:
            issues.append("WARNING: OPENROUTER_API_KEY is not set - no fallback feedback model")

        if not self.livekit_configured():
            issues.append("WARNING: LiveKit credentials are incomplete - AI conversation rooms are disabled")

        if self.environment.lower() not in ("development", "production"):
            issues.append(f"ERROR: ENVIRONMENT must be 'development' or 'production', got '{self.environment}'")

        if self.agent_poll_interval <= 0 or self.agent_connect_timeout <= 0:
            issues.append("ERROR: agent_connect_timeout and agent_poll_interval must be positive")

        if self.database_url.startswith("sqlite") and not os.access(".", os.W_OK):
            issues.append("ERROR: working directory is not writable for the SQLite database")

        return issues

settings = Settings()
