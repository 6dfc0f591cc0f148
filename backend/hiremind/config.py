"""Configuration loaded once from environment variables (and an optional .env)."""
import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

DEFAULT_ORIGINS = ["http://localhost:5173", "http://localhost:3000"]
DEV_SESSION_SECRET = "hiremind-dev-secret-change-me"


def _split(value: Optional[str]) -> List[str]:
    return [v.strip() for v in (value or "").split(",") if v.strip()]


class Settings(BaseModel):
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    openai_base_url: str = "https://api.openai.com/v1"

    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-1.5-flash"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"

    provider_priority: List[str] = Field(default_factory=lambda: ["openai", "gemini"])
    request_timeout: float = 60.0

    cors_origins: List[str] = Field(default_factory=lambda: list(DEFAULT_ORIGINS))
    session_secret: str = DEV_SESSION_SECRET
    session_ttl_seconds: int = 24 * 60 * 60
    database_url: str = "sqlite:///./hiremind.db"
    max_upload_bytes: int = 5 * 1024 * 1024
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 3001

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        origins = _split(os.getenv("CORS_ORIGINS")) or _split(os.getenv("FRONTEND_URL")) or list(DEFAULT_ORIGINS)
        priority = [p.lower() for p in _split(os.getenv("AI_PROVIDER_PRIORITY"))] or ["openai", "gemini"]
        return cls(
            openai_api_key=os.getenv("OPENAI_API_KEY") or None,
            openai_model=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
            openai_base_url=os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1"),
            gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
            gemini_model=os.getenv("GEMINI_MODEL", "gemini-1.5-flash"),
            gemini_base_url=os.getenv("GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"),
            provider_priority=priority,
            request_timeout=float(os.getenv("REQUEST_TIMEOUT_SECONDS", "60")),
            cors_origins=origins,
            session_secret=os.getenv("SESSION_SECRET", DEV_SESSION_SECRET),
            session_ttl_seconds=int(os.getenv("SESSION_TTL_SECONDS", str(24 * 60 * 60))),
            database_url=os.getenv("DATABASE_URL", "sqlite:///./hiremind.db"),
            max_upload_bytes=int(os.getenv("MAX_UPLOAD_BYTES", str(5 * 1024 * 1024))),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "3001")),
        )
