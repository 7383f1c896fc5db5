# app/config.py
"""
Application configuration using Pydantic-Settings.
All settings can be overridden via environment variables or .env file.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # ── Remote datastore (PostgREST / Supabase) ─────────────────────────────
    SUPABASE_URL: str = ""
    SUPABASE_KEY: str = ""
    REMOTE_TIMEOUT_SECONDS: float = 10.0

    # ── Network ───────────────────────────────────────────────────────────
    BACKEND_IP: str = "0.0.0.0"
    BACKEND_PORT: int = 8080

    # ── Superuser ─────────────────────────────────────────────────────────
    ADMIN_USERNAME: str = "admin"
    ADMIN_PASSWORD: Optional[str] = None   # Set in .env to enable the admin console

    # ── Service window ────────────────────────────────────────────────────
    TIMEZONE: str = "Europe/Istanbul"
    SERVICE_OPEN_HOUR: int = 8
    SERVICE_CLOSE_HOUR: int = 18            # exclusive: 18:00 is closed
    SERVICE_LAST_DAY_OF_MONTH: int = 20
    GATE_CHECK_INTERVAL_SECONDS: int = 60

    # ── Lookup cache / local state ────────────────────────────────────────
    STATE_DIR: str = "state"
    CACHE_TTL_SECONDS: int = 60 * 60 * 24
    RECENT_SEARCHES_LIMIT: int = 5

    # ── Sessions ──────────────────────────────────────────────────────────
    SESSION_TTL_SECONDS: int = 60 * 60 * 12

    # ── Bulk import / export ──────────────────────────────────────────────
    IMPORT_CHUNK_SIZE: int = 200
    IMPORT_THROTTLE_SECONDS: float = 0.1
    EXPORT_ROW_LIMIT: int = 50000

    # ── Logging ───────────────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"

    @property
    def REMOTE_CONFIGURED(self) -> bool:
        return bool(self.SUPABASE_URL) and "PROJECT_ID" not in self.SUPABASE_URL and bool(self.SUPABASE_KEY)

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
