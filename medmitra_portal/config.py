# medmitra_portal/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ===== App =====
    APP_NAME: str = "medmitra_portal"
    ENV: str = "dev"
    # Local timezone of the hospital, used for "today" in queues and dashboards
    TIMEZONE: str = "Asia/Kolkata"

    # ===== Local DB (portal sessions + encounter drafts) =====
    DATABASE_URL: str = "sqlite:///./medmitra_portal.db"

    DB_POOL_SIZE: int = 2
    DB_MAX_OVERFLOW: int = 5
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800  # 30 min

    # ===== External backend =====
    API_BASE_URL: str = "http://localhost:8000/api/v1"
    BACKEND_TIMEOUT: float = 15.0

    # Names used by the web build; accepted so one .env serves both
    NEXT_PUBLIC_API_BASE_URL: Optional[str] = None

    # ===== Sessions =====
    SESSION_COOKIE_NAME: str = "medmitra_session"
    SESSION_TTL_HOURS: int = 24 * 7
    SESSION_COOKIE_SECURE: bool = False

    # ===== Encounter drafts =====
    DRAFT_DEBOUNCE_SECONDS: float = 2.0
    DRAFT_TTL_HOURS: int = 72

    # ===== AI assist =====
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_LLM_MODEL: str = "gpt-4o-mini"

    # ===== Scheduler =====
    SCHEDULER_ENABLED: bool = True

    # ===== Ops =====
    ADMIN_TOKEN: Optional[str] = None

    def model_post_init(self, __context) -> None:
        """
        Backfill API_BASE_URL from NEXT_PUBLIC_API_BASE_URL when only the web
        name is set, and strip the trailing slash so paths join cleanly.
        """
        if self.NEXT_PUBLIC_API_BASE_URL and self.API_BASE_URL == "http://localhost:8000/api/v1":
            self.API_BASE_URL = self.NEXT_PUBLIC_API_BASE_URL.strip()
        self.API_BASE_URL = self.API_BASE_URL.rstrip("/")


settings = Settings()
