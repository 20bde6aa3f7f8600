from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import List
import os


class Settings(BaseSettings):
    """Global app settings loaded from environment.
    - Keep defaults light for dev.
    - Override via .env or real env vars.
    """

    APP_NAME: str = "careconnect_api"
    APP_ENV: str = "dev"
    APP_DEBUG: bool = True
    LOG_DIR: str = "logs"

    MONGODB_URI: str = "mongodb://localhost:27017/careconnect"

    # JWT settings
    JWT_SECRET: str = "careconnect_dev_secret"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    REFRESH_TOKEN_EXPIRE_DAYS: int = 30
    # Browser clients authenticate with this httpOnly cookie; API clients use the Bearer header
    SESSION_COOKIE_NAME: str = "session_token"

    # Raw CORS string from env (comma-separated); parsed via cors_origins property
    CORS_ORIGINS: str | None = None

    RATE_LIMIT_ENABLED: bool = True

    # Feature flags
    FEATURE_AI_MATCHING: bool = False

    # Cloudflare R2 storage config
    R2_ACCOUNT_ID: str | None = None
    R2_ACCESS_KEY_ID: str | None = None
    R2_SECRET_ACCESS_KEY: str | None = None
    R2_BUCKET_NAME: str | None = None
    # Public base URL, e.g. https://cdn.example.com
    R2_PUBLIC_BASE: str | None = None
    MEDIA_ROOT: str = "media"
    MAX_IMAGE_MB: int = 10

    # E-mail provider config (dummy | smtp)
    EMAIL_PROVIDER: str = "dummy"
    SMTP_HOST: str | None = None
    SMTP_PORT: int = 587
    SMTP_USER: str | None = None
    SMTP_PASSWORD: str | None = None
    SMTP_FROM: str | None = None

    # Real-time relay. Empty URL means the in-process Socket.IO server is used.
    SOCKET_RELAY_URL: str | None = None
    NOTIFY_RELAY_TIMEOUT_SECONDS: float = 2.0

    # Booking reminders
    SCHEDULER_ENABLED: bool = True
    REMINDER_LEAD_HOURS: int = 24

    class Config:
        env_file = ".env"
        case_sensitive = False

    @property
    def cors_origins(self) -> List[str]:
        """Return CORS origins as a list, parsing comma-separated env string."""
        raw = self.CORS_ORIGINS or os.getenv("CORS_ORIGINS", "") or ""
        return [o.strip() for o in raw.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.APP_ENV.lower() in ("prod", "production")


@lru_cache()
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
