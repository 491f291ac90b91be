"""
config/settings.py
Application settings loaded from environment variables.
Uses Pydantic BaseSettings for validation and type safety.
"""

from functools import lru_cache
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Application ──────────────────────────────────────────
    APP_NAME: str = "Community Admin Console"
    APP_ENV: str = "development"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # ── Server ───────────────────────────────────────────────
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    WORKERS: int = 4

    # ── Database ─────────────────────────────────────────────
    DATABASE_URL: str
    DATABASE_POOL_SIZE: int = 10
    DATABASE_MAX_OVERFLOW: int = 20
    DATABASE_POOL_TIMEOUT: int = 30

    # ── Redis ────────────────────────────────────────────────
    REDIS_URL: str = "redis://localhost:6379/0"

    # ── JWT ──────────────────────────────────────────────────
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Where signed-out admins are sent
    LOGIN_URL: str = "/login"

    # ── Frontend ─────────────────────────────────────────────
    ALLOWED_ORIGINS: str = "http://localhost:3000"

    # ── Cloudinary (image uploads) ───────────────────────────
    CLOUDINARY_CLOUD_NAME: str = ""
    CLOUDINARY_UPLOAD_PRESET: str = "jbp_events"
    CLOUDINARY_QR_FOLDER: str = "jbp-agrawal-sabha/qr-codes"
    MAX_IMAGE_UPLOAD_BYTES: int = 5 * 1024 * 1024

    # ── Organization ─────────────────────────────────────────
    ORG_NAME: str = "JBP Agrawal Sabha"
    SUPPORT_EMAIL: str = "jabalpuragrawalsabha2019@gmail.com"
    SUPPORT_PHONE: str = "+91 9826115733"
    UPI_ID: str = "jbpagrawalsabha@upi"

    # ── Business Config ──────────────────────────────────────
    IMPORT_ERROR_PREVIEW_LIMIT: int = 10
    RECENT_ACTIVITY_LIMIT: int = 5
    DONATION_CHART_MONTHS: int = 6

    @property
    def allowed_origins_list(self) -> List[str]:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",")]

    @property
    def cloudinary_upload_url(self) -> str:
        return f"https://api.cloudinary.com/v1_1/{self.CLOUDINARY_CLOUD_NAME}/image/upload"


@lru_cache()
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()


settings = get_settings()
