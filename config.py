# src/config.py
import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent

load_dotenv(BASE_DIR / ".env")


def _env_list(name: str, default: str = "") -> List[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


def _env_bool(name: str, default: bool) -> bool:
    return os.getenv(name, str(default)).lower() in ("1", "true", "yes", "on")


class Settings:
    """Application configuration settings."""
    SITE_NAME: str = os.getenv("SITE_NAME", "춘천답기 웹진")
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    DATABASE_URL: str = os.getenv("DATABASE_URL", f"sqlite:///{BASE_DIR}/webzine.db")
    AUTO_CREATE_TABLES: bool = _env_bool("AUTO_CREATE_TABLES", True)

    # Session cookie
    SECRET_KEY: str = os.getenv("SESSION_SECRET", "default-secret-key")
    ALGORITHM: str = "HS256"
    SESSION_COOKIE_NAME: str = "__session"
    SESSION_MAX_AGE_DAYS: int = int(os.getenv("SESSION_MAX_AGE_DAYS", "30"))

    # Admin account
    ADMIN_EMAILS: List[str] = _env_list("ADMIN_EMAILS")
    ADMIN_ACCOUNT_EMAIL: str = os.getenv("ADMIN_ACCOUNT_EMAIL", "")
    ADMIN_ACCOUNT_NAME: str = os.getenv("ADMIN_ACCOUNT_NAME", "춘천문화원 관리자")
    ADMIN_PASSWORD_HASH: str = os.getenv("ADMIN_PASSWORD_HASH", "")

    # Storage
    STORAGE_BACKEND: str = os.getenv("STORAGE_BACKEND", "local")  # local, s3
    MEDIA_ROOT: str = os.getenv("MEDIA_ROOT", str(BASE_DIR / "public" / "media"))
    MEDIA_URL: str = os.getenv("MEDIA_URL", "/media")
    CONTENT_BUCKET: str = os.getenv("CONTENT_BUCKET", "webzine-media")
    MEDIA_BUCKET: str = os.getenv("MEDIA_BUCKET", "media")

    # S3-compatible object store
    S3_ENDPOINT_URL: str = os.getenv("S3_ENDPOINT_URL", "")
    S3_REGION_NAME: str = os.getenv("S3_REGION_NAME", "us-east-1")
    S3_ACCESS_KEY: str = os.getenv("S3_ACCESS_KEY", "")
    S3_SECRET_KEY: str = os.getenv("S3_SECRET_KEY", "")
    CDN_URL: str = os.getenv("CDN_URL", "")

    # Google Cloud Text-to-Speech
    GOOGLE_CLOUD_API_KEY: str = os.getenv("GOOGLE_CLOUD_API_KEY", "")
    GOOGLE_CLOUD_PROJECT_ID: str = os.getenv("GOOGLE_CLOUD_PROJECT_ID", "")
    TTS_API_URL: str = "https://texttospeech.googleapis.com/v1/text:synthesize"
    TTS_LANGUAGE_CODE: str = os.getenv("TTS_LANGUAGE_CODE", "ko-KR")
    TTS_VOICE_NAME: str = os.getenv("TTS_VOICE_NAME", "ko-KR-Neural2-A")
    TTS_MAX_CHUNK_BYTES: int = int(os.getenv("TTS_MAX_CHUNK_BYTES", "4500"))
    TTS_LEGACY_DIR: str = os.getenv("TTS_LEGACY_DIR", str(BASE_DIR / "public" / "tts"))
    HTTP_TIMEOUT_SEC: float = float(os.getenv("HTTP_TIMEOUT_SEC", "60"))

    CORS_ORIGINS: List[str] = _env_list("CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173")

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def tts_configured(self) -> bool:
        return bool(self.GOOGLE_CLOUD_API_KEY)


settings = Settings()
