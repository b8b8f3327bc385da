from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Any
import json


def parse_cors_origins(v: Any) -> List[str]:
    """Parse CORS origins from string or list"""
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        # Try JSON parsing first
        if v.startswith('['):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        # Fall back to comma-separated
        return [origin.strip() for origin in v.split(',') if origin.strip()]
    return []


class Settings(BaseSettings):
    """Application settings - all configurable via environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ==========================================
    # Application
    # ==========================================
    APP_NAME: str = "PhD Hub"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    API_PREFIX: str = "/api"

    # Server Configuration
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8000

    # ==========================================
    # Database
    # ==========================================
    DATABASE_URL: str = "sqlite+aiosqlite:///./phdhub.db"
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30  # seconds to wait for a pooled connection
    DB_POOL_RECYCLE: int = 1800  # 30 minutes
    DB_COMMAND_TIMEOUT: float = 15.0  # per-statement timeout (asyncpg)
    DB_ECHO: bool = False

    # ==========================================
    # Identity provider
    # ==========================================
    IDENTITY_API_URL: str = "https://api.clerk.com/v1"
    IDENTITY_SECRET_KEY: str = ""
    # PEM public key (RS256) or shared secret (HS256) used to verify session tokens
    IDENTITY_JWT_KEY: str = ""
    IDENTITY_JWT_ALGORITHM: str = "RS256"
    IDENTITY_SESSION_COOKIE: str = "__session"
    IDENTITY_TIMEOUT: float = 10.0  # seconds
    WEBHOOK_SECRET: str = ""
    WEBHOOK_TOLERANCE_SECONDS: int = 300

    # ==========================================
    # Storage Configuration
    # ==========================================
    AWS_ACCESS_KEY_ID: str = ""
    AWS_SECRET_ACCESS_KEY: str = ""
    AWS_REGION: str = "us-east-1"
    S3_BUCKET_NAME: str = "phdhub-resources"
    S3_ENDPOINT_URL: str = ""  # Empty means AWS; set for MinIO/localstack
    UPLOAD_URL_EXPIRY: int = 600  # 10 minutes
    DOWNLOAD_URL_EXPIRY: int = 300  # 5 minutes

    # ==========================================
    # CORS (stored as comma-separated string, parsed to list)
    # ==========================================
    CORS_ORIGINS_STR: str = "http://localhost:3000,http://127.0.0.1:3000"

    @property
    def CORS_ORIGINS(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return parse_cors_origins(self.CORS_ORIGINS_STR)

    # ==========================================
    # Listing
    # ==========================================
    MAX_PAGE_SIZE: int = 100
    ACTIVITY_FEED_LIMIT: int = 50
    GROUP_PREVIEW_IMAGES: int = 5
    MEMBERSHIP_UPDATE_ATTEMPTS: int = 5  # re-reads when a concurrent join/leave wins

    # ==========================================
    # Logging
    # ==========================================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/phdhub.log"


settings = Settings()
