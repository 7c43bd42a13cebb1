from pydantic_settings import BaseSettings
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


def parse_extensions(v: Any) -> List[str]:
    """Parse allowed extensions from string or list"""
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        if v.startswith('['):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        return [ext.strip().lower() for ext in v.split(',') if ext.strip()]
    return []


class Settings(BaseSettings):
    """Application settings - all configurable via environment variables"""

    # ==========================================
    # Application
    # ==========================================
    APP_NAME: str = "BlastDesk"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    SECRET_KEY: str
    API_PREFIX: str = "/api"

    # Server Configuration
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 3001

    # Public URL used for links inside outgoing emails (unsubscribe)
    PUBLIC_BASE_URL: str = "http://localhost:3001"

    # ==========================================
    # Database
    # ==========================================
    DATABASE_URL: str = "sqlite+aiosqlite:///./database.db"
    DB_ECHO: bool = False

    # ==========================================
    # Authentication
    # ==========================================
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440  # 24 hours
    BCRYPT_ROUNDS: int = 10

    # Optional bootstrap account created at startup
    SUPERADMIN_USERNAME: str = ""
    SUPERADMIN_PASSWORD: str = ""
    SUPERADMIN_EMAIL: str = ""

    # ==========================================
    # Email
    # ==========================================
    SMTP_HOST: str = "localhost"
    SMTP_PORT: int = 587
    SMTP_USE_TLS: bool = False  # implicit TLS (port 465)
    SMTP_START_TLS: bool = True
    SMTP_VALIDATE_CERTS: bool = True
    SMTP_TIMEOUT: int = 30

    # Transport for verification codes and other system mail
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    VERIFICATION_FROM_NAME: str = "BlastDesk Verification"
    VERIFICATION_CODE_TTL_MINUTES: int = 10

    # Transport for email blasts
    BLAST_SMTP_USER: str = ""
    BLAST_SMTP_PASSWORD: str = ""
    DEFAULT_SENDER_NAME: str = "BlastDesk"
    BLAST_SEND_DELAY_SECONDS: float = 0.0

    # ==========================================
    # Scheduled blasts
    # ==========================================
    BLAST_SCHEDULER_ENABLED: bool = True
    BLAST_SCHEDULER_INTERVAL_SECONDS: int = 30

    # ==========================================
    # E-card backdrops
    # ==========================================
    UPLOAD_DIR: str = "uploads"
    MAX_UPLOAD_SIZE_MB: int = 10
    ALLOWED_BACKDROP_EXTENSIONS_STR: str = ".png,.jpg,.jpeg"

    @property
    def ALLOWED_BACKDROP_EXTENSIONS(self) -> List[str]:
        return parse_extensions(self.ALLOWED_BACKDROP_EXTENSIONS_STR)

    # ==========================================
    # CORS (stored as comma-separated string, parsed to list)
    # ==========================================
    CORS_ORIGINS_STR: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"

    @property
    def CORS_ORIGINS(self) -> List[str]:
        return parse_cors_origins(self.CORS_ORIGINS_STR)

    # ==========================================
    # Rate Limiting
    # ==========================================
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_PER_MINUTE: int = 60
    RATE_LIMIT_STORAGE_URI: str = "memory://"

    # ==========================================
    # Logging
    # ==========================================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""

    # ==========================================
    # Seed data
    # ==========================================
    SEED_DEMO_DATA: bool = False

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


settings = Settings()
