"""
Core settings and environment variables for the PakAir API.
Uses pydantic-settings for type-safe environment variable loading.
"""

from enum import Enum
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class CorsPolicy(str, Enum):
    """
    CORS strictness for the single API entrypoint.

    ALLOW_ALL:      any origin, credentials disabled
    ALLOW_LISTED:   only CORS_ORIGINS / CORS_ORIGIN_REGEX, credentials allowed
    DEV_PERMISSIVE: any origin echoed back with credentials (local development only)
    """
    ALLOW_ALL = "allow_all"
    ALLOW_LISTED = "allow_listed"
    DEV_PERMISSIVE = "dev_permissive"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Create a .env file in the root directory to configure these.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="allow",  # Allow extra env vars to prevent crashes
    )

    # Application
    APP_NAME: str = "PakAir API"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"  # development | production | test
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # CORS
    CORS_POLICY: CorsPolicy = CorsPolicy.ALLOW_LISTED
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:5173"
    CORS_ORIGIN_REGEX: Optional[str] = None  # e.g. https://.*\.vercel\.app

    # Firebase/Firestore
    FIREBASE_PROJECT_ID: Optional[str] = None
    FIREBASE_CREDENTIALS_PATH: Optional[str] = None  # Path to service account JSON
    FIREBASE_STORAGE_BUCKET: Optional[str] = None

    # Mock DB mode for local development without Firebase credentials.
    # An empty MOCK_DB_PATH keeps the mock purely in memory.
    USE_MOCK_DB: bool = False
    MOCK_DB_PATH: str = "./mock_db.json"

    # Session tokens
    JWT_SECRET: str = "change-this-secret-in-production"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 60 * 24 * 7  # 7 days
    BCRYPT_ROUNDS: int = 12

    # Registration
    ALLOW_OFFICIAL_REGISTRATION: bool = False

    # Media uploads
    MEDIA_PROVIDER: str = "firebase"  # "firebase" or "mock"
    MEDIA_FOLDER: str = "pakair/reports"
    MEDIA_MAX_BYTES: int = 20 * 1024 * 1024  # 20 MiB
    MEDIA_IMAGE_MAX_DIMENSION: int = 1200
    MEDIA_UPLOAD_TIMEOUT_SECONDS: float = 60.0
    MOCK_MEDIA_BASE_URL: str = "http://localhost:8000/mock-media"

    # Externally populated collections (read-only relays)
    MODEL_DATA_COLLECTION: str = "model_data"
    RECOMMENDATIONS_COLLECTION: str = "recomendation_model"

    # Feature flags
    ENABLE_AI_FEATURES: bool = False
    ENABLE_CLAUDE_HAIKU: bool = False

    # Default official account, used only by scripts/provision_official.py
    DEFAULT_OFFICIAL_EMAIL: Optional[str] = None
    DEFAULT_OFFICIAL_PASSWORD: Optional[str] = None
    DEFAULT_OFFICIAL_FIRST_NAME: str = "Developer"
    DEFAULT_OFFICIAL_LAST_NAME: str = "Official"
    DEFAULT_OFFICIAL_PHONE: str = "0000000000"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


# Global settings instance
settings = Settings()
