"""
Adwarden Configuration
Load settings from environment variables
"""
from functools import lru_cache
from typing import Optional, List
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # ============================================
    # Application Settings
    # ============================================
    APP_NAME: str = "Adwarden"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"  # development, staging, production
    LOG_LEVEL: str = "INFO"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    # ============================================
    # Database Settings
    # ============================================
    POSTGRES_USER: str = "postgres"
    POSTGRES_PWD: str = ""
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "adwarden"
    DATABASE_URL: Optional[str] = None
    DATABASE_POOL_MAX: int = 10

    @property
    def database_url(self) -> str:
        """Get database URL, construct from parts if not provided"""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PWD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    @property
    def async_database_url(self) -> str:
        """Get async database URL for SQLAlchemy async"""
        url = self.database_url
        return url.replace("postgresql://", "postgresql+asyncpg://")

    # ============================================
    # Security Settings
    # ============================================
    SECRET_KEY: str = "your-secret-key-change-in-production"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24  # 24 hours
    ALGORITHM: str = "HS256"

    # Seeded by scripts/init_db.py when no users exist
    ADMIN_EMAIL: Optional[str] = None
    ADMIN_PASSWORD: Optional[str] = None

    # ============================================
    # CORS Settings
    # ============================================
    # The browser extension calls from arbitrary page origins
    CORS_ORIGINS: List[str] = ["*"]

    # ============================================
    # Redis Settings (live connection count, rate limits)
    # ============================================
    REDIS_URL: Optional[str] = None
    REDIS_CONNECT_TIMEOUT_SECONDS: float = 2.0
    REALTIME_COUNT_KEY: str = "realtime:connection_count"
    REALTIME_COUNT_CHANNEL: str = "realtime:connection_count:updates"
    REALTIME_NOTIFICATION_CHANNEL: str = "realtime:notifications"
    LIVE_POLL_INTERVAL_SECONDS: float = 1.0

    # ============================================
    # Extension Serving Settings
    # ============================================
    CAMPAIGN_TIMEZONE: str = "UTC"  # time_based windows are evaluated in this zone
    NEW_USER_WINDOW_DAYS: int = 7
    EXTENSION_LOG_DOMAIN: str = "extension"  # logged when no page domain is sent

    # ============================================
    # Rate Limit Settings (per client IP)
    # ============================================
    RATE_LIMIT_ENABLED: bool = True
    AD_BLOCK_RATE_LIMIT: int = 120
    AD_BLOCK_RATE_WINDOW_SECONDS: int = 60
    LIVE_RATE_LIMIT: int = 10
    LIVE_RATE_WINDOW_SECONDS: int = 60

    # ============================================
    # Scheduler Settings
    # ============================================
    SCHEDULER_ENABLED: bool = True
    STATUS_SYNC_INTERVAL_MINUTES: int = 5

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields from .env


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


# Global settings instance
settings = get_settings()
