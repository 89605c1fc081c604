"""
Configuration management for PillTracker
"""

from datetime import timedelta
from typing import Optional
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    APP_NAME: str = "PillTracker"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENV: str = "development"

    # API
    API_PREFIX: str = "/api/v1"
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Database
    DATABASE_URL: str = "sqlite:///./pill_tracker.db"
    DATABASE_ECHO: bool = False

    # Identity provider ("database" or "http")
    IDENTITY_PROVIDER: str = "database"
    AUTH_API_URL: str = "http://localhost:9999"
    AUTH_SERVICE_KEY: Optional[str] = None
    AUTH_TIMEOUT_SECONDS: float = 30.0

    # Administrator access
    ADMIN_API_KEY: str = "change-me-admin-key"
    ADMIN_INCLUDE_LOG_ONLY_OWNERS: bool = True

    # Notifications
    NOTIFICATION_CHANNEL_ID: str = "pill-reminders"
    NOTIFICATION_CHANNEL_NAME: str = "Pill Reminders"

    # CORS
    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost:19006"]

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


class PolicyConfig:
    """Fixed adherence and reminder policy"""

    # Timing classification: |offset| <= window is on time
    ON_TIME_WINDOW_MINUTES: int = 10

    # Reminder scheduling
    REMINDER_ROLLOVER: timedelta = timedelta(days=1)  # passed times move to the next day
    BACKUP_REMINDER_OFFSET: timedelta = timedelta(days=1)
    REMINDER_KEY_PREFIX: str = "pill_"
    BACKUP_KEY_SUFFIX: str = "_backup"

    # Scheduled time input, HH:MM
    TIME_OF_DAY_PATTERN: str = r"^([01]?[0-9]|2[0-3]):([0-5][0-9])$"

    # Placeholder identities use this many leading characters of the user id
    PLACEHOLDER_ID_PREFIX_LENGTH: int = 8

    # Delivered notifications kept by the in-process queue
    DELIVERED_HISTORY_LIMIT: int = 100


# Database table names
class TableNames:
    USERS = "users"
    MEDICATIONS = "medications"
    DOSE_LOGS = "dose_logs"


settings = get_settings()
policy = PolicyConfig()
