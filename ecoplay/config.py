"""
EcoPlay Backend Configuration.

Centralized configuration management using Pydantic Settings.

Environment Variables:
======================
All settings can be overridden via environment variables or .env file.

Database:
---------
- DATABASE_URL: SQLAlchemy async URL
  (postgresql+asyncpg://... in production, sqlite+aiosqlite://... locally)

Point Rules:
------------
- WATERING_POINTS: 15 per verified daily watering
- ACTIVITY_POINTS: 10 per activity submission (credited optimistically)
- QUIZ_QUESTION_POINTS: 10 default per quiz question

Verification Oracle:
--------------------
- VERIFICATION_MODE: "simulated" (no network) or "remote" (HTTP oracle)
- VERIFICATION_SIMULATED_RESULT: outcome returned in simulated mode
- VERIFICATION_API_URL / VERIFICATION_API_KEY: remote oracle endpoint
- VERIFICATION_TIMEOUT_SECONDS: timeout, counted as a rejection

Celery:
-------
- CELERY_BROKER_URL / CELERY_RESULT_BACKEND: used by the audit worker
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Settings are cached via @lru_cache.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=True
    )

    # ==========================================================================
    # General Settings
    # ==========================================================================
    APP_ENV: str = "development"
    APP_DEBUG: bool = True
    DEBUG: bool = False
    CORS_ORIGINS: list[str] = ["*"]

    # ==========================================================================
    # Database
    # ==========================================================================
    DATABASE_URL: str = "sqlite+aiosqlite:///./ecoplay.db"
    DATABASE_ECHO: bool = False

    # ==========================================================================
    # Point Rules
    # ==========================================================================
    WATERING_POINTS: int = 15
    ACTIVITY_POINTS: int = 10
    QUIZ_QUESTION_POINTS: int = 10
    ACTIVITY_TYPES: list[str] = ["Planting", "Cleanup", "Recycling", "Conservation"]
    DEFAULT_WATERING_NOTE: str = "Daily watering activity"

    # ==========================================================================
    # Verification Oracle
    # ==========================================================================
    VERIFICATION_MODE: str = "simulated"  # or "remote"
    VERIFICATION_SIMULATED_RESULT: bool = True
    VERIFICATION_API_URL: Optional[str] = None
    VERIFICATION_API_KEY: Optional[str] = None
    VERIFICATION_TIMEOUT_SECONDS: float = 10.0

    # ==========================================================================
    # Celery (audit worker)
    # ==========================================================================
    CELERY_BROKER_URL: str = "redis://redis:6379/1"
    CELERY_RESULT_BACKEND: str = "redis://redis:6379/2"


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
