"""
Application Settings
Load from environment variables
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """Application settings from environment"""

    # ======================
    # Application
    # ======================
    APP_ENV: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # ======================
    # Backend API
    # ======================
    BACKEND_API_URL: str = "http://localhost:9510/api"
    BACKEND_API_TOKEN: Optional[str] = None
    HTTP_TIMEOUT_SECONDS: float = 30.0

    # ======================
    # Performance aggregation
    # ======================
    PERFORMANCE_FETCH_TIMEOUT_SECONDS: float = 20.0
    PERFORMANCE_CACHE_TTL_SECONDS: int = 60

    # ======================
    # FX & currencies
    # ======================
    FX_CACHE_TTL_SECONDS: int = 300
    CURRENCY_CACHE_TTL_SECONDS: int = 3600
    DEFAULT_DISPLAY_CURRENCY: str = "USD"

    # ======================
    # Pydantic v2 config
    # ======================
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="forbid",
    )


settings = Settings()
