"""
Zip Unlimited - Backend Configuration

Настройки приложения через environment variables.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from functools import lru_cache
from typing import Literal


class Settings(BaseSettings):
    """Настройки приложения."""

    # App
    APP_NAME: str = "Zip Unlimited"
    DEBUG: bool = False
    API_PREFIX: str = "/api/v1"
    ENVIRONMENT: Literal["development", "production"] = "development"
    LOG_LEVEL: str = "INFO"

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_GAME: int = 60

    # Sessions (in-memory only)
    SESSION_MAX: int = 1000

    # Generator
    EXPOSE_SOLUTION: bool = False
    CHECKPOINT_PLACEMENT_ATTEMPTS: int = 2000
    MAX_GRID_SIZE: int = 20
    MAX_REWIRE_ITERATIONS: int = 20000

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"LOG_LEVEL must be a logging level name, got: {value}")
        return level

    @field_validator("MAX_GRID_SIZE", "MAX_REWIRE_ITERATIONS", "SESSION_MAX", "CHECKPOINT_PLACEMENT_ATTEMPTS")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError(f"must be positive, got: {value}")
        return value

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def solution_visible(self) -> bool:
        return self.DEBUG or self.EXPOSE_SOLUTION

    @property
    def cors_origins_list(self) -> list[str]:
        """Парсит CORS_ORIGINS в список."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    """Получить настройки (кэшируется)."""
    return Settings()


settings = get_settings()
