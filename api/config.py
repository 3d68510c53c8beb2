"""
API Configuration
Environment variables and settings for the FastAPI backend.
"""

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    debug_mode: bool = True
    log_level: str = "INFO"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Canvas
    default_width: float = 800.0
    default_height: float = 600.0

    # Layout
    frame_interval_ms: float = 1000 / 60
    max_ticks_per_request: int = 1000
    layout_seed: int = 42

    # Sessions
    max_sessions: int = 100

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
