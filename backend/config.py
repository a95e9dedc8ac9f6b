"""Configuration settings for the backend API."""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"  # Ignore extra environment variables
    )

    # API
    api_title: str = "SCHEMA2ERD Backend API"
    api_version: str = "1.0.0"
    # Can be overridden via env var: CORS_ORIGINS='["http://localhost:5173"]'
    cors_origins: List[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    # None defers to the `logging` section of config.yaml
    log_level: Optional[str] = None
    debug: bool = False

    # Share links
    public_base_url: str = "http://localhost:8000"
    share_ttl_hours: int = 48
    share_key_length: int = 10
    share_max_payload_chars: int = 500_000

    # Headless rendering
    render_width: int = 1600
    render_height: int = 1000

    # Attach truncated tracebacks to error bodies (development only)
    include_tracebacks: bool = False


settings = Settings()
