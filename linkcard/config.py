"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - get_settings() is cached (lru_cache) — single instance per process
    - Every setting has a default: the service runs with no environment at all

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support (ADR: developer UX)
    - Limits live here, not in the services: services take them as constructor
      arguments so tests build small instances directly
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Identifier normalization
    identifier_rate_limit: int = 100
    identifier_batch_max: int = 50

    # Artifact generation
    artifact_rate_limit: int = 60
    artifact_batch_max: int = 20
    rate_limit_window_seconds: int = 60

    # Artifact cache
    cache_max_size: int = 1000
    cache_ttl_seconds: int = 3600

    # State cookie
    cookie_name: str = "linkedin_card_data"
    cookie_max_age_seconds: int = 30 * 24 * 60 * 60
    cookie_secure: bool = True
    cookie_same_site: Literal["strict", "lax", "none"] = "lax"

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
