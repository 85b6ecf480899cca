"""
Configuration and settings for the dashboard API.

Every field can be set from the environment with a GLASS_ prefix, e.g.
GLASS_FIREBASE_PROJECT_ID or GLASS_USE_IN_MEMORY_BACKENDS.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from backend.identity import IDENTITY_TOOLKIT_URL, REQUEST_TIMEOUT, SECURE_TOKEN_URL
from shared.download import BRAND_CONFIG


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_prefix="GLASS_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")
    environment: str = Field(default="production")

    # Served to the dashboard as runtime-config.json
    api_url: Optional[str] = Field(default=None)

    # Firebase
    firebase_project_id: Optional[str] = Field(default=None)
    firebase_web_api_key: Optional[str] = Field(default=None)
    identity_toolkit_url: str = Field(default=IDENTITY_TOOLKIT_URL)
    secure_token_url: str = Field(default=SECURE_TOKEN_URL)
    request_timeout: float = Field(default=REQUEST_TIMEOUT)

    # Desktop app hand-off
    app_protocol: str = Field(default=BRAND_CONFIG.protocol)

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
