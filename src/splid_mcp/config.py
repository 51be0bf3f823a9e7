"""Application configuration."""

import os

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from splid_mcp.adapters.splid_client import (
    DEFAULT_APP_ID,
    DEFAULT_BASE_URL,
    DEFAULT_CLIENT_KEY,
)

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    splid_code: str = Field(validation_alias=AliasChoices("splid_code", "code"))
    splid_app_id: str = DEFAULT_APP_ID
    splid_client_key: str = DEFAULT_CLIENT_KEY
    splid_base_url: str = DEFAULT_BASE_URL
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 8000
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
        populate_by_name=True,
    )
