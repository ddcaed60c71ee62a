"""
Feddy SDK Configuration
=======================

PURPOSE:
    Pydantic-Settings based defaults for the Feddy SDK, plus the explicit
    per-client configuration object handed to the transport client.
    All settings can be overridden via environment variables (FEDDY_ prefix).

LIFECYCLE:
    Settings are process-wide defaults. FeddyConfig is built by
    Feddy.configure() (or restored from the identity store) and passed into
    FeddyAPIClient; reconfiguring builds a new FeddyConfig and a new client.
"""

import logging
import os
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

SDK_VERSION = "1.0.0"
DEFAULT_BASE_URL = "https://feddy.app"


class Settings(BaseSettings):
    """Process-wide SDK defaults."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="FEDDY_", extra="ignore")

    debug: bool = False

    # Feddy service
    base_url: str = DEFAULT_BASE_URL
    sdk_version: str = SDK_VERSION
    request_timeout: float = 10.0  # seconds, per HTTP call

    # Identity persistence (api key + user identity)
    data_dir: str = os.path.join("~", ".feddy")
    identity_file: str = "identity.json"

    def identity_path(self) -> str:
        return os.path.join(os.path.expanduser(self.data_dir), self.identity_file)


class FeddyConfig(BaseModel):
    """Explicit configuration for one transport client.

    Immutable: reconfiguring the SDK produces a new FeddyConfig rather than
    mutating the one a live client holds.
    """

    model_config = ConfigDict(frozen=True)

    api_key: str = Field(min_length=1)
    base_url: str = DEFAULT_BASE_URL
    enable_debug_logging: bool = False

    @field_validator("api_key", mode="before")
    @classmethod
    def strip_api_key(cls, value: Optional[str]) -> str:
        return (value or "").strip()

    @field_validator("base_url", mode="before")
    @classmethod
    def default_base_url(cls, value: Optional[str]) -> str:
        return value or settings.base_url


settings = Settings()
