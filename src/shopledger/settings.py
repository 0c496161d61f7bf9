"""
shopledger.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for the session core and the relay.
- Hide secrets from repr/logging (API keys, SMTP password).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    One settings object shared by the controller, the provider adapters and the relay.
    Defaults are safe for local dev.
    """

    model_config = SettingsConfigDict(env_prefix="SHOPLEDGER_", case_sensitive=False)

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "shopledger"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 3001

    # Local persistence (browser local storage equivalent)
    storage_url: str = "sqlite:///./shopledger.db"

    # Session
    session_timeout_seconds: float = Field(default=30 * 60, gt=0)
    access_token_ttl_days: int = 1
    refresh_token_ttl_days: int = 7

    # Identity providers
    identity_api_base_url: str = "http://localhost:3001/api"
    firebase_api_key: str = Field(default="", repr=False)
    firebase_project_id: str = ""
    request_timeout_seconds: float = 10.0

    # Email relay (client side)
    email_relay_base_url: str = "http://localhost:3001"

    # Email relay (server side)
    sendgrid_api_key: str = Field(default="", repr=False)
    from_email: str = ""
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = Field(default="", repr=False)
    smtp_use_tls: bool = True


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Every other module depends on this one; add fields here rather than reading os.environ.
