"""
Configuration Management.

Client configuration and its defaults. Settings may come from the
environment (TFE_ prefix); explicit Config values always win.

Environment (.env is honoured as well):
    TFE_ADDRESS     - API address, defaults to the public SaaS service
    TFE_TOKEN       - API token, only read by config_from_env()
    TFE_LOG_LEVEL   - Level used by setup_logging()
    TFE_LOG_FORMAT  - 'console' or 'json'
"""

from functools import lru_cache
from typing import Literal

import httpx
from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ADDRESS = "https://app.terraform.io"
"""The public SaaS service."""

# Connection reuse for the default transport. No overall timeout: read and
# write timeouts are left to callers that supply their own client.
DEFAULT_CONNECT_TIMEOUT = 30.0
DEFAULT_MAX_CONNECTIONS = 100
DEFAULT_MAX_KEEPALIVE_CONNECTIONS = 100
DEFAULT_KEEPALIVE_EXPIRY = 90.0


class Settings(BaseSettings):
    """Values read from TFE_* environment variables."""

    address: str = DEFAULT_ADDRESS
    token: str = ""
    log_level: str = "WARNING"
    log_format: Literal["console", "json"] = "console"

    model_config = SettingsConfigDict(
        env_prefix="TFE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


class Config(BaseModel):
    """
    Configuration details for the API client.

    Attributes:
        address: Address of the API. Empty means the default address.
        token: API token used to authenticate every request.
        http_client: Custom httpx client to send requests with.
    """

    address: str = ""
    token: str = ""
    http_client: httpx.Client | None = Field(default=None, repr=False)

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)


def default_config() -> Config:
    """Return the default configuration. It carries no token."""
    return Config(address=get_settings().address or DEFAULT_ADDRESS)


def config_from_env() -> Config:
    """Build a complete configuration, token included, from the environment."""
    settings = get_settings()
    return Config(address=settings.address or DEFAULT_ADDRESS, token=settings.token)


def build_http_client() -> httpx.Client:
    """
    Create the default transport.

    A pooled httpx client that follows redirects. Only connecting is
    bounded in time; no proxy or TLS customisation is applied.
    """
    return httpx.Client(
        timeout=httpx.Timeout(None, connect=DEFAULT_CONNECT_TIMEOUT),
        limits=httpx.Limits(
            max_connections=DEFAULT_MAX_CONNECTIONS,
            max_keepalive_connections=DEFAULT_MAX_KEEPALIVE_CONNECTIONS,
            keepalive_expiry=DEFAULT_KEEPALIVE_EXPIRY,
        ),
        follow_redirects=True,
    )
