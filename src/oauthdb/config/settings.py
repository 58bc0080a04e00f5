"""Client settings and configuration management."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client settings loaded from environment variables.

    Settings are frozen: a client captures them once at construction and
    they stay fixed for its lifetime.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # OAuth service
    oauth_url: str = Field(
        default="http://localhost:9010",
        description="Base URL of the OAuth service; also the assertion audience",
    )
    oauth_secret_key: SecretStr = Field(
        default=SecretStr(""),
        description="Pre-shared HS256 key used to sign identity assertions",
    )
    oauth_timeout: float = Field(
        default=30.0,
        description="Timeout in seconds for requests to the OAuth service",
    )

    # Identity provider
    domain: str = Field(
        default="localhost",
        description="Identity provider domain; used as the assertion issuer",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    log_format: Literal["json", "text"] = Field(
        default="text",
        description="Log format",
    )

    @property
    def client_info_path(self) -> str:
        """Get the path template for the client metadata endpoint."""
        return "/v1/client/{client_id}"

    @property
    def key_data_path(self) -> str:
        """Get the path of the scoped key data endpoint."""
        return "/v1/key-data"


@lru_cache
def get_settings() -> Settings:
    """Get cached client settings."""
    return Settings()
