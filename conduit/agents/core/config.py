"""
Process settings.

Values come from ``CONDUIT_*`` environment variables or a ``.env`` file.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for the tool-orchestration layer."""

    model_config = SettingsConfigDict(
        env_prefix="CONDUIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite+aiosqlite:///./conduit.db"
    database_echo: bool = False

    # Capability servers
    servers_config_path: Optional[str] = None
    connect_timeout_seconds: float = Field(default=30.0, gt=0)
    call_timeout_seconds: float = Field(default=60.0, gt=0)

    # Payload keys used for routing inside the agent, stripped before remote calls
    internal_payload_fields: List[str] = Field(
        default_factory=lambda: ["conversation_id", "conversation_uuid"]
    )


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings, loaded once."""
    return Settings()
