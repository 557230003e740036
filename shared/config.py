"""
Shared configuration management for the connector authentication layer.
"""

from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConnectorAuthConfig(BaseSettings):
    """Settings consumed by the connector authentication layer."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="CONNECTOR_AUTH_",
        case_sensitive=False,
        populate_by_name=True,
        extra="allow"
    )

    # Environment
    env: str = "local"
    log_level: str = "info"

    # Bot identity, read from the conventional Bot Framework keys as well
    microsoft_app_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("MicrosoftAppId", "CONNECTOR_AUTH_MICROSOFT_APP_ID"),
    )
    microsoft_app_password: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("MicrosoftAppPassword", "CONNECTOR_AUTH_MICROSOFT_APP_PASSWORD"),
    )
    channel_auth_tenant: Optional[str] = None

    # Outbound HTTP used by the default token and metadata clients
    http_timeout: float = 10.0
    openid_refresh_interval: int = 24 * 60 * 60


def get_config() -> ConnectorAuthConfig:
    """Get configuration from the environment."""
    return ConnectorAuthConfig()
