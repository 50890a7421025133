"""
Shared configuration management for the FitCoach Access Layer.

Third-party secrets are optional at startup. Each integration checks for the
values it needs when it is called and raises ``ConfigurationError`` then.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = Field(default="local", description="Deployment environment")
    log_level: str = Field(default="info")

    # Outbound HTTP
    upstream_timeout_seconds: float = Field(default=30.0)

    # Caller identity
    identity_service_url: str = Field(default="http://localhost:8010")
    identity_timeout_seconds: float = Field(default=10.0)

    # Generative model
    gemini_api_key: Optional[str] = None
    gemini_api_root: str = Field(default="https://generativelanguage.googleapis.com/v1beta")
    gemini_default_model: str = Field(default="gemini-2.0-flash")
    gemini_fallback_model: str = Field(default="gemini-2.5-flash")
    gemini_temperature: float = Field(default=0.2)

    # Exercise database
    api_ninjas_key: Optional[str] = None
    api_ninjas_url: str = Field(default="https://api.api-ninjas.com/v1/exercises")

    # Nutrition database
    fs_oauth2_client_id: Optional[str] = None
    fs_oauth2_client_secret: Optional[str] = None
    fs_oauth1_consumer_key: Optional[str] = None
    fs_oauth1_consumer_secret: Optional[str] = None
    fs_api_mode: Optional[str] = Field(default="auto", description="oauth2 | oauth1 | auto")
    fs_token_url: str = Field(default="https://oauth.fatsecret.com/connect/token")
    fs_token_scope: str = Field(default="premier barcode")
    fs_api_root: str = Field(default="https://platform.fatsecret.com/rest")


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int
    host: str = "0.0.0.0"

    def __init__(self, service_name: str, port: int, **kwargs):
        super().__init__(service_name=service_name, port=port, **kwargs)


def get_config(service_name: str, port: int) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, port=port)
