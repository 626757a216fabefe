"""
Shared configuration management for the Analysis service.
"""

from typing import List, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="ANALYSIS_",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    # Environment
    env: str = "local"
    log_level: str = "info"
    default_language: str = "es"

    # Gateway trust boundary
    gateway_secret: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("ANALYSIS_GATEWAY_SECRET", "GATEWAY_SECRET", "gateway_secret"),
    )

    # Bearer token validation
    jwt_secret_key: Optional[str] = None
    jwt_issuer: Optional[str] = None
    jwt_audience: Optional[str] = None
    jwt_algorithms: List[str] = Field(default_factory=lambda: ["HS256"])

    # Record read services
    analysis_service_url: str = "http://localhost:8081"
    result_service_url: str = "http://localhost:8081"
    error_service_url: str = "http://localhost:8081"
    records_timeout_seconds: float = 10.0


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str = "analysis"
    port: int = 8080
    host: str = "0.0.0.0"


def get_config(service_name: str = "analysis", port: int = 8080, **overrides) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, port=port, **overrides)
