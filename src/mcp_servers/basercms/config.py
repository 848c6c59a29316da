"""
baserCMS MCP Server Configuration

Configuration settings using pydantic-settings for environment variable support.
Connection settings for the remote API live in BaserCMSConfig.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaserCMSServerConfig(BaseSettings):
    """
    Configuration for the baserCMS MCP Server.

    Reads from environment variables with BASERCMS_MCP_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="BASERCMS_MCP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore extra fields from .env file
    )

    # Server Identity
    server_name: str = Field(
        default="basercms-mcp",
        description="Server name for MCP protocol identification",
    )
    server_version: str = Field(
        default="0.1.0",
        description="Server version for MCP protocol",
    )

    # Telemetry
    telemetry_enabled: bool = Field(
        default=False,
        description="Enable OpenTelemetry instrumentation",
    )
    telemetry_service_name: str = Field(
        default="basercms-mcp",
        description="Service name for telemetry",
    )
    telemetry_otlp_endpoint: str = Field(
        default="http://localhost:4317",
        description="OTLP collector endpoint",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )