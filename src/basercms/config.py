"""
baserCMS Client Configuration

Configuration settings using pydantic-settings for environment variable support.
Read once at process start; never re-read per request.
"""

from __future__ import annotations

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.basercms.exceptions import MissingConfigError


class BaserCMSConfig(BaseSettings):
    """
    Connection and resolution settings for the baserCMS Web API.

    Reads from environment variables with BASERCMS_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="BASERCMS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore extra fields from .env file
    )

    # Remote API
    base_url: str = Field(
        default="http://localhost",
        description="Site root of the baserCMS installation",
    )
    api_prefix: str = Field(
        default="/baser/api/admin",
        description="Path of the admin API below the site root",
    )
    email: str | None = Field(
        default=None,
        description="Login email of the API user",
    )
    password: SecretStr | None = Field(
        default=None,
        description="Login password of the API user",
    )
    timeout_seconds: float = Field(
        default=30.0,
        description="Timeout for every HTTP call to the API",
    )

    # Resolution defaults
    default_user_id: int = Field(
        default=1,
        description="User substituted when an email cannot be resolved",
    )
    default_blog_content_id: int = Field(
        default=1,
        description="Blog content substituted when a blog content name cannot be resolved",
    )

    # Reported by serverInfo
    environment: str = Field(
        default="development",
        description="Deployment environment name",
    )

    @property
    def api_base_url(self) -> str:
        """Full URL of the admin API."""
        return self.base_url.rstrip("/") + "/" + self.api_prefix.strip("/")

    def require_credentials(self) -> tuple[str, str]:
        """
        Return the login credentials.

        Raises:
            MissingConfigError: If email or password is not configured
        """
        if not self.email:
            raise MissingConfigError("BASERCMS_EMAIL", hint="Set it in the environment or .env")
        if self.password is None or not self.password.get_secret_value():
            raise MissingConfigError(
                "BASERCMS_PASSWORD", hint="Set it in the environment or .env"
            )
        return self.email, self.password.get_secret_value()