"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        default="sqlite:///./unihub.db",
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    app_timezone: str = Field(
        default="Asia/Manila",
        description="IANA timezone name (or UTC+HH:MM offset) used for timestamps",
    )
    frontend_url: str = Field(
        default="http://localhost:3000",
        description="Base URL of the web client, used to build links inside emails",
    )
    allowed_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000"],
        description="Browser origins allowed to call the REST API and websocket",
    )
    notification_page_size: int = Field(
        default=50,
        description="Maximum number of notifications returned by a list request",
        gt=0,
    )
    smtp_host: str | None = Field(
        default=None, description="SMTP server hostname; email is disabled when unset"
    )
    smtp_port: int = Field(default=587, description="SMTP server port", gt=0)
    smtp_username: str | None = Field(
        default=None, description="SMTP authentication username"
    )
    smtp_password: str | None = Field(
        default=None, description="SMTP authentication password"
    )
    smtp_from: str | None = Field(
        default=None,
        description="Sender address for SMTP email; defaults to the SMTP username",
    )
    smtp_use_tls: bool | None = Field(
        default=None,
        description="Use implicit TLS; when unset it is enabled for port 465 only",
    )
    sendgrid_api_key: str | None = Field(
        default=None,
        description="SendGrid API key used for sending transactional emails via the REST API",
    )
    sendgrid_sender: str | None = Field(
        default=None,
        description="Email address that will appear as the sender of SendGrid messages",
        min_length=3,
    )

    @model_validator(mode="after")
    def _validate_sendgrid_pair(self) -> "Settings":
        if bool(self.sendgrid_api_key) ^ bool(self.sendgrid_sender):
            raise ValueError(
                "SENDGRID_API_KEY and SENDGRID_SENDER must both be provided to enable email"
            )
        if self.sendgrid_sender and "@" not in self.sendgrid_sender:
            raise ValueError("SENDGRID_SENDER must be a valid email address")
        return self

    @property
    def smtp_sender(self) -> str | None:
        """Return the effective SMTP from-address."""

        return self.smtp_from or self.smtp_username

    @property
    def smtp_configured(self) -> bool:
        return bool(self.smtp_host and self.smtp_sender)

    @property
    def sendgrid_configured(self) -> bool:
        return bool(self.sendgrid_api_key and self.sendgrid_sender)


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
