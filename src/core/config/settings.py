# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Application configuration settings using Pydantic Settings.

This module provides centralized configuration management for the
admissions notification engine. Settings are loaded from environment
variables with sensible defaults.

The Settings class is the main entry point and aggregates all subsettings.
A singleton instance is provided via get_settings() for dependency injection.

Example:
    >>> from src.core.config.settings import get_settings
    >>> settings = get_settings()
    >>> print(settings.notifications.default_locale)
    'en'
"""

from functools import lru_cache
from typing import Literal, Self

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class NotificationSettings(BaseSettings):
    """Notification engine configuration.

    Attributes:
        default_locale: Locale used when a guardian has no preference.
        school_name: Organization name available to every template.
        school_phone: Organization phone available to every template.
        store_backend: Which notification store to build at startup.
    """

    model_config = SettingsConfigDict(
        env_prefix="NOTIFICATIONS_",
        extra="ignore",
    )

    default_locale: Literal["en", "ar"] = "en"
    school_name: str = "Moazzez School"
    school_phone: str = "+971-4-XXX-XXXX"
    store_backend: Literal["memory", "sql"] = "memory"


class DatabaseSettings(BaseSettings):
    """Database configuration for the SQL notification store.

    Attributes:
        url: SQLAlchemy async connection URL.
        echo: Log every SQL statement.
    """

    model_config = SettingsConfigDict(
        env_prefix="NOTIFICATIONS_DB_",
        extra="ignore",
    )

    url: str = "sqlite+aiosqlite:///./notifications.db"
    echo: bool = False


class SMTPSettings(BaseSettings):
    """SMTP configuration for the email channel.

    Attributes:
        host: SMTP server hostname.
        port: SMTP server port.
        username: SMTP authentication username.
        password: SMTP authentication password.
        use_tls: Use STARTTLS.
        from_email: Sender email address.
        from_name: Sender display name.
    """

    model_config = SettingsConfigDict(
        env_prefix="SMTP_",
        extra="ignore",
    )

    host: str | None = None
    port: int = 587
    username: str | None = None
    password: SecretStr | None = None
    use_tls: bool = True
    from_email: str | None = None
    from_name: str = "Moazzez School Admissions"

    @property
    def is_configured(self) -> bool:
        """Check whether enough is set to open an SMTP session."""
        return all([self.host, self.username, self.password, self.from_email])


class SMSSettings(BaseSettings):
    """HTTP SMS gateway configuration for the SMS channel.

    Attributes:
        gateway_url: Endpoint that accepts outbound messages.
        api_key: Bearer token for the gateway.
        sender_id: Sender name or number shown to the recipient.
        timeout: Request timeout in seconds.
    """

    model_config = SettingsConfigDict(
        env_prefix="SMS_",
        extra="ignore",
    )

    gateway_url: str | None = None
    api_key: SecretStr | None = None
    sender_id: str = "MOAZZEZ"
    timeout: float = 10.0

    @property
    def is_configured(self) -> bool:
        """Check whether the gateway endpoint and key are set."""
        return bool(self.gateway_url and self.api_key)


class Settings(BaseSettings):
    """Main application settings aggregating all subsettings.

    Use get_settings() to obtain a cached singleton instance.

    Attributes:
        environment: Current environment (development, staging, production).
        debug: Enable debug mode.
        log_level: Logging level.
        notifications: Notification engine settings.
        database: SQL store settings.
        smtp: Email channel settings.
        sms: SMS channel settings.
        cors_origins: Origins allowed to call the HTTP API.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # Environment
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "DEBUG"
    cors_origins: list[str] = Field(default_factory=list)

    # Subsettings - loaded with their own env prefixes
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    smtp: SMTPSettings = Field(default_factory=SMTPSettings)
    sms: SMSSettings = Field(default_factory=SMSSettings)

    @model_validator(mode="after")
    def validate_production_settings(self) -> Self:
        """Validate that production settings are properly configured.

        Raises:
            ValueError: If running in production with the in-memory store.
        """
        if self.environment == "production" and self.notifications.store_backend == "memory":
            raise ValueError(
                "The in-memory notification store loses every record on restart. "
                "Set NOTIFICATIONS_STORE_BACKEND=sql in production."
            )
        return self

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call clear_settings_cache() if you need to reload settings.

    Returns:
        Cached Settings instance.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Call this if you need to reload settings from environment.
    Useful for testing or dynamic configuration updates.
    """
    get_settings.cache_clear()
