# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Application configuration settings using Pydantic Settings.

This module provides centralized configuration management for the
workshop pairing service. Settings are loaded from environment variables
with sensible defaults.

The Settings class is the main entry point and aggregates all subsettings.
A singleton instance is provided via get_settings() for dependency injection.

Example:
    >>> from src.core.config.settings import get_settings
    >>> settings = get_settings()
    >>> print(settings.environment)
    'development'
"""

from functools import lru_cache
from typing import Literal, Self

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./data/workshops.db"


class DatabaseSettings(BaseSettings):
    """Database configuration for the enrollment store.

    Attributes:
        url: Async SQLAlchemy connection URL.
        pool_size: Connection pool size (ignored for SQLite).
        max_overflow: Maximum overflow connections (ignored for SQLite).
        echo: Log emitted SQL statements.
    """

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        extra="ignore",
    )

    url: str = DEFAULT_DATABASE_URL
    pool_size: int = 10
    max_overflow: int = 20
    echo: bool = False

    @property
    def is_sqlite(self) -> bool:
        """Check whether the configured backend is SQLite."""
        return self.url.startswith("sqlite")

    @property
    def sync_url(self) -> str:
        """Build the sync database URL for migrations."""
        return (
            self.url.replace("postgresql+asyncpg://", "postgresql://", 1)
            .replace("sqlite+aiosqlite://", "sqlite://", 1)
        )


class PairingSettings(BaseSettings):
    """Pairing engine configuration.

    Attributes:
        lock_timeout_seconds: Maximum time an operation waits for the
            per-workshop lock before failing.
    """

    model_config = SettingsConfigDict(
        env_prefix="PAIRING_",
        extra="ignore",
    )

    lock_timeout_seconds: float = Field(default=10.0, gt=0)


class NotificationSettings(BaseSettings):
    """Outbound notification configuration.

    Email delivery is disabled unless host, username, password and
    sender address are all set.

    Attributes:
        smtp_host: SMTP server hostname.
        smtp_port: SMTP server port.
        smtp_username: SMTP authentication username.
        smtp_password: SMTP authentication password.
        smtp_use_tls: Use STARTTLS.
        smtp_timeout_seconds: Connect and command timeout for SMTP.
        from_email: Sender email address.
        from_name: Sender display name.
        site_url: Link included in notifications so users can manage
            their attendance.
        date_format: strftime pattern for workshop dates in messages.
    """

    model_config = SettingsConfigDict(
        env_prefix="NOTIFY_",
        extra="ignore",
    )

    smtp_host: str | None = None
    smtp_port: int = 587
    smtp_username: str | None = None
    smtp_password: SecretStr | None = None
    smtp_use_tls: bool = True
    smtp_timeout_seconds: float = Field(default=10.0, gt=0)
    from_email: str | None = None
    from_name: str = "Workshop Events"
    site_url: str = "http://localhost:4200"
    date_format: str = "%d-%m-%Y"

    @property
    def email_enabled(self) -> bool:
        """Check if every setting needed for SMTP delivery is present."""
        return all(
            [self.smtp_host, self.smtp_username, self.smtp_password, self.from_email]
        )


class Settings(BaseSettings):
    """Main application settings aggregating all subsettings.

    Use get_settings() to obtain a cached singleton instance.

    Attributes:
        environment: Current environment (development, staging, production).
        debug: Enable debug mode.
        log_level: Logging level.
        database: Enrollment store database settings.
        pairing: Pairing engine settings.
        notifications: Notification delivery settings.
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

    # Subsettings - loaded with their own env prefixes
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    pairing: PairingSettings = Field(default_factory=PairingSettings)
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)

    @model_validator(mode="after")
    def validate_production_settings(self) -> Self:
        """Validate that production settings are properly configured.

        Raises:
            ValueError: If running in production against the SQLite default.
        """
        if self.environment == "production" and self.database.url == DEFAULT_DATABASE_URL:
            raise ValueError(
                "The default SQLite database cannot be used in production. "
                "Set DB_URL environment variable."
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
