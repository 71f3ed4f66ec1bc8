# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Application configuration settings using Pydantic Settings.

This module provides centralized configuration management for ZimLearn.
Settings are loaded from environment variables (and an optional .env file).

A few values have no default and must be supplied by the environment:
the database URL, the JWT secret and the SMTP credentials. Constructing
Settings without them raises a pydantic ValidationError, which the
command-line entry point turns into a non-zero exit.

Example:
    >>> from zimlearn.core.config.settings import get_settings
    >>> settings = get_settings()
    >>> print(settings.environment)
    'development'
"""

from functools import lru_cache
from typing import Literal, Self

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_JWT_SECRET = "change-this-in-production"


class DatabaseSettings(BaseSettings):
    """Database configuration.

    Attributes:
        url: SQLAlchemy async connection URL (required).
        pool_size: Connection pool size (ignored for SQLite).
        max_overflow: Maximum overflow connections (ignored for SQLite).
        echo: Log emitted SQL statements.
        connect_retry_attempts: Startup connection attempts before giving up.
        connect_retry_delay: Seconds to wait between startup attempts.
    """

    model_config = SettingsConfigDict(
        env_prefix="DATABASE_",
        env_file=".env",
        extra="ignore",
    )

    url: str
    pool_size: int = 10
    max_overflow: int = 20
    echo: bool = False
    connect_retry_attempts: int = 12
    connect_retry_delay: float = 5.0

    @property
    def is_sqlite(self) -> bool:
        """Check if the configured backend is SQLite."""
        return self.url.startswith("sqlite")


class JWTSettings(BaseSettings):
    """JWT authentication configuration.

    Attributes:
        secret_key: Secret key for signing tokens (required).
        algorithm: JWT signing algorithm.
        access_token_expire_minutes: Access token lifetime.
    """

    model_config = SettingsConfigDict(
        env_prefix="JWT_",
        env_file=".env",
        extra="ignore",
    )

    secret_key: SecretStr
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60


class SMTPSettings(BaseSettings):
    """Outbound email configuration for verification codes.

    Attributes:
        host: SMTP server host.
        port: SMTP server port.
        username: SMTP login (required).
        password: SMTP password (required).
        use_tls: Upgrade the connection with STARTTLS.
        from_email: Sender address, defaults to the login.
        from_name: Sender display name.
        timeout: Send timeout in seconds.
    """

    model_config = SettingsConfigDict(
        env_prefix="SMTP_",
        env_file=".env",
        extra="ignore",
    )

    host: str = "smtp.gmail.com"
    port: int = 587
    username: str
    password: SecretStr
    use_tls: bool = True
    from_email: str | None = None
    from_name: str = "ZimLearn"
    timeout: float = 30.0

    @property
    def sender(self) -> str:
        """Address used in the From header."""
        return self.from_email or self.username


class ProviderSettings(BaseSettings):
    """Third-party resource provider configuration.

    Attributes:
        mopse_api_url: Ministry of Primary and Secondary Education library API.
        collegepress_api_url: College Press textbook API.
        teacha_api_url: Teacha! resource marketplace API.
        zimsec_api_url: ZIMSEC base URL used for past paper links.
        youtube_api_url: YouTube Data API v3 base URL.
        youtube_api_key: YouTube Data API key. Video fetches are skipped without it.
        oer_commons_api_url: OER Commons search API.
        ck12_api_url: CK-12 concepts API.
        sbp_base_url: Secondary Book Press website.
        request_timeout: Timeout for every outbound provider request in seconds.
    """

    model_config = SettingsConfigDict(
        env_prefix="PROVIDER_",
        env_file=".env",
        extra="ignore",
    )

    mopse_api_url: str = "https://api.mopse-library.zw"
    collegepress_api_url: str = "https://api.collegepress.co.zw"
    teacha_api_url: str = "https://api.teacha.co.zw"
    zimsec_api_url: str = "https://www.zimsec.co.zw"
    youtube_api_url: str = "https://www.googleapis.com/youtube/v3"
    youtube_api_key: SecretStr | None = None
    oer_commons_api_url: str = "https://api.oercommons.org/v1"
    ck12_api_url: str = "https://api.ck12.org/v1"
    sbp_base_url: str = "https://www.secondarybookpress.co.zw"
    request_timeout: float = 30.0


class RateLimitSettings(BaseSettings):
    """Rate limiting configuration for the public auth endpoints.

    Attributes:
        enabled: Whether limits are enforced.
    """

    model_config = SettingsConfigDict(
        env_prefix="RATE_LIMIT_",
        env_file=".env",
        extra="ignore",
    )

    enabled: bool = True


class CORSSettings(BaseSettings):
    """CORS configuration for API.

    Attributes:
        origins: Comma-separated list of allowed origins.
        allow_credentials: Whether to allow credentials.
        allow_methods: Allowed HTTP methods.
        allow_headers: Allowed HTTP headers.
    """

    model_config = SettingsConfigDict(
        env_prefix="CORS_",
        env_file=".env",
        extra="ignore",
    )

    origins: str = "http://localhost:8081,http://localhost:8082,http://localhost:3000"
    allow_credentials: bool = True
    allow_methods: list[str] = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    allow_headers: list[str] = ["Content-Type", "Authorization"]

    @property
    def origins_list(self) -> list[str]:
        """Parse origins string into a list."""
        return [origin.strip() for origin in self.origins.split(",") if origin.strip()]


class APISettings(BaseSettings):
    """API server configuration.

    Attributes:
        host: Host to bind to.
        port: Port to listen on.
        workers: Number of worker processes.
        reload: Whether to enable auto-reload.
    """

    model_config = SettingsConfigDict(
        env_prefix="API_",
        env_file=".env",
        extra="ignore",
    )

    host: str = "0.0.0.0"
    port: int = 5000
    workers: int = 1
    reload: bool = False


class Settings(BaseSettings):
    """Main application settings aggregating all subsettings.

    Use get_settings() to obtain a cached instance.

    Attributes:
        environment: Current environment (development, staging, production).
        debug: Enable debug mode.
        log_level: Logging level.
        database: Database settings.
        jwt: JWT authentication settings.
        smtp: Outbound email settings.
        providers: Resource provider settings.
        rate_limit: Rate limiting settings.
        cors: CORS settings.
        api: API server settings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # Environment
    environment: Literal["development", "staging", "production", "test"] = "development"
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    # Subsettings - loaded with their own env prefixes
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    jwt: JWTSettings = Field(default_factory=JWTSettings)
    smtp: SMTPSettings = Field(default_factory=SMTPSettings)
    providers: ProviderSettings = Field(default_factory=ProviderSettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)
    cors: CORSSettings = Field(default_factory=CORSSettings)
    api: APISettings = Field(default_factory=APISettings)

    @model_validator(mode="after")
    def validate_production_settings(self) -> Self:
        """Validate that production settings are properly configured.

        Raises:
            ValueError: If running in production with insecure defaults.
        """
        if self.environment == "production":
            if self.jwt.secret_key.get_secret_value() == DEFAULT_JWT_SECRET:
                raise ValueError(
                    "JWT secret key must be changed from default in production. "
                    "Set JWT_SECRET_KEY environment variable."
                )
            if self.database.is_sqlite:
                raise ValueError("SQLite is not supported in production. Set DATABASE_URL.")
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

    Raises:
        pydantic.ValidationError: If a required value is missing.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Call this if you need to reload settings from environment.
    Useful for testing or dynamic configuration updates.
    """
    get_settings.cache_clear()
