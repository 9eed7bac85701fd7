"""Pydantic configuration models for repowatch.

The configuration hierarchy follows this structure:
- Config: Root configuration containing all subsystems
- SystemConfig: Core system settings (logging, environment)
- GitHubConfig, SyncConfig, DatabaseConfig: Component settings

Environment variables are substituted using the format ${VAR_NAME} with
optional defaults: ${VAR_NAME:default_value}
"""

import os
import re
from enum import Enum
from typing import Any
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

SUPPORTED_DATABASE_SCHEMES = ("sqlite", "postgresql")

ASYNC_DRIVERS = {
    "sqlite": "sqlite+aiosqlite",
    "postgresql": "postgresql+asyncpg",
}


class LogLevel(str, Enum):
    """Supported logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class BaseConfigModel(BaseModel):
    """Base configuration model with environment variable substitution."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    @model_validator(mode="before")
    @classmethod
    def substitute_env_vars(cls, values: Any) -> Any:
        """Substitute environment variables in string values.

        Supports formats:
        - ${VAR_NAME} - Required environment variable
        - ${VAR_NAME:default} - Optional with default value

        Args:
            values: Raw configuration values

        Returns:
            Configuration values with environment variables substituted

        Raises:
            ValueError: If required environment variable is missing
        """
        if not isinstance(values, dict):
            return values

        def substitute_value(value: Any) -> Any:
            if isinstance(value, str):
                # Pattern: ${VAR_NAME} or ${VAR_NAME:default}
                pattern = r"\$\{([^}:]+)(?::([^}]*))?\}"

                def replacer(match: re.Match[str]) -> str:
                    var_name = match.group(1)
                    default_value = match.group(2)

                    env_value = os.getenv(var_name)
                    if env_value is not None:
                        return env_value
                    elif default_value is not None:
                        return default_value
                    else:
                        raise ValueError(
                            f"Required environment variable '{var_name}' not found"
                        )

                return re.sub(pattern, replacer, value)
            elif isinstance(value, dict):
                return {k: substitute_value(v) for k, v in value.items()}
            elif isinstance(value, list):
                return [substitute_value(item) for item in value]
            else:
                return value

        return {key: substitute_value(value) for key, value in values.items()}


class SystemConfig(BaseConfigModel):
    """Core system configuration settings."""

    log_level: LogLevel = Field(
        default=LogLevel.INFO, description="System-wide logging level"
    )

    environment: str = Field(
        default="development",
        description="Deployment environment (development, staging, production)",
    )

    debug_mode: bool = Field(
        default=False, description="Enable debug mode with verbose logging"
    )


class GitHubConfig(BaseConfigModel):
    """GitHub API access configuration."""

    token: str | None = Field(
        default=None,
        description="Personal access token; anonymous access when unset",
    )

    base_url: str = Field(
        default="https://api.github.com", description="GitHub REST API base URL"
    )

    timeout: int = Field(
        default=30, ge=1, le=300, description="Total request timeout in seconds"
    )

    max_retries: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts per API call, including the first one",
    )

    retry_base_delay: float = Field(
        default=1.0, ge=0, le=60, description="Base backoff delay in seconds"
    )

    rate_limit_warning_threshold: int = Field(
        default=100,
        ge=0,
        description="Remaining-quota level below which a warning is logged",
    )

    user_agent: str = Field(
        default="repowatch/0.1", description="User-Agent header sent to GitHub"
    )

    @field_validator("token")
    @classmethod
    def normalize_token(cls, v: str | None) -> str | None:
        """Treat blank tokens as unset."""
        if v is None or v.strip() == "":
            return None
        return v.strip()

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Validate API base URL format."""
        if not v.startswith(("https://", "http://")):
            raise ValueError("GitHub base URL must be an http(s) URL")
        return v.rstrip("/")


class SyncConfig(BaseConfigModel):
    """Synchronization scheduling configuration."""

    interval_minutes: int = Field(
        default=30,
        ge=1,
        description="Minutes between scheduled syncs (raised to at least 5)",
    )

    max_concurrency: int = Field(
        default=3, ge=1, le=20, description="Repositories synced in parallel"
    )

    run_on_startup: bool = Field(
        default=True, description="Run a full sync as soon as the worker starts"
    )


class DatabaseConfig(BaseConfigModel):
    """Database connection and pool configuration."""

    url: str = Field(
        default="sqlite+aiosqlite:///./repowatch.db",
        description="Database connection URL",
    )

    pool_size: int = Field(
        default=10, ge=1, le=100, description="Database connection pool size"
    )

    max_overflow: int = Field(
        default=20,
        ge=0,
        le=100,
        description="Maximum overflow connections beyond pool size",
    )

    pool_timeout: int = Field(
        default=30,
        ge=1,
        le=300,
        description="Timeout in seconds for getting connection from pool",
    )

    pool_recycle: int = Field(
        default=3600, ge=300, le=86400, description="Connection recycle time in seconds"
    )

    echo: bool = Field(default=False, description="Enable SQLAlchemy query logging")

    @field_validator("url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Validate database URL format."""
        if not v:
            raise ValueError("Database URL cannot be empty")

        parsed = urlparse(v)
        if not parsed.scheme:
            raise ValueError("Database URL must include scheme")
        if parsed.scheme.split("+")[0] not in SUPPORTED_DATABASE_SCHEMES:
            raise ValueError(f"Unsupported database scheme: {parsed.scheme}")

        return v

    @property
    def dialect(self) -> str:
        """Database dialect name without driver suffix."""
        return urlparse(self.url).scheme.split("+")[0]

    @property
    def is_sqlite(self) -> bool:
        """Check if the URL points at SQLite."""
        return self.dialect == "sqlite"

    def get_sqlalchemy_url(self) -> str:
        """Get SQLAlchemy URL with an async driver."""
        scheme, rest = self.url.split("://", 1)
        if "+" in scheme:
            return self.url
        return f"{ASYNC_DRIVERS[scheme]}://{rest}"


class Config(BaseConfigModel):
    """Root configuration containing all subsystem configurations."""

    system: SystemConfig = Field(
        default_factory=SystemConfig, description="Core system configuration"
    )

    github: GitHubConfig = Field(
        default_factory=GitHubConfig, description="GitHub API configuration"
    )

    sync: SyncConfig = Field(
        default_factory=SyncConfig, description="Sync scheduling configuration"
    )

    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Database configuration"
    )

    @model_validator(mode="after")
    def validate_consistent_configuration(self) -> "Config":
        """Validate cross-field consistency."""
        if self.system.environment == "production" and self.database.echo:
            raise ValueError("SQL echo must be disabled in production")
        return self
