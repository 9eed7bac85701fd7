"""Configuration loading and management system.

This module provides functionality to load configuration from YAML files or
from environment variables alone, validate it, and manage the global
configuration instance.

The loading hierarchy is:
1. Default values from Pydantic models
2. Configuration file (YAML), with ${VAR} substitution
3. Environment variables (when no file is found)
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .exceptions import (
    ConfigurationError,
    ConfigurationFileError,
    ConfigurationValidationError,
)
from .models import Config

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "REPOWATCH_CONFIG_PATH"


class ConfigurationLoader:
    """Handles loading and validation of configuration from various sources."""

    def __init__(self) -> None:
        """Initialize configuration loader."""
        self._config: Config | None = None
        self._config_file_path: Path | None = None
        self._loaded_from_sources: dict[str, bool] = {
            "file": False,
            "env": False,
            "defaults": True,
        }

    def load_from_file(self, config_path: str | Path) -> Config:
        """Load configuration from a YAML file.

        Args:
            config_path: Path to the YAML configuration file

        Returns:
            Loaded and validated configuration

        Raises:
            ConfigurationFileError: If file cannot be read or parsed
            ConfigurationValidationError: If configuration validation fails
        """
        config_path = Path(config_path)

        if not config_path.exists():
            raise ConfigurationFileError(
                f"Configuration file not found: {config_path}",
                file_path=str(config_path),
            )

        if not config_path.is_file():
            raise ConfigurationFileError(
                f"Configuration path is not a file: {config_path}",
                file_path=str(config_path),
            )

        try:
            with open(config_path, encoding="utf-8") as f:
                config_data = yaml.safe_load(f)

            if config_data is None:
                config_data = {}

        except yaml.YAMLError as e:
            raise ConfigurationFileError(
                f"Failed to parse YAML configuration: {e}", file_path=str(config_path)
            ) from e
        except OSError as e:
            raise ConfigurationFileError(
                f"Failed to read configuration file: {e}", file_path=str(config_path)
            ) from e

        if not isinstance(config_data, dict):
            raise ConfigurationFileError(
                "Configuration file must contain a mapping at the top level",
                file_path=str(config_path),
            )

        self._config = self._build(config_data)
        self._config_file_path = config_path.resolve()
        self._loaded_from_sources["file"] = True

        logger.info(f"Loaded configuration from {self._config_file_path}")
        return self._config

    def load_from_dict(self, config_data: dict[str, Any]) -> Config:
        """Load configuration from a dictionary.

        Args:
            config_data: Configuration data dictionary

        Returns:
            Loaded and validated configuration

        Raises:
            ConfigurationValidationError: If configuration validation fails
        """
        self._config = self._build(config_data)
        self._loaded_from_sources["dict"] = True
        return self._config

    def load_default(self) -> Config:
        """Load configuration from model defaults and environment variables.

        Recognized variables:
        - GITHUB_TOKEN: GitHub personal access token
        - SYNC_INTERVAL_MINUTES: Minutes between scheduled syncs
        - DATABASE_URL: SQLAlchemy database URL
        - DATABASE_PATH: SQLite file path, used when DATABASE_URL is unset
        - LOG_LEVEL: Logging level name

        Returns:
            Configuration built from the environment

        Raises:
            ConfigurationValidationError: If an environment value is invalid
        """
        config_data: dict[str, Any] = {}

        token = os.getenv("GITHUB_TOKEN")
        if token:
            config_data["github"] = {"token": token}

        interval = os.getenv("SYNC_INTERVAL_MINUTES")
        if interval:
            config_data["sync"] = {"interval_minutes": interval}

        database_url = os.getenv("DATABASE_URL")
        database_path = os.getenv("DATABASE_PATH")
        if database_url:
            config_data["database"] = {"url": database_url}
        elif database_path:
            config_data["database"] = {"url": f"sqlite+aiosqlite:///{database_path}"}

        log_level = os.getenv("LOG_LEVEL")
        if log_level:
            config_data["system"] = {"log_level": log_level.upper()}

        self._config = self._build(config_data)
        self._loaded_from_sources["env"] = bool(config_data)
        return self._config

    def find_config_file(self, filename: str = "config.yaml") -> Path | None:
        """Find configuration file in standard locations.

        Search order:
        1. Current working directory
        2. REPOWATCH_CONFIG_PATH environment variable
        3. ~/.repowatch/
        4. /etc/repowatch/

        Args:
            filename: Configuration filename to search for

        Returns:
            Path to found configuration file, or None if not found
        """
        search_paths = []

        # 1. Current working directory
        search_paths.append(Path.cwd() / filename)

        # 2. Environment variable
        env_path_str = os.getenv(CONFIG_PATH_ENV)
        if env_path_str:
            env_path = Path(env_path_str)
            if env_path.is_file():
                search_paths.append(env_path)
            else:
                search_paths.append(env_path / filename)

        # 3. User config directory
        search_paths.append(Path.home() / ".repowatch" / filename)

        # 4. System config directory
        search_paths.append(Path("/etc/repowatch") / filename)

        for path in search_paths:
            if path.exists() and path.is_file():
                return path

        return None

    def auto_load(self, config_filename: str = "config.yaml") -> Config:
        """Automatically load configuration from standard locations.

        Args:
            config_filename: Configuration filename to search for

        Returns:
            Loaded configuration

        Raises:
            ConfigurationFileError: If no configuration file is found
            ConfigurationValidationError: If configuration validation fails
        """
        config_path = self.find_config_file(config_filename)

        if config_path is None:
            raise ConfigurationFileError(
                f"No configuration file '{config_filename}' found in standard locations"
            )

        return self.load_from_file(config_path)

    def _build(self, config_data: dict[str, Any]) -> Config:
        try:
            return Config(**config_data)
        except ValidationError as e:
            error = ConfigurationValidationError(
                f"Configuration validation failed: {e}",
                validation_errors=e.errors(include_context=False),
            )
            logger.error(
                "Invalid configuration",
                extra={"invalid_fields": error.invalid_fields},
            )
            raise error from e
        except ValueError as e:
            raise ConfigurationValidationError(
                f"Configuration validation failed: {e}"
            ) from e

    @property
    def config(self) -> Config | None:
        """Get the loaded configuration."""
        return self._config

    @property
    def config_file_path(self) -> Path | None:
        """Get the path to the loaded configuration file."""
        return self._config_file_path

    @property
    def is_loaded(self) -> bool:
        """Check if configuration has been loaded."""
        return self._config is not None

    def get_loading_info(self) -> dict[str, Any]:
        """Get information about configuration loading sources.

        Returns:
            Dictionary containing loading source information, without secrets
        """
        summary = None
        if self._config is not None:
            summary = {
                "log_level": self._config.system.log_level.value,
                "database_dialect": self._config.database.dialect,
                "github_authenticated": self._config.github.token is not None,
                "sync_interval_minutes": self._config.sync.interval_minutes,
            }
        return {
            "loaded": self.is_loaded,
            "config_file": str(self._config_file_path)
            if self._config_file_path
            else None,
            "sources": self._loaded_from_sources.copy(),
            "config_summary": summary,
        }


# Global configuration loader instance
_loader = ConfigurationLoader()


def load_config(
    config_path: str | Path | None = None, auto_discover: bool = True
) -> Config:
    """Load configuration from a file, or from the environment if none is found.

    Args:
        config_path: Explicit path to configuration file
        auto_discover: Whether to search standard locations when no path is given

    Returns:
        Loaded configuration

    Raises:
        ConfigurationError: If configuration cannot be loaded or is invalid
    """
    try:
        if config_path:
            return _loader.load_from_file(config_path)
        if auto_discover:
            found = _loader.find_config_file()
            if found is not None:
                return _loader.load_from_file(found)
        return _loader.load_default()
    except (ConfigurationFileError, ConfigurationValidationError) as e:
        raise ConfigurationError(
            f"Failed to load configuration: {e}", details=e.details
        ) from e


def get_config() -> Config:
    """Get the currently loaded configuration.

    Raises:
        ConfigurationError: If no configuration has been loaded
    """
    if not _loader.is_loaded or _loader.config is None:
        raise ConfigurationError("No configuration loaded. Call load_config() first.")

    return _loader.config


def get_loader() -> ConfigurationLoader:
    """Get the global configuration loader instance."""
    return _loader


def reset_config() -> None:
    """Discard the global configuration (useful for testing)."""
    global _loader
    _loader = ConfigurationLoader()
