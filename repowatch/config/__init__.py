"""Configuration management for repowatch.

Configuration is read from a YAML file with environment variable
substitution, or assembled from environment variables when no file exists.

Example usage:
    from repowatch.config import load_config

    config = load_config()
    print(config.sync.interval_minutes)
"""

from .exceptions import (
    ConfigurationError,
    ConfigurationFileError,
    ConfigurationValidationError,
)
from .loader import (
    ConfigurationLoader,
    get_config,
    get_loader,
    load_config,
    reset_config,
)
from .models import (
    BaseConfigModel,
    Config,
    DatabaseConfig,
    GitHubConfig,
    LogLevel,
    SyncConfig,
    SystemConfig,
)

__all__ = [
    "BaseConfigModel",
    "Config",
    "ConfigurationError",
    "ConfigurationFileError",
    "ConfigurationLoader",
    "ConfigurationValidationError",
    "DatabaseConfig",
    "GitHubConfig",
    "LogLevel",
    "SyncConfig",
    "SystemConfig",
    "get_config",
    "get_loader",
    "load_config",
    "reset_config",
]
