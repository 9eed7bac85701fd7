"""Configuration-related exceptions."""

from typing import Any


class ConfigurationError(Exception):
    """Base exception for all configuration-related errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """Initialize configuration error.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional error details
        """
        super().__init__(message)
        self.details = details or {}


class ConfigurationFileError(ConfigurationError):
    """The configuration file is missing, unreadable or not a YAML mapping."""

    def __init__(
        self,
        message: str,
        file_path: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, {"file_path": file_path, **(details or {})})
        self.file_path = file_path


class ConfigurationValidationError(ConfigurationError):
    """Configuration values were rejected by the models."""

    def __init__(
        self,
        message: str,
        validation_errors: list[Any] | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.validation_errors = validation_errors or []
        super().__init__(
            message, {"invalid_fields": self.invalid_fields, **(details or {})}
        )

    @property
    def invalid_fields(self) -> list[str]:
        """Dotted paths of the rejected settings, e.g. ``sync.max_concurrency``."""
        fields = []
        for error in self.validation_errors:
            location = error.get("loc") if isinstance(error, dict) else None
            if location:
                fields.append(".".join(str(part) for part in location))
        return fields
