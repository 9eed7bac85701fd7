"""Exceptions raised by the sync engine."""

from typing import Any


class SyncError(Exception):
    """Base exception for sync engine errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """Initialize sync error.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional error details
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class RepositoryNotFoundError(SyncError):
    """Repository is unknown to the repository directory."""

    def __init__(self, repo_id: int):
        super().__init__("Repository not found", {"repo_id": repo_id})
        self.repo_id = repo_id


class SyncInProgressError(SyncError):
    """A full sync was requested while another one is running."""

    def __init__(self, job_id: str | None = None):
        super().__init__("Sync already in progress", {"job_id": job_id})
        self.job_id = job_id


class PersistenceError(SyncError):
    """Reading or writing sync state failed."""

    def __init__(self, message: str, operation: str | None = None):
        super().__init__(message, {"operation": operation})
        self.operation = operation
