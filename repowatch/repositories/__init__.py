"""Repository implementations for data access layer."""

from .base import BaseRepository
from .repository import RepositoryRepository
from .sync_state import SyncStateRepository
from .version_history import VersionHistoryRepository

__all__ = [
    "BaseRepository",
    "RepositoryRepository",
    "SyncStateRepository",
    "VersionHistoryRepository",
]
