"""SQLAlchemy models for tracked repositories and their sync state."""

from .base import Base, BaseModel, TimestampMixin
from .enums import VersionType
from .repository import Repository
from .sync_state import SyncState
from .version_history import VersionHistory

__all__ = [
    # Base classes
    "Base",
    "BaseModel",
    "TimestampMixin",
    # Enums
    "VersionType",
    # Models
    "Repository",
    "SyncState",
    "VersionHistory",
]
