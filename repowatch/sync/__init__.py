"""Repository synchronization and version change detection."""

from .change_detection import check_for_updates, detect_version_update, normalize_version
from .directory import DatabaseRepositoryDirectory, RepositoryDirectory, RepositoryRef
from .exceptions import (
    PersistenceError,
    RepositoryNotFoundError,
    SyncError,
    SyncInProgressError,
)
from .models import CurrentSyncState, SyncProgress, SyncResult, VersionUpdate
from .progress import SyncProgressTracker
from .scheduler import MIN_INTERVAL_MINUTES, SyncScheduler
from .service import SyncService
from .store import SyncStateStore

__all__ = [
    "MIN_INTERVAL_MINUTES",
    "CurrentSyncState",
    "DatabaseRepositoryDirectory",
    "PersistenceError",
    "RepositoryDirectory",
    "RepositoryNotFoundError",
    "RepositoryRef",
    "SyncError",
    "SyncInProgressError",
    "SyncProgress",
    "SyncProgressTracker",
    "SyncResult",
    "SyncScheduler",
    "SyncService",
    "SyncStateStore",
    "VersionUpdate",
    "check_for_updates",
    "detect_version_update",
    "normalize_version",
]
