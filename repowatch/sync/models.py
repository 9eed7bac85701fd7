"""Data models exchanged between the sync engine components."""

from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from typing import Any

from repowatch.github.models import CommitInfo, ReleaseInfo, TagInfo
from repowatch.models import SyncState, VersionType


@dataclass(frozen=True)
class CurrentSyncState:
    """Snapshot of a repository's persisted sync state."""

    repo_id: int
    last_commit_sha: str | None = None
    last_release_tag: str | None = None
    last_tag: str | None = None
    acknowledged_release: str | None = None
    release_notification_active: bool = False
    has_updates: bool = False
    last_sync_at: datetime | None = None

    @classmethod
    def from_model(cls, state: SyncState) -> "CurrentSyncState":
        """Build a snapshot from a SyncState row."""
        return cls(
            repo_id=state.repo_id,
            last_commit_sha=state.last_commit_sha,
            last_release_tag=state.last_release_tag,
            last_tag=state.last_tag,
            acknowledged_release=state.acknowledged_release,
            release_notification_active=bool(state.release_notification_active),
            has_updates=bool(state.has_updates),
            last_sync_at=state.last_sync_at,
        )


@dataclass(frozen=True)
class VersionUpdate:
    """Version change chosen by the detector for one sync."""

    type: VersionType
    value: str
    date: str | None = None
    notes: str | None = None
    is_new: bool = False

    @property
    def should_notify(self) -> bool:
        """New releases and tags raise a notification and enter the history."""
        return self.is_new and self.type.is_notifiable


@dataclass
class SyncResult:
    """Outcome of syncing a single repository."""

    repo_id: int
    full_name: str
    success: bool
    has_updates: bool = False
    error: str | None = None
    commit: CommitInfo | None = None
    release: ReleaseInfo | None = None
    tag: TagInfo | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


@dataclass
class SyncProgress:
    """Progress of one full sync run."""

    job_id: str
    total: int
    completed: int = 0
    failed: int = 0
    results: list[SyncResult] = field(default_factory=list)
    in_progress: bool = True
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    finished_at: datetime | None = None

    @property
    def processed(self) -> int:
        """Number of repositories that finished, successfully or not."""
        return self.completed + self.failed

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = asdict(self)
        data["started_at"] = self.started_at.isoformat()
        data["finished_at"] = self.finished_at.isoformat() if self.finished_at else None
        return data
