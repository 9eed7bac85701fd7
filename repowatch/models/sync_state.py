"""SyncState SQLAlchemy model."""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import BaseModel

if TYPE_CHECKING:
    from .repository import Repository


class SyncState(BaseModel):
    """Last observed remote versions of a repository and its notification flags.

    One row per repository; a missing row means the repository has never been
    synced. The ``last_*`` columns mirror the most recent observation while
    ``acknowledged_release`` records what the user has already seen.
    """

    __tablename__ = "sync_state"

    repo_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("repos.id", ondelete="CASCADE"), primary_key=True
    )

    # Latest commit on the default branch
    last_commit_sha: Mapped[str | None] = mapped_column(String(64), nullable=True)
    last_commit_date: Mapped[str | None] = mapped_column(String(64), nullable=True)
    last_commit_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_commit_author: Mapped[str | None] = mapped_column(String(200), nullable=True)

    # Latest release and tag
    last_release_tag: Mapped[str | None] = mapped_column(String(200), nullable=True)
    last_release_date: Mapped[str | None] = mapped_column(String(64), nullable=True)
    last_release_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_tag: Mapped[str | None] = mapped_column(String(200), nullable=True)
    last_tag_date: Mapped[str | None] = mapped_column(String(64), nullable=True)

    # Notification state
    acknowledged_release: Mapped[str | None] = mapped_column(
        String(200), nullable=True
    )
    release_notification_active: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    has_updates: Mapped[bool] = mapped_column(
        Boolean, default=False, index=True, nullable=False
    )
    last_sync_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    repository: Mapped["Repository"] = relationship(back_populates="sync_state")

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<SyncState(repo_id={self.repo_id}, has_updates={self.has_updates}, "
            f"notification={self.release_notification_active})>"
        )

    def acknowledge(self, version: str) -> None:
        """Mark a version as seen and clear the notification flags."""
        self.acknowledged_release = version
        self.release_notification_active = False
        self.has_updates = False
