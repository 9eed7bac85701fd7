"""VersionHistory SQLAlchemy model."""

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import BaseModel

if TYPE_CHECKING:
    from .repository import Repository


class VersionHistory(BaseModel):
    """Append-only log of detected releases and tags.

    A version is logged at most once per repository and type.
    """

    __tablename__ = "version_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    repo_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("repos.id", ondelete="CASCADE"), index=True, nullable=False
    )

    version_type: Mapped[str] = mapped_column(String(20), nullable=False)
    version_value: Mapped[str] = mapped_column(String(200), nullable=False)
    release_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    detected_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )
    acknowledged_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    repository: Mapped["Repository"] = relationship(back_populates="version_history")

    __table_args__ = (
        CheckConstraint(
            "version_type IN ('release', 'tag')", name="ck_version_history_type"
        ),
        UniqueConstraint(
            "repo_id",
            "version_type",
            "version_value",
            name="uq_version_history_version",
        ),
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<VersionHistory(id={self.id}, repo_id={self.repo_id}, "
            f"{self.version_type}={self.version_value})>"
        )

    @property
    def is_acknowledged(self) -> bool:
        """Check if the user has acknowledged this version."""
        return self.acknowledged_at is not None
