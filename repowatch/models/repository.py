"""Repository SQLAlchemy model."""

from typing import TYPE_CHECKING

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import BaseModel, TimestampMixin

if TYPE_CHECKING:
    from .sync_state import SyncState
    from .version_history import VersionHistory


class Repository(TimestampMixin, BaseModel):
    """A GitHub repository the user tracks."""

    __tablename__ = "repos"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Repository identification
    github_id: Mapped[str | None] = mapped_column(String(50), unique=True, nullable=True)
    owner: Mapped[str] = mapped_column(String(200), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    full_name: Mapped[str] = mapped_column(
        String(400), unique=True, index=True, nullable=False
    )  # owner/repo
    url: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Child rows are removed by ON DELETE CASCADE
    sync_state: Mapped["SyncState"] = relationship(
        back_populates="repository", uselist=False, passive_deletes=True
    )
    version_history: Mapped[list["VersionHistory"]] = relationship(
        back_populates="repository", passive_deletes=True
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<Repository(id={self.id}, full_name={self.full_name})>"
