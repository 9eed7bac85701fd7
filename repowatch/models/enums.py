"""Enums for database models."""

import enum


class VersionType(str, enum.Enum):
    """Kind of version change detected for a repository."""

    RELEASE = "release"
    TAG = "tag"
    COMMIT = "commit"

    @property
    def is_notifiable(self) -> bool:
        """Releases and tags raise notifications and enter the history log."""
        return self in (VersionType.RELEASE, VersionType.TAG)
