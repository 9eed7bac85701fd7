"""Data returned by the GitHub remote data client."""

from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from typing import Any, Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class CommitInfo:
    """Latest commit on the default branch."""

    sha: str
    date: str
    message: str
    author: str

    @property
    def short_sha(self) -> str:
        """Abbreviated commit SHA."""
        return self.sha[:7]

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "CommitInfo":
        """Build from a ``GET /repos/{owner}/{repo}/commits`` list entry."""
        commit = data.get("commit") or {}
        commit_author = commit.get("author") or {}
        account = data.get("author") or {}
        message = commit.get("message") or ""
        return cls(
            sha=data["sha"],
            date=commit_author.get("date") or "",
            message=message.split("\n")[0],
            author=commit_author.get("name") or account.get("login") or "",
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


@dataclass(frozen=True)
class ReleaseInfo:
    """Latest published release."""

    tag: str
    date: str
    notes: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "ReleaseInfo":
        """Build from a ``GET /repos/{owner}/{repo}/releases/latest`` payload."""
        return cls(
            tag=data["tag_name"],
            date=data.get("published_at") or data.get("created_at") or "",
            notes=data.get("body"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


@dataclass(frozen=True)
class TagInfo:
    """Latest tag.

    The tags endpoint carries no timestamp, so ``date`` is the time the tag
    was observed rather than when it was created.
    """

    tag: str
    date: str

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "TagInfo":
        """Build from a ``GET /repos/{owner}/{repo}/tags`` list entry."""
        return cls(tag=data["name"], date=datetime.now(UTC).isoformat())

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


@dataclass(frozen=True)
class FetchResult(Generic[T]):
    """Outcome of one lower-level fetch with its conditional-fetch token.

    When ``not_modified`` is set GitHub answered 304 and ``data`` is None;
    the caller must keep its previous value rather than read it as absent.
    """

    data: T | None = None
    etag: str | None = None
    not_modified: bool = False


@dataclass(frozen=True)
class RepoData:
    """Commit, release and tag fetched for one repository in one poll."""

    commit: CommitInfo | None = None
    release: ReleaseInfo | None = None
    tag: TagInfo | None = None
