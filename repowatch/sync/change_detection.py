"""Version change detection.

Decides, for one repository, which observed change is worth reporting. The
tiers are ordered release > tag > commit and the first matching tier wins.
A release or tag counts as new when it differs from the version the user has
acknowledged, compared without a leading ``v``. A commit counts as new only
once a previous commit has been recorded, so the first sync of a repository
never raises a commit notification.

Everything here is pure and synchronous.
"""

from repowatch.github.models import CommitInfo, ReleaseInfo, TagInfo
from repowatch.models import VersionType

from .models import CurrentSyncState, VersionUpdate


def normalize_version(version: str | None) -> str | None:
    """Strip one leading ``v``/``V`` so ``v1.2.0`` and ``1.2.0`` compare equal.

    Args:
        version: Version string, possibly None or empty

    Returns:
        Normalized version, or None for a missing version
    """
    if not version:
        return None
    if version[0] in ("v", "V"):
        return version[1:]
    return version


def detect_version_update(
    current: CurrentSyncState | None,
    release: ReleaseInfo | None,
    tag: TagInfo | None,
    commit: CommitInfo | None,
) -> VersionUpdate | None:
    """Pick the version change to report for a repository.

    Args:
        current: Persisted state, None when the repository was never synced
        release: Latest release, if any
        tag: Latest tag, if any
        commit: Latest commit, if any

    Returns:
        The detected update, or None when nothing changed
    """
    acknowledged = normalize_version(current.acknowledged_release if current else None)

    if release is not None:
        if normalize_version(release.tag) != acknowledged:
            return VersionUpdate(
                type=VersionType.RELEASE,
                value=release.tag,
                date=release.date,
                notes=release.notes,
                is_new=True,
            )

    # Tags only count for repositories that publish no releases
    if tag is not None and release is None:
        last_tag = current.last_tag if current else None
        if normalize_version(tag.tag) != acknowledged and tag.tag != last_tag:
            return VersionUpdate(
                type=VersionType.TAG,
                value=tag.tag,
                date=tag.date,
                is_new=True,
            )

    last_sha = current.last_commit_sha if current else None
    if commit is not None and commit.sha != last_sha:
        return VersionUpdate(
            type=VersionType.COMMIT,
            value=commit.short_sha,
            date=commit.date,
            is_new=last_sha is not None,
        )

    return None


def check_for_updates(
    current: CurrentSyncState | None,
    commit: CommitInfo | None,
    release: ReleaseInfo | None,
    tag: TagInfo | None,
) -> bool:
    """Check whether anything observed differs from the persisted mirror.

    Independent of :func:`detect_version_update`: this ignores
    acknowledgements and only compares raw values. Values that were not
    fetched are not compared.

    Returns:
        True on first sync or when any present value changed
    """
    if current is None:
        return True

    if commit is not None and commit.sha != current.last_commit_sha:
        return True

    if release is not None and release.tag != current.last_release_tag:
        return True

    if tag is not None and tag.tag != current.last_tag:
        return True

    return False
