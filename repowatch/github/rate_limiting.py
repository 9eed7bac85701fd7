"""GitHub API rate limit tracking."""

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime

logger = logging.getLogger(__name__)

DEFAULT_RATE_LIMIT = 5000


@dataclass
class RateLimitInfo:
    """Rate limit information from GitHub API."""

    limit: int
    remaining: int
    reset: int
    used: int = 0
    resource: str = "core"

    @property
    def reset_datetime(self) -> datetime:
        """Get reset time as an aware UTC datetime."""
        return datetime.fromtimestamp(self.reset, UTC)


@dataclass(frozen=True)
class RateLimitStatus:
    """Remaining quota and reset time as reported to callers."""

    remaining: int
    reset_at: datetime

    def to_dict(self) -> dict[str, object]:
        """Convert to a JSON-friendly dictionary."""
        return {"remaining": self.remaining, "reset_at": self.reset_at.isoformat()}


@dataclass
class RateLimitManager:
    """Tracks GitHub API rate limit headroom from response headers.

    Tracking is advisory: a low quota produces a warning log entry but never
    blocks requests.
    """

    warning_threshold: int = 100

    _rate_limits: dict[str, RateLimitInfo] = field(default_factory=dict)

    def get_rate_limit(self, resource: str = "core") -> RateLimitInfo | None:
        """Get current rate limit info for resource."""
        return self._rate_limits.get(resource)

    def update_rate_limit(self, headers: dict[str, str]) -> RateLimitInfo | None:
        """Update rate limit info from response headers.

        Args:
            headers: HTTP response headers from GitHub API

        Returns:
            The recorded rate limit info, or None if the headers carried none
        """
        normalized = {key.lower(): value for key, value in headers.items()}
        if "x-ratelimit-remaining" not in normalized:
            return None

        try:
            rate_limit = RateLimitInfo(
                limit=int(normalized.get("x-ratelimit-limit", DEFAULT_RATE_LIMIT)),
                remaining=int(normalized["x-ratelimit-remaining"]),
                reset=int(normalized.get("x-ratelimit-reset", 0)),
                used=int(normalized.get("x-ratelimit-used", 0)),
                resource=normalized.get("x-ratelimit-resource", "core"),
            )
        except (ValueError, TypeError):
            # Ignore invalid rate limit headers
            return None

        self._rate_limits[rate_limit.resource] = rate_limit

        if rate_limit.remaining < self.warning_threshold:
            logger.warning(
                "GitHub API rate limit low",
                extra={
                    "remaining": rate_limit.remaining,
                    "reset_at": rate_limit.reset_datetime.isoformat(),
                    "resource": rate_limit.resource,
                },
            )

        return rate_limit

    def get_status(self, resource: str = "core") -> RateLimitStatus:
        """Get remaining quota and reset time, with defaults before any call."""
        rate_limit = self.get_rate_limit(resource)
        if rate_limit is None:
            return RateLimitStatus(
                remaining=DEFAULT_RATE_LIMIT, reset_at=datetime.fromtimestamp(0, UTC)
            )
        return RateLimitStatus(
            remaining=rate_limit.remaining, reset_at=rate_limit.reset_datetime
        )
