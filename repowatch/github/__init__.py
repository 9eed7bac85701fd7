"""GitHub API client package."""

from .auth import (
    AnonymousAuth,
    AuthProvider,
    AuthToken,
    PersonalAccessTokenAuth,
    create_auth_provider,
)
from .client import GitHubClient, GitHubClientConfig, GitHubResponse
from .exceptions import (
    GitHubAuthenticationError,
    GitHubConnectionError,
    GitHubError,
    GitHubNotFoundError,
    GitHubRateLimitError,
    GitHubServerError,
    GitHubTimeoutError,
    GitHubValidationError,
)
from .models import CommitInfo, FetchResult, ReleaseInfo, RepoData, TagInfo
from .rate_limiting import RateLimitInfo, RateLimitManager, RateLimitStatus
from .retry import RetryPolicy, is_retryable_error

__all__ = [
    "AnonymousAuth",
    "AuthProvider",
    "AuthToken",
    "CommitInfo",
    "FetchResult",
    "GitHubAuthenticationError",
    "GitHubClient",
    "GitHubClientConfig",
    "GitHubConnectionError",
    "GitHubError",
    "GitHubNotFoundError",
    "GitHubRateLimitError",
    "GitHubResponse",
    "GitHubServerError",
    "GitHubTimeoutError",
    "GitHubValidationError",
    "PersonalAccessTokenAuth",
    "RateLimitInfo",
    "RateLimitManager",
    "RateLimitStatus",
    "ReleaseInfo",
    "RepoData",
    "RetryPolicy",
    "TagInfo",
    "create_auth_provider",
    "is_retryable_error",
]
