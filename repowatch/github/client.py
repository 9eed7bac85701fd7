"""GitHub API client for latest commit, release and tag lookups."""

import asyncio
import json
import logging
import time
import uuid
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import aiohttp

from .auth import AnonymousAuth, AuthProvider
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
from .rate_limiting import RateLimitManager, RateLimitStatus
from .retry import RetryPolicy

logger = logging.getLogger(__name__)


@dataclass
class GitHubClientConfig:
    """Configuration for GitHub client."""

    base_url: str = "https://api.github.com"
    timeout: int = 30
    max_retries: int = 3
    retry_base_delay: float = 1.0
    rate_limit_warning_threshold: int = 100
    user_agent: str = "repowatch/0.1"
    max_concurrent_requests: int = 10


@dataclass
class GitHubResponse:
    """Decoded response of a single API request."""

    status: int
    data: Any
    headers: dict[str, str]

    @property
    def etag(self) -> str | None:
        """ETag header, used as the conditional-fetch token."""
        for key, value in self.headers.items():
            if key.lower() == "etag":
                return value
        return None


class GitHubClient:
    """Async GitHub API client used by the sync engine.

    Each lookup (latest commit, latest release, latest tag) is wrapped in its
    own retry policy, so a transient failure of one does not re-run the
    others.
    """

    def __init__(
        self,
        auth: AuthProvider | None = None,
        config: GitHubClientConfig | None = None,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        """Initialize GitHub client.

        Args:
            auth: Authentication provider, anonymous access when omitted
            config: Client configuration
            retry_policy: Retry policy applied to each lookup
        """
        self.auth = auth or AnonymousAuth()
        self.config = config or GitHubClientConfig()
        self.rate_limiter = RateLimitManager(
            warning_threshold=self.config.rate_limit_warning_threshold
        )
        self.retry_policy = retry_policy or RetryPolicy(
            max_attempts=self.config.max_retries,
            base_delay=self.config.retry_base_delay,
        )

        # HTTP session will be initialized on first use
        self._session: aiohttp.ClientSession | None = None
        self._session_lock = asyncio.Lock()
        self._request_semaphore = asyncio.Semaphore(self.config.max_concurrent_requests)

    async def __aenter__(self) -> "GitHubClient":
        """Async context manager entry."""
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()

    async def _ensure_session(self) -> None:
        """Ensure HTTP session is initialized."""
        if self._session is None or self._session.closed:
            async with self._session_lock:
                if self._session is None or self._session.closed:
                    timeout = aiohttp.ClientTimeout(total=self.config.timeout)
                    self._session = aiohttp.ClientSession(
                        timeout=timeout,
                        headers={
                            "User-Agent": self.config.user_agent,
                            "Accept": "application/vnd.github+json",
                        },
                    )

    async def close(self) -> None:
        """Close HTTP session and cleanup resources."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    def _generate_correlation_id(self) -> str:
        """Generate correlation ID for request tracking."""
        return str(uuid.uuid4())[:8]

    def _build_url(self, path: str) -> str:
        return f"{self.config.base_url.rstrip('/')}/{path.lstrip('/')}"

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> GitHubResponse:
        """Make a single HTTP request and map failures to GitHub errors.

        Retrying is the caller's concern; this method performs exactly one
        attempt.

        Args:
            method: HTTP method
            path: API path (e.g., '/repos/owner/repo/commits')
            params: Query parameters
            headers: Additional headers

        Returns:
            Decoded response for 2xx and 304 statuses

        Raises:
            GitHubError: Various GitHub API errors
        """
        correlation_id = self._generate_correlation_id()
        url = self._build_url(path)

        request_headers = dict(headers or {})
        request_headers.update(await self.auth.get_headers())

        await self._ensure_session()
        if not self._session:
            raise GitHubConnectionError("Failed to initialize HTTP session")

        try:
            async with self._request_semaphore:
                start_time = time.time()
                logger.debug(f"GitHub API request [{correlation_id}] {method} {url}")

                async with self._session.request(
                    method, url, params=params, headers=request_headers
                ) as response:
                    request_time = time.time() - start_time
                    response_headers = dict(response.headers)

                    logger.debug(
                        f"GitHub API response [{correlation_id}] "
                        f"{response.status} in {request_time:.2f}s"
                    )

                    if response.status == 304:
                        self.rate_limiter.update_rate_limit(response_headers)
                        return GitHubResponse(304, None, response_headers)

                    if 200 <= response.status < 300:
                        self.rate_limiter.update_rate_limit(response_headers)
                        data = None
                        if response.status != 204:
                            data = await response.json(content_type=None)
                        return GitHubResponse(response.status, data, response_headers)

                    await self._handle_error_response(response, correlation_id)
                    raise GitHubError(
                        f"Unhandled response status {response.status}",
                        response.status,
                    )

        except TimeoutError as e:
            raise GitHubTimeoutError(f"Request timeout for {method} {url}") from e
        except aiohttp.ClientError as e:
            raise GitHubConnectionError(
                f"Connection error for {method} {url}: {e}"
            ) from e

    async def _handle_error_response(
        self, response: aiohttp.ClientResponse, correlation_id: str
    ) -> None:
        """Handle error responses from GitHub API.

        Args:
            response: HTTP response
            correlation_id: Request correlation ID

        Raises:
            GitHubError: Appropriate error based on status code
        """
        try:
            error_data = await response.json(content_type=None)
        except (json.JSONDecodeError, aiohttp.ContentTypeError, ValueError):
            error_data = None
        if not isinstance(error_data, dict):
            error_data = {"message": await response.text()}

        error_message = error_data.get("message") or f"HTTP {response.status}"

        logger.warning(
            f"GitHub API error [{correlation_id}] {response.status}: {error_message}"
        )

        status = response.status
        if status == 401:
            raise GitHubAuthenticationError(error_message, status, error_data)
        elif status in (403, 429):
            remaining = response.headers.get("X-RateLimit-Remaining")
            if (
                status == 429
                or "rate limit" in error_message.lower()
                or remaining == "0"
            ):
                reset_time = response.headers.get("X-RateLimit-Reset")
                limit = response.headers.get("X-RateLimit-Limit", "0")
                raise GitHubRateLimitError(
                    error_message,
                    reset_time=int(reset_time) if reset_time else None,
                    remaining=int(remaining or 0),
                    limit=int(limit),
                    status_code=status,
                )
            raise GitHubAuthenticationError(error_message, status, error_data)
        elif status == 404:
            raise GitHubNotFoundError(error_message, status, error_data)
        elif status == 422:
            raise GitHubValidationError(error_message, status, error_data)
        elif 500 <= status < 600:
            raise GitHubServerError(error_message, status, error_data)
        else:
            raise GitHubError(error_message, status, error_data)

    @staticmethod
    def _repo_path(owner: str, repo: str) -> str:
        return f"/repos/{quote(owner, safe='')}/{quote(repo, safe='')}"

    async def get_latest_commit(
        self, owner: str, repo: str, etag: str | None = None
    ) -> FetchResult[CommitInfo]:
        """Get the most recent commit on the default branch.

        Args:
            owner: Repository owner
            repo: Repository name
            etag: Conditional-fetch token from a previous call

        Returns:
            FetchResult with the commit (None for an empty repository) and a
            fresh ETag; ``not_modified`` is set when GitHub answered 304
        """
        headers = {"If-None-Match": etag} if etag else None

        async def operation() -> FetchResult[CommitInfo]:
            response = await self._request(
                "GET",
                f"{self._repo_path(owner, repo)}/commits",
                params={"per_page": "1"},
                headers=headers,
            )
            if response.status == 304:
                return FetchResult(etag=etag, not_modified=True)
            if not response.data:
                return FetchResult(etag=response.etag)
            return FetchResult(
                data=CommitInfo.from_api(response.data[0]), etag=response.etag
            )

        return await self.retry_policy.execute(
            operation, f"Latest commit lookup for {owner}/{repo}"
        )

    async def get_latest_release(
        self, owner: str, repo: str, etag: str | None = None
    ) -> FetchResult[ReleaseInfo]:
        """Get the latest published release.

        A repository without releases answers 404, which is returned as an
        empty result rather than raised.
        """
        headers = {"If-None-Match": etag} if etag else None

        async def operation() -> FetchResult[ReleaseInfo]:
            try:
                response = await self._request(
                    "GET",
                    f"{self._repo_path(owner, repo)}/releases/latest",
                    headers=headers,
                )
            except GitHubNotFoundError:
                return FetchResult()
            if response.status == 304:
                return FetchResult(etag=etag, not_modified=True)
            return FetchResult(
                data=ReleaseInfo.from_api(response.data), etag=response.etag
            )

        return await self.retry_policy.execute(
            operation, f"Latest release lookup for {owner}/{repo}"
        )

    async def get_latest_tag(self, owner: str, repo: str) -> FetchResult[TagInfo]:
        """Get the first tag GitHub lists, treated as the latest.

        404 is returned as an empty result.
        """

        async def operation() -> FetchResult[TagInfo]:
            try:
                response = await self._request(
                    "GET",
                    f"{self._repo_path(owner, repo)}/tags",
                    params={"per_page": "1"},
                )
            except GitHubNotFoundError:
                return FetchResult()
            if not response.data:
                return FetchResult(etag=response.etag)
            return FetchResult(
                data=TagInfo.from_api(response.data[0]), etag=response.etag
            )

        return await self.retry_policy.execute(
            operation, f"Latest tag lookup for {owner}/{repo}"
        )

    async def fetch_repo_data(self, owner: str, repo: str) -> RepoData:
        """Fetch latest commit, release and tag concurrently.

        The lookups are unconditional, so every result carries the current
        data and ``not_modified`` is never set.

        Raises:
            GitHubError: If any of the three lookups fails
        """
        commit, release, tag = await asyncio.gather(
            self.get_latest_commit(owner, repo),
            self.get_latest_release(owner, repo),
            self.get_latest_tag(owner, repo),
        )
        return RepoData(commit=commit.data, release=release.data, tag=tag.data)

    def get_rate_limit_status(self) -> RateLimitStatus:
        """Get the most recently observed rate limit headroom."""
        return self.rate_limiter.get_status()
