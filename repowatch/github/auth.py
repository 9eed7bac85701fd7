"""GitHub authentication handlers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from .exceptions import GitHubAuthenticationError


@dataclass
class AuthToken:
    """Authentication token."""

    token: str
    token_type: str = "Bearer"

    def to_header(self) -> dict[str, str]:
        """Convert to authorization header."""
        return {"Authorization": f"{self.token_type} {self.token}"}


class AuthProvider(ABC):
    """Abstract base class for authentication providers."""

    @abstractmethod
    async def get_headers(self) -> dict[str, str]:
        """Get headers that authenticate a request."""
        pass


class PersonalAccessTokenAuth(AuthProvider):
    """Personal Access Token authentication provider."""

    def __init__(self, token: str):
        """Initialize PAT authentication.

        Args:
            token: GitHub Personal Access Token
        """
        if not token:
            raise GitHubAuthenticationError("Personal Access Token is required")
        self._token = AuthToken(token=token, token_type="token")  # nosec B106

    async def get_headers(self) -> dict[str, str]:
        """Get authorization header for the token."""
        return self._token.to_header()


class AnonymousAuth(AuthProvider):
    """Unauthenticated access, subject to GitHub's much lower rate limit."""

    async def get_headers(self) -> dict[str, str]:
        """No authorization header."""
        return {}


def create_auth_provider(token: str | None) -> AuthProvider:
    """Pick the provider matching the configured token."""
    if token:
        return PersonalAccessTokenAuth(token)
    return AnonymousAuth()
