"""
Unit tests for configuration models.

Why: Invalid settings must be rejected at startup rather than surfacing as
     runtime failures deep inside the sync engine.

What: Tests defaults, field validation, environment substitution and
      cross-field checks of the pydantic configuration models.

How: Instantiates the models directly with valid and invalid values.
"""

import pytest
from pydantic import ValidationError

from repowatch.config.models import (
    Config,
    DatabaseConfig,
    GitHubConfig,
    LogLevel,
    SyncConfig,
    SystemConfig,
)


class TestDefaults:
    """Tests for default configuration values."""

    def test_root_defaults(self) -> None:
        """Every section has working defaults."""
        config = Config()

        assert config.system.log_level is LogLevel.INFO
        assert config.github.token is None
        assert config.github.base_url == "https://api.github.com"
        assert config.sync.interval_minutes == 30
        assert config.sync.max_concurrency == 3
        assert config.sync.run_on_startup is True
        assert config.database.is_sqlite is True

    def test_unknown_fields_rejected(self) -> None:
        """Typos in configuration keys are errors."""
        with pytest.raises(ValidationError):
            SyncConfig(interval=10)  # type: ignore[call-arg]


class TestGitHubConfig:
    """Tests for GitHubConfig validation."""

    @pytest.mark.parametrize("token", ["", "   "])
    def test_blank_token_is_unset(self, token: str) -> None:
        """Blank tokens mean anonymous access."""
        assert GitHubConfig(token=token).token is None

    def test_token_is_stripped(self) -> None:
        """Surrounding whitespace is removed from tokens."""
        assert GitHubConfig(token=" ghp_abc \n").token == "ghp_abc"

    def test_base_url_trailing_slash_removed(self) -> None:
        """Base URLs are normalized."""
        config = GitHubConfig(base_url="https://github.example.com/api/v3/")

        assert config.base_url == "https://github.example.com/api/v3"

    def test_base_url_requires_http_scheme(self) -> None:
        """Non-HTTP base URLs are rejected."""
        with pytest.raises(ValidationError, match="http"):
            GitHubConfig(base_url="ftp://github.com")

    @pytest.mark.parametrize("max_retries", [0, 11])
    def test_max_retries_bounds(self, max_retries: int) -> None:
        """Attempts must be between 1 and 10."""
        with pytest.raises(ValidationError):
            GitHubConfig(max_retries=max_retries)


class TestSyncConfig:
    """Tests for SyncConfig validation."""

    def test_interval_must_be_positive(self) -> None:
        """Zero-minute intervals are rejected."""
        with pytest.raises(ValidationError):
            SyncConfig(interval_minutes=0)

    def test_string_values_are_coerced(self) -> None:
        """Values from environment variables arrive as strings."""
        assert SyncConfig(interval_minutes="15").interval_minutes == 15  # type: ignore[arg-type]

    def test_validate_assignment(self) -> None:
        """Assignments are validated too."""
        config = SyncConfig()

        with pytest.raises(ValidationError):
            config.max_concurrency = 0


class TestDatabaseConfig:
    """Tests for DatabaseConfig."""

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("sqlite:///data/repowatch.db", "sqlite+aiosqlite:///data/repowatch.db"),
            ("sqlite+aiosqlite:///x.db", "sqlite+aiosqlite:///x.db"),
            ("postgresql://user:pw@db/repowatch", "postgresql+asyncpg://user:pw@db/repowatch"),
            ("postgresql+asyncpg://db/repowatch", "postgresql+asyncpg://db/repowatch"),
        ],
    )
    def test_async_driver_added(self, url: str, expected: str) -> None:
        """SQLAlchemy URLs always use an async driver."""
        assert DatabaseConfig(url=url).get_sqlalchemy_url() == expected

    def test_dialect(self) -> None:
        """Dialect ignores the driver suffix."""
        config = DatabaseConfig(url="postgresql+asyncpg://db/repowatch")

        assert config.dialect == "postgresql"
        assert config.is_sqlite is False

    @pytest.mark.parametrize("url", ["", "repowatch.db", "mysql://db/repowatch"])
    def test_invalid_urls_rejected(self, url: str) -> None:
        """Empty, scheme-less and unsupported URLs are rejected."""
        with pytest.raises(ValidationError):
            DatabaseConfig(url=url)


class TestEnvironmentSubstitution:
    """Tests for ${VAR} substitution."""

    def test_variable_is_substituted(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """${VAR} is replaced by the variable's value."""
        monkeypatch.setenv("TEST_GITHUB_TOKEN", "ghp_from_env")

        config = GitHubConfig(token="${TEST_GITHUB_TOKEN}")

        assert config.token == "ghp_from_env"

    def test_default_used_when_unset(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """${VAR:default} falls back to the default."""
        monkeypatch.delenv("TEST_SYNC_INTERVAL", raising=False)

        config = SyncConfig(interval_minutes="${TEST_SYNC_INTERVAL:45}")  # type: ignore[arg-type]

        assert config.interval_minutes == 45

    def test_nested_sections_are_substituted(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Substitution reaches nested configuration sections."""
        monkeypatch.setenv("TEST_DB_URL", "sqlite:///nested.db")

        config = Config(database={"url": "${TEST_DB_URL}"})  # type: ignore[arg-type]

        assert config.database.url == "sqlite:///nested.db"

    def test_missing_required_variable(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """${VAR} without default fails when the variable is missing."""
        monkeypatch.delenv("TEST_MISSING_VAR", raising=False)

        with pytest.raises(ValidationError, match="TEST_MISSING_VAR"):
            GitHubConfig(token="${TEST_MISSING_VAR}")


class TestConsistency:
    """Tests for cross-field validation."""

    def test_echo_rejected_in_production(self) -> None:
        """SQL logging is not allowed in production."""
        with pytest.raises(ValidationError, match="production"):
            Config(
                system=SystemConfig(environment="production"),
                database=DatabaseConfig(echo=True),
            )

    def test_echo_allowed_in_development(self) -> None:
        """SQL logging is fine outside production."""
        config = Config(database=DatabaseConfig(echo=True))

        assert config.database.echo is True
