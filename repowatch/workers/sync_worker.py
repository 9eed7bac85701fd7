"""Sync worker for scheduled repository synchronization.

This module implements the long-running process that loads configuration,
prepares the database, and keeps the sync scheduler running until it is
asked to stop.
"""

import asyncio
import logging
import signal
import sys
from datetime import UTC, datetime
from typing import Any

from repowatch.config.loader import ConfigurationLoader
from repowatch.config.models import Config
from repowatch.database import DatabaseConnectionManager
from repowatch.github.auth import create_auth_provider
from repowatch.github.client import GitHubClient, GitHubClientConfig
from repowatch.sync.directory import DatabaseRepositoryDirectory
from repowatch.sync.scheduler import SyncScheduler
from repowatch.sync.service import SyncService
from repowatch.sync.store import SyncStateStore

logger = logging.getLogger(__name__)


class SyncWorker:
    """Main worker that owns the sync engine and its resources.

    Manages the complete lifecycle of scheduled syncing including:
    - Configuration loading and validation
    - Database engine and schema bootstrap
    - GitHub client setup
    - Scheduler start and graceful shutdown
    - Health reporting
    """

    def __init__(self, config_path: str | None = None, config: Config | None = None):
        """Initialize sync worker.

        Args:
            config_path: Optional path to configuration file
            config: Preloaded configuration, takes precedence over config_path
        """
        self.config_path = config_path
        self.config = config

        self.connection_manager: DatabaseConnectionManager | None = None
        self.github_client: GitHubClient | None = None
        self.service: SyncService | None = None
        self.scheduler: SyncScheduler | None = None

        # Worker state
        self.running = False
        self.shutdown_event = asyncio.Event()
        self.started_at: datetime | None = None

    async def initialize(self) -> None:
        """Initialize worker components and connections."""
        logger.info("Initializing sync worker...")

        try:
            self._load_configuration()
            await self._initialize_database()
            self._initialize_github_client()
            self._initialize_sync_components()

            self.started_at = datetime.now(UTC)
            logger.info("Sync worker initialized successfully")

        except Exception as e:
            logger.error(f"Failed to initialize sync worker: {e}")
            await self.cleanup()
            raise

    def _load_configuration(self) -> None:
        """Load and validate configuration."""
        if self.config is not None:
            return

        config_loader = ConfigurationLoader()

        if self.config_path:
            self.config = config_loader.load_from_file(self.config_path)
        else:
            found = config_loader.find_config_file()
            if found is not None:
                self.config = config_loader.load_from_file(found)
            else:
                self.config = config_loader.load_default()

        logger.info(
            "Configuration loaded",
            extra=config_loader.get_loading_info()["config_summary"] or {},
        )

    async def _initialize_database(self) -> None:
        """Create the engine and make sure the schema exists."""
        if not self.config:
            raise RuntimeError("Configuration not loaded")

        self.connection_manager = DatabaseConnectionManager(self.config.database)
        await self.connection_manager.create_schema()

    def _initialize_github_client(self) -> None:
        """Create the GitHub client from configuration."""
        if not self.config:
            raise RuntimeError("Configuration not loaded")

        github = self.config.github
        if github.token is None:
            logger.warning(
                "No GitHub token configured; unauthenticated rate limits apply"
            )

        self.github_client = GitHubClient(
            auth=create_auth_provider(github.token),
            config=GitHubClientConfig(
                base_url=github.base_url,
                timeout=github.timeout,
                max_retries=github.max_retries,
                retry_base_delay=github.retry_base_delay,
                rate_limit_warning_threshold=github.rate_limit_warning_threshold,
                user_agent=github.user_agent,
            ),
        )

    def _initialize_sync_components(self) -> None:
        """Wire up the sync service and scheduler."""
        if not self.config or not self.connection_manager or not self.github_client:
            raise RuntimeError("Worker dependencies not initialized")

        self.service = SyncService(
            github_client=self.github_client,
            directory=DatabaseRepositoryDirectory(self.connection_manager),
            store=SyncStateStore(self.connection_manager),
            max_concurrency=self.config.sync.max_concurrency,
        )
        self.scheduler = SyncScheduler(
            self.service,
            interval_minutes=self.config.sync.interval_minutes,
            run_on_startup=self.config.sync.run_on_startup,
        )

    async def run(self) -> None:
        """Run the scheduler until shutdown is requested."""
        if not self.scheduler:
            raise RuntimeError("Worker not initialized. Call initialize() first.")

        self.running = True
        logger.info("Starting sync worker...")

        self._setup_signal_handlers()

        try:
            self.scheduler.start()
            await self.shutdown_event.wait()
        except asyncio.CancelledError:
            logger.info("Worker cancelled")
        finally:
            self.running = False
            await self.scheduler.stop()
            logger.info("Sync worker stopped")

    def _setup_signal_handlers(self) -> None:
        """Set up signal handlers for graceful shutdown."""

        def signal_handler(sig: int, frame: Any) -> None:
            logger.info(f"Received signal {sig}, initiating shutdown...")
            self.shutdown_event.set()

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

    async def shutdown(self) -> None:
        """Initiate graceful shutdown."""
        logger.info("Shutting down sync worker...")
        self.shutdown_event.set()

    async def cleanup(self) -> None:
        """Clean up resources."""
        if self.scheduler:
            await self.scheduler.stop()

        if self.github_client:
            await self.github_client.close()

        if self.connection_manager:
            await self.connection_manager.close()

        logger.info("Cleanup completed")

    async def get_health_status(self) -> dict[str, Any]:
        """Get worker health status."""
        components: dict[str, Any] = {}
        health: dict[str, Any] = {
            "healthy": True,
            "worker": {
                "running": self.running,
                "started_at": self.started_at.isoformat() if self.started_at else None,
            },
            "components": components,
        }

        if self.connection_manager:
            database_healthy = await self.connection_manager.health_check()
            components["database"] = {"healthy": database_healthy}
            if not database_healthy:
                health["healthy"] = False

        if self.service:
            progress = self.service.get_progress()
            components["github"] = {
                "rate_limit": self.service.get_rate_limit_status().to_dict()
            }
            components["sync"] = {
                "in_progress": self.service.is_sync_in_progress(),
                "last_progress": progress.to_dict() if progress else None,
            }

        if self.scheduler:
            components["scheduler"] = {
                "running": self.scheduler.is_running,
                "interval_seconds": self.scheduler.interval_seconds,
                "stats": self.scheduler.stats,
            }

        return health


async def main(argv: list[str] | None = None) -> None:
    """Main entry point for the sync worker."""
    import argparse

    parser = argparse.ArgumentParser(description="repowatch sync worker")
    parser.add_argument("--config", help="Configuration file path")
    parser.add_argument("--log-level", default=None, help="Log level")

    args = parser.parse_args(argv)

    worker = SyncWorker(config_path=args.config)

    # Configure logging before the worker logs anything
    log_level = args.log_level or "INFO"
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        await worker.initialize()
        if args.log_level is None and worker.config is not None:
            logging.getLogger().setLevel(worker.config.system.log_level.value)
        await worker.run()
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except Exception as e:
        logger.error(f"Worker failed: {e}")
        sys.exit(1)
    finally:
        await worker.cleanup()


def run() -> None:
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
