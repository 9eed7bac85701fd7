"""Database infrastructure module.

Provides connection management and schema bootstrap for repowatch.
"""

from .connection import DatabaseConnectionManager

__all__ = ["DatabaseConnectionManager"]
