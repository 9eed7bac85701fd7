"""repowatch: track GitHub repositories and surface new releases, tags and commits."""

__version__ = "0.1.0"
