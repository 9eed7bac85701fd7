"""Run the sync worker: ``python -m repowatch``."""

from repowatch.workers.sync_worker import run

if __name__ == "__main__":
    run()
