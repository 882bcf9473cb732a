"""
Check Service — Optimistic snapshot retry decorator

Every store mutation reads the whole snapshot, changes one check and writes
the snapshot back. The backend refuses the write with StaleSnapshotError when
the stored version moved on since our read (another writer saved first), and
the whole read-modify-write is replayed with exponential backoff + jitter.
A conflict that outlives every attempt ends the request as Internal.
"""
import asyncio
import random
import functools
import logging

from check_service.core.config import get_settings
from check_service.core.errors import Internal

settings = get_settings()
logger = logging.getLogger(__name__)

STORE_CONTENTION = "check store is busy, try again"


class StaleSnapshotError(Exception):
    """The snapshot version changed between our load and our save."""


def backoff_delay(attempt: int) -> float:
    """Seconds to wait before replay number `attempt` (1-based)."""
    ceiling = settings.OPT_LOCK_MAX_DELAY_MS / 1000.0
    delay = (settings.OPT_LOCK_BASE_DELAY_MS / 1000.0) * (2 ** attempt)
    return min(delay, ceiling) + random.uniform(0, settings.OPT_LOCK_JITTER_MS / 1000.0)


def with_optimistic_retry(max_retries: int | None = None):
    """
    Replay an async read-modify-write while its save comes back stale.

    Usage:
        @with_optimistic_retry()
        async def _mutate(self, change):
            ...
    """
    attempts = max_retries or settings.OPT_LOCK_MAX_RETRIES

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            attempt = 1
            while True:
                try:
                    return await func(*args, **kwargs)
                except StaleSnapshotError as exc:
                    if attempt >= attempts:
                        logger.error("%s still stale after %d attempts", func.__name__, attempts)
                        raise Internal(STORE_CONTENTION, details=str(exc)) from exc
                    delay = backoff_delay(attempt)
                    logger.warning(
                        "Stale snapshot in %s (attempt %d/%d), replaying in %.3fs",
                        func.__name__, attempt, attempts, delay,
                    )
                    await asyncio.sleep(delay)
                    attempt += 1
        return wrapper
    return decorator
