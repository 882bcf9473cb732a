"""
Check Service — Snapshot backends

The check store keeps every check in one snapshot document that is loaded
and written back whole. Each snapshot carries a `version`; `save` only
succeeds when the stored version still equals the version that was loaded,
otherwise StaleSnapshotError tells the caller to redo its read-modify-write.

  file  → JSON file on disk, replaced atomically (single host)
  redis → one Redis string key, version check under WATCH/MULTI
"""
import asyncio
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod

import redis.asyncio as aioredis
from pydantic import Field, ValidationError
from redis.exceptions import WatchError

from check_service.core.config import Settings
from check_service.core.errors import Internal
from check_service.core.optimistic_lock import StaleSnapshotError
from check_service.models.check import CamelModel, Check

logger = logging.getLogger(__name__)


class SnapshotCorrupted(Internal):
    """Stored snapshot could not be parsed; refusing to overwrite it."""


class StoreSnapshot(CamelModel):
    version: int = 0
    next_check_number: int | None = None
    checks: dict[str, Check] = Field(default_factory=dict)


def _parse(raw: str | None, source: str) -> StoreSnapshot:
    if not raw or not raw.strip():
        return StoreSnapshot()
    try:
        return StoreSnapshot.model_validate_json(raw)
    except ValidationError as exc:
        logger.error("Snapshot at %s is unreadable: %s", source, exc)
        raise SnapshotCorrupted(f"snapshot at {source} is unreadable") from exc


def _stored_version(raw: str | None) -> int:
    if not raw or not raw.strip():
        return 0
    try:
        return int(json.loads(raw).get("version", 0))
    except (ValueError, AttributeError) as exc:
        raise SnapshotCorrupted("stored snapshot has no readable version") from exc


class SnapshotBackend(ABC):
    @abstractmethod
    async def load(self) -> StoreSnapshot:
        ...

    @abstractmethod
    async def save(self, snapshot: StoreSnapshot, expected_version: int) -> None:
        """Persist `snapshot` as version `expected_version + 1`."""

    @abstractmethod
    async def ping(self) -> None:
        ...

    async def close(self) -> None:
        """Release connections held by the backend."""


class FileSnapshotBackend(SnapshotBackend):
    def __init__(self, path: str):
        self.path = path
        self._write_lock = asyncio.Lock()

    def _read(self) -> str | None:
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                return fh.read()
        except FileNotFoundError:
            return None

    def _write(self, payload: str) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".checks-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
            os.replace(tmp_path, self.path)
        except BaseException:
            os.unlink(tmp_path)
            raise

    async def load(self) -> StoreSnapshot:
        raw = await asyncio.to_thread(self._read)
        return _parse(raw, self.path)

    async def save(self, snapshot: StoreSnapshot, expected_version: int) -> None:
        async with self._write_lock:
            current = _stored_version(await asyncio.to_thread(self._read))
            if current != expected_version:
                raise StaleSnapshotError(
                    f"snapshot version is {current}, expected {expected_version}"
                )
            snapshot.version = expected_version + 1
            payload = snapshot.model_dump_json(by_alias=True, indent=2)
            await asyncio.to_thread(self._write, payload)

    async def ping(self) -> None:
        await asyncio.to_thread(self._read)


class RedisSnapshotBackend(SnapshotBackend):
    def __init__(self, redis: aioredis.Redis, key: str):
        self.redis = redis
        self.key = key

    async def load(self) -> StoreSnapshot:
        raw = await self.redis.get(self.key)
        return _parse(raw, f"redis:{self.key}")

    async def save(self, snapshot: StoreSnapshot, expected_version: int) -> None:
        async with self.redis.pipeline(transaction=True) as pipe:
            try:
                await pipe.watch(self.key)
                current = _stored_version(await pipe.get(self.key))
                if current != expected_version:
                    raise StaleSnapshotError(
                        f"snapshot version is {current}, expected {expected_version}"
                    )
                snapshot.version = expected_version + 1
                pipe.multi()
                pipe.set(self.key, snapshot.model_dump_json(by_alias=True))
                await pipe.execute()
            except WatchError as exc:
                raise StaleSnapshotError("snapshot key changed during save") from exc

    async def ping(self) -> None:
        await self.redis.ping()

    async def close(self) -> None:
        await self.redis.aclose()


def build_backend(settings: Settings) -> SnapshotBackend:
    if settings.STORE_BACKEND == "redis":
        redis = aioredis.from_url(
            settings.redis_url,
            decode_responses=True,
            socket_connect_timeout=settings.HEALTH_CHECK_TIMEOUT,
        )
        return RedisSnapshotBackend(redis, settings.STORE_REDIS_KEY)
    if settings.STORE_BACKEND == "file":
        return FileSnapshotBackend(settings.STORE_PATH)
    raise ValueError(f"Unknown STORE_BACKEND '{settings.STORE_BACKEND}'")
