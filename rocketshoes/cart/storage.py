"""Persistent stores for the cart snapshot.

Every backend is a flat string key-value store with async `get`/`set`.
"""
import asyncio
import json
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from rocketshoes import config
from rocketshoes.db import get_redis
from rocketshoes.logging import get_logger

logger = get_logger(__name__)


class CartStorage:
    """Key-value store interface."""

    async def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    async def set(self, key: str, value: str) -> None:
        raise NotImplementedError


class MemoryCartStorage(CartStorage):
    """In-process store; lost with the process."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self.data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        self.data[key] = value


class FileCartStorage(CartStorage):
    """
    Local durable store: a JSON object file mapping keys to strings.

    Writes go to a temporary file in the same directory which then replaces
    the existing file, so a crash mid-write leaves the previous content intact.
File access runs in a worker thread, off the event loop.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _read_all(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        with open(self.path, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not hold a JSON object")
        return data

    def _write(self, key: str, value: str) -> None:
        try:
            data = self._read_all()
        except ValueError as e:
            logger.warning(f"Replacing unreadable storage file {self.path}: {e}")
            data = {}
        data[key] = value

        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".storage-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except BaseException:
            os.unlink(tmp_name)
            raise

    async def get(self, key: str) -> Optional[str]:
        value = (await asyncio.to_thread(self._read_all)).get(key)
        return value if isinstance(value, str) else None

    async def set(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._write, key, value)


class RedisCartStorage(CartStorage):
    """Upstash Redis store with optional TTL."""

    def __init__(self, redis, ttl: Optional[int] = None):
        self.redis = redis
        self.ttl = ttl

    async def get(self, key: str) -> Optional[str]:
        data = await self.redis.get(key)
        return data if data else None

    async def set(self, key: str, value: str) -> None:
        if self.ttl:
            await self.redis.set(key, value, ex=self.ttl)
        else:
            await self.redis.set(key, value)


def create_storage(backend: str = config.CART_STORAGE) -> CartStorage:
    """Build the store selected by CART_STORAGE."""
    if backend == "file":
        return FileCartStorage(config.CART_STORAGE_PATH)
    if backend == "redis":
        return RedisCartStorage(get_redis(), ttl=config.CART_TTL)
    if backend == "memory":
        return MemoryCartStorage()
    raise ValueError(
        f"Unknown CART_STORAGE {backend!r}, expected one of {', '.join(config.STORAGE_BACKENDS)}"
    )
