"""Key-value/list storage backing the refresh lock and translated timelines.

Operations are atomic per key only. Nothing here spans several keys in one
transaction; the refresh pipeline composes them without atomicity.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

import redis.asyncio as aioredis
from redis.exceptions import RedisError, WatchError

from tweetlate.core.errors import PersistenceError
from tweetlate.models.tweet import TranslatedTweet
from tweetlate.utils.logger import get_logger

log = get_logger(__name__)

# Basic ISO-8601 date-time with milliseconds, e.g. 20141015T093012.250Z
TIMESTAMP_FORMAT = "%Y%m%dT%H%M%S.%f%z"


def format_timestamp(ts: datetime) -> str:
    ts = ts.astimezone(timezone.utc) if ts.tzinfo else ts.replace(tzinfo=timezone.utc)
    return f"{ts:%Y%m%dT%H%M%S}.{ts.microsecond // 1000:03d}Z"


def parse_timestamp(raw: str) -> datetime:
    return datetime.strptime(raw, TIMESTAMP_FORMAT).astimezone(timezone.utc)


class CacheStore(ABC):
    """Async storage interface used by the gate, the pipeline and readers."""

    @abstractmethod
    async def get_raw_timestamp(self, key: str) -> Optional[str]:
        """Stored timestamp text, or None when the key is absent."""

    @abstractmethod
    async def set_timestamp(self, key: str, ts: datetime) -> None:
        ...

    @abstractmethod
    async def compare_and_set_timestamp(self, key: str, expected: Optional[str], ts: datetime) -> bool:
        """Write ``ts`` only if the stored text still equals ``expected``."""

    @abstractmethod
    async def peek_front(self, key: str) -> Optional[TranslatedTweet]:
        ...

    @abstractmethod
    async def length(self, key: str) -> int:
        ...

    @abstractmethod
    async def range(self, key: str, start: int, end: int) -> List[TranslatedTweet]:
        """Elements ``start``..``end`` inclusive, negative indexes from the tail."""

    @abstractmethod
    async def push_front(self, key: str, elements: Sequence[TranslatedTweet]) -> None:
        """Afterwards the list starts with ``elements`` in the given order."""

    async def get_timestamp(self, key: str) -> Optional[datetime]:
        raw = await self.get_raw_timestamp(key)
        if raw is None:
            return None
        return parse_timestamp(raw)

    async def close(self) -> None:
        return None


class RedisCacheStore(CacheStore):
    """CacheStore over a redis-py asyncio client."""

    def __init__(self, client: aioredis.Redis) -> None:
        self.client = client

    @classmethod
    def from_url(cls, host: str = "127.0.0.1", port: int = 6379, db: int = 0) -> "RedisCacheStore":
        client = aioredis.Redis(host=host, port=port, db=db, decode_responses=True)
        log.info(f"Redis cache store configured for {host}:{port}/{db}")
        return cls(client)

    async def get_raw_timestamp(self, key: str) -> Optional[str]:
        try:
            return await self.client.get(key)
        except RedisError as exc:
            raise PersistenceError(str(exc), key=key, operation="get", phase="persist") from exc

    async def set_timestamp(self, key: str, ts: datetime) -> None:
        try:
            await self.client.set(key, format_timestamp(ts))
        except RedisError as exc:
            raise PersistenceError(str(exc), key=key, operation="set", phase="persist") from exc

    async def compare_and_set_timestamp(self, key: str, expected: Optional[str], ts: datetime) -> bool:
        try:
            async with self.client.pipeline(transaction=True) as pipe:
                await pipe.watch(key)
                current = await pipe.get(key)
                if current != expected:
                    return False
                pipe.multi()
                pipe.set(key, format_timestamp(ts))
                await pipe.execute()
                return True
        except WatchError:
            return False
        except RedisError as exc:
            raise PersistenceError(str(exc), key=key, operation="compare_and_set", phase="persist") from exc

    async def peek_front(self, key: str) -> Optional[TranslatedTweet]:
        try:
            raw = await self.client.lindex(key, 0)
        except RedisError as exc:
            raise PersistenceError(str(exc), key=key, operation="lindex", phase="persist") from exc
        return TranslatedTweet.from_json(raw) if raw is not None else None

    async def length(self, key: str) -> int:
        try:
            return int(await self.client.llen(key))
        except RedisError as exc:
            raise PersistenceError(str(exc), key=key, operation="llen", phase="persist") from exc

    async def range(self, key: str, start: int, end: int) -> List[TranslatedTweet]:
        try:
            raw_items = await self.client.lrange(key, start, end)
        except RedisError as exc:
            raise PersistenceError(str(exc), key=key, operation="lrange", phase="persist") from exc
        return [TranslatedTweet.from_json(raw) for raw in raw_items]

    async def push_front(self, key: str, elements: Sequence[TranslatedTweet]) -> None:
        if not elements:
            return
        # LPUSH puts its last argument at the head.
        payload = [element.to_json() for element in reversed(elements)]
        try:
            await self.client.lpush(key, *payload)
        except RedisError as exc:
            raise PersistenceError(str(exc), key=key, operation="lpush", phase="persist") from exc

    async def close(self) -> None:
        await self.client.aclose()


class MemoryCacheStore(CacheStore):
    """Process-local CacheStore for development and tests."""

    def __init__(self) -> None:
        self.values: Dict[str, str] = {}
        self.lists: Dict[str, List[str]] = {}
        self._lock = asyncio.Lock()

    async def get_raw_timestamp(self, key: str) -> Optional[str]:
        return self.values.get(key)

    async def set_timestamp(self, key: str, ts: datetime) -> None:
        self.values[key] = format_timestamp(ts)

    async def compare_and_set_timestamp(self, key: str, expected: Optional[str], ts: datetime) -> bool:
        async with self._lock:
            if self.values.get(key) != expected:
                return False
            self.values[key] = format_timestamp(ts)
            return True

    async def peek_front(self, key: str) -> Optional[TranslatedTweet]:
        items = self.lists.get(key)
        return TranslatedTweet.from_json(items[0]) if items else None

    async def length(self, key: str) -> int:
        return len(self.lists.get(key, []))

    async def range(self, key: str, start: int, end: int) -> List[TranslatedTweet]:
        items = self.lists.get(key, [])
        size = len(items)
        if start < 0:
            start = max(size + start, 0)
        if end < 0:
            end = size + end
        if end < 0 or start >= size or start > end:
            return []
        return [TranslatedTweet.from_json(raw) for raw in items[start : end + 1]]

    async def push_front(self, key: str, elements: Sequence[TranslatedTweet]) -> None:
        if not elements:
            return
        async with self._lock:
            self.lists[key] = [element.to_json() for element in elements] + self.lists.get(key, [])


__all__ = [
    "CacheStore",
    "RedisCacheStore",
    "MemoryCacheStore",
    "format_timestamp",
    "parse_timestamp",
    "TIMESTAMP_FORMAT",
]
