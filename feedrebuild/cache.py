"""
Feed cache invalidation.

Syndication feeds cache the timestamp of the newest change they served.
After a rebuild those timestamps are stale, so one key per configured
feed is deleted.
"""

from typing import Dict, List, Optional

import redis

from .config import RebuildConfig
from .logger import get_logger


def feed_timestamp_key(prefix: str, feed: str) -> str:
    """Cache key holding a feed's last-served timestamp."""
    return f"{prefix}:rcfeed:{feed}:timestamp"


class MemoryFeedCache:
    """Process-local key-value store, used when no Redis is configured."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> int:
        return 1 if self._data.pop(key, None) is not None else 0


class RedisFeedCache:
    """Key-value store backed by a Redis client."""

    def __init__(self, client):
        self.client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisFeedCache":
        return cls(redis.from_url(url))

    def get(self, key: str) -> Optional[str]:
        value = self.client.get(key)
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    def set(self, key: str, value: str) -> None:
        self.client.set(key, value)

    def delete(self, key: str) -> int:
        return int(self.client.delete(key))


def cache_for_config(config: RebuildConfig):
    """Pick the cache backend for a run."""
    if config.redis_url:
        return RedisFeedCache.from_url(config.redis_url)
    return MemoryFeedCache()


def purge_feeds(cache, config: RebuildConfig, logger=None) -> List[str]:
    """
    Delete the cached timestamp of every configured feed.

    Args:
        cache: Object exposing delete(key)
        config: Run configuration (feed_classes, cache_key_prefix)
        logger: Optional StructuredLogger

    Returns:
        The keys deleted, in feed order
    """
    logger = logger or get_logger()
    logger.info("Deleting feed timestamps.")

    keys = []
    for feed in config.feed_classes:
        key = feed_timestamp_key(config.cache_key_prefix, feed)
        removed = cache.delete(key)
        logger.debug("Purged feed timestamp", feed=feed, key=key, removed=removed)
        keys.append(key)
    return keys
