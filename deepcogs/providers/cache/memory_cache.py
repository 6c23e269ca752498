"""In-memory cache provider using cachetools.TTLCache.

Holds fetched collections for the lifetime of one process.  Suitable for a
single-worker deployment; a shared store can be swapped in through the
ICacheProvider interface.
"""

from __future__ import annotations

from typing import Any

from cachetools import TTLCache

from deepcogs.interfaces.cache_provider import ICacheProvider
from deepcogs.utils.logging import get_logger

logger = get_logger(__name__)


class MemoryCacheProvider(ICacheProvider):
    """In-memory TTL cache backed by ``cachetools.TTLCache``.

    Parameters
    ----------
    max_size:
        Maximum number of entries before the least-recently-used entry
        is evicted.
    ttl:
        Time-to-live in seconds applied to every entry.
    """

    def __init__(self, max_size: int = 256, ttl: int = 3600) -> None:
        self._default_ttl = ttl
        self._cache: TTLCache[str, Any] = TTLCache(maxsize=max_size, ttl=ttl)

    async def get(self, key: str) -> Any | None:
        value = self._cache.get(key)
        logger.debug("cache_hit" if value is not None else "cache_miss", key=key)
        return value

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Store *value* under *key*.

        ``TTLCache`` applies one TTL to every entry, so a per-call *ttl*
        different from the default is ignored.
        """
        if ttl is not None and ttl != self._default_ttl:
            logger.debug("cache_ttl_ignored", key=key, requested=ttl, applied=self._default_ttl)
        self._cache[key] = value
        logger.debug("cache_set", key=key)

    async def delete(self, key: str) -> None:
        self._cache.pop(key, None)
        logger.debug("cache_delete", key=key)
