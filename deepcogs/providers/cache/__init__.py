"""Cache providers.

MemoryCacheProvider keeps fetched collections in process memory, keyed by
owner and expected collection size, so repeated DNA / deep-cuts / compare
requests don't refetch every page from Discogs.
"""

from deepcogs.providers.cache.memory_cache import MemoryCacheProvider

__all__ = ["MemoryCacheProvider"]
