"""Public interface definitions for all external service providers.

Every external API used by DeepCogs is reached only through the abstract
base classes in this package.  Concrete adapters live in
``deepcogs/providers/`` and are wired up in ``deepcogs/main.py``; unit tests
inject mocks implementing the same contracts.

CONCRETE PROVIDER MAP:
    Interface                  →  Concrete implementation
    ─────────────────────────────────────────────────────────────
    IMusicDatabaseProvider     →  DiscogsAPIProvider
    ISimilarArtistProvider     →  LastFmSimilarArtistProvider
    ICacheProvider             →  MemoryCacheProvider
"""

from deepcogs.interfaces.cache_provider import ICacheProvider
from deepcogs.interfaces.music_db_provider import IMusicDatabaseProvider
from deepcogs.interfaces.similar_artist_provider import ISimilarArtistProvider

__all__ = [
    "ICacheProvider",
    "IMusicDatabaseProvider",
    "ISimilarArtistProvider",
]
