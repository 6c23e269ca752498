"""Music-database provider implementations.

    DiscogsAPIProvider — official Discogs REST API via python3-discogs-client.
    Reads collections and wantlists, edits the wantlist, and searches vinyl
    masters for the recommendation engine.  Rate limit: 60 req/min.
"""

from deepcogs.providers.music_db.discogs_api_provider import DiscogsAPIProvider

__all__ = ["DiscogsAPIProvider"]
