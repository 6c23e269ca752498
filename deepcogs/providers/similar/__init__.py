"""Similar-artist provider implementations.

    LastFmSimilarArtistProvider — Last.fm ``artist.getsimilar`` over httpx.
    Requires LASTFM_API_KEY; without it the recommendation engine uses its
    style-search fallback only.
"""

from deepcogs.providers.similar.lastfm_provider import LastFmSimilarArtistProvider

__all__ = ["LastFmSimilarArtistProvider"]
