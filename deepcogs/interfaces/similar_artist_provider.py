"""Abstract base class for similar-artist lookup providers.

One call answers "which artists are like X?" for a single artist.  Batching,
pacing and deduplication across many artists live in
:class:`deepcogs.services.similar_artist_gateway.SimilarArtistGateway`, not
here.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from deepcogs.models.recommendation import SimilarArtist


class ISimilarArtistProvider(ABC):
    """Contract for services returning artists similar to a given one."""

    @abstractmethod
    async def get_similar_artists(self, artist: str, limit: int = 10) -> list[SimilarArtist]:
        """Return up to *limit* artists similar to *artist*.

        Every result carries ``source_artist=artist``.  Malformed match
        values are parsed as ``0.0`` rather than failing the call.

        Raises
        ------
        deepcogs.utils.errors.ProviderUnavailableError
            On network failure, a non-2xx answer or an undecodable body.
        deepcogs.utils.errors.RateLimitError
            When the provider answers HTTP 429.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier such as ``"lastfm"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider is configured (API key present)."""
