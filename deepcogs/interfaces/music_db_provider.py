"""Abstract base class for music-database service providers.

Defines the contract for reading a user's collection and wantlist, editing
the wantlist, and searching the release catalogue.  Discogs is the only
backend today; the adapter pattern keeps the services independent of the
client library.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from deepcogs.models.recommendation import RecommendedRelease
from deepcogs.models.release import Release, WantlistEntry


class IMusicDatabaseProvider(ABC):
    """Contract for the music database holding users' collections.

    Implementations translate the backend's records into
    :class:`~deepcogs.models.release.Release` and friends, degrading
    missing fields to empty values.
    """

    @abstractmethod
    async def get_collection(self, username: str) -> list[Release]:
        """Return every release in *username*'s collection.

        Returns
        -------
        list[Release]
            Collection order as reported by the backend.  An empty list
            means the collection is empty or not visible to the caller.

        Raises
        ------
        deepcogs.utils.errors.ProviderUnavailableError
            If the backend cannot be reached or answers with an error.
        """

    @abstractmethod
    async def get_collection_size(self, username: str) -> int:
        """Return the number of releases the user's profile reports.

        Used as part of the collection cache key so a changed collection
        is refetched even before the cache entry expires.
        """

    @abstractmethod
    async def get_wantlist(self, username: str) -> list[WantlistEntry]:
        """Return every entry on *username*'s wantlist."""

    @abstractmethod
    async def search_releases(self, query: str, style: str | None = None) -> list[RecommendedRelease]:
        """Search vinyl masters matching *query*, most wanted first.

        Parameters
        ----------
        query:
            Free-text query, usually an artist name.  May be empty when
            searching by *style* alone.
        style:
            Optional style filter applied by the backend.

        Returns
        -------
        list[RecommendedRelease]
            The first page of results, without ``similar_to`` attribution.
        """

    @abstractmethod
    async def add_to_wantlist(self, username: str, release_id: int) -> None:
        """Add *release_id* to *username*'s wantlist."""

    @abstractmethod
    async def remove_from_wantlist(self, username: str, release_id: int) -> None:
        """Remove *release_id* from *username*'s wantlist."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier such as ``"discogs_api"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider has the credentials it needs."""
