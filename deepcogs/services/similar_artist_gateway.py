"""Batch similar-artist lookups with strict pacing.

The gateway turns a list of collection artists into one ranked list of
similar artists.  Calls go out one at a time with a fixed pause between
them, because Last.fm throttles (and eventually bans) bursty clients.
A failed lookup for one artist is logged and skipped; the others still
run.

Deduplication is by lowercase name and keeps the strongest match, so
"Bob" at 0.5 and "bob" at 0.9 collapse to the 0.9 entry.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

from deepcogs.interfaces.similar_artist_provider import ISimilarArtistProvider
from deepcogs.models.recommendation import SimilarArtist
from deepcogs.utils.errors import InvalidRequestError
from deepcogs.utils.logging import get_logger

_INTER_CALL_DELAY = 0.2  # seconds — Last.fm allows 5 req/sec
_MAX_SOURCE_ARTISTS = 8
_MAX_RESULTS = 20


@dataclass(frozen=True)
class SimilarArtistLookup:
    """Merged lookup results plus the number of failed per-artist calls."""

    artists: list[SimilarArtist]
    failures: int


class SimilarArtistGateway:
    """Paced, failure-tolerant front for an :class:`ISimilarArtistProvider`."""

    def __init__(
        self,
        provider: ISimilarArtistProvider,
        *,
        inter_call_delay: float = _INTER_CALL_DELAY,
        max_source_artists: int = _MAX_SOURCE_ARTISTS,
        max_results: int = _MAX_RESULTS,
    ) -> None:
        self._provider = provider
        self._delay = inter_call_delay
        self._max_sources = max_source_artists
        self._max_results = max_results
        self._logger = get_logger(__name__)

    @property
    def provider_name(self) -> str:
        return self._provider.get_provider_name()

    async def lookup_similar(
        self, artist_names: list[str], limit_per_artist: int = 10
    ) -> list[SimilarArtist]:
        """Return artists similar to *artist_names*, strongest match first.

        Parameters
        ----------
        artist_names:
            Collection artists to look up.  Only the first few are
            queried; callers pass them in priority order.
        limit_per_artist:
            Results requested per source artist.

        Raises
        ------
        InvalidRequestError
            If *artist_names* is empty.
        """
        return (await self.lookup(artist_names, limit_per_artist)).artists

    async def lookup(self, artist_names: list[str], limit_per_artist: int = 10) -> SimilarArtistLookup:
        """Like :meth:`lookup_similar`, also reporting how many calls failed."""
        if not artist_names:
            raise InvalidRequestError(
                message="At least one artist name is required for a similar-artist lookup",
                provider_name=self.provider_name,
            )

        sources = artist_names[: self._max_sources]
        collected: list[SimilarArtist] = []
        failures = 0

        for index, artist in enumerate(sources):
            if index > 0 and self._delay > 0:
                await asyncio.sleep(self._delay)
            try:
                collected.extend(await self._provider.get_similar_artists(artist, limit_per_artist))
            except Exception as exc:
                failures += 1
                self._logger.warning(
                    "similar_artist_lookup_failed",
                    artist=artist,
                    provider=self.provider_name,
                    error=str(exc),
                )

        merged = dedupe_by_name(collected)[: self._max_results]
        self._logger.info(
            "similar_artist_lookup_complete",
            source_artists=len(sources),
            raw_results=len(collected),
            merged_results=len(merged),
            failures=failures,
        )
        return SimilarArtistLookup(artists=merged, failures=failures)


def dedupe_by_name(artists: list[SimilarArtist]) -> list[SimilarArtist]:
    """Collapse case-insensitive duplicates, keeping the highest match.

    The result is sorted by match descending; equal matches keep the order
    in which their names were first seen.
    """
    best: dict[str, SimilarArtist] = {}
    for artist in artists:
        key = artist.name.lower()
        current = best.get(key)
        if current is None or artist.match > current.match:
            best[key] = artist
    return sorted(best.values(), key=lambda a: a.match, reverse=True)
