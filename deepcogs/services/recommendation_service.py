"""Style-driven release recommendations for a collection.

Answers "what should I dig for next?" per top style of the user's
collection.  A run goes through these phases (see
:class:`~deepcogs.models.recommendation.RecommendationPhase`):

  FETCHING_SIMILAR_ARTISTS
    Pool the top artists of the top styles and ask the similar-artist
    gateway about them once.  Similar artists the user already owns are
    dropped, and each remaining one is attributed back to the first style
    whose artists include its source artist.

  SEARCHING_PER_STYLE
    For each style, search the release catalogue once per similar artist,
    strongest match first.  The first search filters by the style; if it
    finds nothing, an unfiltered search is kept only for results whose
    styles are a substring match of the target ("Deep House" vs "House").
    No source artist may contribute more than two releases, and the style
    stops searching once three source artists have contributed and all
    of them are at that cap.  Owned masters are never recommended.

    A style with no similarity-based candidates falls back to a plain
    style search.  Those releases carry no ``similar_to`` and the reason
    reads "Popular <style> releases you might like".

  DEDUPLICATING
    Keep the first release per master id, at most six per style, and drop
    styles that ended up empty.

Every external call is sequential with a short pause in between, and a
failed call only means fewer candidates: it is counted in
``partial_failures`` and the run carries on.  Styles are yielded by
:meth:`RecommendationService.iter_recommendations` as soon as each one is
complete, so a caller that cancels the run on a deadline keeps what was
already produced.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from datetime import datetime, timezone

from deepcogs.interfaces.music_db_provider import IMusicDatabaseProvider
from deepcogs.models.recommendation import (
    RecommendationPhase,
    RecommendationResult,
    RecommendedRelease,
    SimilarArtist,
    StyleRecommendation,
    StyleSeed,
)
from deepcogs.services.similar_artist_gateway import SimilarArtistGateway
from deepcogs.utils.logging import get_logger
from deepcogs.utils.text_normalizer import artist_key, clean_artist_name, is_sentinel_artist, styles_related

_TOP_STYLES = 6
_ARTISTS_PER_STYLE = 5
_MAX_POOLED_ARTISTS = 8
_LIMIT_PER_ARTIST = 10

# Fairness: at most this many releases per source artist, and stop a
# style early once this many distinct sources are all at the cap.
_PER_SOURCE_CAP = 2
_TARGET_SOURCES = 3

_MAX_PER_STYLE = 6
_MAX_SEARCHES_PER_STYLE = 8
_SEARCH_DELAY = 0.1  # seconds between searches


@dataclass
class RecommendationRun:
    """Mutable progress of one recommendation run.

    Owned by a single request.  Safe to read after the run was cancelled:
    ``completed`` only ever holds finished styles.
    """

    phase: RecommendationPhase = RecommendationPhase.IDLE
    analyzed_styles: list[str] = field(default_factory=list)
    used_external_similarity: bool = False
    partial_failures: int = 0
    completed: list[StyleRecommendation] = field(default_factory=list)

    def to_result(self) -> RecommendationResult:
        return RecommendationResult(
            recommendations=list(self.completed),
            analyzed_styles=list(self.analyzed_styles),
            used_external_similarity=self.used_external_similarity,
            partial_failures=self.partial_failures,
            generated_at=datetime.now(tz=timezone.utc),
        )


class RecommendationService:
    """Generates per-style release recommendations.

    Parameters
    ----------
    music_db:
        Release-search provider (Discogs).
    gateway:
        Similar-artist gateway, or ``None`` when no similarity source is
        configured; every style then uses the style-search fallback.
    """

    def __init__(
        self,
        music_db: IMusicDatabaseProvider,
        gateway: SimilarArtistGateway | None = None,
        *,
        top_styles: int = _TOP_STYLES,
        artists_per_style: int = _ARTISTS_PER_STYLE,
        max_pooled_artists: int = _MAX_POOLED_ARTISTS,
        limit_per_artist: int = _LIMIT_PER_ARTIST,
        per_source_cap: int = _PER_SOURCE_CAP,
        target_sources: int = _TARGET_SOURCES,
        max_per_style: int = _MAX_PER_STYLE,
        max_searches_per_style: int = _MAX_SEARCHES_PER_STYLE,
        search_delay: float = _SEARCH_DELAY,
    ) -> None:
        self._music_db = music_db
        self._gateway = gateway
        self._top_styles = top_styles
        self._artists_per_style = artists_per_style
        self._max_pooled_artists = max_pooled_artists
        self._limit_per_artist = limit_per_artist
        self._per_source_cap = per_source_cap
        self._target_sources = target_sources
        self._max_per_style = max_per_style
        self._max_searches = max_searches_per_style
        self._search_delay = search_delay
        self._logger = get_logger(__name__)

    def with_music_db(self, music_db: IMusicDatabaseProvider) -> RecommendationService:
        """Return a copy of this service searching through *music_db*."""
        return RecommendationService(
            music_db,
            self._gateway,
            top_styles=self._top_styles,
            artists_per_style=self._artists_per_style,
            max_pooled_artists=self._max_pooled_artists,
            limit_per_artist=self._limit_per_artist,
            per_source_cap=self._per_source_cap,
            target_sources=self._target_sources,
            max_per_style=self._max_per_style,
            max_searches_per_style=self._max_searches,
            search_delay=self._search_delay,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def recommend(
        self,
        styles: list[StyleSeed],
        owned_master_ids: set[int],
        owned_artist_names: set[str],
        run: RecommendationRun | None = None,
    ) -> RecommendationResult:
        """Run the whole pipeline and return every non-empty style.

        Parameters
        ----------
        styles:
            Collection styles with their most associated artists.  Need not
            be sorted; the top styles by count are used.
        owned_master_ids:
            Masters already in the collection; never recommended.
        owned_artist_names:
            Artists already in the collection; dropped from the similar
            artists (case-insensitive).
        run:
            Optional progress holder.  Pass one in to read partial results
            if this coroutine gets cancelled.
        """
        run = run if run is not None else RecommendationRun()
        async for _ in self.iter_recommendations(styles, owned_master_ids, owned_artist_names, run):
            pass
        return run.to_result()

    async def iter_recommendations(
        self,
        styles: list[StyleSeed],
        owned_master_ids: set[int],
        owned_artist_names: set[str],
        run: RecommendationRun | None = None,
    ) -> AsyncIterator[StyleRecommendation]:
        """Yield each style's recommendation as soon as it is complete."""
        run = run if run is not None else RecommendationRun()
        top = sorted(styles, key=lambda s: s.count, reverse=True)[: self._top_styles]
        style_artists = {seed.name: self._seed_artists(seed) for seed in top}
        run.analyzed_styles = [seed.name for seed in top]

        self._logger.info(
            "recommendation_run_start",
            styles=run.analyzed_styles,
            owned_masters=len(owned_master_ids),
            similarity_enabled=self._gateway is not None,
        )

        self._enter(run, RecommendationPhase.FETCHING_SIMILAR_ARTISTS)
        similar = await self._fetch_similar(style_artists, owned_artist_names, run)
        by_style = self._attribute_to_styles(similar, style_artists)

        for seed in top:
            self._enter(run, RecommendationPhase.SEARCHING_PER_STYLE)
            candidates = await self._search_similar(seed.name, by_style.get(seed.name, []), owned_master_ids, run)
            is_fallback = not candidates
            if is_fallback:
                if by_style.get(seed.name) and self._search_delay > 0:
                    await asyncio.sleep(self._search_delay)
                candidates = await self._search_fallback(seed.name, owned_master_ids, run)

            self._enter(run, RecommendationPhase.DEDUPLICATING)
            releases = _dedupe_by_master(candidates)[: self._max_per_style]
            if not releases:
                self._logger.debug("recommendation_style_empty", style=seed.name)
                continue

            recommendation = _build_style_recommendation(seed.name, releases, is_fallback)
            run.completed.append(recommendation)
            self._logger.debug(
                "recommendation_style_complete",
                style=seed.name,
                releases=len(releases),
                fallback=is_fallback,
            )
            yield recommendation

        self._enter(run, RecommendationPhase.DONE)
        self._logger.info(
            "recommendation_run_complete",
            styles_returned=len(run.completed),
            used_external_similarity=run.used_external_similarity,
            partial_failures=run.partial_failures,
        )

    # ------------------------------------------------------------------
    # Similar artists
    # ------------------------------------------------------------------

    def _seed_artists(self, seed: StyleSeed) -> list[str]:
        names: list[str] = []
        for name in seed.artists:
            if is_sentinel_artist(name):
                continue
            cleaned = clean_artist_name(name)
            if artist_key(cleaned) not in {artist_key(n) for n in names}:
                names.append(cleaned)
            if len(names) >= self._artists_per_style:
                break
        return names

    def _pool_artists(self, style_artists: dict[str, list[str]]) -> list[str]:
        """Interleave the styles' artists by rank so every style gets a voice."""
        pool: list[str] = []
        seen: set[str] = set()
        depth = max((len(names) for names in style_artists.values()), default=0)
        for rank in range(depth):
            for names in style_artists.values():
                if rank >= len(names):
                    continue
                key = artist_key(names[rank])
                if key in seen:
                    continue
                seen.add(key)
                pool.append(names[rank])
                if len(pool) >= self._max_pooled_artists:
                    return pool
        return pool

    async def _fetch_similar(
        self,
        style_artists: dict[str, list[str]],
        owned_artist_names: set[str],
        run: RecommendationRun,
    ) -> list[SimilarArtist]:
        if self._gateway is None:
            return []
        pool = self._pool_artists(style_artists)
        if not pool:
            return []

        try:
            lookup = await self._gateway.lookup(pool, self._limit_per_artist)
        except Exception as exc:
            run.partial_failures += 1
            self._logger.warning("similar_artist_fetch_failed", error=str(exc))
            return []
        run.partial_failures += lookup.failures

        owned = {artist_key(name) for name in owned_artist_names}
        similar = [a for a in lookup.artists if artist_key(a.name) not in owned]
        run.used_external_similarity = bool(similar)
        self._logger.info(
            "similar_artists_fetched",
            pooled_artists=len(pool),
            returned=len(lookup.artists),
            after_owned_filter=len(similar),
        )
        return similar

    @staticmethod
    def _attribute_to_styles(
        similar: list[SimilarArtist], style_artists: dict[str, list[str]]
    ) -> dict[str, list[SimilarArtist]]:
        """Map each similar artist to the first style owning its source artist."""
        keys_by_style = {style: {artist_key(n) for n in names} for style, names in style_artists.items()}
        by_style: dict[str, list[SimilarArtist]] = {}
        for artist in similar:
            source = artist_key(artist.source_artist)
            for style, keys in keys_by_style.items():
                if source in keys:
                    by_style.setdefault(style, []).append(artist)
                    break
        for artists in by_style.values():
            artists.sort(key=lambda a: a.match, reverse=True)
        return by_style

    # ------------------------------------------------------------------
    # Release search
    # ------------------------------------------------------------------

    async def _search(self, query: str, style: str | None, run: RecommendationRun) -> list[RecommendedRelease] | None:
        """One catalogue search; ``None`` marks a failed call."""
        try:
            return await self._music_db.search_releases(query, style=style)
        except Exception as exc:
            run.partial_failures += 1
            self._logger.warning("release_search_failed", query=query, style=style, error=str(exc))
            return None

    async def _paced_search(
        self, query: str, style: str | None, calls_so_far: int, run: RecommendationRun
    ) -> list[RecommendedRelease] | None:
        if calls_so_far > 0 and self._search_delay > 0:
            await asyncio.sleep(self._search_delay)
        return await self._search(query, style, run)

    async def _search_similar(
        self,
        style: str,
        similar: list[SimilarArtist],
        owned_master_ids: set[int],
        run: RecommendationRun,
    ) -> list[RecommendedRelease]:
        candidates: list[RecommendedRelease] = []
        seen_masters: set[int] = set()
        per_source: dict[str, int] = {}
        source_names: dict[str, str] = {}
        searches = 0

        for artist in similar:
            if self._style_saturated(per_source):
                break
            source = artist_key(artist.source_artist)
            if per_source.get(source, 0) >= self._per_source_cap:
                continue
            if searches >= self._max_searches:
                break

            results = await self._paced_search(artist.name, style, searches, run)
            searches += 1
            if results is None:
                continue
            if not results and searches < self._max_searches:
                unfiltered = await self._paced_search(artist.name, None, searches, run)
                searches += 1
                results = [
                    r for r in unfiltered or []
                    if any(styles_related(s, style) for s in r.styles)
                ]

            for release in results:
                if per_source.get(source, 0) >= self._per_source_cap:
                    break
                if release.master_id in owned_master_ids or release.master_id in seen_masters:
                    continue
                seen_masters.add(release.master_id)
                per_source[source] = per_source.get(source, 0) + 1
                source_names.setdefault(source, artist.source_artist)
                candidates.append(release.model_copy(update={"similar_to": source_names[source]}))

        return candidates

    def _style_saturated(self, per_source: dict[str, int]) -> bool:
        contributors = [count for count in per_source.values() if count > 0]
        return len(contributors) >= self._target_sources and all(
            count >= self._per_source_cap for count in contributors
        )

    async def _search_fallback(
        self, style: str, owned_master_ids: set[int], run: RecommendationRun
    ) -> list[RecommendedRelease]:
        results = await self._search("", style, run)
        if not results:
            return []
        fresh = [r for r in results if r.master_id not in owned_master_ids]
        return [r.model_copy(update={"similar_to": None}) for r in _dedupe_by_master(fresh)[: self._max_per_style]]

    def _enter(self, run: RecommendationRun, phase: RecommendationPhase) -> None:
        if run.phase != phase:
            self._logger.debug("recommendation_phase", previous=run.phase.value, phase=phase.value)
            run.phase = phase


def _dedupe_by_master(releases: list[RecommendedRelease]) -> list[RecommendedRelease]:
    """Keep the first release per master id."""
    seen: set[int] = set()
    unique: list[RecommendedRelease] = []
    for release in releases:
        if release.master_id in seen:
            continue
        seen.add(release.master_id)
        unique.append(release)
    return unique


def _build_style_recommendation(
    style: str, releases: list[RecommendedRelease], is_fallback: bool
) -> StyleRecommendation:
    if is_fallback:
        return StyleRecommendation(
            style=style,
            reason=f"Popular {style} releases you might like",
            based_on=[],
            is_fallback=True,
            releases=releases,
        )
    based_on = list(dict.fromkeys(r.similar_to for r in releases if r.similar_to))[:_TARGET_SOURCES]
    return StyleRecommendation(
        style=style,
        reason=f"Based on {', '.join(based_on)} in your collection",
        based_on=based_on,
        is_fallback=False,
        releases=releases,
    )
