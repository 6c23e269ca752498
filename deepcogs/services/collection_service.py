"""Collection-level use cases: fetch, cache, analyse, compare and trade.

Sits between the HTTP routes and the pure analytics in this package.  It
owns the only cache in the system: fetched collections are kept under
``collection:<scope>:<owner>:<expected size>``.  The scope names the Discogs
session that fetched the collection (``app`` for the configured credentials,
a token digest otherwise), so a private collection visible to one session is
never served to another.  The expected size comes from the owner's Discogs
profile; adding or removing a record changes the key, so a stale entry is
never served for a changed collection.  ``refresh=True`` drops the entry and
refetches.

The cache holds raw releases only.  Every analytic result is recomputed
from them on each call.
"""

from __future__ import annotations

import hashlib

from deepcogs.interfaces.cache_provider import ICacheProvider
from deepcogs.interfaces.music_db_provider import IMusicDatabaseProvider
from deepcogs.models.analytics import ComparisonResult, DeepCutsReport, DNAStats, TradeResult
from deepcogs.models.recommendation import StyleSeed
from deepcogs.models.release import Release, WantlistEntry
from deepcogs.services import aggregator, rarity
from deepcogs.services.comparator import compare
from deepcogs.services.trade_matcher import find_trades
from deepcogs.utils.errors import ComparisonDataUnavailableError, SelfComparisonError
from deepcogs.utils.logging import get_logger

APP_CACHE_SCOPE = "app"

_SELF_COMPARISON_MESSAGE = "You can't compare with yourself!"


def session_cache_scope(access_token: str) -> str:
    """Return the cache scope for a user session, derived from its access token."""
    return hashlib.sha256(access_token.encode()).hexdigest()[:32]


def collection_cache_key(username: str, expected_size: int, scope: str = APP_CACHE_SCOPE) -> str:
    return f"collection:{scope}:{username.strip().lower()}:{expected_size}"


class CollectionService:
    """Fetches collections through a music-database provider and analyses them.

    Parameters
    ----------
    music_db:
        Provider used for every fetch.
    cache:
        Shared collection cache.
    aggregation:
        Optional overrides for :func:`deepcogs.services.aggregator.aggregate`
        limits and ``artists_per_style`` (the ``aggregation`` config section).
    deep_cuts_limit:
        Default number of deep cuts returned when the caller gives none.
    cache_scope:
        Identity of the Discogs session behind *music_db*; part of every
        cache key this service reads or writes.
    """

    def __init__(
        self,
        music_db: IMusicDatabaseProvider,
        cache: ICacheProvider,
        *,
        aggregation: dict[str, int] | None = None,
        deep_cuts_limit: int = 50,
        cache_scope: str = APP_CACHE_SCOPE,
    ) -> None:
        self._music_db = music_db
        self._cache = cache
        self._aggregation = dict(aggregation or {})
        self._deep_cuts_limit = deep_cuts_limit
        self._cache_scope = cache_scope
        self._logger = get_logger(__name__)

    def with_music_db(
        self, music_db: IMusicDatabaseProvider, cache_scope: str = APP_CACHE_SCOPE
    ) -> CollectionService:
        """Return a service fetching via *music_db* under its own cache scope.

        The cache backend is shared; entries are separated by *cache_scope*.
        """
        return CollectionService(
            music_db,
            self._cache,
            aggregation=self._aggregation,
            deep_cuts_limit=self._deep_cuts_limit,
            cache_scope=cache_scope,
        )

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    async def get_collection(self, username: str, refresh: bool = False) -> list[Release]:
        """Return *username*'s collection, from cache unless *refresh* is set."""
        expected_size = await self._music_db.get_collection_size(username)
        key = collection_cache_key(username, expected_size, self._cache_scope)

        if refresh:
            await self._cache.delete(key)
        else:
            cached = await self._cache.get(key)
            if cached is not None:
                self._logger.debug("collection_cache_hit", username=username, size=expected_size)
                return list(cached)

        releases = await self._music_db.get_collection(username)
        if releases:
            await self._cache.set(key, releases)
        self._logger.info(
            "collection_fetched",
            username=username,
            release_count=len(releases),
            expected_size=expected_size,
            refreshed=refresh,
        )
        return releases

    async def get_wantlist(self, username: str) -> list[WantlistEntry]:
        return await self._music_db.get_wantlist(username)

    # ------------------------------------------------------------------
    # Single-collection analytics
    # ------------------------------------------------------------------

    async def get_dna(self, username: str) -> DNAStats:
        releases = await self.get_collection(username)
        return aggregator.aggregate(
            releases,
            genre_limit=self._aggregation.get("genre_limit", 8),
            style_limit=self._aggregation.get("style_limit", 10),
            label_limit=self._aggregation.get("label_limit", 10),
            format_limit=self._aggregation.get("format_limit", 5),
        )

    async def get_deep_cuts(
        self,
        username: str,
        limit: int | None = None,
        current_year: int | None = None,
    ) -> DeepCutsReport:
        """Score the whole collection and return the rarest releases.

        Oddity counts cover every release, not just the returned ones.
        """
        releases = await self.get_collection(username)
        scored = [rarity.score_release(r, current_year=current_year) for r in releases]
        return DeepCutsReport(
            deep_cuts=rarity.find_deep_cuts(
                releases,
                current_year=current_year,
                limit=limit if limit is not None else self._deep_cuts_limit,
            ),
            oddities=rarity.summarize_oddities(scored),
            top_rated=rarity.top_rated(releases),
            total_scored=len(scored),
        )

    async def get_recommendation_inputs(
        self, username: str
    ) -> tuple[list[StyleSeed], set[int], set[str]]:
        """Build the recommendation engine's inputs from a collection."""
        releases = await self.get_collection(username)
        seeds = aggregator.build_style_seeds(
            releases, artists_per_style=self._aggregation.get("artists_per_style", 5)
        )
        return seeds, aggregator.owned_master_ids(releases), aggregator.owned_artist_names(releases)

    # ------------------------------------------------------------------
    # Two-collection analytics
    # ------------------------------------------------------------------

    async def compare_with(self, username: str, friend: str) -> ComparisonResult:
        """Compare *username*'s collection with *friend*'s.

        Raises
        ------
        SelfComparisonError
            If both names refer to the same user (case-insensitive).
        ComparisonDataUnavailableError
            If the friend's collection is empty or private.
        """
        self._reject_self(username, friend)
        mine = await self.get_collection(username)
        theirs = await self.get_collection(friend)
        if not theirs:
            raise ComparisonDataUnavailableError(
                message=f"{friend}'s collection is empty or private",
            )
        result = compare(mine, theirs)
        self._logger.info(
            "collections_compared",
            username=username,
            friend=friend,
            compatibility=result.compatibility_score,
            overlap=result.overlap_count,
        )
        return result

    async def find_trades_with(self, username: str, friend: str) -> TradeResult:
        """Find trade opportunities between *username* and *friend*."""
        self._reject_self(username, friend)
        mine = await self.get_collection(username)
        my_wants = await self.get_wantlist(username)
        theirs = await self.get_collection(friend)
        their_wants = await self.get_wantlist(friend)
        if not theirs and not their_wants:
            raise ComparisonDataUnavailableError(
                message=f"{friend}'s collection and wantlist are empty or private",
            )
        result = find_trades(mine, my_wants, theirs, their_wants)
        self._logger.info(
            "trades_found",
            username=username,
            friend=friend,
            i_can_offer=len(result.i_can_offer),
            they_can_offer=len(result.they_can_offer),
        )
        return result

    @staticmethod
    def _reject_self(username: str, friend: str) -> None:
        if username.strip().lower() == friend.strip().lower():
            raise SelfComparisonError(message=_SELF_COMPARISON_MESSAGE)
