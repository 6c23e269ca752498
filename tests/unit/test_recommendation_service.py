"""Unit tests for the recommendation engine."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from deepcogs.models.recommendation import (
    RecommendationPhase,
    RecommendedRelease,
    SimilarArtist,
    StyleSeed,
)
from deepcogs.services.recommendation_service import RecommendationRun, RecommendationService
from deepcogs.services.similar_artist_gateway import SimilarArtistGateway, SimilarArtistLookup
from deepcogs.utils.errors import ProviderUnavailableError


def _gateway(artists: list[SimilarArtist], failures: int = 0) -> MagicMock:
    gateway = MagicMock(spec=SimilarArtistGateway)
    gateway.lookup = AsyncMock(return_value=SimilarArtistLookup(artists=artists, failures=failures))
    return gateway


def _similar(name: str, source: str, match: float = 0.5) -> SimilarArtist:
    return SimilarArtist(name=name, match=match, source_artist=source)


def _service(music_db, gateway=None, **overrides) -> RecommendationService:
    overrides.setdefault("search_delay", 0)
    return RecommendationService(music_db, gateway, **overrides)


def _searcher(results: dict[tuple[str, str | None], list[RecommendedRelease]]):
    """Build a ``search_releases`` side effect from (query, style) -> results."""

    async def _search(query: str, style: str | None = None) -> list[RecommendedRelease]:
        return list(results.get((query, style), []))

    return _search


class TestFallback:
    @pytest.mark.asyncio
    async def test_no_gateway_uses_style_search(self, mock_music_db, make_search_result) -> None:
        mock_music_db.search_releases.side_effect = _searcher(
            {("", "House"): [make_search_result(m) for m in range(1, 10)]}
        )
        service = _service(mock_music_db)

        result = await service.recommend([StyleSeed(name="House", count=5, artists=["Larry Heard"])], set(), set())

        assert len(result.recommendations) == 1
        rec = result.recommendations[0]
        assert rec.is_fallback is True
        assert rec.reason == "Popular House releases you might like"
        assert rec.based_on == []
        assert len(rec.releases) == 6
        assert all(r.similar_to is None for r in rec.releases)
        assert result.used_external_similarity is False

    @pytest.mark.asyncio
    async def test_fallback_excludes_owned_masters(self, mock_music_db, make_search_result) -> None:
        mock_music_db.search_releases.side_effect = _searcher(
            {("", "Dub"): [make_search_result(1), make_search_result(2), make_search_result(2)]}
        )
        service = _service(mock_music_db)

        result = await service.recommend([StyleSeed(name="Dub", count=1)], {1}, set())

        assert [r.master_id for r in result.recommendations[0].releases] == [2]

    @pytest.mark.asyncio
    async def test_empty_style_is_dropped(self, mock_music_db) -> None:
        service = _service(mock_music_db)
        result = await service.recommend([StyleSeed(name="Polka", count=3)], set(), set())
        assert result.recommendations == []
        assert result.analyzed_styles == ["Polka"]


class TestSimilaritySearch:
    @pytest.mark.asyncio
    async def test_per_source_cap_and_early_stop(self, mock_music_db, make_search_result) -> None:
        gateway = _gateway([
            _similar("X", "A", 0.9),
            _similar("Y", "A", 0.8),
            _similar("Z", "B", 0.7),
            _similar("W", "C", 0.6),
            _similar("V", "C", 0.5),
        ])
        mock_music_db.search_releases.side_effect = _searcher({
            ("X", "Techno"): [make_search_result(m) for m in (10, 11, 12)],
            ("Y", "Techno"): [make_search_result(m) for m in (20, 21, 22)],
            ("Z", "Techno"): [make_search_result(m) for m in (30, 31, 32)],
            ("W", "Techno"): [make_search_result(m) for m in (40, 41, 42)],
            ("V", "Techno"): [make_search_result(m) for m in (50, 51, 52)],
        })
        service = _service(mock_music_db, gateway)

        result = await service.recommend(
            [StyleSeed(name="Techno", count=10, artists=["A", "B", "C"])], set(), {"A", "B", "C"}
        )

        rec = result.recommendations[0]
        assert [r.master_id for r in rec.releases] == [10, 11, 30, 31, 40, 41]
        assert [r.similar_to for r in rec.releases] == ["A", "A", "B", "B", "C", "C"]
        assert rec.based_on == ["A", "B", "C"]
        assert rec.reason == "Based on A, B, C in your collection"
        assert rec.is_fallback is False
        assert result.used_external_similarity is True

        queries = [c.args[0] for c in mock_music_db.search_releases.await_args_list]
        assert queries == ["X", "Z", "W"]

    @pytest.mark.asyncio
    async def test_owned_masters_are_never_recommended(self, mock_music_db, make_search_result) -> None:
        gateway = _gateway([_similar("X", "A")])
        mock_music_db.search_releases.side_effect = _searcher(
            {("X", "Jazz"): [make_search_result(1), make_search_result(2), make_search_result(3)]}
        )
        service = _service(mock_music_db, gateway)

        result = await service.recommend([StyleSeed(name="Jazz", count=1, artists=["A"])], {1}, set())

        assert [r.master_id for r in result.recommendations[0].releases] == [2, 3]

    @pytest.mark.asyncio
    async def test_unfiltered_retry_keeps_related_styles(self, mock_music_db, make_search_result) -> None:
        gateway = _gateway([_similar("X", "A")])
        mock_music_db.search_releases.side_effect = _searcher({
            ("X", None): [
                make_search_result(1, styles=["Jazz-Funk"]),
                make_search_result(2, styles=["Deep House"]),
            ],
        })
        service = _service(mock_music_db, gateway)

        result = await service.recommend([StyleSeed(name="House", count=1, artists=["A"])], set(), set())

        rec = result.recommendations[0]
        assert [r.master_id for r in rec.releases] == [2]
        assert rec.releases[0].similar_to == "A"
        assert [c.kwargs.get("style") for c in mock_music_db.search_releases.await_args_list] == ["House", None]

    @pytest.mark.asyncio
    async def test_owned_similar_artists_are_dropped(self, mock_music_db) -> None:
        gateway = _gateway([_similar("already owned", "A")])
        service = _service(mock_music_db, gateway)

        result = await service.recommend(
            [StyleSeed(name="Soul", count=1, artists=["A"])], set(), {"Already Owned"}
        )

        assert result.used_external_similarity is False
        queries = [c.args[0] for c in mock_music_db.search_releases.await_args_list]
        assert queries == [""]

    @pytest.mark.asyncio
    async def test_similar_artist_attributed_to_first_style(self, mock_music_db, make_search_result) -> None:
        gateway = _gateway([_similar("X", "Shared")])
        mock_music_db.search_releases.side_effect = _searcher({
            ("X", "Disco"): [make_search_result(1)],
            ("", "Boogie"): [make_search_result(2)],
        })
        service = _service(mock_music_db, gateway)

        result = await service.recommend(
            [
                StyleSeed(name="Boogie", count=2, artists=["Shared"]),
                StyleSeed(name="Disco", count=5, artists=["Shared"]),
            ],
            set(),
            set(),
        )

        by_style = {r.style: r for r in result.recommendations}
        assert by_style["Disco"].is_fallback is False
        assert by_style["Boogie"].is_fallback is True

    @pytest.mark.asyncio
    async def test_pool_interleaves_styles(self, mock_music_db) -> None:
        gateway = _gateway([])
        service = _service(mock_music_db, gateway)

        await service.recommend(
            [
                StyleSeed(name="House", count=9, artists=["A", "B"]),
                StyleSeed(name="Techno", count=4, artists=["C", "a", "D"]),
            ],
            set(),
            set(),
        )

        gateway.lookup.assert_awaited_once_with(["A", "C", "B", "D"], 10)

    @pytest.mark.asyncio
    async def test_pool_capped_at_gateway_source_limit(self, mock_music_db) -> None:
        gateway = _gateway([])
        service = _service(mock_music_db, gateway)
        seeds = [
            StyleSeed(name=style, count=10 - i, artists=[f"{style} {n}" for n in range(4)])
            for i, style in enumerate(["House", "Techno", "Electro"])
        ]

        await service.recommend(seeds, set(), set())

        pool, _ = gateway.lookup.await_args.args
        assert len(pool) == 8
        assert pool[:3] == ["House 0", "Techno 0", "Electro 0"]


class TestFailures:
    @pytest.mark.asyncio
    async def test_failed_calls_are_counted(self, mock_music_db, make_search_result) -> None:
        gateway = _gateway([_similar("X", "A")], failures=2)

        async def _search(query: str, style: str | None = None):
            if query == "X":
                raise ProviderUnavailableError(message="boom", provider_name="mock_music_db")
            return [make_search_result(7)]

        mock_music_db.search_releases.side_effect = _search
        service = _service(mock_music_db, gateway)

        result = await service.recommend([StyleSeed(name="Electro", count=1, artists=["A"])], set(), set())

        assert result.partial_failures == 3
        assert result.recommendations[0].is_fallback is True

    @pytest.mark.asyncio
    async def test_gateway_exception_falls_back(self, mock_music_db, make_search_result) -> None:
        gateway = MagicMock(spec=SimilarArtistGateway)
        gateway.lookup = AsyncMock(side_effect=RuntimeError("network"))
        mock_music_db.search_releases.side_effect = _searcher({("", "Acid"): [make_search_result(3)]})
        service = _service(mock_music_db, gateway)

        result = await service.recommend([StyleSeed(name="Acid", count=1, artists=["A"])], set(), set())

        assert result.partial_failures == 1
        assert result.recommendations[0].is_fallback is True


class TestRunProgress:
    @pytest.mark.asyncio
    async def test_top_styles_by_count(self, mock_music_db) -> None:
        service = _service(mock_music_db, top_styles=2)
        seeds = [StyleSeed(name="A", count=1), StyleSeed(name="B", count=9), StyleSeed(name="C", count=5)]

        result = await service.recommend(seeds, set(), set())

        assert result.analyzed_styles == ["B", "C"]

    @pytest.mark.asyncio
    async def test_iter_yields_each_style(self, mock_music_db, make_search_result) -> None:
        mock_music_db.search_releases.side_effect = _searcher({
            ("", "Ambient"): [make_search_result(1)],
            ("", "Drone"): [make_search_result(2)],
        })
        service = _service(mock_music_db)
        run = RecommendationRun()

        seen = [
            rec.style
            async for rec in service.iter_recommendations(
                [StyleSeed(name="Ambient", count=2), StyleSeed(name="Drone", count=1)], set(), set(), run
            )
        ]

        assert seen == ["Ambient", "Drone"]
        assert [r.style for r in run.completed] == seen
        assert run.phase is RecommendationPhase.DONE

    @pytest.mark.asyncio
    async def test_with_music_db_swaps_provider(self, mock_music_db, make_search_result) -> None:
        other = MagicMock()
        other.search_releases = AsyncMock(return_value=[make_search_result(1)])
        service = _service(mock_music_db).with_music_db(other)

        await service.recommend([StyleSeed(name="Dub", count=1)], set(), set())

        other.search_releases.assert_awaited()
        mock_music_db.search_releases.assert_not_awaited()
