"""Shared pytest fixtures for the DeepCogs test suite."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from deepcogs.interfaces.cache_provider import ICacheProvider
from deepcogs.interfaces.music_db_provider import IMusicDatabaseProvider
from deepcogs.interfaces.similar_artist_provider import ISimilarArtistProvider
from deepcogs.models.recommendation import RecommendedRelease
from deepcogs.models.release import (
    ArtistCredit,
    LabelCredit,
    Release,
    ReleaseFormat,
    WantlistEntry,
)

ReleaseFactory = Callable[..., Release]


@pytest.fixture
def make_release() -> ReleaseFactory:
    """Return a factory building a :class:`Release` from short keyword args.

    ``artists`` and ``labels`` take plain names; ``formats`` takes
    ``(name, [descriptions])`` tuples.
    """
    counter = iter(range(1, 1_000_000))

    def _make(
        *,
        release_id: int | None = None,
        master_id: int | None = None,
        title: str = "Untitled",
        artists: list[str] | None = None,
        year: int = 0,
        genres: list[str] | None = None,
        styles: list[str] | None = None,
        labels: list[str] | None = None,
        formats: list[tuple[str, list[str]]] | None = None,
        rating: int = 0,
    ) -> Release:
        return Release(
            release_id=release_id if release_id is not None else next(counter),
            master_id=master_id,
            title=title,
            artists=[ArtistCredit(name=n) for n in (artists or [])],
            year=year,
            genres=genres or [],
            styles=styles or [],
            labels=[LabelCredit(name=n) for n in (labels or [])],
            formats=[ReleaseFormat(name=n, descriptions=d) for n, d in (formats or [])],
            rating=rating,
        )

    return _make


@pytest.fixture
def make_want() -> Callable[..., WantlistEntry]:
    def _make(*, release_id: int = 1, master_id: int | None = None, title: str = "Wanted") -> WantlistEntry:
        return WantlistEntry(release_id=release_id, master_id=master_id, title=title)

    return _make


@pytest.fixture
def make_search_result() -> Callable[..., RecommendedRelease]:
    """Factory for search results as returned by a music-database provider."""

    def _make(
        master_id: int,
        *,
        artist: str = "Someone",
        title: str = "Record",
        styles: list[str] | None = None,
    ) -> RecommendedRelease:
        return RecommendedRelease(
            release_id=master_id * 10,
            master_id=master_id,
            title=title,
            artist=artist,
            styles=styles or [],
        )

    return _make


@pytest.fixture
def discogs_collection_item() -> dict[str, Any]:
    """A realistic ``/collection/folders/0/releases`` item."""
    return {
        "id": 249504,
        "instance_id": 1,
        "rating": 5,
        "date_added": "2019-04-03T12:21:04-07:00",
        "basic_information": {
            "id": 249504,
            "master_id": 96559,
            "title": "Kind Of Blue",
            "year": 1959,
            "thumb": "https://img.discogs.com/thumb.jpg",
            "formats": [
                {"name": "Vinyl", "qty": "1", "descriptions": ["LP", "Album", "Mono"]},
            ],
            "labels": [{"name": "Columbia", "catno": "CL 1355"}],
            "artists": [{"name": "Miles Davis"}],
            "genres": ["Jazz"],
            "styles": ["Modal", "Cool Jazz"],
        },
    }


@pytest.fixture
def mock_music_db() -> MagicMock:
    """An IMusicDatabaseProvider mock with async methods returning empty data."""
    provider = MagicMock(spec=IMusicDatabaseProvider)
    provider.get_collection = AsyncMock(return_value=[])
    provider.get_collection_size = AsyncMock(return_value=0)
    provider.get_wantlist = AsyncMock(return_value=[])
    provider.search_releases = AsyncMock(return_value=[])
    provider.add_to_wantlist = AsyncMock(return_value=None)
    provider.remove_from_wantlist = AsyncMock(return_value=None)
    provider.get_provider_name.return_value = "mock_music_db"
    provider.is_available.return_value = True
    return provider


@pytest.fixture
def mock_similar_provider() -> MagicMock:
    provider = MagicMock(spec=ISimilarArtistProvider)
    provider.get_similar_artists = AsyncMock(return_value=[])
    provider.get_provider_name.return_value = "mock_similar"
    provider.is_available.return_value = True
    return provider


@pytest.fixture
def mock_cache() -> MagicMock:
    cache = MagicMock(spec=ICacheProvider)
    cache.get = AsyncMock(return_value=None)
    cache.set = AsyncMock(return_value=None)
    cache.delete = AsyncMock(return_value=None)
    return cache
