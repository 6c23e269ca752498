"""Recommendation models for the DeepCogs discovery engine.

Defines Pydantic v2 models for the engine's input (style seeds), its
intermediate similar-artist data, and its output (per-style release
recommendations).  All models use frozen config.

The engine (``deepcogs/services/recommendation_service.py``) works in
phases, tracked by :class:`RecommendationPhase`:

    IDLE -> FETCHING_SIMILAR_ARTISTS -> SEARCHING_PER_STYLE
         -> DEDUPLICATING -> DONE

A failed external call at any phase boundary only reduces the number of
candidates; it is counted in ``RecommendationResult.partial_failures``
and never ends the run with an error.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from deepcogs.models.release import as_int, as_master_id


class RecommendationPhase(str, Enum):  # noqa: UP042 — StrEnum requires Python 3.11+
    """Phases of a single recommendation run."""

    IDLE = "IDLE"
    FETCHING_SIMILAR_ARTISTS = "FETCHING_SIMILAR_ARTISTS"
    SEARCHING_PER_STYLE = "SEARCHING_PER_STYLE"
    DEDUPLICATING = "DEDUPLICATING"
    DONE = "DONE"


# ---------------------------------------------------------------------------
# StyleSeed — one style of the user's collection, with its key artists.
# ---------------------------------------------------------------------------
class StyleSeed(BaseModel):
    """A collection style with its most associated artists.

    ``artists`` is ordered by how many of the style's releases each artist
    appears on (most frequent first).
    """

    model_config = ConfigDict(frozen=True)

    name: str
    count: int = 0
    artists: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# SimilarArtist — ephemeral result of the external similar-artist lookup.
# ---------------------------------------------------------------------------
class SimilarArtist(BaseModel):
    """An artist similar to ``source_artist`` (an artist the user owns)."""

    model_config = ConfigDict(frozen=True)

    name: str
    match: float = Field(default=0.0, ge=0.0, le=1.0)
    source_artist: str


# ---------------------------------------------------------------------------
# RecommendedRelease — one release-search result shown to the user.
# ---------------------------------------------------------------------------
class RecommendedRelease(BaseModel):
    """A candidate release from the release-search provider.

    ``similar_to`` names the collection artist whose similar artist led to
    this release.  It is ``None`` for style-search fallback results.
    """

    model_config = ConfigDict(frozen=True)

    release_id: int
    master_id: int
    title: str
    artist: str
    year: int = 0
    thumbnail_url: str = ""
    genres: list[str] = Field(default_factory=list)
    styles: list[str] = Field(default_factory=list)
    community_have: int = 0
    community_want: int = 0
    similar_to: str | None = None

    @classmethod
    def from_search_result(
        cls, data: dict[str, Any], similar_to: str | None = None
    ) -> RecommendedRelease | None:
        """Parse one Discogs database-search result.

        Returns ``None`` when the result has neither a master id nor an id,
        since it could not be deduplicated or excluded as owned.

        Search titles follow ``"Artist - Title"``; the text is split on the
        first ``" - "``.  Without a separator the artist is unknown and the
        whole string is the title.
        """
        release_id = as_int(data.get("id"))
        master_id = as_master_id(data.get("master_id")) or as_master_id(release_id)
        if master_id is None:
            return None

        raw_title = str(data.get("title") or "").strip()
        if " - " in raw_title:
            artist, title = raw_title.split(" - ", 1)
            artist = artist.strip() or "Unknown Artist"
            title = title.strip() or "Unknown"
        else:
            artist = "Unknown Artist"
            title = raw_title or "Unknown"

        community = data.get("community") if isinstance(data.get("community"), dict) else {}
        genres = data.get("genre") if isinstance(data.get("genre"), list) else []
        styles = data.get("style") if isinstance(data.get("style"), list) else []

        return cls(
            release_id=release_id,
            master_id=master_id,
            title=title,
            artist=artist,
            year=max(as_int(data.get("year")), 0),
            thumbnail_url=str(data.get("thumb") or ""),
            genres=[str(g) for g in genres],
            styles=[str(s) for s in styles],
            community_have=as_int(community.get("have")),
            community_want=as_int(community.get("want")),
            similar_to=similar_to,
        )


# ---------------------------------------------------------------------------
# StyleRecommendation / RecommendationResult — the engine's output.
# ---------------------------------------------------------------------------
class StyleRecommendation(BaseModel):
    """Recommended releases for one of the user's top styles."""

    model_config = ConfigDict(frozen=True)

    style: str
    # "Based on X, Y in your collection" or "Popular <style> releases you might like".
    reason: str
    # Collection artists whose similar artists produced the releases.
    based_on: list[str] = Field(default_factory=list)
    is_fallback: bool = False
    releases: list[RecommendedRelease] = Field(default_factory=list)


class RecommendationResult(BaseModel):
    """The full output of a recommendation run."""

    model_config = ConfigDict(frozen=True)

    recommendations: list[StyleRecommendation] = Field(default_factory=list)
    analyzed_styles: list[str] = Field(default_factory=list)
    used_external_similarity: bool = False
    # Number of external calls that failed and were treated as empty.
    partial_failures: int = 0
    generated_at: datetime | None = None
