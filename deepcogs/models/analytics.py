"""Result models for the collection analytics.

Every model here is derived, never stored: it is built by one of the
services in ``deepcogs/services/`` from an in-memory list of releases and
discarded once the response is sent.

    - DNAStats          — aggregate fingerprint of a collection (aggregator.py)
    - ScoredRelease     — rarity score + reasons for one release (rarity.py)
    - ComparisonResult  — explainable compatibility between two collections
                          (comparator.py)
    - TradeResult       — bidirectional trade opportunities (trade_matcher.py)
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from deepcogs.models.release import Release, WantlistEntry


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------

class CountEntry(BaseModel):
    """One bucket of a ranked distribution (genre, style, label, decade...)."""

    model_config = ConfigDict(frozen=True)

    name: str
    count: int
    # Share of the collection's releases carrying this value (0–100).
    percentage: float = 0.0


class StyleShare(BaseModel):
    """Count and percentage-of-releases for one style."""

    model_config = ConfigDict(frozen=True)

    count: int
    percentage: float


class YearRange(BaseModel):
    """Oldest and newest release year; both ``None`` when no year is known."""

    model_config = ConfigDict(frozen=True)

    min: int | None = None
    max: int | None = None

    @property
    def is_known(self) -> bool:
        return self.min is not None and self.max is not None


class OddityCounts(BaseModel):
    """Collection-level counts of collectible pressings."""

    model_config = ConfigDict(frozen=True)

    test_pressings: int = 0
    promos: int = 0
    limited: int = 0


class DNAStats(BaseModel):
    """The "collection DNA": ranked distributions plus headline numbers."""

    model_config = ConfigDict(frozen=True)

    total_releases: int = 0
    genres: list[CountEntry] = Field(default_factory=list)
    styles: list[CountEntry] = Field(default_factory=list)
    # Chronological, not ranked by count.
    decades: list[CountEntry] = Field(default_factory=list)
    labels: list[CountEntry] = Field(default_factory=list)
    formats: list[CountEntry] = Field(default_factory=list)
    unique_genres: int = 0
    unique_labels: int = 0
    year_range: YearRange = Field(default_factory=YearRange)
    oddities: OddityCounts = Field(default_factory=OddityCounts)
    represses: int = 0


# ---------------------------------------------------------------------------
# Rarity
# ---------------------------------------------------------------------------

class RarityIndicator(BaseModel):
    """A tagged reason contributing ``score_delta`` to a release's rarity."""

    model_config = ConfigDict(frozen=True)

    category: str       # "format", "size" or "age"
    label: str          # e.g. "Test Pressing"
    score_delta: int    # may be negative ("Reissue" is -10)


class ScoredRelease(BaseModel):
    """A release with its total rarity score and the indicators behind it."""

    model_config = ConfigDict(frozen=True)

    release: Release
    score: int
    indicators: list[RarityIndicator] = Field(default_factory=list)

    def has_indicator(self, label: str) -> bool:
        return any(i.label == label for i in self.indicators)


class DeepCutsReport(BaseModel):
    """The "deep cuts" view: rare releases plus collection-level oddities."""

    model_config = ConfigDict(frozen=True)

    deep_cuts: list[ScoredRelease] = Field(default_factory=list)
    oddities: OddityCounts = Field(default_factory=OddityCounts)
    top_rated: list[Release] = Field(default_factory=list)
    # Releases scored, before filtering to score > 0 and truncating.
    total_scored: int = 0


# ---------------------------------------------------------------------------
# Comparison
# ---------------------------------------------------------------------------

class StyleOverlap(BaseModel):
    """A style both collections share, with each side's presence."""

    model_config = ConfigDict(frozen=True)

    style: str
    my_percent: float
    their_percent: float
    # For shared styles: min of the two percentages.  For top overlaps:
    # this style's share of the cosine dot product (0–100).
    weight: float


class StyleDifference(BaseModel):
    """A style where the two collections diverge the most."""

    model_config = ConfigDict(frozen=True)

    style: str
    my_percent: float
    their_percent: float
    difference: float   # my_percent - their_percent (signed)


class StyleComparisonRow(BaseModel):
    """Side-by-side presence of one style, for chart display."""

    model_config = ConfigDict(frozen=True)

    style: str
    my_percent: float
    their_percent: float


class ComparisonResult(BaseModel):
    """Explainable compatibility between two collections.

    ``compatibility_score`` is the primary number (cosine similarity of the
    style-percentage vectors, 0–100).  ``overlap_percent`` and
    ``overlap_count`` are secondary display metrics over master ids.
    """

    model_config = ConfigDict(frozen=True)

    compatibility_score: int = Field(default=0, ge=0, le=100)
    overlap: list[Release] = Field(default_factory=list)
    only_mine: list[Release] = Field(default_factory=list)
    only_theirs: list[Release] = Field(default_factory=list)
    overlap_count: int = 0
    overlap_percent: int = Field(default=0, ge=0, le=100)
    shared_styles: list[StyleOverlap] = Field(default_factory=list)
    top_overlaps: list[StyleOverlap] = Field(default_factory=list)
    biggest_differences: list[StyleDifference] = Field(default_factory=list)
    style_comparison: list[StyleComparisonRow] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Trades
# ---------------------------------------------------------------------------

class TradeOpportunity(BaseModel):
    """A release one party owns that the other party wants."""

    model_config = ConfigDict(frozen=True)

    release: Release
    matched_want: WantlistEntry


class TradeResult(BaseModel):
    """Trade opportunities in both directions."""

    model_config = ConfigDict(frozen=True)

    i_can_offer: list[TradeOpportunity] = Field(default_factory=list)
    they_can_offer: list[TradeOpportunity] = Field(default_factory=list)
