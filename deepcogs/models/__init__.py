"""DeepCogs domain models — re-exports all public model classes.

The models are organized across three submodules by concern:
    - release.py         — collection and wantlist entities parsed from Discogs
    - analytics.py       — DNA stats, rarity scores, comparisons, trades
    - recommendation.py  — style seeds, similar artists, recommendations
"""

from __future__ import annotations

from deepcogs.models.analytics import (
    ComparisonResult,
    DeepCutsReport,
    CountEntry,
    DNAStats,
    OddityCounts,
    RarityIndicator,
    ScoredRelease,
    StyleComparisonRow,
    StyleDifference,
    StyleOverlap,
    StyleShare,
    TradeOpportunity,
    TradeResult,
    YearRange,
)
from deepcogs.models.recommendation import (
    RecommendationPhase,
    RecommendationResult,
    RecommendedRelease,
    SimilarArtist,
    StyleRecommendation,
    StyleSeed,
)
from deepcogs.models.release import (
    ArtistCredit,
    LabelCredit,
    Release,
    ReleaseFormat,
    WantlistEntry,
)

__all__ = [
    # release
    "ArtistCredit",
    "LabelCredit",
    "Release",
    "ReleaseFormat",
    "WantlistEntry",
    # analytics
    "ComparisonResult",
    "DeepCutsReport",
    "CountEntry",
    "DNAStats",
    "OddityCounts",
    "RarityIndicator",
    "ScoredRelease",
    "StyleComparisonRow",
    "StyleDifference",
    "StyleOverlap",
    "StyleShare",
    "TradeOpportunity",
    "TradeResult",
    "YearRange",
    # recommendation
    "RecommendationPhase",
    "RecommendationResult",
    "RecommendedRelease",
    "SimilarArtist",
    "StyleRecommendation",
    "StyleSeed",
]
