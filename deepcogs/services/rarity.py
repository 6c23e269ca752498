"""Rarity scoring for individual collection releases.

Every release gets a signed integer score built from three sources:

1. **Format keywords** -- an ordered table of case-insensitive regexes run
   against the release's format names and descriptions joined into one
   string.  Every matching row adds its delta; rows are independent, so a
   "Limited Edition, Numbered" pressing collects both +25 and +20.
2. **Age** -- a bonus keyed to the release's age in years.  Only the
   highest band applies.
3. **Single formats** -- small bonuses for 7" and 12" vinyl singles.

Scores can be zero or negative (reissues and remasters subtract).  The
"deep cuts" view keeps only releases scoring above zero.

All functions are pure and deterministic for a fixed ``current_year``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date

from deepcogs.models.analytics import OddityCounts, RarityIndicator, ScoredRelease
from deepcogs.models.release import Release


@dataclass(frozen=True)
class _Keyword:
    pattern: re.Pattern[str]
    label: str
    score: int


def _kw(pattern: str, label: str, score: int) -> _Keyword:
    return _Keyword(re.compile(pattern, re.IGNORECASE), label, score)


RARITY_KEYWORDS: tuple[_Keyword, ...] = (
    _kw(r"test\s*press", "Test Pressing", 50),
    _kw(r"acetate", "Acetate", 60),
    _kw(r"white\s*label", "White Label", 35),
    _kw(r"promo", "Promo", 30),
    _kw(r"numbered", "Numbered", 20),
    _kw(r"first\s*press", "First Pressing", 20),
    _kw(r"original", "Original", 15),
    _kw(r"DJ\s*copy", "DJ Copy", 25),
    _kw(r"bootleg", "Bootleg", 20),
    _kw(r"limited", "Limited Edition", 25),
    _kw(r"picture\s*disc", "Picture Disc", 15),
    _kw(r"box\s*set", "Box Set", 15),
    _kw(r"mono", "Mono", 20),
    _kw(r"colored|colour|splatter|marble", "Colored Vinyl", 10),
    _kw(r"180\s*g", "180g", 5),
    _kw(r"gatefold", "Gatefold", 5),
    _kw(r"stereo", "Stereo", 5),
    _kw(r"reissue", "Reissue", -10),
    _kw(r"remaster", "Remaster", -5),
)

# (minimum age in years, bonus) -- highest band first; first match wins.
AGE_BANDS: tuple[tuple[int, int], ...] = (
    (50, 25),
    (40, 20),
    (30, 15),
    (20, 10),
)

SEVEN_INCH_BONUS = 5
TWELVE_INCH_SINGLE_BONUS = 8

# Collection-level oddity detection (rolled up in the DNA stats).
TEST_PRESSING_PATTERN = re.compile(r"test\s*press", re.IGNORECASE)
PROMO_PATTERN = re.compile(r"promo|white\s*label", re.IGNORECASE)
LIMITED_PATTERN = re.compile(r"limited|numbered", re.IGNORECASE)

REPRESS_PATTERN = re.compile(
    r"reissue|re-issue|remaster|repress|re-press|2nd\s*press|second\s*press|180\s*g",
    re.IGNORECASE,
)

# Ratings are whole stars; only a full five counts as "top rated".
_TOP_RATED_THRESHOLD = 4.7


def score_release(release: Release, *, current_year: int | None = None) -> ScoredRelease:
    """Score *release* and list the indicators that contributed.

    Parameters
    ----------
    release:
        The collection release to score.
    current_year:
        Reference year for the age bonus.  Defaults to today's year; pass
        it explicitly for reproducible results.

    Returns
    -------
    ScoredRelease
        The release, its summed score and the matched indicators in table
        order (keywords, then single formats, then age).
    """
    year_now = current_year if current_year is not None else date.today().year
    indicators: list[RarityIndicator] = []

    text = release.format_text
    if text:
        for keyword in RARITY_KEYWORDS:
            if keyword.pattern.search(text):
                indicators.append(
                    RarityIndicator(category="format", label=keyword.label, score_delta=keyword.score)
                )

    vinyl = [f for f in release.formats if f.name == "Vinyl"]
    if any('7"' in f.descriptions for f in vinyl):
        indicators.append(RarityIndicator(category="size", label='7" Single', score_delta=SEVEN_INCH_BONUS))
    if any('12"' in f.descriptions and "Single" in f.descriptions for f in vinyl):
        indicators.append(
            RarityIndicator(category="size", label='12" Single', score_delta=TWELVE_INCH_SINGLE_BONUS)
        )

    if release.year > 0:
        age = year_now - release.year
        for min_age, bonus in AGE_BANDS:
            if age >= min_age:
                indicators.append(
                    RarityIndicator(category="age", label=f"{min_age}+ Years Old", score_delta=bonus)
                )
                break

    return ScoredRelease(
        release=release,
        score=sum(i.score_delta for i in indicators),
        indicators=indicators,
    )


def find_deep_cuts(
    releases: list[Release],
    *,
    current_year: int | None = None,
    limit: int | None = None,
) -> list[ScoredRelease]:
    """Return releases with a positive rarity score, rarest first.

    Ties keep collection order (stable sort).
    """
    scored = [score_release(r, current_year=current_year) for r in releases]
    ranked = sorted((s for s in scored if s.score > 0), key=lambda s: s.score, reverse=True)
    return ranked[:limit] if limit is not None else ranked


def summarize_oddities(scored: list[ScoredRelease]) -> OddityCounts:
    """Count test pressings, promos and limited editions among *scored*."""
    return OddityCounts(
        test_pressings=sum(1 for s in scored if s.has_indicator("Test Pressing")),
        promos=sum(1 for s in scored if s.has_indicator("Promo") or s.has_indicator("White Label")),
        limited=sum(
            1 for s in scored if s.has_indicator("Limited Edition") or s.has_indicator("Numbered")
        ),
    )


def top_rated(releases: list[Release]) -> list[Release]:
    """Return the user's five-star releases, newest first."""
    rated = [r for r in releases if r.rating > _TOP_RATED_THRESHOLD]
    return sorted(rated, key=lambda r: r.year, reverse=True)
