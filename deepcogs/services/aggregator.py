"""Style/genre aggregation -- the "collection DNA".

Counts categorical attributes across a list of releases and turns them
into ranked distributions:

    genres, styles, labels, formats  -- by count, descending; ties keep the
                                        order values were first seen
    decades                          -- chronological (the decade axis of
                                        a chart reads left to right)

Alongside the distributions it reports headline numbers (totals, unique
counts, year range) and collection-level oddity counters that reuse the
rarity patterns from :mod:`deepcogs.services.rarity`.

It also builds the per-style seeds (style + most associated artists) that
the recommendation engine consumes.

Everything here is pure: no I/O, no shared state, and no exceptions for
missing data -- an empty field simply contributes nothing.
"""

from __future__ import annotations

from collections import Counter

from deepcogs.models.analytics import (
    CountEntry,
    DNAStats,
    OddityCounts,
    StyleShare,
    YearRange,
)
from deepcogs.models.recommendation import StyleSeed
from deepcogs.models.release import Release
from deepcogs.services.rarity import (
    LIMITED_PATTERN,
    PROMO_PATTERN,
    REPRESS_PATTERN,
    TEST_PRESSING_PATTERN,
)
from deepcogs.utils.text_normalizer import artist_key, clean_artist_name, is_sentinel_artist

NO_LABEL = "Not On Label"
_MIN_VALID_YEAR = 1900


def _ranked(counts: Counter[str], total: int, limit: int | None) -> list[CountEntry]:
    """Sort *counts* by count descending, keeping first-seen order on ties."""
    # Counter preserves insertion order and sorted() is stable.
    ordered = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    if limit is not None:
        ordered = ordered[:limit]
    return [
        CountEntry(name=name, count=count, percentage=_percent(count, total))
        for name, count in ordered
    ]


def _percent(count: int, total: int) -> float:
    return count / total * 100 if total > 0 else 0.0


def decade_of(year: int) -> str | None:
    """Return ``"1970s"`` for 1975; ``None`` for unknown or pre-1901 years."""
    if year <= _MIN_VALID_YEAR:
        return None
    return f"{year // 10 * 10}s"


def aggregate(
    releases: list[Release],
    *,
    genre_limit: int | None = 8,
    style_limit: int | None = 10,
    label_limit: int | None = 10,
    format_limit: int | None = 5,
) -> DNAStats:
    """Compute the DNA statistics of a collection.

    Parameters
    ----------
    releases:
        The collection.  Releases may have any field empty.
    genre_limit, style_limit, label_limit, format_limit:
        Top-N cut-off per dimension; ``None`` keeps every value.  Decades
        are never truncated.

    Returns
    -------
    DNAStats
        Ranked distributions, totals, year range and oddity counters.
    """
    genres: Counter[str] = Counter()
    styles: Counter[str] = Counter()
    decades: Counter[str] = Counter()
    labels: Counter[str] = Counter()
    formats: Counter[str] = Counter()
    years: list[int] = []
    test_pressings = promos = limited = represses = 0

    for release in releases:
        text = release.format_text
        if text:
            test_pressings += bool(TEST_PRESSING_PATTERN.search(text))
            promos += bool(PROMO_PATTERN.search(text))
            limited += bool(LIMITED_PATTERN.search(text))
            represses += bool(REPRESS_PATTERN.search(text))

        genres.update(release.genres)
        styles.update(release.styles)

        decade = decade_of(release.year)
        if decade is not None:
            decades[decade] += 1
            years.append(release.year)

        labels.update(label.name for label in release.labels if label.name and label.name != NO_LABEL)
        formats.update(fmt.name for fmt in release.formats if fmt.name)

    total = len(releases)
    decade_entries = [
        CountEntry(name=name, count=count, percentage=_percent(count, total))
        for name, count in sorted(decades.items(), key=lambda item: int(item[0][:-1]))
    ]

    return DNAStats(
        total_releases=total,
        genres=_ranked(genres, total, genre_limit),
        styles=_ranked(styles, total, style_limit),
        decades=decade_entries,
        labels=_ranked(labels, total, label_limit),
        formats=_ranked(formats, total, format_limit),
        unique_genres=len(genres),
        unique_labels=len(labels),
        year_range=YearRange(min=min(years), max=max(years)) if years else YearRange(),
        oddities=OddityCounts(test_pressings=test_pressings, promos=promos, limited=limited),
        represses=represses,
    )


def style_distribution(releases: list[Release]) -> dict[str, StyleShare]:
    """Map each style to its count and percentage of the collection's releases.

    Styles are counted with multiplicity across releases, so percentages
    can add up to more than 100 when releases carry several styles.
    """
    counts: Counter[str] = Counter()
    for release in releases:
        counts.update(release.styles)
    total = len(releases)
    return {
        style: StyleShare(count=count, percentage=_percent(count, total))
        for style, count in counts.items()
    }


def build_style_seeds(
    releases: list[Release],
    *,
    artists_per_style: int = 5,
    limit: int | None = None,
) -> list[StyleSeed]:
    """Build recommendation seeds: styles by count with their top artists.

    An artist's weight within a style is the number of that style's
    releases crediting them.  Placeholder credits ("Various") are skipped
    and Discogs disambiguation suffixes are removed, so ``"Prince (2)"``
    and ``"Prince"`` count as one artist.
    """
    style_counts: Counter[str] = Counter()
    style_artists: dict[str, Counter[str]] = {}
    display_names: dict[str, str] = {}

    for release in releases:
        credited: list[str] = []
        for name in release.artist_names:
            if is_sentinel_artist(name):
                continue
            key = artist_key(name)
            display_names.setdefault(key, clean_artist_name(name))
            if key not in credited:
                credited.append(key)

        for style in dict.fromkeys(release.styles):
            style_counts[style] += 1
            style_artists.setdefault(style, Counter()).update(credited)

    ordered = sorted(style_counts.items(), key=lambda item: item[1], reverse=True)
    if limit is not None:
        ordered = ordered[:limit]

    seeds: list[StyleSeed] = []
    for style, count in ordered:
        top = sorted(style_artists[style].items(), key=lambda item: item[1], reverse=True)
        seeds.append(
            StyleSeed(
                name=style,
                count=count,
                artists=[display_names[key] for key, _ in top[:artists_per_style]],
            )
        )
    return seeds


def owned_master_ids(releases: list[Release]) -> set[int]:
    """Master ids present in the collection (releases without one are skipped)."""
    return {r.master_id for r in releases if r.master_id is not None}


def owned_artist_names(releases: list[Release]) -> set[str]:
    """Cleaned artist names credited anywhere in the collection."""
    return {
        clean_artist_name(name)
        for release in releases
        for name in release.artist_names
        if not is_sentinel_artist(name)
    }
