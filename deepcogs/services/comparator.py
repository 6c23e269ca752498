"""Collection comparison: explainable taste compatibility between two users.

The primary number is the cosine similarity of the two collections'
style-percentage vectors, scaled to an integer 0-100.  Everything else in
the result exists to explain that number:

    shared_styles        styles both sides collect seriously (>= 3%)
    top_overlaps         styles carrying the most weight in the dot product
    biggest_differences  where the two tastes diverge
    style_comparison     side-by-side chart rows

Master-id overlap (``overlap``, ``overlap_count``, ``overlap_percent``) is
a secondary display metric: it answers "which records do we both own",
not "how alike are our tastes".
"""

from __future__ import annotations

import math

from deepcogs.models.analytics import (
    ComparisonResult,
    StyleComparisonRow,
    StyleDifference,
    StyleOverlap,
    StyleShare,
)
from deepcogs.models.release import Release
from deepcogs.services.aggregator import style_distribution

SHARED_STYLE_MIN_PERCENT = 3.0
SHARED_STYLE_LIMIT = 5
TOP_OVERLAP_LIMIT = 5
DIFFERENCE_MIN_GAP = 3.0
DIFFERENCE_MIN_PRESENCE = 2.0
DIFFERENCE_LIMIT = 3
STYLE_COMPARISON_LIMIT = 10


def _round_percent(value: float) -> int:
    """Round half up and clamp to 0..100."""
    return max(0, min(100, int(value + 0.5)))


def cosine_score(mine: dict[str, StyleShare], theirs: dict[str, StyleShare]) -> int:
    """Cosine similarity of two style distributions as an integer 0-100.

    Returns 0 when either side has no styled releases.
    """
    basis = list(dict.fromkeys([*mine, *theirs]))
    my_vec = [mine[s].percentage if s in mine else 0.0 for s in basis]
    their_vec = [theirs[s].percentage if s in theirs else 0.0 for s in basis]

    my_norm = math.sqrt(sum(v * v for v in my_vec))
    their_norm = math.sqrt(sum(v * v for v in their_vec))
    if my_norm == 0 or their_norm == 0:
        return 0

    dot = sum(a * b for a, b in zip(my_vec, their_vec))
    return _round_percent(dot / (my_norm * their_norm) * 100)


def _percent_of(shares: dict[str, StyleShare], style: str) -> float:
    share = shares.get(style)
    return share.percentage if share is not None else 0.0


def compare(mine: list[Release], theirs: list[Release]) -> ComparisonResult:
    """Compare two collections.

    Parameters
    ----------
    mine, theirs:
        The two collections.  Either may be empty; an empty side yields a
        degenerate result with a score of 0.

    Returns
    -------
    ComparisonResult
        The compatibility score with its explanation fields.  ``overlap``
        lists *my* releases whose master also appears in *theirs*;
        releases without a master id never overlap.
    """
    my_masters = {r.master_id for r in mine if r.master_id is not None}
    their_masters = {r.master_id for r in theirs if r.master_id is not None}
    shared_masters = my_masters & their_masters
    all_masters = my_masters | their_masters

    overlap = [r for r in mine if r.master_id is not None and r.master_id in shared_masters]
    only_mine = [r for r in mine if r.master_id is None or r.master_id not in shared_masters]
    only_theirs = [r for r in theirs if r.master_id is None or r.master_id not in shared_masters]

    overlap_percent = (
        _round_percent(len(shared_masters) / len(all_masters) * 100) if all_masters else 0
    )

    my_styles = style_distribution(mine)
    their_styles = style_distribution(theirs)

    # Shared styles: meaningful presence on both sides, ranked by the weaker side.
    shared: list[StyleOverlap] = []
    for style in my_styles:
        if style not in their_styles:
            continue
        my_pct = my_styles[style].percentage
        their_pct = their_styles[style].percentage
        if my_pct >= SHARED_STYLE_MIN_PERCENT and their_pct >= SHARED_STYLE_MIN_PERCENT:
            shared.append(
                StyleOverlap(
                    style=style,
                    my_percent=my_pct,
                    their_percent=their_pct,
                    weight=min(my_pct, their_pct),
                )
            )
    shared.sort(key=lambda s: s.weight, reverse=True)

    # Top overlaps: each style's share of the cosine dot product.
    contributions = {
        style: my_styles[style].percentage * their_styles[style].percentage
        for style in my_styles
        if style in their_styles
    }
    total_dot = sum(contributions.values())
    top_overlaps: list[StyleOverlap] = []
    if total_dot > 0:
        ranked = sorted(contributions.items(), key=lambda item: item[1], reverse=True)
        top_overlaps = [
            StyleOverlap(
                style=style,
                my_percent=my_styles[style].percentage,
                their_percent=their_styles[style].percentage,
                weight=value / total_dot * 100,
            )
            for style, value in ranked[:TOP_OVERLAP_LIMIT]
        ]
    top_names = {o.style for o in top_overlaps}

    basis = list(dict.fromkeys([*my_styles, *their_styles]))

    differences: list[StyleDifference] = []
    for style in basis:
        if style in top_names:
            continue
        my_pct = _percent_of(my_styles, style)
        their_pct = _percent_of(their_styles, style)
        diff = my_pct - their_pct
        if abs(diff) > DIFFERENCE_MIN_GAP and (
            my_pct > DIFFERENCE_MIN_PRESENCE or their_pct > DIFFERENCE_MIN_PRESENCE
        ):
            differences.append(
                StyleDifference(
                    style=style, my_percent=my_pct, their_percent=their_pct, difference=diff
                )
            )
    differences.sort(key=lambda d: abs(d.difference), reverse=True)

    by_presence = sorted(
        basis,
        key=lambda s: _percent_of(my_styles, s) + _percent_of(their_styles, s),
        reverse=True,
    )
    style_comparison = [
        StyleComparisonRow(
            style=style,
            my_percent=_percent_of(my_styles, style),
            their_percent=_percent_of(their_styles, style),
        )
        for style in by_presence[:STYLE_COMPARISON_LIMIT]
    ]

    return ComparisonResult(
        compatibility_score=cosine_score(my_styles, their_styles),
        overlap=overlap,
        only_mine=only_mine,
        only_theirs=only_theirs,
        overlap_count=len(shared_masters),
        overlap_percent=overlap_percent,
        shared_styles=shared[:SHARED_STYLE_LIMIT],
        top_overlaps=top_overlaps,
        biggest_differences=differences[:DIFFERENCE_LIMIT],
        style_comparison=style_comparison,
    )
