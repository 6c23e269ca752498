"""Unit tests for rarity scoring and the deep-cuts helpers."""

from __future__ import annotations

import pytest

from deepcogs.services.rarity import (
    SEVEN_INCH_BONUS,
    TWELVE_INCH_SINGLE_BONUS,
    find_deep_cuts,
    score_release,
    summarize_oddities,
    top_rated,
)

YEAR = 2025


class TestScoreRelease:
    def test_test_pressing_numbered(self, make_release) -> None:
        release = make_release(formats=[("Vinyl", ["Test Pressing", "Numbered"])])
        scored = score_release(release, current_year=YEAR)

        assert scored.score == 70
        assert [i.label for i in scored.indicators] == ["Test Pressing", "Numbered"]
        assert all(i.category == "format" for i in scored.indicators)

    def test_keyword_rows_are_independent(self, make_release) -> None:
        release = make_release(formats=[("Vinyl", ["Limited Edition", "Numbered"])])
        assert score_release(release, current_year=YEAR).score == 45

    def test_only_highest_age_band_applies(self, make_release) -> None:
        release = make_release(year=YEAR - 55)
        scored = score_release(release, current_year=YEAR)

        assert scored.score == 25
        assert len(scored.indicators) == 1
        assert scored.indicators[0].category == "age"
        assert scored.indicators[0].label == "50+ Years Old"

    @pytest.mark.parametrize(
        ("age", "bonus"),
        [(45, 20), (30, 15), (20, 10), (19, 0)],
    )
    def test_age_bands(self, make_release, age: int, bonus: int) -> None:
        release = make_release(year=YEAR - age)
        assert score_release(release, current_year=YEAR).score == bonus

    def test_unknown_year_gets_no_age_bonus(self, make_release) -> None:
        scored = score_release(make_release(year=0), current_year=YEAR)
        assert scored.score == 0
        assert scored.indicators == []

    def test_seven_inch_bonus(self, make_release) -> None:
        release = make_release(formats=[("Vinyl", ['7"', "Single", "45 RPM"])])
        scored = score_release(release, current_year=YEAR)
        assert scored.score == SEVEN_INCH_BONUS
        assert scored.indicators[0].label == '7" Single'

    def test_twelve_inch_single_bonus(self, make_release) -> None:
        release = make_release(formats=[("Vinyl", ['12"', "Single", "33 ⅓ RPM"])])
        assert score_release(release, current_year=YEAR).score == TWELVE_INCH_SINGLE_BONUS

    def test_twelve_inch_album_gets_nothing(self, make_release) -> None:
        release = make_release(formats=[("Vinyl", ['12"', "Album"])])
        assert score_release(release, current_year=YEAR).score == 0

    def test_size_bonus_needs_vinyl(self, make_release) -> None:
        release = make_release(formats=[("Shellac", ['7"'])])
        assert score_release(release, current_year=YEAR).score == 0

    def test_reissue_scores_negative(self, make_release) -> None:
        release = make_release(formats=[("Vinyl", ["LP", "Album", "Reissue", "Remastered"])])
        assert score_release(release, current_year=YEAR).score == -15

    def test_case_insensitive(self, make_release) -> None:
        release = make_release(formats=[("Vinyl", ["WHITE LABEL"])])
        assert score_release(release, current_year=YEAR).score == 35

    def test_no_formats(self, make_release) -> None:
        assert score_release(make_release(), current_year=YEAR).score == 0


class TestFindDeepCuts:
    def test_keeps_positive_scores_rarest_first(self, make_release) -> None:
        promo = make_release(title="Promo", formats=[("Vinyl", ["Promo"])])
        plain = make_release(title="Plain", formats=[("Vinyl", ["LP"])])
        reissue = make_release(title="Reissue", formats=[("Vinyl", ["Reissue"])])
        acetate = make_release(title="Acetate", formats=[("Acetate", [])])

        cuts = find_deep_cuts([promo, plain, reissue, acetate], current_year=YEAR)

        assert [c.release.title for c in cuts] == ["Acetate", "Promo"]

    def test_ties_keep_collection_order(self, make_release) -> None:
        first = make_release(title="A", formats=[("Vinyl", ["Mono"])])
        second = make_release(title="B", formats=[("Vinyl", ["Bootleg"])])
        cuts = find_deep_cuts([first, second], current_year=YEAR)
        assert [c.release.title for c in cuts] == ["A", "B"]

    def test_limit(self, make_release) -> None:
        releases = [make_release(formats=[("Vinyl", ["Promo"])]) for _ in range(5)]
        assert len(find_deep_cuts(releases, current_year=YEAR, limit=2)) == 2


class TestSummaries:
    def test_summarize_oddities(self, make_release) -> None:
        scored = [
            score_release(make_release(formats=[("Vinyl", ["Test Pressing"])]), current_year=YEAR),
            score_release(make_release(formats=[("Vinyl", ["White Label"])]), current_year=YEAR),
            score_release(make_release(formats=[("Vinyl", ["Promo"])]), current_year=YEAR),
            score_release(make_release(formats=[("Vinyl", ["Numbered"])]), current_year=YEAR),
            score_release(make_release(formats=[("Vinyl", ["Reissue"])]), current_year=YEAR),
        ]
        oddities = summarize_oddities(scored)
        assert oddities.test_pressings == 1
        assert oddities.promos == 2
        assert oddities.limited == 1

    def test_top_rated_only_five_stars_newest_first(self, make_release) -> None:
        releases = [
            make_release(title="Old", rating=5, year=1971),
            make_release(title="Four", rating=4, year=2001),
            make_release(title="New", rating=5, year=1999),
        ]
        assert [r.title for r in top_rated(releases)] == ["New", "Old"]
