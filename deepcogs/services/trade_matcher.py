"""Trade matching between two users' collections and wantlists.

A trade opportunity is a release one party owns whose master appears on
the other party's wantlist.  Matching is by master id only, so different
pressings of the same record count as a match.  There is no scoring or
ranking here; both lists keep collection order.
"""

from __future__ import annotations

from deepcogs.models.analytics import TradeOpportunity, TradeResult
from deepcogs.models.release import Release, WantlistEntry


def _index_wants(wantlist: list[WantlistEntry]) -> dict[int, WantlistEntry]:
    """Map master id to the first wantlist entry carrying it."""
    index: dict[int, WantlistEntry] = {}
    for want in wantlist:
        if want.master_id is not None:
            index.setdefault(want.master_id, want)
    return index


def _offers(collection: list[Release], wantlist: list[WantlistEntry]) -> list[TradeOpportunity]:
    wants = _index_wants(wantlist)
    return [
        TradeOpportunity(release=release, matched_want=wants[release.master_id])
        for release in collection
        if release.master_id is not None and release.master_id in wants
    ]


def find_trades(
    my_collection: list[Release],
    my_wantlist: list[WantlistEntry],
    their_collection: list[Release],
    their_wantlist: list[WantlistEntry],
) -> TradeResult:
    """Find what each side owns that the other side wants.

    Swapping the two (collection, wantlist) pairs swaps ``i_can_offer``
    and ``they_can_offer``.
    """
    return TradeResult(
        i_can_offer=_offers(my_collection, their_wantlist),
        they_can_offer=_offers(their_collection, my_wantlist),
    )
