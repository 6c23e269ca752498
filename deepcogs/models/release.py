"""Collection and wantlist entities parsed from Discogs JSON.

Defines Pydantic v2 models for the fields of a Discogs collection item
that the analytics actually read.  All models use frozen config, so a
release parsed at the start of a request cannot be mutated by any of the
analytics that share it.

Discogs JSON is consumed defensively: any field may be missing, ``null``
or of the wrong type, and every such gap collapses to an empty value
(``""``, ``0``, ``[]`` or ``None``) instead of raising.  ``master_id`` is
the one field where "absent" must stay distinguishable, so ``0`` and
missing both become ``None``; comparisons and trade matching never join
on ``None``.
"""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Defensive coercion helpers for third-party JSON.
# ---------------------------------------------------------------------------

def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> list[Any]:
    return list(value) if isinstance(value, (list, tuple)) else []


def _as_str(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return str(value)


def as_int(value: Any, default: int = 0) -> int:
    """Coerce ints, floats and numeric strings (``"1998"``) to ``int``."""
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return default
    if isinstance(value, float):
        # "1e400", "Infinity" and "nan" parse as floats but have no int value.
        return int(value) if math.isfinite(value) else default
    return default


def as_master_id(value: Any) -> int | None:
    """Return a positive master id, or ``None`` for 0 / missing / malformed."""
    master_id = as_int(value)
    return master_id if master_id > 0 else None


def _string_list(value: Any) -> list[str]:
    return [str(item) for item in _as_list(value) if isinstance(item, str) and item]


def _name_list(value: Any) -> list[str]:
    names: list[str] = []
    for item in _as_list(value):
        name = _as_dict(item).get("name")
        if isinstance(name, str) and name:
            names.append(name)
    return names


# ---------------------------------------------------------------------------
# Nested credit / format models.
# ---------------------------------------------------------------------------

class ArtistCredit(BaseModel):
    """An artist credited on a release (order as listed by Discogs)."""

    model_config = ConfigDict(frozen=True)

    name: str


class LabelCredit(BaseModel):
    """A label credited on a release."""

    model_config = ConfigDict(frozen=True)

    name: str
    catno: str = ""


class ReleaseFormat(BaseModel):
    """A physical format entry, e.g. ``Vinyl`` with ``["LP", "Limited Edition"]``.

    Descriptions are free text with no controlled vocabulary; rarity and
    repress detection match them with case-insensitive regexes.
    """

    model_config = ConfigDict(frozen=True)

    name: str = ""
    qty: str = ""
    descriptions: list[str] = Field(default_factory=list)

    @classmethod
    def from_discogs(cls, data: Any) -> ReleaseFormat:
        raw = _as_dict(data)
        return cls(
            name=_as_str(raw.get("name")),
            qty=_as_str(raw.get("qty")),
            descriptions=_string_list(raw.get("descriptions")),
        )


# ---------------------------------------------------------------------------
# Release — one collection entry.
# ---------------------------------------------------------------------------

class Release(BaseModel):
    """One entry of a user's Discogs collection."""

    model_config = ConfigDict(frozen=True)

    release_id: int = 0
    # The "work" identity shared by all pressings; None when Discogs has none.
    master_id: int | None = None
    title: str = ""
    artists: list[ArtistCredit] = Field(default_factory=list)
    year: int = 0                       # 0 when unknown
    genres: list[str] = Field(default_factory=list)
    styles: list[str] = Field(default_factory=list)
    labels: list[LabelCredit] = Field(default_factory=list)
    formats: list[ReleaseFormat] = Field(default_factory=list)
    thumbnail_url: str = ""
    rating: int = Field(default=0, ge=0, le=5)
    date_added: str | None = None       # informational only

    @property
    def artist_names(self) -> list[str]:
        return [a.name for a in self.artists]

    @property
    def format_text(self) -> str:
        """Every format name and description, space-joined, for keyword scans."""
        parts: list[str] = []
        for fmt in self.formats:
            parts.append(fmt.name)
            parts.extend(fmt.descriptions)
        return " ".join(part for part in parts if part)

    @classmethod
    def from_discogs(cls, data: Any) -> Release:
        """Build a release from a collection item or a bare ``basic_information``.

        Accepts ``{"id", "rating", "date_added", "basic_information": {...}}``
        as returned by ``/users/{u}/collection/folders/0/releases``, or the
        inner ``basic_information`` object on its own.
        """
        item = _as_dict(data)
        info = _as_dict(item.get("basic_information")) or item

        rating = as_int(item.get("rating"))
        labels = [
            LabelCredit(name=name, catno=_as_str(_as_dict(raw).get("catno")))
            for raw in _as_list(info.get("labels"))
            if (name := _as_str(_as_dict(raw).get("name")))
        ]

        return cls(
            release_id=as_int(info.get("id") or item.get("id")),
            master_id=as_master_id(info.get("master_id")),
            title=_as_str(info.get("title")),
            artists=[ArtistCredit(name=n) for n in _name_list(info.get("artists"))],
            year=max(as_int(info.get("year")), 0),
            genres=_string_list(info.get("genres")),
            styles=_string_list(info.get("styles")),
            labels=labels,
            formats=[ReleaseFormat.from_discogs(f) for f in _as_list(info.get("formats"))],
            thumbnail_url=_as_str(info.get("thumb") or info.get("cover_image")),
            rating=min(max(rating, 0), 5),
            date_added=_as_str(item.get("date_added")) or None,
        )


# ---------------------------------------------------------------------------
# WantlistEntry — a desire, not an ownership record.
# ---------------------------------------------------------------------------

class WantlistEntry(BaseModel):
    """One entry of a user's wantlist (the ``basic_information`` subset)."""

    model_config = ConfigDict(frozen=True)

    release_id: int = 0
    master_id: int | None = None
    title: str = ""
    year: int = 0
    thumbnail_url: str = ""
    artists: list[ArtistCredit] = Field(default_factory=list)
    genres: list[str] = Field(default_factory=list)
    styles: list[str] = Field(default_factory=list)
    rating: int = Field(default=0, ge=0, le=5)

    @classmethod
    def from_discogs(cls, data: Any) -> WantlistEntry:
        item = _as_dict(data)
        info = _as_dict(item.get("basic_information")) or item
        rating = as_int(item.get("rating"))
        return cls(
            release_id=as_int(info.get("id") or item.get("id")),
            master_id=as_master_id(info.get("master_id")),
            title=_as_str(info.get("title")),
            year=max(as_int(info.get("year")), 0),
            thumbnail_url=_as_str(info.get("thumb")),
            artists=[ArtistCredit(name=n) for n in _name_list(info.get("artists"))],
            genres=_string_list(info.get("genres")),
            styles=_string_list(info.get("styles")),
            rating=min(max(rating, 0), 5),
        )
