"""Text normalization helpers for Discogs artist and style names.

Discogs disambiguates homonymous artists with a numeric suffix
(``"Prince (2)"``) and uses placeholder credits such as ``"Various"`` on
compilations.  Neither is useful to an external similar-artist lookup, so
names are cleaned before they leave the analytics layer.

All case folding uses ``str.casefold`` / ``str.lower`` which are locale
independent, keeping results identical across machines.
"""

import re

# "Name (2)", "Name (12)" -- Discogs' disambiguation suffix.
_DISAMBIGUATION_SUFFIX = re.compile(r"\s*\(\d+\)$")
_MULTI_SPACE = re.compile(r"\s+")

# Placeholder credits that never identify a real artist.
_SENTINEL_ARTISTS = frozenset({
    "various",
    "various artists",
    "unknown artist",
    "no artist",
    "traditional",
})


def clean_artist_name(name: str) -> str:
    """Strip the Discogs disambiguation suffix and collapse whitespace.

    ``"Prince (2)"`` -> ``"Prince"``; ``"  Sun   Ra "`` -> ``"Sun Ra"``.
    """
    cleaned = _MULTI_SPACE.sub(" ", name.strip())
    return _DISAMBIGUATION_SUFFIX.sub("", cleaned)


def artist_key(name: str) -> str:
    """Return the case-insensitive comparison key for an artist name."""
    return clean_artist_name(name).lower()


def is_sentinel_artist(name: str) -> bool:
    """Return ``True`` for "Various Artists"-type placeholder credits."""
    key = artist_key(name)
    return not key or key in _SENTINEL_ARTISTS


def styles_related(candidate: str, target: str) -> bool:
    """Return ``True`` if either style name contains the other.

    Used to accept near-miss taxonomy matches such as ``"Deep House"``
    for a ``"House"`` target (and vice versa).
    """
    a = candidate.strip().lower()
    b = target.strip().lower()
    if not a or not b:
        return False
    return a in b or b in a
