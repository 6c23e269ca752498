"""Last.fm similar-artist provider.

Calls the ``artist.getsimilar`` method of the Last.fm 2.0 API through an
injected ``httpx.AsyncClient``.  One call per artist; pacing across calls
is the gateway's job (Last.fm allows about 5 requests per second).

Response shape consumed::

    {"similarartists": {"artist": [{"name": "...", "match": "0.87"}, ...]}}

Last.fm reports some errors with HTTP 200 and an ``{"error": N}`` body.
Error 6 ("artist not found") is an empty result; error 29 is a rate limit.
"""

from __future__ import annotations

from typing import Any

import httpx

from deepcogs.interfaces.similar_artist_provider import ISimilarArtistProvider
from deepcogs.models.recommendation import SimilarArtist
from deepcogs.utils.errors import ProviderUnavailableError, RateLimitError
from deepcogs.utils.logging import get_logger

_DEFAULT_BASE_URL = "https://ws.audioscrobbler.com/2.0/"
_ERROR_ARTIST_NOT_FOUND = 6
_ERROR_RATE_LIMITED = 29


def parse_match(value: Any) -> float:
    """Parse a Last.fm match value (a numeric string) into 0.0..1.0."""
    try:
        match = float(value)
    except (TypeError, ValueError):
        return 0.0
    if match != match:  # NaN
        return 0.0
    return max(0.0, min(1.0, match))


class LastFmSimilarArtistProvider(ISimilarArtistProvider):
    """Similar-artist lookups against Last.fm.

    Parameters
    ----------
    http_client:
        Shared ``httpx.AsyncClient``; injected for testability and
        connection pooling.
    api_key:
        Last.fm API key.  An empty key makes the provider unavailable.
    base_url:
        API root, overridable for tests.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str,
        base_url: str = _DEFAULT_BASE_URL,
    ) -> None:
        self._http = http_client
        self._api_key = api_key
        self._base_url = base_url
        self._logger = get_logger(__name__)

    async def get_similar_artists(self, artist: str, limit: int = 10) -> list[SimilarArtist]:
        params = {
            "method": "artist.getsimilar",
            "artist": artist,
            "api_key": self._api_key,
            "format": "json",
            "limit": str(limit),
        }
        provider = self.get_provider_name()

        try:
            response = await self._http.get(self._base_url, params=params)
        except httpx.HTTPError as exc:
            self._logger.warning("lastfm_request_failed", artist=artist, error=str(exc))
            raise ProviderUnavailableError(
                message=f"Last.fm request failed for '{artist}': {exc}",
                provider_name=provider,
            ) from exc

        if response.status_code == 429:
            raise RateLimitError(message="Last.fm rate limit exceeded", provider_name=provider)
        if response.status_code != 200:
            self._logger.warning("lastfm_unexpected_status", artist=artist, status=response.status_code)
            raise ProviderUnavailableError(
                message=f"Last.fm answered HTTP {response.status_code} for '{artist}'",
                provider_name=provider,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise ProviderUnavailableError(
                message=f"Last.fm returned malformed JSON for '{artist}'",
                provider_name=provider,
            ) from exc

        if not isinstance(payload, dict):
            raise ProviderUnavailableError(
                message=f"Last.fm returned an unexpected body for '{artist}'",
                provider_name=provider,
            )

        if "error" in payload:
            code = payload.get("error")
            if code == _ERROR_ARTIST_NOT_FOUND:
                self._logger.debug("lastfm_artist_not_found", artist=artist)
                return []
            if code == _ERROR_RATE_LIMITED:
                raise RateLimitError(message="Last.fm rate limit exceeded", provider_name=provider)
            raise ProviderUnavailableError(
                message=f"Last.fm error {code}: {payload.get('message', 'unknown error')}",
                provider_name=provider,
            )

        container = payload.get("similarartists")
        raw = container.get("artist", []) if isinstance(container, dict) else []
        # A single match comes back as an object rather than a one-item list.
        if isinstance(raw, dict):
            raw = [raw]
        if not isinstance(raw, list):
            raw = []

        similar: list[SimilarArtist] = []
        for item in raw[:limit]:
            if not isinstance(item, dict):
                continue
            name = str(item.get("name") or "").strip()
            if not name:
                continue
            similar.append(
                SimilarArtist(name=name, match=parse_match(item.get("match")), source_artist=artist)
            )

        self._logger.debug("lastfm_similar_complete", artist=artist, result_count=len(similar))
        return similar

    def get_provider_name(self) -> str:
        """Return ``'lastfm'``."""
        return "lastfm"

    def is_available(self) -> bool:
        return bool(self._api_key)
