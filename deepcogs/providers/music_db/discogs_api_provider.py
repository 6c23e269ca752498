"""Discogs REST API provider using python3-discogs-client.

Implements IMusicDatabaseProvider for reading collections and wantlists,
editing the wantlist and searching vinyl masters.  The client library is
synchronous, so every call is off-loaded with ``asyncio.to_thread`` and
rate-limited to respect Discogs' 60 req/min cap for authenticated clients.

Authentication, in order of preference:

  1. The caller's OAuth access token/secret (from the session cookies set
     by the external OAuth handshake) plus the app's consumer key/secret.
  2. A personal user token from the settings.
  3. The app's consumer key/secret alone (public data only).
"""

from __future__ import annotations

import asyncio
import time
from typing import Any

import discogs_client
from discogs_client.exceptions import HTTPError

from deepcogs.config.settings import Settings
from deepcogs.interfaces.music_db_provider import IMusicDatabaseProvider
from deepcogs.models.recommendation import RecommendedRelease
from deepcogs.models.release import Release, WantlistEntry
from deepcogs.utils.errors import (
    AuthenticationError,
    DeepCogsError,
    ProviderUnavailableError,
    RateLimitError,
)
from deepcogs.utils.logging import get_logger

_MIN_REQUEST_INTERVAL = 1.0  # seconds — 60 requests per minute
_PRIVATE_STATUSES = (403, 404)


class DiscogsAPIProvider(IMusicDatabaseProvider):
    """Music database provider backed by the Discogs REST API.

    The client is initialized lazily on first use.  Rate limiting enforces
    a minimum of 1 second between consecutive API calls made through one
    provider instance.
    """

    def __init__(
        self,
        settings: Settings,
        access_token: str = "",
        access_token_secret: str = "",
    ) -> None:
        self._settings = settings
        self._access_token = access_token
        self._access_token_secret = access_token_secret
        self._client: discogs_client.Client | None = None
        self._last_request_time: float = 0.0
        self._logger = get_logger(__name__)

    def with_session(self, access_token: str, access_token_secret: str) -> DiscogsAPIProvider:
        """Return a provider acting on behalf of an OAuth session."""
        return DiscogsAPIProvider(self._settings, access_token, access_token_secret)

    # -- Private helpers -------------------------------------------------------

    def _has_session(self) -> bool:
        return bool(self._access_token and self._access_token_secret)

    def _get_client(self) -> discogs_client.Client:
        """Lazily initialize and return the Discogs API client."""
        if self._client is None:
            user_agent = self._settings.discogs_user_agent
            if self._has_session():
                self._client = discogs_client.Client(
                    user_agent,
                    consumer_key=self._settings.discogs_consumer_key,
                    consumer_secret=self._settings.discogs_consumer_secret,
                    token=self._access_token,
                    secret=self._access_token_secret,
                )
            elif self._settings.discogs_user_token:
                self._client = discogs_client.Client(
                    user_agent, user_token=self._settings.discogs_user_token
                )
            else:
                self._client = discogs_client.Client(
                    user_agent,
                    consumer_key=self._settings.discogs_consumer_key,
                    consumer_secret=self._settings.discogs_consumer_secret,
                )
        return self._client

    async def _throttle(self) -> None:
        """Enforce minimum interval between API requests."""
        now = time.monotonic()
        elapsed = now - self._last_request_time
        if self._last_request_time > 0 and elapsed < _MIN_REQUEST_INTERVAL:
            await asyncio.sleep(_MIN_REQUEST_INTERVAL - elapsed)
        self._last_request_time = time.monotonic()

    def _translate_error(self, exc: Exception, action: str) -> DeepCogsError:
        """Map a client exception onto the DeepCogs error hierarchy."""
        provider = self.get_provider_name()
        status = getattr(exc, "status_code", None)
        if status == 429:
            return RateLimitError(message=f"Discogs rate limit hit during {action}", provider_name=provider)
        if status == 401:
            return AuthenticationError(
                message=f"Discogs rejected the credentials during {action}", provider_name=provider
            )
        return ProviderUnavailableError(message=f"Discogs {action} failed: {exc}", provider_name=provider)

    # -- Sync helpers (executed via asyncio.to_thread) -------------------------

    def _collection_sync(self, username: str) -> list[dict[str, Any]]:
        """Walk every page of the user's "All" collection folder."""
        user = self._get_client().user(username)
        folder = user.collection_folders[0]
        return [dict(item.data) for item in folder.releases]

    def _collection_size_sync(self, username: str) -> int:
        user = self._get_client().user(username)
        return int(user.num_collection or 0)

    def _wantlist_sync(self, username: str) -> list[dict[str, Any]]:
        user = self._get_client().user(username)
        return [dict(item.data) for item in user.wantlist]

    def _search_sync(self, query: str, style: str | None) -> list[dict[str, Any]]:
        """Run a vinyl master search and return the first page of raw results."""
        fields: dict[str, Any] = {
            "type": "master",
            "format": "Vinyl",
            "sort": "want",
            "sort_order": "desc",
        }
        if style:
            fields["style"] = style
        results = self._get_client().search(query, **fields)
        return [dict(item.data) for item in results.page(1)]

    def _add_want_sync(self, username: str, release_id: int) -> None:
        self._get_client().user(username).wantlist.add(release_id)

    def _remove_want_sync(self, username: str, release_id: int) -> None:
        self._get_client().user(username).wantlist.remove(release_id)

    # -- IMusicDatabaseProvider implementation ---------------------------------

    async def get_collection(self, username: str) -> list[Release]:
        """Fetch the full collection; a private or unknown user yields ``[]``."""
        await self._throttle()
        try:
            raw_items = await asyncio.to_thread(self._collection_sync, username)
        except HTTPError as exc:
            if exc.status_code in _PRIVATE_STATUSES:
                self._logger.info("discogs_collection_not_visible", username=username, status=exc.status_code)
                return []
            self._logger.error("discogs_collection_failed", username=username, error=str(exc))
            raise self._translate_error(exc, "collection fetch") from exc
        except Exception as exc:
            self._logger.error("discogs_collection_failed", username=username, error=str(exc))
            raise self._translate_error(exc, "collection fetch") from exc

        releases = [Release.from_discogs(item) for item in raw_items]
        self._logger.info("discogs_collection_complete", username=username, release_count=len(releases))
        return releases

    async def get_collection_size(self, username: str) -> int:
        await self._throttle()
        try:
            return await asyncio.to_thread(self._collection_size_sync, username)
        except HTTPError as exc:
            if exc.status_code in _PRIVATE_STATUSES:
                return 0
            raise self._translate_error(exc, "profile fetch") from exc
        except Exception as exc:
            raise self._translate_error(exc, "profile fetch") from exc

    async def get_wantlist(self, username: str) -> list[WantlistEntry]:
        """Fetch the full wantlist; a private or unknown user yields ``[]``."""
        await self._throttle()
        try:
            raw_items = await asyncio.to_thread(self._wantlist_sync, username)
        except HTTPError as exc:
            if exc.status_code in _PRIVATE_STATUSES:
                self._logger.info("discogs_wantlist_not_visible", username=username, status=exc.status_code)
                return []
            self._logger.error("discogs_wantlist_failed", username=username, error=str(exc))
            raise self._translate_error(exc, "wantlist fetch") from exc
        except Exception as exc:
            self._logger.error("discogs_wantlist_failed", username=username, error=str(exc))
            raise self._translate_error(exc, "wantlist fetch") from exc

        entries = [WantlistEntry.from_discogs(item) for item in raw_items]
        self._logger.info("discogs_wantlist_complete", username=username, entry_count=len(entries))
        return entries

    async def search_releases(self, query: str, style: str | None = None) -> list[RecommendedRelease]:
        await self._throttle()
        try:
            raw_results = await asyncio.to_thread(self._search_sync, query, style)
        except Exception as exc:
            self._logger.warning("discogs_search_failed", query=query, style=style, error=str(exc))
            raise self._translate_error(exc, "search") from exc

        releases: list[RecommendedRelease] = []
        for data in raw_results:
            parsed = RecommendedRelease.from_search_result(data)
            if parsed is not None:
                releases.append(parsed)

        self._logger.debug("discogs_search_complete", query=query, style=style, result_count=len(releases))
        return releases

    async def add_to_wantlist(self, username: str, release_id: int) -> None:
        await self._throttle()
        try:
            await asyncio.to_thread(self._add_want_sync, username, release_id)
        except Exception as exc:
            self._logger.error("discogs_wantlist_add_failed", username=username, release_id=release_id, error=str(exc))
            raise self._translate_error(exc, "wantlist add") from exc
        self._logger.info("discogs_wantlist_added", username=username, release_id=release_id)

    async def remove_from_wantlist(self, username: str, release_id: int) -> None:
        await self._throttle()
        try:
            await asyncio.to_thread(self._remove_want_sync, username, release_id)
        except Exception as exc:
            self._logger.error(
                "discogs_wantlist_remove_failed", username=username, release_id=release_id, error=str(exc)
            )
            raise self._translate_error(exc, "wantlist remove") from exc
        self._logger.info("discogs_wantlist_removed", username=username, release_id=release_id)

    def get_provider_name(self) -> str:
        """Return ``'discogs_api'``."""
        return "discogs_api"

    def is_available(self) -> bool:
        """Return ``True`` if a session token or app credentials are present."""
        return self._has_session() or self._settings.has_discogs_credentials()
