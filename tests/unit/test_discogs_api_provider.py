"""Unit tests for the Discogs API provider."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from discogs_client.exceptions import HTTPError

from deepcogs.config.settings import Settings
from deepcogs.providers.music_db.discogs_api_provider import DiscogsAPIProvider
from deepcogs.utils.errors import AuthenticationError, ProviderUnavailableError, RateLimitError

_PATCH_TARGET = "deepcogs.providers.music_db.discogs_api_provider.discogs_client"


def _settings(**overrides) -> Settings:
    defaults = {
        "discogs_consumer_key": "test-key",
        "discogs_consumer_secret": "test-secret",
        "discogs_user_agent": "DeepCogs-test/0.1",
    }
    defaults.update(overrides)
    return Settings(_env_file=None, **defaults)


def _item(data: dict) -> MagicMock:
    item = MagicMock()
    item.data = data
    return item


@pytest.fixture(autouse=True)
def _no_throttle():
    with patch("deepcogs.providers.music_db.discogs_api_provider._MIN_REQUEST_INTERVAL", 0):
        yield


class TestDiscogsAPIProvider:
    @pytest.fixture()
    def settings(self) -> Settings:
        return _settings()

    def test_get_provider_name(self, settings: Settings) -> None:
        assert DiscogsAPIProvider(settings).get_provider_name() == "discogs_api"

    def test_is_available_with_keys(self, settings: Settings) -> None:
        assert DiscogsAPIProvider(settings).is_available() is True

    def test_is_available_without_keys(self) -> None:
        provider = DiscogsAPIProvider(_settings(discogs_consumer_key="", discogs_consumer_secret=""))
        assert provider.is_available() is False

    def test_session_makes_provider_available(self) -> None:
        base = DiscogsAPIProvider(_settings(discogs_consumer_key="", discogs_consumer_secret=""))
        assert base.with_session("token", "secret").is_available() is True

    @pytest.mark.asyncio
    async def test_get_collection(self, settings: Settings, discogs_collection_item) -> None:
        mock_user = MagicMock()
        mock_user.collection_folders = [MagicMock(releases=[_item(discogs_collection_item)])]
        mock_client = MagicMock()
        mock_client.user.return_value = mock_user

        with patch(_PATCH_TARGET) as mock_dc:
            mock_dc.Client.return_value = mock_client
            releases = await DiscogsAPIProvider(settings).get_collection("digger")

        assert len(releases) == 1
        assert releases[0].title == "Kind Of Blue"
        assert releases[0].master_id == 96559
        assert releases[0].rating == 5
        mock_client.user.assert_called_once_with("digger")

    @pytest.mark.asyncio
    async def test_private_collection_is_empty(self, settings: Settings) -> None:
        mock_client = MagicMock()
        mock_client.user.side_effect = HTTPError("Forbidden", 403)

        with patch(_PATCH_TARGET) as mock_dc:
            mock_dc.Client.return_value = mock_client
            provider = DiscogsAPIProvider(settings)
            assert await provider.get_collection("hidden") == []
            assert await provider.get_collection_size("hidden") == 0
            assert await provider.get_wantlist("hidden") == []

    @pytest.mark.asyncio
    async def test_collection_size(self, settings: Settings) -> None:
        mock_client = MagicMock()
        mock_client.user.return_value = MagicMock(num_collection=412)

        with patch(_PATCH_TARGET) as mock_dc:
            mock_dc.Client.return_value = mock_client
            assert await DiscogsAPIProvider(settings).get_collection_size("digger") == 412

    @pytest.mark.asyncio
    async def test_get_wantlist(self, settings: Settings) -> None:
        want = {"id": 5, "basic_information": {"id": 5, "master_id": 77, "title": "Wanted LP"}}
        mock_client = MagicMock()
        mock_client.user.return_value = MagicMock(wantlist=[_item(want)])

        with patch(_PATCH_TARGET) as mock_dc:
            mock_dc.Client.return_value = mock_client
            entries = await DiscogsAPIProvider(settings).get_wantlist("digger")

        assert [(e.release_id, e.master_id, e.title) for e in entries] == [(5, 77, "Wanted LP")]

    @pytest.mark.asyncio
    async def test_search_releases(self, settings: Settings) -> None:
        results = MagicMock()
        results.page.return_value = [
            _item({"id": 11, "master_id": 11, "title": "Larry Heard - Sceneries", "style": ["Deep House"]}),
            _item({"title": "no ids"}),
        ]
        mock_client = MagicMock()
        mock_client.search.return_value = results

        with patch(_PATCH_TARGET) as mock_dc:
            mock_dc.Client.return_value = mock_client
            found = await DiscogsAPIProvider(settings).search_releases("Larry Heard", style="Deep House")

        assert [(r.master_id, r.artist, r.title) for r in found] == [(11, "Larry Heard", "Sceneries")]
        mock_client.search.assert_called_once_with(
            "Larry Heard",
            type="master",
            format="Vinyl",
            sort="want",
            sort_order="desc",
            style="Deep House",
        )
        results.page.assert_called_once_with(1)

    @pytest.mark.asyncio
    async def test_search_without_style(self, settings: Settings) -> None:
        mock_client = MagicMock()
        mock_client.search.return_value.page.return_value = []

        with patch(_PATCH_TARGET) as mock_dc:
            mock_dc.Client.return_value = mock_client
            assert await DiscogsAPIProvider(settings).search_releases("Anyone") == []

        assert "style" not in mock_client.search.call_args.kwargs

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("status", "error_type"),
        [(429, RateLimitError), (401, AuthenticationError), (500, ProviderUnavailableError)],
    )
    async def test_errors_are_translated(self, settings: Settings, status: int, error_type) -> None:
        mock_client = MagicMock()
        mock_client.search.side_effect = HTTPError("failed", status)

        with patch(_PATCH_TARGET) as mock_dc:
            mock_dc.Client.return_value = mock_client
            with pytest.raises(error_type):
                await DiscogsAPIProvider(settings).search_releases("Anyone")

    @pytest.mark.asyncio
    async def test_wantlist_edits(self, settings: Settings) -> None:
        mock_user = MagicMock()
        mock_client = MagicMock()
        mock_client.user.return_value = mock_user

        with patch(_PATCH_TARGET) as mock_dc:
            mock_dc.Client.return_value = mock_client
            provider = DiscogsAPIProvider(settings).with_session("tok", "sec")
            await provider.add_to_wantlist("digger", 123)
            await provider.remove_from_wantlist("digger", 123)

        mock_user.wantlist.add.assert_called_once_with(123)
        mock_user.wantlist.remove.assert_called_once_with(123)
        assert mock_dc.Client.call_args.kwargs["token"] == "tok"
        assert mock_dc.Client.call_args.kwargs["secret"] == "sec"

    @pytest.mark.asyncio
    async def test_user_token_client(self) -> None:
        settings = _settings(discogs_consumer_key="", discogs_consumer_secret="", discogs_user_token="pat")
        mock_client = MagicMock()
        mock_client.search.return_value.page.return_value = []

        with patch(_PATCH_TARGET) as mock_dc:
            mock_dc.Client.return_value = mock_client
            await DiscogsAPIProvider(settings).search_releases("x")

        mock_dc.Client.assert_called_once_with("DeepCogs-test/0.1", user_token="pat")
