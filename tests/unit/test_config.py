"""Unit tests for settings and the YAML config loader."""

from __future__ import annotations

from pathlib import Path

import pytest

from deepcogs.config.loader import load_config, section
from deepcogs.config.settings import Settings
from deepcogs.utils.errors import ConfigurationError


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


class TestSettings:
    def test_credentials_from_app_keys(self) -> None:
        assert _settings(discogs_consumer_key="k", discogs_consumer_secret="s").has_discogs_credentials()

    def test_credentials_from_user_token(self) -> None:
        assert _settings(discogs_user_token="t").has_discogs_credentials()

    def test_no_credentials(self) -> None:
        assert _settings(discogs_consumer_key="k").has_discogs_credentials() is False

    def test_cors_origins_split(self) -> None:
        settings = _settings(cors_origins="https://a.example, https://b.example,")
        assert settings.get_cors_origins() == ["https://a.example", "https://b.example"]


class TestLoadConfig:
    def test_yaml_and_env_are_merged(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "recommendation:\n  max_per_style: 4\ncache:\n  note: kept\n", encoding="utf-8"
        )

        config = load_config(str(config_file), _settings(collection_cache_ttl=60, lastfm_api_key="x"))

        assert config["recommendation"]["max_per_style"] == 4
        assert config["cache"] == {"note": "kept", "ttl": 60, "max_size": 256}
        assert config["lastfm"]["configured"] is True

    def test_missing_file_gives_env_only(self, tmp_path: Path) -> None:
        config = load_config(str(tmp_path / "absent.yaml"), _settings())
        assert "recommendation" not in config
        assert config["discogs"]["configured"] is False

    def test_invalid_yaml_raises(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("recommendation: [unclosed\n", encoding="utf-8")

        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_config(str(config_file), _settings())

    def test_non_mapping_yaml_raises(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("- just\n- a list\n", encoding="utf-8")

        with pytest.raises(ConfigurationError, match="must contain a mapping"):
            load_config(str(config_file), _settings())

    def test_repo_config_sections(self) -> None:
        repo_config = Path(__file__).resolve().parents[2] / "config" / "config.yaml"
        config = load_config(str(repo_config), _settings())
        assert section(config, "recommendation")["max_per_style"] == 6
        assert section(config, "similar_artists")["max_source_artists"] == 8

    def test_section_tolerates_bad_values(self) -> None:
        assert section({"aggregation": "oops"}, "aggregation") == {}
        assert section({}, "aggregation") == {}
