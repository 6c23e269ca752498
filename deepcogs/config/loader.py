"""YAML configuration loader with environment variable overrides.

Configuration is layered (later layers win):

  1. ``config/config.yaml`` -- tuning constants checked into the repo
     (recommendation caps, similar-artist pacing, aggregation limits)
  2. ``.env`` file and environment variables, via :class:`Settings`

``load_config`` reads the YAML first and deep-merges the environment
values on top, so a deploy can override any key without editing the file.
"""

from pathlib import Path
from typing import Any

import yaml

from deepcogs.config.settings import Settings
from deepcogs.utils.errors import ConfigurationError


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict[str, Any]:
    """Load YAML config and merge it with environment-based Settings.

    Args:
        path: Path to the YAML configuration file.  A missing file yields
              an empty base layer.
        settings: Settings instance to merge; a fresh one is read from the
                  environment when omitted.

    Returns:
        Fully resolved configuration dictionary.

    Raises:
        ConfigurationError: If the file is not valid YAML or its top level
                            is not a mapping.
    """
    config_path = Path(path)
    if config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(message=f"Invalid YAML in {config_path}: {exc}") from exc
        if not isinstance(yaml_config, dict):
            raise ConfigurationError(
                message=f"{config_path} must contain a mapping, got {type(yaml_config).__name__}"
            )
    else:
        yaml_config = {}

    settings = settings or Settings()
    env_overrides = {
        "app": {
            "host": settings.app_host,
            "port": settings.app_port,
            "env": settings.app_env,
        },
        "discogs": {
            "user_agent": settings.discogs_user_agent,
            "configured": settings.has_discogs_credentials(),
        },
        "lastfm": {
            "base_url": settings.lastfm_base_url,
            "configured": bool(settings.lastfm_api_key),
        },
        "cache": {
            "ttl": settings.collection_cache_ttl,
            "max_size": settings.collection_cache_max_size,
        },
        "logging": {
            "level": settings.log_level,
        },
    }

    _deep_merge(yaml_config, env_overrides)
    return yaml_config


def section(config: dict[str, Any], name: str) -> dict[str, Any]:
    """Return ``config[name]`` as a dict, or ``{}`` if absent or malformed."""
    value = config.get(name)
    return value if isinstance(value, dict) else {}


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
