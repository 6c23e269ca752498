"""DeepCogs FastAPI application entry point.

Wires together providers, services, and routes via dependency injection.
Loads configuration from ``.env`` and ``config/config.yaml`` and configures
structured logging once at import time.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI

from deepcogs import __version__
from deepcogs.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from deepcogs.api.routes import router as api_router
from deepcogs.config.loader import load_config, section
from deepcogs.config.settings import Settings
from deepcogs.providers.cache.memory_cache import MemoryCacheProvider
from deepcogs.providers.music_db.discogs_api_provider import DiscogsAPIProvider
from deepcogs.providers.similar.lastfm_provider import LastFmSimilarArtistProvider
from deepcogs.services.collection_service import CollectionService
from deepcogs.services.recommendation_service import RecommendationService
from deepcogs.services.similar_artist_gateway import SimilarArtistGateway
from deepcogs.utils.logging import configure_logging, get_logger

_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "config.yaml"

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()
config = load_config(str(_CONFIG_PATH), settings)

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)


def _build_all(app_settings: Settings, app_config: dict[str, Any]) -> dict[str, Any]:
    """Construct every provider and service instance for the application.

    Returns a flat dict of named components to be stored on ``app.state``.
    """
    # -- Shared resources --
    http_client = httpx.AsyncClient(timeout=15.0)

    # -- Providers --
    music_db = DiscogsAPIProvider(settings=app_settings)
    cache_config = section(app_config, "cache")
    cache = MemoryCacheProvider(
        max_size=cache_config.get("max_size", app_settings.collection_cache_max_size),
        ttl=cache_config.get("ttl", app_settings.collection_cache_ttl),
    )

    similar = section(app_config, "similar_artists")
    gateway: SimilarArtistGateway | None = None
    if app_settings.lastfm_api_key:
        lastfm = LastFmSimilarArtistProvider(
            http_client=http_client,
            api_key=app_settings.lastfm_api_key,
            base_url=app_settings.lastfm_base_url,
        )
        gateway = SimilarArtistGateway(
            lastfm,
            inter_call_delay=similar.get("inter_call_delay", 0.2),
            max_source_artists=similar.get("max_source_artists", 8),
            max_results=similar.get("max_results", 20),
        )

    # -- Services --
    reco = section(app_config, "recommendation")
    recommendation_service = RecommendationService(
        music_db,
        gateway,
        top_styles=reco.get("top_styles", 6),
        artists_per_style=reco.get("artists_per_style", 5),
        max_pooled_artists=similar.get("max_source_artists", 8),
        limit_per_artist=similar.get("limit_per_artist", 10),
        per_source_cap=reco.get("per_source_cap", 2),
        target_sources=reco.get("target_sources", 3),
        max_per_style=reco.get("max_per_style", 6),
        max_searches_per_style=reco.get("max_searches_per_style", 8),
        search_delay=reco.get("search_delay", 0.1),
    )
    collection_service = CollectionService(
        music_db,
        cache,
        aggregation=section(app_config, "aggregation"),
        deep_cuts_limit=section(app_config, "deep_cuts").get("default_limit", 50),
    )

    provider_registry = {
        "discogs": music_db.is_available(),
        "lastfm": gateway is not None,
        "cache": True,
    }

    return {
        "settings": app_settings,
        "http_client": http_client,
        "music_db": music_db,
        "cache": cache,
        "similar_artist_gateway": gateway,
        "recommendation_service": recommendation_service,
        "collection_service": collection_service,
        "provider_registry": provider_registry,
    }


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Initialise all providers and services on startup, clean up on shutdown."""
    components = _build_all(settings, config)

    for key, value in components.items():
        setattr(application.state, key, value)

    _logger.info(
        "app_startup",
        version=__version__,
        environment=settings.app_env,
        providers=components["provider_registry"],
    )

    yield

    # -- Shutdown: close shared httpx client --
    http_client: httpx.AsyncClient = components["http_client"]
    await http_client.aclose()
    _logger.info("app_shutdown", message="HTTP client closed")


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    application = FastAPI(
        title="DeepCogs API",
        version=__version__,
        description=(
            "Discogs collection analytics: collection DNA, rarity scoring, "
            "taste compatibility, trade matching and style-driven recommendations."
        ),
        lifespan=_lifespan,
    )

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application, allowed_origins=settings.get_cors_origins())

    application.include_router(api_router)
    return application


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    uvicorn.run(
        "deepcogs.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )


if __name__ == "__main__":
    run()
