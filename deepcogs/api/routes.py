"""FastAPI API routes for DeepCogs.

Service dependencies are resolved from ``app.state`` via FastAPI's
``Depends`` using the ``Annotated`` pattern.  Discogs calls are made on
behalf of the caller when the request carries the session cookies set by
the OAuth handshake (``discogs_access_token`` and
``discogs_access_token_secret``); otherwise the app-level credentials from
the settings are used.

# Endpoint                                   Method  Description
# ─────────────────────────────────────────────────────────────────────
# /api/v1/health                             GET     Health + provider status
# /api/v1/users/{u}/collection               GET     Full collection (?refresh=)
# /api/v1/users/{u}/dna                      GET     Collection DNA stats
# /api/v1/users/{u}/deep-cuts                GET     Rarest releases (?limit=)
# /api/v1/users/{u}/wantlist                 GET     Wantlist entries
# /api/v1/users/{u}/compare/{friend}         GET     Taste compatibility
# /api/v1/users/{u}/trades/{friend}          GET     Trade opportunities
# /api/v1/users/{u}/recommendations          GET     Recommendations from the collection
# /api/v1/recommendations                    POST    Recommendations from explicit inputs
# /api/v1/wantlist                           POST    Add to the session user's wantlist
# /api/v1/wantlist/{release_id}              DELETE  Remove from the session user's wantlist
"""

from __future__ import annotations

import asyncio
from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, Path, Query, Request

from deepcogs import __version__
from deepcogs.api.schemas import (
    CollectionResponse,
    HealthResponse,
    RecommendationRequest,
    RecommendationsResponse,
    WantlistAddRequest,
    WantlistChangeResponse,
    WantlistResponse,
)
from deepcogs.config.settings import Settings
from deepcogs.interfaces.music_db_provider import IMusicDatabaseProvider
from deepcogs.models.analytics import ComparisonResult, DeepCutsReport, DNAStats, TradeResult
from deepcogs.models.recommendation import StyleSeed
from deepcogs.providers.music_db.discogs_api_provider import DiscogsAPIProvider
from deepcogs.services.collection_service import (
    APP_CACHE_SCOPE,
    CollectionService,
    session_cache_scope,
)
from deepcogs.services.recommendation_service import RecommendationRun, RecommendationService
from deepcogs.utils.errors import AuthenticationError
from deepcogs.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api/v1")

ACCESS_TOKEN_COOKIE = "discogs_access_token"
ACCESS_TOKEN_SECRET_COOKIE = "discogs_access_token_secret"
USERNAME_COOKIE = "discogs_username"

_MAX_DEEP_CUTS = 500


# ---------------------------------------------------------------------------
# Dependency injection helpers — resolve singletons from app.state
# ---------------------------------------------------------------------------


def _get_settings(request: Request) -> Settings:
    return request.app.state.settings


def _get_music_db(request: Request) -> IMusicDatabaseProvider:
    """Return the Discogs provider acting for this request's session."""
    base: IMusicDatabaseProvider = request.app.state.music_db
    token = request.cookies.get(ACCESS_TOKEN_COOKIE)
    secret = request.cookies.get(ACCESS_TOKEN_SECRET_COOKIE)
    provider = base
    if token and secret and isinstance(base, DiscogsAPIProvider):
        provider = base.with_session(token, secret)
    if not provider.is_available():
        raise AuthenticationError(provider_name=provider.get_provider_name())
    return provider


SettingsDep = Annotated[Settings, Depends(_get_settings)]
MusicDbDep = Annotated[IMusicDatabaseProvider, Depends(_get_music_db)]


def _get_cache_scope(request: Request) -> str:
    """Return the collection-cache scope of the session this request acts for."""
    token = request.cookies.get(ACCESS_TOKEN_COOKIE)
    secret = request.cookies.get(ACCESS_TOKEN_SECRET_COOKIE)
    if token and secret and isinstance(request.app.state.music_db, DiscogsAPIProvider):
        return session_cache_scope(token)
    return APP_CACHE_SCOPE


def _get_collection_service(request: Request, music_db: MusicDbDep) -> CollectionService:
    return request.app.state.collection_service.with_music_db(
        music_db, cache_scope=_get_cache_scope(request)
    )


def _get_recommendation_service(request: Request, music_db: MusicDbDep) -> RecommendationService:
    return request.app.state.recommendation_service.with_music_db(music_db)


def _get_session_username(request: Request) -> str:
    """Return the username of the signed-in Discogs user."""
    username = request.cookies.get(USERNAME_COOKIE)
    if not username:
        raise AuthenticationError()
    return username


CollectionServiceDep = Annotated[CollectionService, Depends(_get_collection_service)]
RecommendationServiceDep = Annotated[RecommendationService, Depends(_get_recommendation_service)]
SessionUserDep = Annotated[str, Depends(_get_session_username)]


# ---------------------------------------------------------------------------
# Collection analytics
# ---------------------------------------------------------------------------


@router.get("/users/{username}/collection", response_model=CollectionResponse)
async def get_collection(
    username: str,
    service: CollectionServiceDep,
    refresh: bool = Query(default=False, description="Bypass and overwrite the collection cache"),
) -> CollectionResponse:
    releases = await service.get_collection(username, refresh=refresh)
    return CollectionResponse(username=username, total=len(releases), releases=releases)


@router.get("/users/{username}/dna", response_model=DNAStats)
async def get_dna(username: str, service: CollectionServiceDep) -> DNAStats:
    return await service.get_dna(username)


@router.get("/users/{username}/deep-cuts", response_model=DeepCutsReport)
async def get_deep_cuts(
    username: str,
    service: CollectionServiceDep,
    limit: int | None = Query(default=None, ge=1, le=_MAX_DEEP_CUTS),
) -> DeepCutsReport:
    return await service.get_deep_cuts(username, limit=limit)


@router.get("/users/{username}/wantlist", response_model=WantlistResponse)
async def get_wantlist(username: str, service: CollectionServiceDep) -> WantlistResponse:
    entries = await service.get_wantlist(username)
    return WantlistResponse(username=username, total=len(entries), entries=entries)


@router.get("/users/{username}/compare/{friend}", response_model=ComparisonResult)
async def compare_collections(
    username: str, friend: str, service: CollectionServiceDep
) -> ComparisonResult:
    return await service.compare_with(username, friend)


@router.get("/users/{username}/trades/{friend}", response_model=TradeResult)
async def find_trades(username: str, friend: str, service: CollectionServiceDep) -> TradeResult:
    return await service.find_trades_with(username, friend)


# ---------------------------------------------------------------------------
# Recommendations
# ---------------------------------------------------------------------------


async def _run_recommendations(
    service: RecommendationService,
    styles: list[StyleSeed],
    owned_master_ids: set[int],
    owned_artist_names: set[str],
    timeout: float,
) -> RecommendationsResponse:
    """Run the engine under *timeout*, keeping finished styles on expiry."""
    run = RecommendationRun()
    is_partial = False
    try:
        await asyncio.wait_for(
            service.recommend(styles, owned_master_ids, owned_artist_names, run=run),
            timeout=timeout,
        )
    except asyncio.TimeoutError:
        is_partial = True
        _logger.warning(
            "recommendation_timeout",
            timeout=timeout,
            phase=run.phase.value,
            styles_completed=len(run.completed),
        )

    result = run.to_result()
    return RecommendationsResponse(
        recommendations=result.recommendations,
        analyzed_styles=result.analyzed_styles,
        used_external_similarity=result.used_external_similarity,
        partial_failures=result.partial_failures,
        is_partial=is_partial,
        generated_at=result.generated_at,
    )


@router.get(
    "/users/{username}/recommendations",
    response_model=RecommendationsResponse,
    response_model_exclude_none=True,
)
async def recommend_for_user(
    username: str,
    collections: CollectionServiceDep,
    recommender: RecommendationServiceDep,
    settings: SettingsDep,
) -> RecommendationsResponse:
    styles, owned_ids, owned_names = await collections.get_recommendation_inputs(username)
    return await _run_recommendations(
        recommender, styles, owned_ids, owned_names, settings.recommendation_timeout
    )


@router.post(
    "/recommendations",
    response_model=RecommendationsResponse,
    response_model_exclude_none=True,
)
async def recommend_from_inputs(
    body: RecommendationRequest,
    recommender: RecommendationServiceDep,
    settings: SettingsDep,
) -> RecommendationsResponse:
    return await _run_recommendations(
        recommender,
        body.styles,
        set(body.owned_master_ids),
        set(body.owned_artist_names),
        settings.recommendation_timeout,
    )


# ---------------------------------------------------------------------------
# Wantlist edits (pass-through to Discogs)
# ---------------------------------------------------------------------------


@router.post("/wantlist", response_model=WantlistChangeResponse)
async def add_to_wantlist(
    body: WantlistAddRequest, username: SessionUserDep, music_db: MusicDbDep
) -> WantlistChangeResponse:
    await music_db.add_to_wantlist(username, body.release_id)
    return WantlistChangeResponse(username=username, release_id=body.release_id, action="added")


@router.delete("/wantlist/{release_id}", response_model=WantlistChangeResponse)
async def remove_from_wantlist(
    username: SessionUserDep,
    music_db: MusicDbDep,
    release_id: int = Path(..., gt=0),
) -> WantlistChangeResponse:
    await music_db.remove_from_wantlist(username, release_id)
    return WantlistChangeResponse(username=username, release_id=release_id, action="removed")


# ---------------------------------------------------------------------------
# System endpoints
# ---------------------------------------------------------------------------


@router.get("/health", response_model=HealthResponse, summary="Application health check")
async def health_check(request: Request) -> HealthResponse:
    """Return application health, version, and provider availability.

    Discogs is required; Last.fm is optional (recommendations fall back to
    style search without it), so its absence only degrades the status.
    """
    providers: dict[str, Any] = dict(getattr(request.app.state, "provider_registry", {}))

    if not providers.get("discogs", False):
        status = "unhealthy"
    elif not providers.get("lastfm", False):
        status = "degraded"
    else:
        status = "healthy"

    return HealthResponse(status=status, version=__version__, providers=providers)
