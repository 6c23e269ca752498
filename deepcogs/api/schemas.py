"""Pydantic request/response schemas for the DeepCogs API.

Analytic results (``DNAStats``, ``ComparisonResult``, ``TradeResult``,
``DeepCutsReport``) are returned as-is from ``deepcogs.models``; the
schemas here wrap lists with their owner and add the transport-only
fields (``is_partial``, error bodies, health).

Convention: request schemas end with "Request", response schemas end with
"Response".
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from deepcogs.models.recommendation import StyleRecommendation, StyleSeed
from deepcogs.models.release import Release, WantlistEntry


class CollectionResponse(BaseModel):
    """A user's full collection."""

    username: str
    total: int
    releases: list[Release] = Field(default_factory=list)


class WantlistResponse(BaseModel):
    """A user's wantlist."""

    username: str
    total: int
    entries: list[WantlistEntry] = Field(default_factory=list)


class RecommendationRequest(BaseModel):
    """Explicit recommendation inputs, as computed by a client from a collection."""

    styles: list[StyleSeed] = Field(..., min_length=1)
    owned_master_ids: list[int] = Field(default_factory=list)
    owned_artist_names: list[str] = Field(default_factory=list)


class RecommendationsResponse(BaseModel):
    """Per-style recommendations.

    ``is_partial`` is ``True`` when the run hit the server's deadline;
    the styles that finished before it are still included.
    """

    recommendations: list[StyleRecommendation] = Field(default_factory=list)
    analyzed_styles: list[str] = Field(default_factory=list)
    used_external_similarity: bool = False
    partial_failures: int = 0
    is_partial: bool = False
    generated_at: datetime | None = None


class WantlistAddRequest(BaseModel):
    """Release to add to the session user's wantlist."""

    release_id: int = Field(..., gt=0)


class WantlistChangeResponse(BaseModel):
    """Acknowledges a wantlist edit."""

    username: str
    release_id: int
    action: str  # "added" | "removed"


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    providers: dict[str, Any]


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None
