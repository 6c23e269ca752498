"""DeepCogs API layer — routes, schemas, and middleware."""

from deepcogs.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from deepcogs.api.routes import router
from deepcogs.api.schemas import (
    CollectionResponse,
    ErrorResponse,
    HealthResponse,
    RecommendationRequest,
    RecommendationsResponse,
    WantlistResponse,
)

__all__ = [
    "ErrorHandlingMiddleware",
    "RequestLoggingMiddleware",
    "configure_cors",
    "router",
    "CollectionResponse",
    "ErrorResponse",
    "HealthResponse",
    "RecommendationRequest",
    "RecommendationsResponse",
    "WantlistResponse",
]
