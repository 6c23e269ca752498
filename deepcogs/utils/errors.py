"""Custom exception hierarchy for DeepCogs.

All application exceptions inherit from :class:`DeepCogsError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "discogs_api", "lastfm") caused the failure.

The hierarchy is organized by where the failure originates:

    DeepCogsError  (base -- catch-all for any DeepCogs error)
    +-- ProviderUnavailableError      (external service down / bad response)
    +-- RateLimitError                (provider rate-limit exceeded)
    +-- ConfigurationError            (malformed config file at startup)
    +-- AuthenticationError           (no usable Discogs session)
    +-- InvalidRequestError           (precondition violated by the caller)
        +-- SelfComparisonError       (comparing a collection with itself)
    +-- ComparisonDataUnavailableError (friend collection empty or private)

Pure analytics never raise for data-shape reasons; only the I/O layer and
request preconditions use this hierarchy.  ``ComparisonDataUnavailableError``
is deliberately separate from a successful comparison with zero overlap.
"""


class DeepCogsError(Exception):
    """Base exception for all DeepCogs errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  The ``__str__`` method prefixes the provider name in brackets
    for structured log output, e.g. ``[lastfm] Rate limit exceeded``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# External service / provider errors
# ---------------------------------------------------------------------------

class ProviderUnavailableError(DeepCogsError):
    """Raised when an external service is unreachable or answers badly.

    Covers network failures, non-2xx responses and undecodable JSON.  The
    similar-artist gateway and recommendation engine catch this per call
    and treat it as "zero results" for that one call.
    """

    def __init__(
        self,
        message: str = "External service is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class RateLimitError(DeepCogsError):
    """Raised when an API rate limit is exceeded (HTTP 429)."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Configuration / session errors
# ---------------------------------------------------------------------------

class ConfigurationError(DeepCogsError):
    """Raised when configuration is invalid (e.g. a malformed config.yaml)."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class AuthenticationError(DeepCogsError):
    """Raised when an operation needs a Discogs session and none is present."""

    def __init__(
        self,
        message: str = "Not authenticated",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Request precondition errors
# ---------------------------------------------------------------------------

class InvalidRequestError(DeepCogsError):
    """Raised when a caller violates a precondition (e.g. empty artist list)."""

    def __init__(
        self,
        message: str = "Invalid request",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class SelfComparisonError(InvalidRequestError):
    """Raised before any work when a user asks to compare with themselves."""

    def __init__(
        self,
        message: str = "You can't compare a collection with itself",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ComparisonDataUnavailableError(DeepCogsError):
    """Raised when the other party's collection is empty or private.

    Callers must not confuse this with a comparison that succeeded and
    simply found no overlap.
    """

    def __init__(
        self,
        message: str = "No collection data available for comparison",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
