"""Custom exception hierarchy for Duende.

All application exceptions inherit from :class:`DuendeError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "mongodb", "gemini", "supabase") caused the failure.

    DuendeError  (base -- catch-all for any Duende error)
    +-- ConfigurationError   (startup / missing config)
    +-- EventStoreError      (document store query or write failure)
    +-- EventNotFoundError   (requested event id does not exist)
    +-- LLMError             (any generative-text API call failure)
    +-- AnalyticsError       (analytics sink failure, never surfaced to clients)

Route handlers and ``ErrorHandlingMiddleware`` map these to HTTP statuses;
see ``duende.api.middleware``.
"""


class DuendeError(Exception):
    """Base exception for all Duende errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  ``__str__`` prefixes the provider name in brackets for
    structured log output, e.g. ``[mongodb] Event store query failed``.
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


class ConfigurationError(DuendeError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Event store errors
# ---------------------------------------------------------------------------

class EventStoreError(DuendeError):
    """Raised when the event store cannot complete a read or write.

    Driver details go to the server-side log entry, never into
    ``message``.
    """

    def __init__(
        self,
        message: str = "Event store query failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class EventNotFoundError(DuendeError):
    """Raised when an event id does not resolve to a stored event."""

    def __init__(
        self,
        message: str = "Event not found",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# External service errors
# ---------------------------------------------------------------------------

class LLMError(DuendeError):
    """Raised when a generative-text call fails or returns an unusable response."""

    def __init__(
        self,
        message: str = "LLM API call failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class AnalyticsError(DuendeError):
    """Raised by analytics sinks.  ``AnalyticsService`` always swallows it."""

    def __init__(
        self,
        message: str = "Analytics sink rejected the record",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
