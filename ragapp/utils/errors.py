"""Custom exception hierarchy for ragapp.

All application exceptions inherit from :class:`RagAppError`, which carries
an optional ``provider_name`` so error handlers can identify which external
service (e.g. "openai", "ollama", "chromadb") caused the failure.

The hierarchy is organized by who is expected to react:

    RagAppError  (base -- catch-all for any ragapp error)
    +-- ValidationError          (malformed caller input, never retried)
    +-- UnsupportedFormatError   (file extension the loader cannot read)
    +-- ConfigurationError       (invalid settings)
    +-- AuthError                (missing / rejected provider credentials)
    +-- RateLimitError           (provider throttling -- retry with backoff)
    +-- ProviderUnavailableError (network / service failure)
    |   +-- ProviderConnectionError (local service unreachable)
    +-- GenerationError          (text generation failed)
    +-- VectorStoreError         (vector index read / write failure)
        +-- DimensionMismatchError

The pipelines never recover locally: every error raised by a step aborts
the invocation and reaches the caller with its class intact, so the HTTP
layer and the CLI can tell the categories apart.
"""


class RagAppError(Exception):
    """Base exception for all ragapp errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name``.  ``__str__`` prefixes the provider name in brackets
    for log output, e.g. ``[openai] Rate limit exceeded``.
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
# Caller input errors
# ---------------------------------------------------------------------------

class ValidationError(RagAppError):
    """Raised for malformed input: bad query, disallowed upload, oversized file."""

    def __init__(
        self,
        message: str = "Invalid input",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class UnsupportedFormatError(RagAppError):
    """Raised when the loader is asked to read a file type it has no handler for."""

    def __init__(
        self,
        message: str = "Unsupported file format",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConfigurationError(RagAppError):
    """Raised when configuration is invalid."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# External service / provider errors
# ---------------------------------------------------------------------------

class AuthError(RagAppError):
    """Raised when provider credentials are missing or rejected.

    Missing keys surface on first use, not at startup.  Not retried.
    """

    def __init__(
        self,
        message: str = "Provider credentials are missing or invalid",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class RateLimitError(RagAppError):
    """Raised when a provider throttles the request.

    Callers should retry with backoff; the pipelines themselves do not.
    """

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ProviderUnavailableError(RagAppError):
    """Raised when an embedding, generation, or index endpoint cannot serve the call."""

    def __init__(
        self,
        message: str = "External service is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ProviderConnectionError(ProviderUnavailableError):
    """Raised when a locally hosted service (e.g. Ollama) is unreachable."""

    def __init__(
        self,
        message: str = "Could not connect to the provider",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class GenerationError(RagAppError):
    """Raised when a text-generation call fails or returns no content."""

    def __init__(
        self,
        message: str = "Text generation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Vector index errors
# ---------------------------------------------------------------------------

class VectorStoreError(RagAppError):
    """Raised when a vector index read or write fails."""

    def __init__(
        self,
        message: str = "Vector store operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class DimensionMismatchError(VectorStoreError):
    """Raised when vectors of a different dimensionality reach an existing collection."""

    def __init__(
        self,
        message: str = "Embedding dimension does not match the collection",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
