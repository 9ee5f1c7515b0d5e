"""Utility modules for ragapp.

- **errors** -- Exception hierarchy rooted at RagAppError; each failure
  category (validation, auth, throttling, availability, generation, vector
  store) has its own subclass so callers can react precisely.
- **logging** -- structlog setup for both entry points: console or JSON
  rendering to a chosen stream, with chatty client libraries held at WARNING.
"""

from ragapp.utils.errors import (
    AuthError,
    ConfigurationError,
    DimensionMismatchError,
    GenerationError,
    ProviderConnectionError,
    ProviderUnavailableError,
    RagAppError,
    RateLimitError,
    UnsupportedFormatError,
    ValidationError,
    VectorStoreError,
)
from ragapp.utils.logging import configure_logging, get_logger

__all__ = [
    "AuthError",
    "ConfigurationError",
    "DimensionMismatchError",
    "GenerationError",
    "ProviderConnectionError",
    "ProviderUnavailableError",
    "RagAppError",
    "RateLimitError",
    "UnsupportedFormatError",
    "ValidationError",
    "VectorStoreError",
    "configure_logging",
    "get_logger",
]
