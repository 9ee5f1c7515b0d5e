"""Google Gemini model provider adapter.

Wraps the ``google-genai`` SDK to implement :class:`IModelProvider`:
``gemini-embedding-001`` for embeddings and a Gemini text model (capped at
2048 output tokens) for answers.  The SDK client is synchronous here, so
every call runs in a worker thread via ``asyncio.to_thread``.
"""

from __future__ import annotations

import asyncio

import httpx
import structlog
from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types

from ragapp.config.settings import Settings
from ragapp.interfaces.model_provider import IModelProvider
from ragapp.utils.errors import (
    AuthError,
    GenerationError,
    ProviderUnavailableError,
    RagAppError,
    RateLimitError,
)

logger = structlog.get_logger(logger_name=__name__)

# Gemini accepts at most 100 texts per embed_content call.
_GOOGLE_BATCH_LIMIT = 100
_DEFAULT_MAX_OUTPUT_TOKENS = 2048

_MODEL_DIMENSIONS: dict[str, int] = {
    "gemini-embedding-001": 3072,
    "text-embedding-004": 768,
}


def _map_google_error(
    exc: Exception, provider_name: str, *, generating: bool
) -> RagAppError:
    """Translate a ``google-genai`` / transport exception into ragapp errors."""
    if isinstance(exc, httpx.HTTPError):
        return ProviderUnavailableError(
            message=f"Service unavailable: {exc}",
            provider_name=provider_name,
        )
    code = getattr(exc, "code", None)
    if code in (401, 403) or (code == 400 and "api key" in str(exc).lower()):
        return AuthError(
            message=f"Credentials rejected: {exc}",
            provider_name=provider_name,
        )
    if code == 429:
        return RateLimitError(
            message=f"Rate limit exceeded: {exc}",
            provider_name=provider_name,
        )
    if isinstance(exc, genai_errors.ServerError):
        return ProviderUnavailableError(
            message=f"Service unavailable: {exc}",
            provider_name=provider_name,
        )
    if generating:
        return GenerationError(
            message=f"Gemini API error: {exc}",
            provider_name=provider_name,
        )
    return ProviderUnavailableError(
        message=f"Gemini embedding API error: {exc}",
        provider_name=provider_name,
    )


class GoogleModelProvider(IModelProvider):
    """Model provider backed by the Gemini API.

    Requires ``GOOGLE_API_KEY``; the check happens on the first call, when
    the ``genai.Client`` is created.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._api_key = settings.google_api_key
        self._client: genai.Client | None = None
        self._embedding_model = settings.google_embedding_model or "gemini-embedding-001"
        self._text_model = settings.google_text_model or "gemini-3-flash-preview"
        self._dimension = _MODEL_DIMENSIONS.get(self._embedding_model, 3072)

    def _get_client(self) -> genai.Client:
        if not self._api_key:
            raise AuthError(
                message="GOOGLE_API_KEY is not set",
                provider_name=self.get_provider_name(),
            )
        if self._client is None:
            self._client = genai.Client(api_key=self._api_key)
        return self._client

    # ------------------------------------------------------------------
    # IModelProvider implementation
    # ------------------------------------------------------------------

    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Generate embedding vectors, splitting into batches of 100."""
        if not texts:
            return []

        client = self._get_client()
        all_embeddings: list[list[float]] = []
        try:
            for start in range(0, len(texts), _GOOGLE_BATCH_LIMIT):
                batch = texts[start : start + _GOOGLE_BATCH_LIMIT]
                response = await asyncio.to_thread(
                    client.models.embed_content,
                    model=self._embedding_model,
                    contents=batch,
                )
                all_embeddings.extend(
                    list(item.values or []) for item in (response.embeddings or [])
                )
                logger.info(
                    "google_embedding_batch",
                    model=self._embedding_model,
                    batch_size=len(batch),
                )
        except (genai_errors.APIError, httpx.HTTPError) as exc:
            raise _map_google_error(
                exc, self.get_provider_name(), generating=False
            ) from exc

        if len(all_embeddings) != len(texts):
            raise ProviderUnavailableError(
                message=(
                    f"Expected {len(texts)} embeddings, received {len(all_embeddings)}"
                ),
                provider_name=self.get_provider_name(),
            )
        return all_embeddings

    async def embed_query(self, text: str) -> list[float]:
        result = await self.embed([text])
        return result[0]

    async def generate(
        self,
        prompt: str,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """Generate an answer with ``generate_content``."""
        client = self._get_client()
        config = genai_types.GenerateContentConfig(
            temperature=temperature,
            max_output_tokens=max_tokens or _DEFAULT_MAX_OUTPUT_TOKENS,
        )
        try:
            response = await asyncio.to_thread(
                client.models.generate_content,
                model=self._text_model,
                contents=prompt,
                config=config,
            )
        except (genai_errors.APIError, httpx.HTTPError) as exc:
            raise _map_google_error(
                exc, self.get_provider_name(), generating=True
            ) from exc

        content = response.text
        if content is None:
            raise GenerationError(
                message="Gemini returned empty response",
                provider_name=self.get_provider_name(),
            )
        logger.info("google_completion", model=self._text_model)
        return content

    def get_dimension(self) -> int:
        return self._dimension

    def get_provider_name(self) -> str:
        return "google"

    def is_available(self) -> bool:
        """Return ``True`` if an API key is configured."""
        return bool(self._api_key)
