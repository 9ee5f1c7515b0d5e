"""OpenAI model provider adapter.

Wraps the ``openai`` async client to implement :class:`IModelProvider`:
``text-embedding-3-small`` for embeddings and ``gpt-4o-mini`` (temperature 0)
for answers.  When ``openai_base_url`` is configured the client points at
that OpenAI-compatible endpoint instead.

The SDK client is created on first use.  A missing ``OPENAI_API_KEY`` is
reported as :class:`AuthError` at that point rather than at startup, so the
service can boot (and ingest with another provider) without the key.
"""

from __future__ import annotations

from typing import Any

import openai
import structlog

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

_OPENAI_BATCH_LIMIT = 2048

# Known embedding model dimensions.
_MODEL_DIMENSIONS: dict[str, int] = {
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
    "text-embedding-ada-002": 1536,
}


def map_openai_error(
    exc: openai.APIError,
    provider_name: str,
    *,
    generating: bool,
    unavailable_cls: type[ProviderUnavailableError] = ProviderUnavailableError,
) -> RagAppError:
    """Translate an ``openai`` SDK exception into the ragapp error taxonomy.

    Shared by every adapter that talks the OpenAI wire protocol (OpenAI
    itself and Ollama's ``/v1`` endpoint).
    """
    if isinstance(exc, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return AuthError(
            message=f"Credentials rejected: {exc}",
            provider_name=provider_name,
        )
    if isinstance(exc, openai.RateLimitError):
        return RateLimitError(
            message=f"Rate limit exceeded: {exc}",
            provider_name=provider_name,
        )
    # APITimeoutError is a subclass of APIConnectionError.
    if isinstance(exc, (openai.APIConnectionError, openai.InternalServerError)):
        return unavailable_cls(
            message=f"Service unavailable: {exc}",
            provider_name=provider_name,
        )
    if generating:
        return GenerationError(
            message=f"API error: {exc}",
            provider_name=provider_name,
        )
    return ProviderUnavailableError(
        message=f"Embedding API error: {exc}",
        provider_name=provider_name,
    )


class OpenAIModelProvider(IModelProvider):
    """Model provider backed by an OpenAI-compatible API.

    Uses ``text-embedding-3-small`` (1536 dims) and ``gpt-4o-mini`` by
    default; both can be overridden via settings.  Handles automatic
    batching for embedding inputs exceeding the per-call limit.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._api_key = settings.openai_api_key
        self._base_url = settings.openai_base_url
        self._client: openai.AsyncOpenAI | None = None
        self._embedding_model = settings.openai_embedding_model or "text-embedding-3-small"
        self._text_model = settings.openai_text_model or "gpt-4o-mini"
        self._dimension = _MODEL_DIMENSIONS.get(self._embedding_model, 1536)
        self._provider_label = "openai-compatible" if self._base_url else "openai"

    def _get_client(self) -> openai.AsyncOpenAI:
        if not self._api_key:
            raise AuthError(
                message="OPENAI_API_KEY is not set",
                provider_name=self.get_provider_name(),
            )
        if self._client is None:
            client_kwargs: dict[str, Any] = {"api_key": self._api_key}
            if self._base_url:
                client_kwargs["base_url"] = self._base_url
            self._client = openai.AsyncOpenAI(**client_kwargs)
        return self._client

    # ------------------------------------------------------------------
    # IModelProvider implementation
    # ------------------------------------------------------------------

    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Generate embedding vectors, splitting into batches of 2048."""
        if not texts:
            return []

        client = self._get_client()
        all_embeddings: list[list[float]] = []
        try:
            for start in range(0, len(texts), _OPENAI_BATCH_LIMIT):
                batch = texts[start : start + _OPENAI_BATCH_LIMIT]
                response = await client.embeddings.create(
                    input=batch,
                    model=self._embedding_model,
                )
                all_embeddings.extend(item.embedding for item in response.data)
                logger.info(
                    "openai_embedding_batch",
                    model=self._embedding_model,
                    provider=self._provider_label,
                    batch_size=len(batch),
                    tokens=response.usage.total_tokens if response.usage else None,
                )
        except openai.APIError as exc:
            raise map_openai_error(
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
        """Generate an answer via the chat completions API.

        The prompt is sent as a single user message.  Temperature defaults
        to 0 so answers stay close to the supplied context.
        """
        client = self._get_client()
        request: dict[str, Any] = {
            "model": self._text_model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": 0.0 if temperature is None else temperature,
        }
        if max_tokens is not None:
            request["max_tokens"] = max_tokens

        try:
            response = await client.chat.completions.create(**request)
        except openai.APIError as exc:
            raise map_openai_error(
                exc, self.get_provider_name(), generating=True
            ) from exc

        content = response.choices[0].message.content if response.choices else None
        if content is None:
            raise GenerationError(
                message=f"{self._provider_label} returned empty response",
                provider_name=self.get_provider_name(),
            )
        logger.info(
            "openai_completion",
            model=self._text_model,
            provider=self._provider_label,
            tokens=response.usage.total_tokens if response.usage else None,
        )
        return content

    def get_dimension(self) -> int:
        return self._dimension

    def get_provider_name(self) -> str:
        """Return 'openai' or 'openai-compatible' depending on configuration."""
        return self._provider_label

    def is_available(self) -> bool:
        """Return ``True`` if an API key is configured (doesn't verify it works)."""
        return bool(self._api_key)
