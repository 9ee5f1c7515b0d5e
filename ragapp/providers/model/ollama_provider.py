"""Ollama model provider adapter.

Wraps a local Ollama server via its OpenAI-compatible API endpoint, using the
``openai`` client library pointed at ``{OLLAMA_BASE_URL}/v1``.  Embeddings
come from ``nomic-embed-text`` (768 dimensions) and answers from ``llama3``.
No API key is needed, so this provider runs fully offline.

Setup: install Ollama (https://ollama.ai), then ``ollama pull llama3`` and
``ollama pull nomic-embed-text``.  Set OLLAMA_BASE_URL=http://localhost:11434
"""

from __future__ import annotations

from typing import Any

import httpx
import openai
import structlog

from ragapp.config.settings import Settings
from ragapp.interfaces.model_provider import IModelProvider
from ragapp.providers.model.openai_provider import map_openai_error
from ragapp.utils.errors import (
    GenerationError,
    ProviderConnectionError,
    ProviderUnavailableError,
)

logger = structlog.get_logger(logger_name=__name__)

_OLLAMA_BATCH_LIMIT = 512

_MODEL_DIMENSIONS: dict[str, int] = {
    "nomic-embed-text": 768,
    "mxbai-embed-large": 1024,
    "all-minilm": 384,
}


class OllamaModelProvider(IModelProvider):
    """Model provider backed by a local Ollama server.

    Ollama exposes an OpenAI-compatible ``/v1`` API, so this adapter reuses
    ``openai.AsyncOpenAI`` with a different base URL.  A server that cannot
    be reached surfaces as :class:`ProviderConnectionError`.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._base_url = settings.ollama_base_url.rstrip("/")
        self._client: openai.AsyncOpenAI | None = None
        self._embedding_model = settings.ollama_embedding_model or "nomic-embed-text"
        self._text_model = settings.ollama_text_model or "llama3"
        self._dimension = _MODEL_DIMENSIONS.get(self._embedding_model, 768)

    def _get_client(self) -> openai.AsyncOpenAI:
        if self._client is None:
            self._client = openai.AsyncOpenAI(
                base_url=f"{self._base_url}/v1",
                # Ollama ignores the key but the SDK requires a non-empty one.
                api_key="ollama",
            )
        return self._client

    # ------------------------------------------------------------------
    # IModelProvider implementation
    # ------------------------------------------------------------------

    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Generate embedding vectors, splitting into batches of 512."""
        if not texts:
            return []

        client = self._get_client()
        all_embeddings: list[list[float]] = []
        try:
            for start in range(0, len(texts), _OLLAMA_BATCH_LIMIT):
                batch = texts[start : start + _OLLAMA_BATCH_LIMIT]
                response = await client.embeddings.create(
                    input=batch,
                    model=self._embedding_model,
                )
                all_embeddings.extend(item.embedding for item in response.data)
                logger.info(
                    "ollama_embedding_batch",
                    model=self._embedding_model,
                    batch_size=len(batch),
                )
        except openai.APIError as exc:
            raise map_openai_error(
                exc,
                self.get_provider_name(),
                generating=False,
                unavailable_cls=ProviderConnectionError,
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
        """Generate an answer via Ollama's OpenAI-compatible chat API."""
        client = self._get_client()
        request: dict[str, Any] = {
            "model": self._text_model,
            "messages": [{"role": "user", "content": prompt}],
        }
        if temperature is not None:
            request["temperature"] = temperature
        if max_tokens is not None:
            request["max_tokens"] = max_tokens

        try:
            response = await client.chat.completions.create(**request)
        except openai.APIError as exc:
            raise map_openai_error(
                exc,
                self.get_provider_name(),
                generating=True,
                unavailable_cls=ProviderConnectionError,
            ) from exc

        content = response.choices[0].message.content if response.choices else None
        if content is None:
            raise GenerationError(
                message="Ollama returned empty response",
                provider_name=self.get_provider_name(),
            )
        logger.info("ollama_completion", model=self._text_model)
        return content

    def get_dimension(self) -> int:
        """Return 768 for nomic-embed-text."""
        return self._dimension

    def get_provider_name(self) -> str:
        return "ollama"

    def is_available(self) -> bool:
        """Return ``True`` if the Ollama server answers on ``/api/tags``."""
        if not self._base_url:
            return False
        try:
            response = httpx.get(f"{self._base_url}/api/tags", timeout=3.0)
            return response.status_code == 200
        except httpx.HTTPError:
            return False
