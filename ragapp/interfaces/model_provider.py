"""Abstract base class for model service providers.

One provider family (OpenAI, Ollama, Google) supplies both capabilities the
RAG pipelines need: text embeddings for ingestion and query-time search, and
text generation for grounded answers.  Each family is a single concrete
class, chosen once from settings by ``ragapp.providers.factory``, so neither
pipeline contains a provider conditional.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementations:
#   OpenAIModelProvider  -- text-embedding-3-small + gpt-4o-mini (API key)
#   OllamaModelProvider  -- nomic-embed-text + llama3 on a local Ollama server
#   GoogleModelProvider  -- gemini-embedding-001 + Gemini text model (API key)
# Located in: ragapp/providers/model/
class IModelProvider(ABC):
    """Contract for the embedding + generation backend used by the pipelines."""

    @abstractmethod
    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Generate embedding vectors for a batch of texts.

        Parameters
        ----------
        texts:
            Texts to embed.  Implementations split the list into backend
            sized sub-batches themselves.

        Returns
        -------
        list[list[float]]
            Vectors corresponding positionally to *texts*, each of length
            :meth:`get_dimension`.  An empty input returns an empty list.

        Raises
        ------
        ragapp.utils.errors.AuthError
            If credentials are missing or rejected.
        ragapp.utils.errors.RateLimitError
            If the backend throttles the request.
        ragapp.utils.errors.ProviderUnavailableError
            On network or service failure.
        """

    @abstractmethod
    async def embed_query(self, text: str) -> list[float]:
        """Generate the embedding vector for a single query string."""

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """Generate a completion for *prompt* and return the text verbatim.

        ``None`` for *temperature* / *max_tokens* means the provider default.

        Raises
        ------
        ragapp.utils.errors.GenerationError
            If the call fails for a reason other than auth, throttling or
            availability, or the model returns no text.
        """

    @abstractmethod
    def get_dimension(self) -> int:
        """Return the dimensionality of the embedding vectors.

        Constant for the lifetime of the instance.  Example values: ``1536``
        (``text-embedding-3-small``), ``768`` (``nomic-embed-text``).
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier, e.g. ``"openai"``, ``"ollama"``, ``"google"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider looks configured, without a model call."""
