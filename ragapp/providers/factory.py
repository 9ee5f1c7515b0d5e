"""Provider selection from settings.

The model provider is chosen once, here, from ``LLM_PROVIDER``.  The
pipelines only ever see the :class:`IModelProvider` /
:class:`IVectorStoreProvider` interfaces, so switching providers never
changes their call sequence.
"""

from __future__ import annotations

import structlog

from ragapp.config.settings import Settings
from ragapp.interfaces.model_provider import IModelProvider
from ragapp.interfaces.vector_store_provider import IVectorStoreProvider
from ragapp.providers.model.google_provider import GoogleModelProvider
from ragapp.providers.model.ollama_provider import OllamaModelProvider
from ragapp.providers.model.openai_provider import OpenAIModelProvider
from ragapp.providers.vector_store.chromadb_provider import ChromaDBProvider

logger = structlog.get_logger(logger_name=__name__)

_MODEL_PROVIDERS: dict[str, type[IModelProvider]] = {
    "openai": OpenAIModelProvider,
    "ollama": OllamaModelProvider,
    "gemini": GoogleModelProvider,
    "google": GoogleModelProvider,
}


def build_model_provider(settings: Settings) -> IModelProvider:
    """Return the model provider named by ``settings.llm_provider``.

    Matching is case-insensitive.  Unknown names fall back to OpenAI.
    """
    requested = (settings.llm_provider or "").strip().lower()
    provider_cls = _MODEL_PROVIDERS.get(requested)
    if provider_cls is None:
        logger.warning(
            "unknown_llm_provider",
            requested=settings.llm_provider,
            fallback="openai",
        )
        provider_cls = OpenAIModelProvider
    provider = provider_cls(settings=settings)
    logger.info(
        "model_provider_selected",
        provider=provider.get_provider_name(),
        dimension=provider.get_dimension(),
    )
    return provider


def build_vector_store(settings: Settings) -> IVectorStoreProvider:
    """Return the Chroma adapter for ``CHROMA_URL`` / ``COLLECTION_NAME``."""
    backend = (settings.vector_db or "chroma").strip().lower()
    if backend not in ("chroma", "chromadb"):
        logger.warning("unsupported_vector_db", requested=settings.vector_db, using="chroma")
    return ChromaDBProvider(
        url=settings.chroma_url,
        collection_name=settings.collection_name,
    )
