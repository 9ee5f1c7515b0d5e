"""Public interface definitions for external service providers.

Every external service in ragapp is accessed through the abstract base
classes in this package.  Concrete adapters live in ``ragapp/providers/``
and are built by ``ragapp/providers/factory.py`` at startup.

    Interface               →  Concrete implementations
    ─────────────────────────────────────────────────────
    IModelProvider          →  OpenAIModelProvider, OllamaModelProvider,
                               GoogleModelProvider
    IVectorStoreProvider    →  ChromaDBProvider
"""

from ragapp.interfaces.model_provider import IModelProvider
from ragapp.interfaces.vector_store_provider import IVectorStoreProvider

__all__ = [
    "IModelProvider",
    "IVectorStoreProvider",
]
