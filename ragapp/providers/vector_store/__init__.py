"""Vector store provider adapters.

ChromaDBProvider -- Chroma server over HTTP, cosine space, pre-computed vectors.
"""

from ragapp.providers.vector_store.chromadb_provider import ChromaDBProvider

__all__ = ["ChromaDBProvider"]
