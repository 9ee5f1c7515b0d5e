"""Abstract base class for vector-store service providers.

Defines the contract for storing pre-embedded chunks and serving
nearest-neighbour queries.  The concrete adapter wraps a Chroma server; the
pipelines only see this interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ragapp.models.rag import DocumentChunk, RetrievedChunk


# Concrete implementation: ChromaDBProvider (ragapp/providers/vector_store/)
class IVectorStoreProvider(ABC):
    """Contract for the vector index shared by ingestion and retrieval.

    All methods touching the store are async.  The store owns concurrency
    control between simultaneous writers; adapters keep no shared state
    beyond their client handle.
    """

    @abstractmethod
    async def add_chunks(
        self,
        chunks: list[DocumentChunk],
        embeddings: list[list[float]],
    ) -> int:
        """Write pre-embedded chunks into the collection (created if absent).

        Parameters
        ----------
        chunks:
            Chunks to store; ``chunk_id`` is the record id.
        embeddings:
            Vectors corresponding positionally to *chunks*.

        Returns
        -------
        int
            Number of records written.

        Raises
        ------
        ValueError
            If ``len(chunks) != len(embeddings)``.
        ragapp.utils.errors.VectorStoreError
            If the store operation fails.  Earlier batches are not rolled back.
        """

    @abstractmethod
    async def query(
        self,
        embedding: list[float],
        top_k: int | None = None,
    ) -> list[RetrievedChunk]:
        """Return the chunks nearest to *embedding*, closest first.

        ``top_k`` of ``None`` uses the adapter's own default.
        """

    @abstractmethod
    async def count(self) -> int:
        """Return the number of records in the collection."""

    @abstractmethod
    def get_collection_name(self) -> str:
        """Return the name of the collection this adapter reads and writes."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier, e.g. ``"chromadb"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the store answers a lightweight request."""
