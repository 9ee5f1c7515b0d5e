"""ChromaDB vector store provider adapter.

Wraps ``chromadb.HttpClient`` to implement :class:`IVectorStoreProvider`
against a Chroma server at ``CHROMA_URL``.  Uses cosine distance for
similarity search.  Vectors are always computed by the model provider, so
the collection is opened with a no-op embedding function.
"""

from __future__ import annotations

import asyncio
import os
from typing import Any
from urllib.parse import urlparse

# Disable ChromaDB's anonymous telemetry before importing chromadb.
os.environ.setdefault("ANONYMIZED_TELEMETRY", "False")

import chromadb
import structlog

from ragapp.interfaces.vector_store_provider import IVectorStoreProvider
from ragapp.models.rag import DocumentChunk, MetadataValue, RetrievedChunk
from ragapp.utils.errors import DimensionMismatchError, VectorStoreError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_TOP_K = 4
_UPSERT_BATCH_SIZE = 500


class _NoopEmbeddingFunction(chromadb.EmbeddingFunction[list[str]]):
    """No-op embedding function that prevents ChromaDB from loading a model.

    ragapp always passes pre-computed embeddings, so ChromaDB's built-in
    embedding is never invoked.  Without this, ChromaDB downloads its
    default ONNX model on collection creation.
    """

    def __call__(self, input: list[str]) -> list[list[float]]:
        raise NotImplementedError(
            "ragapp uses pre-computed embeddings; "
            "ChromaDB's built-in embedding should never be called."
        )

    def name(self) -> str:
        """Return function name (required by ChromaDB's EmbeddingFunction protocol)."""
        return "noop_precomputed"


def _parse_chroma_url(url: str) -> tuple[str, int, bool]:
    """Split ``CHROMA_URL`` into ``(host, port, ssl)`` for ``chromadb.HttpClient``."""
    parsed = urlparse(url if "://" in url else f"http://{url}")
    ssl = parsed.scheme == "https"
    host = parsed.hostname or "localhost"
    port = parsed.port or (443 if ssl else 8000)
    return host, port, ssl


class ChromaDBProvider(IVectorStoreProvider):
    """Vector store provider backed by a ChromaDB server.

    The HTTP client is created on first use so that constructing the
    provider (at app startup, or in the CLI) never touches the network.
    Tests inject a fake client through *client*.
    """

    def __init__(
        self,
        url: str = "http://localhost:8000",
        collection_name: str = "rag-docs",
        client: Any | None = None,
        default_top_k: int = _DEFAULT_TOP_K,
    ) -> None:
        self._url = url
        self._collection_name = collection_name
        self._client = client
        self._default_top_k = default_top_k

    # ------------------------------------------------------------------
    # Client / collection access
    # ------------------------------------------------------------------

    def _get_client(self) -> Any:
        if self._client is None:
            host, port, ssl = _parse_chroma_url(self._url)
            self._client = chromadb.HttpClient(
                host=host,
                port=port,
                ssl=ssl,
                settings=chromadb.config.Settings(anonymized_telemetry=False),
            )
        return self._client

    def _get_collection(self) -> Any:
        """Open the collection, creating it with cosine space if absent."""
        return self._get_client().get_or_create_collection(
            name=self._collection_name,
            metadata={"hnsw:space": "cosine"},
            embedding_function=_NoopEmbeddingFunction(),
        )

    # ------------------------------------------------------------------
    # IVectorStoreProvider implementation
    # ------------------------------------------------------------------

    async def add_chunks(
        self,
        chunks: list[DocumentChunk],
        embeddings: list[list[float]],
    ) -> int:
        """Upsert pre-embedded chunks in batches of 500."""
        if len(chunks) != len(embeddings):
            raise ValueError(
                f"chunks and embeddings length mismatch: {len(chunks)} != {len(embeddings)}"
            )
        if not chunks:
            return 0

        try:
            return await asyncio.to_thread(self._add_chunks_sync, chunks, embeddings)
        except VectorStoreError:
            raise
        except Exception as exc:
            raise VectorStoreError(
                message=f"ChromaDB add_chunks failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    def _add_chunks_sync(
        self,
        chunks: list[DocumentChunk],
        embeddings: list[list[float]],
    ) -> int:
        collection = self._get_collection()
        self._validate_embedding_dimensions(collection, len(embeddings[0]))

        total_stored = 0
        for start in range(0, len(chunks), _UPSERT_BATCH_SIZE):
            end = min(start + _UPSERT_BATCH_SIZE, len(chunks))
            batch_chunks = chunks[start:end]

            collection.upsert(
                ids=[c.chunk_id for c in batch_chunks],
                embeddings=embeddings[start:end],
                documents=[c.content for c in batch_chunks],
                metadatas=[self._chunk_to_metadata(c) for c in batch_chunks],
            )
            total_stored += len(batch_chunks)

        logger.info(
            "chromadb_add_chunks",
            collection=self._collection_name,
            count=total_stored,
            batches=(len(chunks) + _UPSERT_BATCH_SIZE - 1) // _UPSERT_BATCH_SIZE,
        )
        return total_stored

    async def query(
        self,
        embedding: list[float],
        top_k: int | None = None,
    ) -> list[RetrievedChunk]:
        """Return the *top_k* nearest chunks, closest first.

        An empty (or newly created) collection yields ``[]``.
        """
        n_results = top_k or self._default_top_k
        try:
            return await asyncio.to_thread(self._query_sync, embedding, n_results)
        except Exception as exc:
            raise VectorStoreError(
                message=f"ChromaDB query failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    def _query_sync(self, embedding: list[float], n_results: int) -> list[RetrievedChunk]:
        collection = self._get_collection()
        available = collection.count()
        if available == 0:
            logger.info("chromadb_query", collection=self._collection_name, results_count=0)
            return []

        results = collection.query(
            query_embeddings=[embedding],
            n_results=min(n_results, available),
            include=["documents", "metadatas", "distances"],
        )
        if not results["documents"] or not results["documents"][0]:
            return []

        documents = results["documents"][0]
        ids = results["ids"][0] if results.get("ids") else [""] * len(documents)
        metadatas = (
            results["metadatas"][0] if results.get("metadatas") else [{}] * len(documents)
        )
        distances = (
            results["distances"][0] if results.get("distances") else [None] * len(documents)
        )

        retrieved = [
            RetrievedChunk(
                chunk=DocumentChunk(
                    chunk_id=chunk_id,
                    content=doc_text or "",
                    metadata=dict(meta or {}),
                ),
                distance=float(distance) if distance is not None else None,
            )
            for chunk_id, doc_text, meta, distance in zip(
                ids, documents, metadatas, distances, strict=True
            )
        ]
        logger.info(
            "chromadb_query",
            collection=self._collection_name,
            results_count=len(retrieved),
            top_distance=retrieved[0].distance if retrieved else None,
        )
        return retrieved

    async def count(self) -> int:
        try:
            return await asyncio.to_thread(lambda: self._get_collection().count())
        except Exception as exc:
            raise VectorStoreError(
                message=f"ChromaDB count failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    def get_collection_name(self) -> str:
        return self._collection_name

    def get_provider_name(self) -> str:
        return "chromadb"

    def is_available(self) -> bool:
        """Return ``True`` if the ChromaDB server answers a heartbeat."""
        try:
            self._get_client().heartbeat()
            return True
        except Exception:
            return False

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _validate_embedding_dimensions(self, collection: Any, incoming_dim: int) -> None:
        """Compare *incoming_dim* against one stored vector, if any.

        Mixing dimensionalities in one collection makes every query fail,
        so a mismatch is rejected before anything is written.
        """
        if collection.count() == 0:
            return

        sample = collection.peek(limit=1)
        embeddings = sample.get("embeddings") if sample else None
        if embeddings is None or len(embeddings) == 0:
            return

        stored_dim = len(embeddings[0])
        if stored_dim != incoming_dim:
            logger.error(
                "embedding_dimension_mismatch",
                collection=self._collection_name,
                stored_dim=stored_dim,
                incoming_dim=incoming_dim,
            )
            raise DimensionMismatchError(
                message=(
                    f"Embedding dimension mismatch: collection "
                    f"'{self._collection_name}' has {stored_dim}-dim vectors "
                    f"but received {incoming_dim}-dim vectors. Use the provider "
                    f"that built the collection or set a new COLLECTION_NAME."
                ),
                provider_name=self.get_provider_name(),
            )

    @staticmethod
    def _chunk_to_metadata(chunk: DocumentChunk) -> dict[str, MetadataValue]:
        """Convert chunk metadata to a ChromaDB-compatible dict.

        ChromaDB metadata values must be str, int, float, or bool, so
        ``None`` values are omitted.
        """
        return {key: value for key, value in chunk.metadata.items() if value is not None}
