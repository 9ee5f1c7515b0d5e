"""Orchestrator for the document ingestion pipeline.

Pipeline stages: **load -> sanitize -> split -> embed -> store**.

:class:`IngestionService` coordinates four collaborators (document loader,
text splitter, model provider, vector store) without any of them knowing
about each other.  All of them are injected, so the model provider can be
swapped (OpenAI -> Ollama -> Gemini) without changing this class.

Failures are not recovered here: any exception from a stage is logged and
re-raised unchanged.  Writes are not transactional, so chunks stored before
a failure stay in the index.
"""

from __future__ import annotations

import asyncio
import time
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from ragapp.models.rag import IngestionResult
from ragapp.services.ingestion.chunker import RecursiveTextSplitter
from ragapp.services.ingestion.loader import DocumentLoader
from ragapp.services.ingestion.metadata import sanitize_metadata

if TYPE_CHECKING:
    from ragapp.interfaces.model_provider import IModelProvider
    from ragapp.interfaces.vector_store_provider import IVectorStoreProvider

logger = structlog.get_logger(logger_name=__name__)

NO_DOCUMENTS_MESSAGE = "No documents found."
NO_CONTENT_MESSAGE = "No content to index."


class IngestionService:
    """Runs the full ingestion pipeline for a directory or a single file.

    Parameters
    ----------
    loader:
        Reads source files into raw documents.
    splitter:
        Splits raw documents into overlapping chunks.
    model_provider:
        Generates embedding vectors for chunk text.
    vector_store:
        Stores embedded chunks for retrieval.
    """

    def __init__(
        self,
        loader: DocumentLoader,
        splitter: RecursiveTextSplitter,
        model_provider: IModelProvider,
        vector_store: IVectorStoreProvider,
    ) -> None:
        self._loader = loader
        self._splitter = splitter
        self._model_provider = model_provider
        self._vector_store = vector_store

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def ingest(
        self,
        source: str | Path,
        is_single_file: bool = False,
    ) -> IngestionResult:
        """Load, split, embed and store everything under *source*.

        Returns
        -------
        IngestionResult
            ``success=False`` with a message when nothing was indexable;
            otherwise ``success=True`` with the number of chunks stored.
        """
        source_str = str(source)
        start = time.monotonic()
        logger.info(
            "ingestion_started",
            source=source_str,
            single_file=is_single_file,
            provider=self._model_provider.get_provider_name(),
            collection=self._vector_store.get_collection_name(),
        )

        try:
            documents = await asyncio.to_thread(self._loader.load, source, is_single_file)
            if not documents:
                logger.warning("ingestion_no_documents", source=source_str)
                return IngestionResult(
                    success=False,
                    chunk_count=0,
                    message=NO_DOCUMENTS_MESSAGE,
                    source=source_str,
                )

            documents = [
                doc.model_copy(update={"metadata": sanitize_metadata(doc.metadata)})
                for doc in documents
            ]

            chunks = self._splitter.split_documents(documents)
            if not chunks:
                logger.warning("ingestion_no_content", source=source_str)
                return IngestionResult(
                    success=False,
                    chunk_count=0,
                    message=NO_CONTENT_MESSAGE,
                    source=source_str,
                )

            embeddings = await self._model_provider.embed([c.content for c in chunks])
            stored = await self._vector_store.add_chunks(chunks, embeddings)
        except Exception as exc:
            logger.error(
                "ingestion_failed",
                source=source_str,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            raise

        logger.info(
            "ingestion_complete",
            source=source_str,
            documents=len(documents),
            chunks=stored,
            time_s=round(time.monotonic() - start, 2),
        )
        return IngestionResult(
            success=True,
            chunk_count=stored,
            message=f"Ingested {stored} chunks from {source_str}.",
            source=source_str,
        )

    async def ingest_directory(self, dir_path: str | Path) -> IngestionResult:
        """Bulk-ingest every supported file under *dir_path*."""
        return await self.ingest(dir_path, is_single_file=False)

    async def ingest_file(self, file_path: str | Path) -> IngestionResult:
        """Incrementally ingest one ``.txt`` or ``.pdf`` file."""
        return await self.ingest(file_path, is_single_file=True)
