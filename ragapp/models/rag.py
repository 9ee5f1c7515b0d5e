"""RAG pipeline data models.

Defines Pydantic v2 models for the documents flowing through ingestion, the
chunks written to the vector index, search hits, and ingestion results.  All
models are frozen.

Flow:

    1. LOAD: the document loader reads ``.txt`` / ``.pdf`` files into
       :class:`RawDocument` objects (one per text file, one per PDF page).
    2. SPLIT: the recursive splitter slices each document into
       :class:`DocumentChunk` windows carrying sanitized metadata.
    3. EMBED + STORE: chunk texts are embedded and written to Chroma.
    4. RETRIEVE: a query vector returns :class:`RetrievedChunk` hits whose
       texts ground the generated answer.
"""

from __future__ import annotations

from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field

# Value types the vector store accepts in metadata.
MetadataValue = Union[str, int, float, bool, None]


class RawDocument(BaseModel):
    """Text content read from one source file (or one PDF page) plus provenance."""

    model_config = ConfigDict(frozen=True)

    content: str = Field(description="Extracted text of the file or page.")
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        description='Provenance metadata; always contains "source".',
    )


class DocumentChunk(BaseModel):
    """A contiguous slice of a :class:`RawDocument`, ready for embedding.

    ``content`` equals ``parent.content[start_index:start_index + len(content)]``
    where ``start_index`` is recorded in ``metadata``.
    """

    model_config = ConfigDict(frozen=True)

    chunk_id: str = Field(description="Unique identifier (UUID) for this chunk.")
    content: str = Field(description="The chunk's textual content.")
    metadata: dict[str, MetadataValue] = Field(
        default_factory=dict,
        description="Sanitized parent metadata plus start_index / chunk_index.",
    )


class RetrievedChunk(BaseModel):
    """A chunk returned by a similarity query, with the index-reported distance."""

    model_config = ConfigDict(frozen=True)

    chunk: DocumentChunk
    distance: float | None = Field(
        default=None,
        description="Distance reported by the vector index (smaller is closer).",
    )


class IngestionResult(BaseModel):
    """Summary of one ingestion run.

    ``success`` is ``False`` with a message (and no exception) when the source
    produced nothing to index.
    """

    model_config = ConfigDict(frozen=True)

    success: bool
    chunk_count: int | None = Field(default=None, ge=0)
    message: str | None = None
    source: str = Field(default="", description="The file or directory that was ingested.")
