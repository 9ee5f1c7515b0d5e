"""ragapp domain models -- re-exports all public model classes."""

from __future__ import annotations

from ragapp.models.rag import (
    DocumentChunk,
    IngestionResult,
    MetadataValue,
    RawDocument,
    RetrievedChunk,
)

__all__ = [
    "DocumentChunk",
    "IngestionResult",
    "MetadataValue",
    "RawDocument",
    "RetrievedChunk",
]
