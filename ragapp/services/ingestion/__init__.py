"""Document ingestion pipeline: load -> sanitize -> split -> embed -> store."""

from ragapp.services.ingestion.chunker import RecursiveTextSplitter, split_documents
from ragapp.services.ingestion.ingestion_service import IngestionService
from ragapp.services.ingestion.loader import DocumentLoader
from ragapp.services.ingestion.metadata import sanitize_metadata

__all__ = [
    "DocumentLoader",
    "IngestionService",
    "RecursiveTextSplitter",
    "sanitize_metadata",
    "split_documents",
]
