"""Source processors for the ragapp ingestion pipeline.

Each processor converts one file format into
:class:`~ragapp.models.rag.RawDocument` objects, which the loader hands to
the splitter:

- **TextProcessor** -- ``.txt`` files, one document per file
- **PDFProcessor**  -- ``.pdf`` files via PyMuPDF, one document per page

Processors expose ``extensions`` and ``process(file_path)``; the loader
accepts any object with that shape for additional formats.
"""

from ragapp.services.ingestion.source_processors.pdf_processor import PDFProcessor
from ragapp.services.ingestion.source_processors.text_processor import TextProcessor

__all__ = ["PDFProcessor", "TextProcessor"]
