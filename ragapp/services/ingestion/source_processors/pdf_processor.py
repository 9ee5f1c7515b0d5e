"""Source processor for PDF files.

Reads PDF files using PyMuPDF (fitz) and extracts text page-by-page,
returning one :class:`~ragapp.models.rag.RawDocument` per page that has
extractable text.  Supports text-based PDFs and scanned PDFs with an
embedded OCR text layer; image-only pages are skipped.
"""

from __future__ import annotations

from pathlib import Path

import fitz  # PyMuPDF -- the "fitz" import name is a PyMuPDF convention
import structlog

from ragapp.models.rag import RawDocument
from ragapp.utils.errors import ValidationError

logger = structlog.get_logger(logger_name=__name__)


class PDFProcessor:
    """Processes PDF files into per-page :class:`RawDocument` objects.

    Page metadata: ``source`` (absolute path), ``page_number`` (1-based),
    ``total_pages`` and ``pdf_info`` (the PDF's document-info dictionary,
    serialized later by the metadata sanitizer).
    """

    extensions = (".pdf",)

    def process(self, file_path: str | Path) -> list[RawDocument]:
        """Read the PDF at *file_path*.

        Raises
        ------
        ValidationError
            If the file cannot be opened as a PDF.
        """
        source = str(Path(file_path).resolve())
        try:
            doc = fitz.open(source)
        except Exception as exc:
            logger.error("pdf_open_failed", file_path=source, error=str(exc))
            raise ValidationError(
                message=f"Could not open PDF '{Path(source).name}': {exc}"
            ) from exc

        documents: list[RawDocument] = []
        try:
            total_pages = len(doc)
            pdf_info = dict(doc.metadata or {})
            for page_index in range(total_pages):
                text = doc[page_index].get_text("text").strip()
                if not text:
                    continue
                documents.append(
                    RawDocument(
                        content=text,
                        metadata={
                            "source": source,
                            "page_number": page_index + 1,
                            "total_pages": total_pages,
                            "pdf_info": pdf_info,
                        },
                    )
                )
        finally:
            doc.close()

        if not documents:
            logger.warning("pdf_no_text_extracted", file_path=source)
        logger.info("pdf_processed", file_path=source, pages=len(documents))
        return documents
