"""Unit tests for source processors (plain text, PDF).

PDF tests mock PyMuPDF (fitz); text tests read real files under tmp_path.
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from ragapp.models.rag import RawDocument
from ragapp.services.ingestion.source_processors import PDFProcessor, TextProcessor
from ragapp.utils.errors import ValidationError


def _mock_pdf(pages: list[str], metadata: dict | None = None) -> MagicMock:
    mock_pages = []
    for text in pages:
        page = MagicMock()
        page.get_text.return_value = text
        mock_pages.append(page)

    mock_doc = MagicMock()
    mock_doc.__len__ = MagicMock(return_value=len(mock_pages))
    mock_doc.__getitem__ = MagicMock(side_effect=lambda i: mock_pages[i])
    mock_doc.metadata = metadata if metadata is not None else {"title": "Handbook", "author": "Ops"}
    mock_doc.close = MagicMock()
    return mock_doc


# ======================================================================
# TextProcessor
# ======================================================================


class TestTextProcessor:
    def test_reads_whole_file_as_one_document(self, tmp_path: Path) -> None:
        path = tmp_path / "guide.txt"
        path.write_text("line one\n\nline two\n", encoding="utf-8")

        docs = TextProcessor().process(path)

        assert len(docs) == 1
        assert isinstance(docs[0], RawDocument)
        assert docs[0].content == "line one\n\nline two\n"
        assert docs[0].metadata == {"source": str(path.resolve())}

    def test_undecodable_bytes_are_replaced(self, tmp_path: Path) -> None:
        path = tmp_path / "latin.txt"
        path.write_bytes(b"caf\xe9 menu")

        (doc,) = TextProcessor().process(str(path))

        assert doc.content.startswith("caf")
        assert doc.content.endswith(" menu")
        assert "�" in doc.content


# ======================================================================
# PDFProcessor
# ======================================================================


class TestPDFProcessor:
    @patch("ragapp.services.ingestion.source_processors.pdf_processor.fitz")
    def test_one_document_per_page(self, mock_fitz: MagicMock) -> None:
        mock_doc = _mock_pdf(["  First page text.\n", "Second page text."])
        mock_fitz.open.return_value = mock_doc

        docs = PDFProcessor().process("/data/handbook.pdf")

        assert [d.content for d in docs] == ["First page text.", "Second page text."]
        assert [d.metadata["page_number"] for d in docs] == [1, 2]
        assert all(d.metadata["total_pages"] == 2 for d in docs)
        assert all(d.metadata["source"] == str(Path("/data/handbook.pdf").resolve()) for d in docs)
        assert docs[0].metadata["pdf_info"] == {"title": "Handbook", "author": "Ops"}
        mock_doc.close.assert_called_once()

    @patch("ragapp.services.ingestion.source_processors.pdf_processor.fitz")
    def test_blank_pages_are_skipped(self, mock_fitz: MagicMock) -> None:
        mock_fitz.open.return_value = _mock_pdf(["", "   \n", "Only text here."])

        docs = PDFProcessor().process("/data/scan.pdf")

        assert len(docs) == 1
        assert docs[0].metadata["page_number"] == 3
        assert docs[0].metadata["total_pages"] == 3

    @patch("ragapp.services.ingestion.source_processors.pdf_processor.fitz")
    def test_image_only_pdf_returns_empty(self, mock_fitz: MagicMock) -> None:
        mock_fitz.open.return_value = _mock_pdf(["", ""], metadata={})
        assert PDFProcessor().process("/data/images.pdf") == []

    @patch("ragapp.services.ingestion.source_processors.pdf_processor.fitz")
    def test_open_failure_raises_validation_error(self, mock_fitz: MagicMock) -> None:
        mock_fitz.open.side_effect = RuntimeError("cannot open broken document")

        with pytest.raises(ValidationError, match="Could not open PDF 'broken.pdf'"):
            PDFProcessor().process("/data/broken.pdf")

    @patch("ragapp.services.ingestion.source_processors.pdf_processor.fitz")
    def test_document_closed_when_page_read_fails(self, mock_fitz: MagicMock) -> None:
        mock_doc = _mock_pdf(["text"])
        mock_doc.__getitem__ = MagicMock(side_effect=RuntimeError("corrupt page"))
        mock_fitz.open.return_value = mock_doc

        with pytest.raises(RuntimeError):
            PDFProcessor().process("/data/corrupt.pdf")
        mock_doc.close.assert_called_once()
