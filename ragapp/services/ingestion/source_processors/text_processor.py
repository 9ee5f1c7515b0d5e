"""Source processor for plain-text (.txt) files."""

from __future__ import annotations

from pathlib import Path

import structlog

from ragapp.models.rag import RawDocument

logger = structlog.get_logger(logger_name=__name__)


class TextProcessor:
    """Reads a text file as one :class:`RawDocument`.

    The file is decoded as UTF-8; undecodable bytes are replaced rather
    than failing the whole ingestion.
    """

    extensions = (".txt",)

    def process(self, file_path: str | Path) -> list[RawDocument]:
        path = Path(file_path).resolve()
        text = path.read_text(encoding="utf-8", errors="replace")
        logger.debug("text_file_read", file_path=str(path), chars=len(text))
        return [RawDocument(content=text, metadata={"source": str(path)})]
