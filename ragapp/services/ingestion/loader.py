"""Document loading for the ingestion pipeline.

Turns a directory (walked recursively) or a single file into
:class:`~ragapp.models.rag.RawDocument` objects by dispatching each file to
the source processor registered for its extension.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Protocol

import structlog

from ragapp.models.rag import RawDocument
from ragapp.services.ingestion.source_processors import PDFProcessor, TextProcessor
from ragapp.utils.errors import UnsupportedFormatError, ValidationError

logger = structlog.get_logger(logger_name=__name__)


class SourceProcessor(Protocol):
    def process(self, file_path: str | Path) -> list[RawDocument]: ...


def _default_processors() -> dict[str, SourceProcessor]:
    return {".txt": TextProcessor(), ".pdf": PDFProcessor()}


class DocumentLoader:
    """Loads ``.txt`` and ``.pdf`` files (plus any extra registered formats).

    Parameters
    ----------
    processors:
        Extra or replacement processors keyed by lower-case extension
        including the dot, e.g. ``{".md": MarkdownProcessor()}``.
    """

    def __init__(self, processors: Mapping[str, SourceProcessor] | None = None) -> None:
        self._processors = _default_processors()
        for extension, processor in (processors or {}).items():
            self._processors[extension.lower()] = processor

    @property
    def supported_extensions(self) -> frozenset[str]:
        return frozenset(self._processors)

    def load(self, source: str | Path, is_single_file: bool = False) -> list[RawDocument]:
        """Read every supported document under *source*.

        Parameters
        ----------
        source:
            A directory (``is_single_file=False``) or a single file.
        is_single_file:
            Treat *source* as one file instead of a directory.

        Returns
        -------
        list[RawDocument]
            Documents in sorted path order.  A directory without supported
            files yields ``[]``.

        Raises
        ------
        ValidationError
            If *source* does not exist or is the wrong kind of path.
        UnsupportedFormatError
            If a single file has an extension with no processor.
        """
        path = Path(source)
        if not path.exists():
            raise ValidationError(message=f"Path does not exist: {source}")

        if is_single_file:
            if not path.is_file():
                raise ValidationError(message=f"Not a file: {source}")
            processor = self._processors.get(path.suffix.lower())
            if processor is None:
                raise UnsupportedFormatError(
                    message=(
                        f"Unsupported file type '{path.suffix or path.name}'. "
                        f"Supported: {', '.join(sorted(self._processors))}"
                    )
                )
            documents = processor.process(path)
            logger.info("documents_loaded", source=str(path), files=1, documents=len(documents))
            return documents

        if not path.is_dir():
            raise ValidationError(message=f"Not a directory: {source}")

        documents: list[RawDocument] = []
        files_loaded = 0
        for file_path in sorted(p for p in path.rglob("*") if p.is_file()):
            processor = self._processors.get(file_path.suffix.lower())
            if processor is None:
                logger.debug("file_skipped_unsupported", file_path=str(file_path))
                continue
            documents.extend(processor.process(file_path))
            files_loaded += 1

        logger.info(
            "documents_loaded",
            source=str(path),
            files=files_loaded,
            documents=len(documents),
        )
        return documents
