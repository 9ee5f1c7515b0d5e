"""Recursive character text splitting with overlapping windows.

Splits :class:`~ragapp.models.rag.RawDocument` text into
:class:`~ragapp.models.rag.DocumentChunk` objects of at most ``chunk_size``
characters (default 1000) with up to ``chunk_overlap`` characters (default
200) shared between consecutive chunks.

The splitter tries separators from coarse to fine:

1. ``"\\n\\n"`` -- paragraph breaks
2. ``"\\n"`` -- line breaks
3. ``". "`` -- sentence ends
4. ``" "`` -- word boundaries
5. ``""`` -- hard character cut

The coarsest separator present in a span is used to cut it into pieces; any
piece still longer than ``chunk_size`` is cut again with the next
separator, down to single characters.  The whole piece sequence is then
packed greedily into chunks in one pass, so short leftovers (a trailing
newline, a one-word paragraph) join their neighbours instead of becoming
chunks of their own.

All work is done on ``(start, end)`` offsets into the original text, and each
separator stays attached to the piece it terminates, so every chunk is an
exact slice of its document and the chunks (minus their overlaps) rebuild the
document byte-for-byte.
"""

from __future__ import annotations

import uuid
from collections import deque
from collections.abc import Sequence

import structlog

from ragapp.models.rag import DocumentChunk, RawDocument
from ragapp.services.ingestion.metadata import sanitize_metadata

logger = structlog.get_logger(logger_name=__name__)

DEFAULT_SEPARATORS: tuple[str, ...] = ("\n\n", "\n", ". ", " ", "")

Span = tuple[int, int]


class RecursiveTextSplitter:
    """Splits text into overlapping, boundary-aware character windows.

    Parameters
    ----------
    chunk_size:
        Maximum number of characters per chunk (default 1000).
    chunk_overlap:
        Maximum number of characters carried from the end of one chunk into
        the start of the next (default 200).  Must be smaller than
        *chunk_size*.
    separators:
        Separators to try, coarse to fine.  The final ``""`` entry (hard
        cut) is appended if missing.
    """

    def __init__(
        self,
        chunk_size: int = 1000,
        chunk_overlap: int = 200,
        separators: Sequence[str] | None = None,
    ) -> None:
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        if chunk_overlap < 0:
            raise ValueError(f"chunk_overlap must be >= 0, got {chunk_overlap}")
        if chunk_overlap >= chunk_size:
            raise ValueError(
                f"chunk_overlap ({chunk_overlap}) must be smaller than "
                f"chunk_size ({chunk_size})"
            )
        self._chunk_size = chunk_size
        self._chunk_overlap = chunk_overlap
        seps = list(separators) if separators is not None else list(DEFAULT_SEPARATORS)
        if not seps or seps[-1] != "":
            seps.append("")
        self._separators = tuple(seps)

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    @property
    def chunk_overlap(self) -> int:
        return self._chunk_overlap

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def split_text(self, text: str) -> list[Span]:
        """Return the ``(start, end)`` offsets of each chunk of *text*.

        Blank text yields no spans.
        """
        if not text or not text.strip():
            return []
        return self._merge(self._split(text, 0, len(text), self._separators))

    def split_documents(self, documents: Sequence[RawDocument]) -> list[DocumentChunk]:
        """Split every document, preserving document order and chunk order.

        Each chunk carries the document's sanitized metadata plus
        ``start_index`` (offset into the document) and ``chunk_index``
        (position among that document's chunks).
        """
        chunks: list[DocumentChunk] = []
        for document in documents:
            base_metadata = sanitize_metadata(document.metadata)
            for index, (start, end) in enumerate(self.split_text(document.content)):
                chunks.append(
                    DocumentChunk(
                        chunk_id=str(uuid.uuid4()),
                        content=document.content[start:end],
                        metadata={
                            **base_metadata,
                            "start_index": start,
                            "chunk_index": index,
                        },
                    )
                )

        logger.debug(
            "chunking_complete",
            num_documents=len(documents),
            num_chunks=len(chunks),
            chunk_size=self._chunk_size,
            chunk_overlap=self._chunk_overlap,
        )
        return chunks

    # ------------------------------------------------------------------
    # Recursive splitting
    # ------------------------------------------------------------------

    def _split(self, text: str, start: int, end: int, separators: Sequence[str]) -> list[Span]:
        """Cut ``text[start:end]`` into contiguous pieces of at most ``chunk_size``."""
        separator = separators[-1]
        remaining: Sequence[str] = ()
        for i, candidate in enumerate(separators):
            if candidate == "" or text.find(candidate, start, end) != -1:
                separator = candidate
                remaining = separators[i + 1 :]
                break

        if separator == "":
            # Single characters; _merge packs them into overlapping windows.
            return [(pos, pos + 1) for pos in range(start, end)]

        pieces: list[Span] = []
        for piece_start, piece_end in self._cut(text, start, end, separator):
            if piece_end - piece_start <= self._chunk_size:
                pieces.append((piece_start, piece_end))
            else:
                pieces.extend(self._split(text, piece_start, piece_end, remaining))
        return pieces

    @staticmethod
    def _cut(text: str, start: int, end: int, separator: str) -> list[Span]:
        """Cut ``text[start:end]`` after every occurrence of *separator*."""
        pieces: list[Span] = []
        pos = start
        while pos < end:
            idx = text.find(separator, pos, end)
            if idx == -1:
                pieces.append((pos, end))
                break
            stop = idx + len(separator)
            pieces.append((pos, stop))
            pos = stop
        return pieces

    def _merge(self, pieces: list[Span]) -> list[Span]:
        """Pack contiguous pieces into chunks, carrying trailing overlap forward."""
        spans: list[Span] = []
        current: deque[Span] = deque()
        total = 0
        for piece_start, piece_end in pieces:
            length = piece_end - piece_start
            if current and total + length > self._chunk_size:
                spans.append((current[0][0], current[-1][1]))
                while current and (
                    total > self._chunk_overlap or total + length > self._chunk_size
                ):
                    dropped_start, dropped_end = current.popleft()
                    total -= dropped_end - dropped_start
            current.append((piece_start, piece_end))
            total += length
        if current:
            spans.append((current[0][0], current[-1][1]))
        return spans


def split_documents(
    documents: Sequence[RawDocument],
    chunk_size: int = 1000,
    chunk_overlap: int = 200,
) -> list[DocumentChunk]:
    """Split *documents* with a one-off :class:`RecursiveTextSplitter`."""
    return RecursiveTextSplitter(chunk_size, chunk_overlap).split_documents(documents)
