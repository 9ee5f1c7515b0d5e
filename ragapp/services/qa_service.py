"""Retrieval-augmented question answering.

Answers a user question from the indexed documents only:

  1. VALIDATE -- reject anything that is not a non-blank string before any
                 provider or store call is made.
  2. EMBED    -- embed the question with the configured model provider.
  3. RETRIEVE -- fetch the nearest chunks from the vector store (the
                 store's default top-k).
  4. PROMPT   -- place the chunk texts, verbatim and separated by blank
                 lines, into a fixed "answer only from context" template.
  5. GENERATE -- return the model's answer unmodified.

Store and generation failures propagate unchanged to the caller.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import structlog

from ragapp.interfaces.model_provider import IModelProvider
from ragapp.interfaces.vector_store_provider import IVectorStoreProvider
from ragapp.models.rag import RetrievedChunk
from ragapp.utils.errors import ValidationError
from ragapp.utils.logging import get_logger

logger: structlog.BoundLogger = get_logger(__name__)

PROMPT_TEMPLATE = (
    "Answer the question based only on the following context:\n"
    "\n"
    "{context}\n"
    "\n"
    "Question: {question}"
)


def build_prompt(question: str, chunks: Sequence[RetrievedChunk]) -> str:
    """Render the grounded prompt for *question* from the retrieved *chunks*."""
    context = "\n\n".join(rc.chunk.content for rc in chunks)
    return PROMPT_TEMPLATE.format(context=context, question=question)


class RetrievalQAService:
    """Answers questions using only retrieved document context."""

    def __init__(
        self,
        model_provider: IModelProvider,
        vector_store: IVectorStoreProvider,
    ) -> None:
        self._model_provider = model_provider
        self._vector_store = vector_store

    async def answer(self, query: Any) -> str:
        """Return the model's answer to *query*.

        Raises
        ------
        ValidationError
            If *query* is not a string or is blank.
        """
        if not isinstance(query, str) or not query.strip():
            raise ValidationError(message="Message is required and must be a non-empty string.")

        query_vector = await self._model_provider.embed_query(query)
        chunks = await self._vector_store.query(query_vector)
        prompt = build_prompt(query, chunks)

        logger.info(
            "qa_context_retrieved",
            query_length=len(query),
            chunks=len(chunks),
            provider=self._model_provider.get_provider_name(),
        )

        answer = await self._model_provider.generate(prompt)

        logger.info("qa_answer_generated", answer_length=len(answer))
        return answer
