"""Unit tests for RetrievalQAService and build_prompt."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from ragapp.models.rag import DocumentChunk, RetrievedChunk
from ragapp.services.qa_service import PROMPT_TEMPLATE, RetrievalQAService, build_prompt
from ragapp.utils.errors import GenerationError, ValidationError, VectorStoreError


def _hit(chunk_id: str, content: str, distance: float = 0.1) -> RetrievedChunk:
    return RetrievedChunk(
        chunk=DocumentChunk(chunk_id=chunk_id, content=content, metadata={"source": "/a.txt"}),
        distance=distance,
    )


class TestBuildPrompt:
    def test_exact_template(self) -> None:
        prompt = build_prompt("Where is the Eiffel Tower?", [_hit("1", "A"), _hit("2", "B")])
        assert prompt == (
            "Answer the question based only on the following context:\n\n"
            "A\n\nB\n\n"
            "Question: Where is the Eiffel Tower?"
        )

    def test_no_context(self) -> None:
        assert build_prompt("q", []) == PROMPT_TEMPLATE.format(context="", question="q")

    def test_chunk_text_inserted_verbatim(self) -> None:
        text = "  {braces} and\n newlines  "
        assert text in build_prompt("q", [_hit("1", text)])


class TestAnswer:
    @pytest.mark.asyncio
    async def test_pipeline_order_and_verbatim_answer(self, fake_model_provider, memory_store) -> None:
        fake_model_provider.answer = "  The tower is in Paris.\n"
        memory_store.query = AsyncMock(return_value=[_hit("1", "The Eiffel Tower is in Paris.")])
        service = RetrievalQAService(fake_model_provider, memory_store)

        answer = await service.answer("Where is the Eiffel Tower?")

        assert answer == "  The tower is in Paris.\n"
        assert [name for name, _ in fake_model_provider.calls] == ["embed_query", "generate"]
        assert fake_model_provider.calls[0][1] == "Where is the Eiffel Tower?"
        memory_store.query.assert_awaited_once_with(
            fake_model_provider._vector("Where is the Eiffel Tower?")
        )
        prompt = fake_model_provider.calls[1][1]
        assert "The Eiffel Tower is in Paris." in prompt
        assert prompt.endswith("Question: Where is the Eiffel Tower?")

    @pytest.mark.asyncio
    async def test_empty_index_still_generates(self, fake_model_provider, memory_store) -> None:
        answer = await RetrievalQAService(fake_model_provider, memory_store).answer("anything?")

        assert answer == "fake answer"
        assert fake_model_provider.calls[-1] == (
            "generate",
            build_prompt("anything?", []),
        )

    @pytest.mark.asyncio
    @pytest.mark.parametrize("query", [None, "", "   \n\t", 42, ["list"], {"text": "hi"}])
    async def test_invalid_query_rejected_before_any_call(
        self, fake_model_provider, memory_store, query
    ) -> None:
        service = RetrievalQAService(fake_model_provider, memory_store)

        with pytest.raises(ValidationError, match="non-empty string"):
            await service.answer(query)

        assert fake_model_provider.calls == []
        assert memory_store.calls == []

    @pytest.mark.asyncio
    async def test_store_failure_propagates(self, fake_model_provider, memory_store) -> None:
        memory_store.query = AsyncMock(side_effect=VectorStoreError("chroma down"))

        with pytest.raises(VectorStoreError):
            await RetrievalQAService(fake_model_provider, memory_store).answer("q")
        assert [name for name, _ in fake_model_provider.calls] == ["embed_query"]

    @pytest.mark.asyncio
    async def test_generation_failure_propagates(self, fake_model_provider, memory_store) -> None:
        fake_model_provider.generate = AsyncMock(side_effect=GenerationError("empty response"))

        with pytest.raises(GenerationError):
            await RetrievalQAService(fake_model_provider, memory_store).answer("q")
