"""Shared pytest fixtures for the ragapp test suite."""

from __future__ import annotations

import math
from pathlib import Path
from typing import Any

import pytest

from ragapp.config.settings import Settings
from ragapp.interfaces.model_provider import IModelProvider
from ragapp.interfaces.vector_store_provider import IVectorStoreProvider
from ragapp.models.rag import DocumentChunk, RetrievedChunk


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


def make_settings(**overrides: Any) -> Settings:
    """Build a Settings instance with test defaults (never reads real keys)."""
    defaults: dict[str, Any] = {
        "llm_provider": "openai",
        "openai_api_key": "sk-test",
        "openai_base_url": "",
        "google_api_key": "google-test",
        "ollama_base_url": "http://localhost:11434",
        "chroma_url": "http://localhost:8000",
        "collection_name": "test-docs",
        "documents_dir": "./documents",
        "chunk_size": 1000,
        "chunk_overlap": 200,
        "app_env": "testing",
    }
    defaults.update(overrides)
    return Settings(_env_file=None, **defaults)


@pytest.fixture
def settings_factory():  # noqa: ANN201
    return make_settings


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return make_settings(documents_dir=str(tmp_path / "documents"))


# ---------------------------------------------------------------------------
# In-memory collaborators
# ---------------------------------------------------------------------------


class FakeModelProvider(IModelProvider):
    """Deterministic model provider that records every call."""

    def __init__(self, name: str = "fake", dimension: int = 8, answer: str = "fake answer") -> None:
        self.name = name
        self.dimension = dimension
        self.answer = answer
        self.calls: list[tuple[str, Any]] = []

    def _vector(self, text: str) -> list[float]:
        seed = sum(ord(ch) for ch in text) or 1
        return [math.sin(seed * (i + 1)) for i in range(self.dimension)]

    async def embed(self, texts: list[str]) -> list[list[float]]:
        self.calls.append(("embed", list(texts)))
        return [self._vector(t) for t in texts]

    async def embed_query(self, text: str) -> list[float]:
        self.calls.append(("embed_query", text))
        return self._vector(text)

    async def generate(
        self,
        prompt: str,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        self.calls.append(("generate", prompt))
        return self.answer

    def get_dimension(self) -> int:
        return self.dimension

    def get_provider_name(self) -> str:
        return self.name

    def is_available(self) -> bool:
        return True


class InMemoryVectorStore(IVectorStoreProvider):
    """Vector store keeping records in a dict; queries by squared distance."""

    def __init__(self, collection_name: str = "test-docs", default_top_k: int = 4) -> None:
        self.collection_name = collection_name
        self.default_top_k = default_top_k
        self.records: dict[str, tuple[DocumentChunk, list[float]]] = {}
        self.calls: list[str] = []

    async def add_chunks(
        self,
        chunks: list[DocumentChunk],
        embeddings: list[list[float]],
    ) -> int:
        self.calls.append("add_chunks")
        if len(chunks) != len(embeddings):
            raise ValueError("chunks and embeddings length mismatch")
        for chunk, vector in zip(chunks, embeddings):
            self.records[chunk.chunk_id] = (chunk, vector)
        return len(chunks)

    async def query(
        self,
        embedding: list[float],
        top_k: int | None = None,
    ) -> list[RetrievedChunk]:
        self.calls.append("query")
        scored = sorted(
            (
                (sum((a - b) ** 2 for a, b in zip(embedding, vector)), chunk)
                for chunk, vector in self.records.values()
            ),
            key=lambda pair: pair[0],
        )
        return [
            RetrievedChunk(chunk=chunk, distance=distance)
            for distance, chunk in scored[: top_k or self.default_top_k]
        ]

    async def count(self) -> int:
        return len(self.records)

    def get_collection_name(self) -> str:
        return self.collection_name

    def get_provider_name(self) -> str:
        return "memory"

    def is_available(self) -> bool:
        return True


@pytest.fixture
def fake_model_provider() -> FakeModelProvider:
    return FakeModelProvider()


@pytest.fixture
def model_provider_factory():  # noqa: ANN201
    return FakeModelProvider


@pytest.fixture
def memory_store() -> InMemoryVectorStore:
    return InMemoryVectorStore()


# ---------------------------------------------------------------------------
# Documents on disk
# ---------------------------------------------------------------------------


@pytest.fixture
def docs_dir(tmp_path: Path) -> Path:
    """A small document tree: two text files, one unsupported file, one nested file."""
    root = tmp_path / "docs"
    (root / "nested").mkdir(parents=True)
    (root / "alpha.txt").write_text(
        "Chroma stores vectors.\n\nIt answers nearest-neighbour queries.", encoding="utf-8"
    )
    (root / "notes.md").write_text("# not ingested", encoding="utf-8")
    (root / "nested" / "beta.TXT").write_text("Ollama runs models locally.", encoding="utf-8")
    return root
