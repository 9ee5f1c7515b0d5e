"""Integration tests for the HTTP API.

The real routes, middleware and pipelines run against the in-memory model
provider and vector store from conftest, through FastAPI's TestClient.
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from ragapp.main import build_components, create_app
from ragapp.services.ingestion.chunker import RecursiveTextSplitter
from ragapp.services.ingestion.ingestion_service import IngestionService
from ragapp.services.ingestion.loader import DocumentLoader
from ragapp.services.qa_service import RetrievalQAService
from ragapp.utils.errors import AuthError, RateLimitError


@pytest.fixture
def components(settings, fake_model_provider, memory_store) -> dict:
    return {
        "settings": settings,
        "model_provider": fake_model_provider,
        "vector_store": memory_store,
        "ingestion_service": IngestionService(
            loader=DocumentLoader(),
            splitter=RecursiveTextSplitter(settings.chunk_size, settings.chunk_overlap),
            model_provider=fake_model_provider,
            vector_store=memory_store,
        ),
        "qa_service": RetrievalQAService(fake_model_provider, memory_store),
    }


@pytest.fixture
def client(settings, components):
    app = create_app(settings=settings, components=components)
    with TestClient(app) as test_client:
        yield test_client


# ======================================================================
# POST /chat
# ======================================================================


class TestChat:
    def test_answer_returned(self, client: TestClient, fake_model_provider) -> None:
        fake_model_provider.answer = "Vectors live in Chroma."

        response = client.post("/chat", json={"message": "Where do vectors live?"})

        assert response.status_code == 200
        assert response.json() == {"response": "Vectors live in Chroma."}

    @pytest.mark.parametrize(
        "body",
        [{"message": ""}, {"message": "   "}, {"message": 42}, {"message": None}, {}],
    )
    def test_invalid_message_is_400(self, client: TestClient, fake_model_provider, body) -> None:
        response = client.post("/chat", json=body)

        assert response.status_code == 400
        assert response.json() == {"error": "Message is required and must be a non-empty string."}
        assert fake_model_provider.calls == []

    def test_malformed_body_is_400(self, client: TestClient) -> None:
        response = client.post(
            "/chat", content=b"not json", headers={"content-type": "application/json"}
        )

        assert response.status_code == 400
        assert response.json()["error"].startswith("Invalid request")

    def test_provider_failure_is_500_with_message(
        self, client: TestClient, fake_model_provider
    ) -> None:
        fake_model_provider.embed_query = AsyncMock(
            side_effect=RateLimitError("Rate limit exceeded", provider_name="openai")
        )

        response = client.post("/chat", json={"message": "hello?"})

        assert response.status_code == 500
        assert response.json() == {"error": "Rate limit exceeded"}

    def test_unexpected_failure_is_generic_500(self, client: TestClient, memory_store) -> None:
        memory_store.query = AsyncMock(side_effect=KeyError("boom"))

        response = client.post("/chat", json={"message": "hello?"})

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}


# ======================================================================
# POST /ingest
# ======================================================================


class TestIngestUpload:
    def test_text_upload_is_saved_and_indexed(
        self, client: TestClient, settings, memory_store
    ) -> None:
        response = client.post(
            "/ingest",
            files={"file": ("guide.txt", b"Chroma stores vectors.", "text/plain")},
        )

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "File uploaded and ingested successfully.",
        }
        saved = Path(settings.documents_dir) / "guide.txt"
        assert saved.read_bytes() == b"Chroma stores vectors."
        (chunk, _), = memory_store.records.values()
        assert chunk.content == "Chroma stores vectors."
        assert chunk.metadata["source"] == str(saved.resolve())

    def test_blank_upload_reports_nothing_indexed(self, client: TestClient, memory_store) -> None:
        response = client.post(
            "/ingest", files={"file": ("blank.txt", b"   \n", "text/plain")}
        )

        assert response.status_code == 200
        assert response.json() == {"success": False, "message": "No content to index."}
        assert memory_store.records == {}

    @pytest.mark.parametrize("filename", ["notes.md", "report.docx", "archive", "script.txt.exe"])
    def test_disallowed_extension_is_400(self, client: TestClient, settings, filename: str) -> None:
        response = client.post("/ingest", files={"file": (filename, b"data", "text/plain")})

        assert response.status_code == 400
        assert response.json() == {"error": "Only .pdf and .txt files are allowed."}
        assert not Path(settings.documents_dir).exists()

    def test_missing_file_is_400(self, client: TestClient) -> None:
        response = client.post("/ingest", data={"other": "field"})

        assert response.status_code == 400
        assert response.json() == {"error": "No file uploaded."}

    def test_oversized_file_is_400(self, settings_factory, tmp_path: Path, components) -> None:
        small = settings_factory(documents_dir=str(tmp_path / "uploads"), max_upload_bytes=10)
        components["settings"] = small
        with TestClient(create_app(settings=small, components=components)) as small_client:
            response = small_client.post(
                "/ingest", files={"file": ("big.txt", b"x" * 11, "text/plain")}
            )

        assert response.status_code == 400
        assert response.json()["error"].startswith("File too large")
        assert not (tmp_path / "uploads" / "big.txt").exists()

    def test_path_segments_are_stripped(self, client: TestClient, settings, tmp_path: Path) -> None:
        response = client.post(
            "/ingest",
            files={"file": ("../../escape.txt", b"contained", "text/plain")},
        )

        assert response.status_code == 200
        assert (Path(settings.documents_dir) / "escape.txt").exists()
        assert not (tmp_path.parent / "escape.txt").exists()

    def test_pipeline_failure_is_500(self, client: TestClient, fake_model_provider) -> None:
        fake_model_provider.embed = AsyncMock(
            side_effect=AuthError("OPENAI_API_KEY is not set", provider_name="openai")
        )

        response = client.post("/ingest", files={"file": ("a.txt", b"text", "text/plain")})

        assert response.status_code == 500
        assert response.json() == {"error": "OPENAI_API_KEY is not set"}


# ======================================================================
# GET /health
# ======================================================================


class TestHealth:
    def test_reports_provider_and_collection(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {
            "status": "ok",
            "provider": "fake",
            "collection": "test-docs",
            "vector_store": True,
        }

    def test_vector_store_down(self, client: TestClient, memory_store) -> None:
        memory_store.is_available = lambda: False
        assert client.get("/health").json()["vector_store"] is False


# ======================================================================
# Startup wiring
# ======================================================================


class TestStartup:
    def test_components_built_from_settings(self, settings_factory, tmp_path: Path) -> None:
        settings = settings_factory(
            llm_provider="ollama",
            collection_name="kb",
            documents_dir=str(tmp_path / "docs"),
        )
        with patch(
            "ragapp.providers.vector_store.chromadb_provider.ChromaDBProvider.is_available",
            return_value=True,
        ):
            with TestClient(create_app(settings=settings)) as built_client:
                body = built_client.get("/health").json()

        assert body["provider"] == "ollama"
        assert body["collection"] == "kb"

    def test_build_components_shares_one_provider(self, settings_factory) -> None:
        built = build_components(settings_factory(llm_provider="gemini"))

        assert built["model_provider"].get_provider_name() == "google"
        assert built["ingestion_service"]._model_provider is built["model_provider"]
        assert built["qa_service"]._model_provider is built["model_provider"]
        assert built["qa_service"]._vector_store is built["vector_store"]
