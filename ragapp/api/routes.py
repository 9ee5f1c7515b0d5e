"""FastAPI routes for chat, document upload and health.

    Endpoint   Method  Description
    ─────────────────────────────────────────────────────────────
    /chat      POST    Answer a question from the indexed documents
    /ingest    POST    Upload a .pdf/.txt file and index it
    /health    GET     Provider / collection / vector-store status

Service dependencies are resolved from ``app.state`` (populated in
``main.py``'s lifespan) via FastAPI's ``Depends`` using the ``Annotated``
pattern.  Errors are raised as ragapp exceptions and turned into JSON by
``ErrorHandlingMiddleware``.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, File, Request, UploadFile

from ragapp.api.schemas import (
    ChatRequest,
    ChatResponse,
    ErrorResponse,
    HealthResponse,
    IngestResponse,
)
from ragapp.config.settings import Settings
from ragapp.interfaces.model_provider import IModelProvider
from ragapp.interfaces.vector_store_provider import IVectorStoreProvider
from ragapp.services.ingestion.ingestion_service import IngestionService
from ragapp.services.qa_service import RetrievalQAService
from ragapp.utils.errors import ValidationError
from ragapp.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter()

_ALLOWED_UPLOAD_EXTENSIONS = frozenset({".pdf", ".txt"})

# Uploads are read in 64 KB increments so oversized files are rejected
# without buffering the whole payload.
_UPLOAD_CHUNK_SIZE = 64 * 1024


# ---------------------------------------------------------------------------
# Dependency injection helpers -- resolve components from app.state
# ---------------------------------------------------------------------------


def _get_settings(request: Request) -> Settings:
    return request.app.state.settings


def _get_model_provider(request: Request) -> IModelProvider:
    return request.app.state.model_provider


def _get_vector_store(request: Request) -> IVectorStoreProvider:
    return request.app.state.vector_store


def _get_ingestion_service(request: Request) -> IngestionService:
    return request.app.state.ingestion_service


def _get_qa_service(request: Request) -> RetrievalQAService:
    return request.app.state.qa_service


SettingsDep = Annotated[Settings, Depends(_get_settings)]
ModelProviderDep = Annotated[IModelProvider, Depends(_get_model_provider)]
VectorStoreDep = Annotated[IVectorStoreProvider, Depends(_get_vector_store)]
IngestionServiceDep = Annotated[IngestionService, Depends(_get_ingestion_service)]
QAServiceDep = Annotated[RetrievalQAService, Depends(_get_qa_service)]


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.post(
    "/chat",
    response_model=ChatResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Answer a question from the indexed documents",
)
async def chat(body: ChatRequest, qa_service: QAServiceDep) -> ChatResponse:
    answer = await qa_service.answer(body.message)
    return ChatResponse(response=answer)


@router.post(
    "/ingest",
    response_model=IngestResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Upload a .pdf or .txt document and index it",
)
async def ingest_upload(
    settings: SettingsDep,
    ingestion_service: IngestionServiceDep,
    file: UploadFile | None = File(None),
) -> IngestResponse:
    """Save the uploaded file under ``DOCUMENTS_DIR`` and ingest it."""
    if file is None or not file.filename:
        raise ValidationError(message="No file uploaded.")

    # Only the base name is used, so "../" segments cannot escape the directory.
    filename = Path(file.filename).name
    extension = Path(filename).suffix.lower()
    if not filename or extension not in _ALLOWED_UPLOAD_EXTENSIONS:
        raise ValidationError(message="Only .pdf and .txt files are allowed.")

    parts: list[bytes] = []
    total_size = 0
    while True:
        part = await file.read(_UPLOAD_CHUNK_SIZE)
        if not part:
            break
        total_size += len(part)
        if total_size > settings.max_upload_bytes:
            raise ValidationError(
                message=(
                    f"File too large. Maximum size is {settings.max_upload_bytes} bytes."
                )
            )
        parts.append(part)

    documents_dir = Path(settings.documents_dir)
    destination = documents_dir / filename
    await asyncio.to_thread(documents_dir.mkdir, parents=True, exist_ok=True)
    await asyncio.to_thread(destination.write_bytes, b"".join(parts))
    _logger.info("upload_saved", filename=filename, size=total_size, path=str(destination))

    result = await ingestion_service.ingest_file(destination)
    if not result.success:
        return IngestResponse(success=False, message=result.message)
    return IngestResponse(success=True, message="File uploaded and ingested successfully.")


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health(
    model_provider: ModelProviderDep,
    vector_store: VectorStoreDep,
) -> HealthResponse:
    """Report the active provider and whether the vector store answers."""
    vector_store_ok = await asyncio.to_thread(vector_store.is_available)
    return HealthResponse(
        status="ok",
        provider=model_provider.get_provider_name(),
        collection=vector_store.get_collection_name(),
        vector_store=vector_store_ok,
    )
