"""ragapp FastAPI application entry point.

Wires the model provider, vector store and both pipelines together and
exposes them over HTTP.  Components are built once in the lifespan and
stored on ``app.state``; tests pass prebuilt components to
:func:`create_app` instead.

Run with ``python -m ragapp.main`` or
``uvicorn --factory ragapp.main:create_app``.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from ragapp.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
    request_validation_handler,
)
from ragapp.api.routes import router as api_router
from ragapp.config.settings import Settings, load_settings
from ragapp.providers.factory import build_model_provider, build_vector_store
from ragapp.services.ingestion.chunker import RecursiveTextSplitter
from ragapp.services.ingestion.ingestion_service import IngestionService
from ragapp.services.ingestion.loader import DocumentLoader
from ragapp.services.qa_service import RetrievalQAService
from ragapp.utils.logging import configure_logging, get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

_VERSION = "0.1.0"


# ---------------------------------------------------------------------------
# Component assembly
# ---------------------------------------------------------------------------


def build_components(app_settings: Settings) -> dict[str, Any]:
    """Construct every provider and service for one entry point.

    Returns a flat dict of named components: ``settings``,
    ``model_provider``, ``vector_store``, ``ingestion_service`` and
    ``qa_service``.  No network calls are made here.
    """
    model_provider = build_model_provider(app_settings)
    vector_store = build_vector_store(app_settings)

    ingestion_service = IngestionService(
        loader=DocumentLoader(),
        splitter=RecursiveTextSplitter(
            chunk_size=app_settings.chunk_size,
            chunk_overlap=app_settings.chunk_overlap,
        ),
        model_provider=model_provider,
        vector_store=vector_store,
    )
    qa_service = RetrievalQAService(
        model_provider=model_provider,
        vector_store=vector_store,
    )

    return {
        "settings": app_settings,
        "model_provider": model_provider,
        "vector_store": vector_store,
        "ingestion_service": ingestion_service,
        "qa_service": qa_service,
    }


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app(
    settings: Settings | None = None,
    components: dict[str, Any] | None = None,
) -> FastAPI:
    """Build and configure the FastAPI application.

    Parameters
    ----------
    settings:
        Configuration; read from the environment / ``.env`` when omitted.
    components:
        Prebuilt components (see :func:`build_components`).  Missing keys
        are filled from *settings* at startup.
    """
    app_settings = settings or (components or {}).get("settings")
    if app_settings is None:
        app_settings = load_settings()
        configure_logging(
            log_level=app_settings.log_level,
            json_output=(app_settings.app_env == "production"),
        )

    @asynccontextmanager
    async def _lifespan(application: FastAPI):  # noqa: ANN202
        built = dict(components or {})
        if not {"model_provider", "vector_store", "ingestion_service", "qa_service"} <= built.keys():
            built = {**build_components(app_settings), **built}
        built.setdefault("settings", app_settings)

        for key, value in built.items():
            setattr(application.state, key, value)

        _logger.info(
            "app_startup",
            version=_VERSION,
            environment=app_settings.app_env,
            provider=built["model_provider"].get_provider_name(),
            collection=built["vector_store"].get_collection_name(),
        )
        yield
        _logger.info("app_shutdown")

    application = FastAPI(
        title="ragapp API",
        version=_VERSION,
        description=(
            "Ingest .txt and .pdf documents into a vector index and answer "
            "questions grounded in the retrieved passages."
        ),
        lifespan=_lifespan,
    )

    # -- Middleware (last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    if app_settings.app_env != "production":
        configure_cors(application)

    application.add_exception_handler(RequestValidationError, request_validation_handler)
    application.include_router(api_router)
    return application


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def main() -> None:
    """Serve the application with uvicorn on ``APP_HOST:APP_PORT``."""
    app_settings = load_settings()
    uvicorn.run(
        "ragapp.main:create_app",
        factory=True,
        host=app_settings.app_host,
        port=app_settings.app_port,
        reload=(app_settings.app_env == "development"),
    )


if __name__ == "__main__":
    main()
