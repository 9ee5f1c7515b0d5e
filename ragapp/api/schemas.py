"""Pydantic request/response schemas for the ragapp HTTP API.

Request schemas end with "Request", response schemas end with "Response".
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    """Body of ``POST /chat``.

    ``message`` is typed loosely so that a missing, non-string or blank
    value reaches the QA service, which rejects it with a 400.
    """

    message: Any = Field(default=None, description="The user's question.")


class ChatResponse(BaseModel):
    """Answer generated from the indexed documents."""

    response: str


class IngestResponse(BaseModel):
    """Result of ``POST /ingest``."""

    success: bool
    message: str | None = None


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    provider: str
    collection: str
    vector_store: bool
