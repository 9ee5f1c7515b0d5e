"""Application settings loaded from environment variables via pydantic-settings.

Two sources, in priority order:

  1. **Environment variables** -- e.g. ``LLM_PROVIDER=ollama`` (always wins)
  2. **.env file** -- key=value lines in the project root ``.env`` file

Field ``collection_name`` maps to ``COLLECTION_NAME`` and so on.  Defaults
apply when neither source sets a value.

A :class:`Settings` instance is built once per entry point (the FastAPI
lifespan, the ingest CLI) and handed to constructors explicitly, so the
pipelines can be tested without touching the process environment.  API keys
are *not* checked here: a missing key surfaces as ``AuthError`` on the first
provider call.
"""

from typing import Any

from pydantic import ValidationError as PydanticValidationError
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ragapp.utils.errors import ConfigurationError


class Settings(BaseSettings):
    """ragapp settings. Environment variables override defaults."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Provider selection ===
    # "openai", "ollama" or "gemini" ("google" is accepted as an alias).
    # Unknown values fall back to OpenAI, see providers/factory.py.
    llm_provider: str = "openai"
    # Informational: only "chroma" is wired into this service.
    vector_db: str = "chroma"

    # === OpenAI ===
    openai_api_key: str = ""
    openai_base_url: str = ""  # OpenAI-compatible endpoint override
    openai_embedding_model: str = "text-embedding-3-small"
    openai_text_model: str = "gpt-4o-mini"

    # === Google Gemini ===
    google_api_key: str = ""
    google_embedding_model: str = "gemini-embedding-001"
    google_text_model: str = "gemini-3-flash-preview"

    # === Ollama (local) ===
    ollama_base_url: str = "http://localhost:11434"
    ollama_embedding_model: str = "nomic-embed-text"
    ollama_text_model: str = "llama3"

    # === Vector store ===
    chroma_url: str = "http://localhost:8000"
    collection_name: str = "rag-docs"

    # === Ingestion ===
    documents_dir: str = "./documents"
    chunk_size: int = 1000
    chunk_overlap: int = 200
    max_upload_bytes: int = 5 * 1024 * 1024

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 3000
    app_env: str = "development"
    log_level: str = "INFO"

    @model_validator(mode="after")
    def _check_chunking(self) -> "Settings":
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if not 0 <= self.chunk_overlap < self.chunk_size:
            raise ValueError("chunk_overlap must be >= 0 and smaller than chunk_size")
        return self


def load_settings(**overrides: Any) -> Settings:
    """Read settings for an entry point.

    Invalid values (a non-integer ``CHUNK_SIZE``, an overlap that is not
    smaller than the chunk size, ...) are reported as
    :class:`~ragapp.utils.errors.ConfigurationError` so the CLI and the
    HTTP app fail with one error type.
    """
    try:
        return Settings(**overrides)
    except PydanticValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or 'settings'}: {error['msg']}"
            for error in exc.errors()
        )
        raise ConfigurationError(message=f"Invalid configuration: {problems}") from exc
