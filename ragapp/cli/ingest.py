"""Offline bulk-ingest command.

Usage::

    python -m ragapp.cli.ingest                    # ingest DOCUMENTS_DIR
    python -m ragapp.cli.ingest --path ./corpus    # ingest another directory
    python -m ragapp.cli.ingest --file notes.pdf   # ingest one file

The provider, collection and chunking parameters come from the same
environment / ``.env`` settings the HTTP service uses.  Exit status is 0
when ingestion succeeds or finds nothing to index, 1 on any failure.
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from ragapp.config.settings import Settings, load_settings
from ragapp.utils.errors import ConfigurationError


def _build_ingestion_service(app_settings: Settings):  # noqa: ANN202
    """Construct the ingestion pipeline for *app_settings*.

    Imports are deferred so ``--help`` does not load the provider SDKs.
    """
    from ragapp.providers.factory import build_model_provider, build_vector_store
    from ragapp.services.ingestion.chunker import RecursiveTextSplitter
    from ragapp.services.ingestion.ingestion_service import IngestionService
    from ragapp.services.ingestion.loader import DocumentLoader

    return IngestionService(
        loader=DocumentLoader(),
        splitter=RecursiveTextSplitter(
            chunk_size=app_settings.chunk_size,
            chunk_overlap=app_settings.chunk_overlap,
        ),
        model_provider=build_model_provider(app_settings),
        vector_store=build_vector_store(app_settings),
    )


async def _run(args: argparse.Namespace, service) -> int:  # noqa: ANN001
    """Run one ingestion and print a summary.  Returns the exit code."""
    if args.file:
        print(f"Ingesting file: {args.file}")
        result = await service.ingest_file(args.file)
    else:
        print(f"Ingesting directory: {args.path}")
        result = await service.ingest_directory(args.path)

    if not result.success:
        print(f"Nothing ingested: {result.message}")
        return 0

    print("\nIngestion complete:")
    print(f"  Chunks stored: {result.chunk_count}")
    print(f"  {result.message}")
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ragapp-ingest",
        description="Load, split, embed and index documents into the vector store.",
    )
    target = parser.add_mutually_exclusive_group()
    target.add_argument(
        "--path",
        default=None,
        help="Directory to ingest recursively (default: DOCUMENTS_DIR)",
    )
    target.add_argument(
        "--file",
        default=None,
        help="Ingest a single .txt or .pdf file",
    )
    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entry point: parse arguments, ingest, and exit with 0 or 1."""
    args = _build_parser().parse_args(argv)

    try:
        app_settings = load_settings()
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    from ragapp.utils.logging import configure_logging

    configure_logging(
        log_level=app_settings.log_level,
        json_output=(app_settings.app_env == "production"),
        stream=sys.stderr,
    )

    if args.path is None:
        args.path = app_settings.documents_dir

    try:
        service = _build_ingestion_service(app_settings)
        exit_code = asyncio.run(_run(args, service))
    except Exception as exc:
        print(f"Error: ingestion failed: {exc}", file=sys.stderr)
        sys.exit(1)

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
