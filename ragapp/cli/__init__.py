"""Command-line tools for ragapp.

- ``python -m ragapp.cli.ingest`` -- bulk-ingest ``DOCUMENTS_DIR`` (or a
  given directory / file) into the vector store.

Heavy imports (provider SDKs, chromadb) are deferred inside functions so
``--help`` stays fast.
"""
