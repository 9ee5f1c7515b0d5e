"""ragapp: document ingestion and retrieval-augmented answering.

Ingestion: load ``.txt`` / ``.pdf`` -> sanitize metadata -> split into
overlapping chunks -> embed -> store in Chroma.

Answering: embed the question -> retrieve the nearest chunks -> generate an
answer grounded only in that context.
"""

__version__ = "0.1.0"
