"""Business-logic services: the ingestion pipeline and retrieval QA."""
