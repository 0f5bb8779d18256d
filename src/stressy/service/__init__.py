"""Ingestion and query services: chunking, embeddings, storage and pipelines."""
