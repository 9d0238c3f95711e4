"""Embedding provider clients for txintel."""

from txintel.embeddings.base import EmbeddingClient
from txintel.embeddings.factories import create_openai_embedding_client

__all__ = ["EmbeddingClient", "create_openai_embedding_client"]
