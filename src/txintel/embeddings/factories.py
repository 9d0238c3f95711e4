"""Embedding client factory functions."""

import os
from typing import Optional

from txintel.domain.errors import EmbeddingUnavailable
from txintel.embeddings.openai_client import DEFAULT_MODEL, DEFAULT_TIMEOUT, OpenAIEmbeddingClient


def create_openai_embedding_client(
    api_key: Optional[str] = None,
    model: Optional[str] = None,
    timeout: Optional[float] = None,
) -> OpenAIEmbeddingClient:
    """Create an OpenAI embedding client from arguments or environment.

    Args:
        api_key: API key. If None, reads OPENAI_API_KEY.
        model: Model name. If None, reads TXINTEL_EMBEDDING_MODEL, then
            defaults to text-embedding-3-small.
        timeout: Call ceiling in seconds. If None, reads
            TXINTEL_EMBEDDING_TIMEOUT, then defaults to 30.

    Raises:
        EmbeddingUnavailable: If no API key is configured
    """
    if api_key is None:
        api_key = os.environ.get("OPENAI_API_KEY")
    if not api_key:
        raise EmbeddingUnavailable("OPENAI_API_KEY environment variable is required for embeddings")

    if model is None:
        model = os.environ.get("TXINTEL_EMBEDDING_MODEL", DEFAULT_MODEL)
    if timeout is None:
        timeout = float(os.environ.get("TXINTEL_EMBEDDING_TIMEOUT", DEFAULT_TIMEOUT))

    return OpenAIEmbeddingClient(api_key=api_key, model=model, timeout=timeout)
