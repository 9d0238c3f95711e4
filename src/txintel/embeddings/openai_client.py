"""OpenAI embeddings client.

One non-streaming call to the embeddings endpoint per text, bounded by a
fixed timeout and never retried; callers decide whether to resubmit.
"""

import math
from typing import Any, Optional

from openai import OpenAI, OpenAIError

from txintel.domain.errors import EmbeddingUnavailable
from txintel.embeddings.base import EmbeddingClient
from txintel.logging_setup import get_logger

logger = get_logger(__name__)

DEFAULT_MODEL = "text-embedding-3-small"
DEFAULT_TIMEOUT = 30.0


class OpenAIEmbeddingClient(EmbeddingClient):
    """Embedding client backed by the OpenAI embeddings API."""

    def __init__(
        self,
        client: Any = None,
        model: str = DEFAULT_MODEL,
        timeout: float = DEFAULT_TIMEOUT,
        api_key: Optional[str] = None,
        dimensions: Optional[int] = None,
    ):
        """Initialize the client.

        Args:
            client: Pre-built ``openai.OpenAI`` (or compatible) instance. When
                None, one is created with ``api_key``, ``timeout`` and retries
                disabled.
            model: Embedding model name
            timeout: Ceiling in seconds for one embedding call
            api_key: OpenAI API key, used only when ``client`` is None
            dimensions: Expected vector length; responses of another length
                are rejected
        """
        if client is None:
            try:
                client = OpenAI(api_key=api_key, timeout=timeout, max_retries=0)
            except OpenAIError as e:
                raise EmbeddingUnavailable(f"Could not create OpenAI client: {e}") from e
        self.client = client
        self.model = model
        self.timeout = timeout
        self.dimensions = dimensions

    def embed(self, text: str) -> list[float]:
        """Return the embedding vector for ``text``."""
        try:
            response = self.client.embeddings.create(model=self.model, input=text, timeout=self.timeout)
        except OpenAIError as e:
            logger.warning("Embedding request failed: %s", e)
            raise EmbeddingUnavailable(f"Embedding provider error: {e}") from e

        vector = self._extract_vector(response)
        if self.dimensions is not None and len(vector) != self.dimensions:
            raise EmbeddingUnavailable(
                f"Embedding has {len(vector)} dimensions, expected {self.dimensions}"
            )
        return vector

    @staticmethod
    def _extract_vector(response: Any) -> list[float]:
        try:
            raw = response.data[0].embedding
            vector = [float(v) for v in raw]
        except (AttributeError, IndexError, KeyError, TypeError, ValueError) as e:
            raise EmbeddingUnavailable(f"Malformed embedding response: {e}") from e

        if not vector or not all(math.isfinite(v) for v in vector):
            raise EmbeddingUnavailable("Malformed embedding response: empty or non-finite vector")
        return vector
