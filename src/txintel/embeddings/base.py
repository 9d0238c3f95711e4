"""Abstract embedding client interface."""

from abc import ABC, abstractmethod


class EmbeddingClient(ABC):
    """Turns free text into a fixed-length vector."""

    @abstractmethod
    def embed(self, text: str) -> list[float]:
        """Return the embedding vector for ``text``.

        Raises:
            EmbeddingUnavailable: If the provider fails, times out or returns
                malformed output
        """
        pass
