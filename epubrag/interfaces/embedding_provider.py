"""Abstract base class for text-embedding service providers.

Defines the contract for turning text into a fixed-length vector.
Implementations wrap Ollama (local, default) or any OpenAI-compatible
embeddings API.  The ingestion pipeline and the retrieval service depend
only on this interface, so a deterministic fake can stand in for tests.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementations:
#   OllamaEmbeddingProvider  - mxbai-embed-large via a local Ollama server
#   OpenAIEmbeddingProvider  - text-embedding-3-small (requires API key)
# Located in: epubrag/providers/embedding/
class IEmbeddingProvider(ABC):
    """Contract for text-embedding services used by ingestion and retrieval.

    One instance is created per process and passed explicitly to the
    services that need it; nothing reaches for a global client.
    """

    @abstractmethod
    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Generate embedding vectors for a batch of texts.

        Parameters
        ----------
        texts:
            One or more text strings to embed.  Implementations should
            handle batching internally if the underlying API has a per-call
            limit.

        Returns
        -------
        list[list[float]]
            Embedding vectors corresponding positionally to *texts*.

        Raises
        ------
        epubrag.utils.errors.EmbeddingError
            If the embedding API call fails or returns malformed data.
        """

    @abstractmethod
    async def embed_single(self, text: str) -> list[float]:
        """Generate an embedding vector for a single text string.

        Used per chunk during ingestion (so one failure skips one chunk)
        and for the question at query time.

        Raises
        ------
        epubrag.utils.errors.EmbeddingError
            If the embedding API call fails or returns malformed data.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"ollama_embedding"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider is configured and reachable.

        Implementations should check credentials or reachability without
        generating an actual embedding.
        """
