"""Public interface definitions for all external collaborators.

Every external service epubrag talks to is accessed through the abstract
base classes defined here.  Concrete adapters implement these interfaces
and are constructed once by the CLI, then passed into the services that
need them.  Unit tests inject fakes instead.

    Interface            →  Concrete implementations
    ─────────────────────────────────────────────────────────────
    IEmbeddingProvider   →  OllamaEmbeddingProvider, OpenAIEmbeddingProvider
    ILLMProvider         →  OllamaLLMProvider, OpenAILLMProvider,
                            AnthropicLLMProvider
    IChunkProducer       →  EPUBProcessor
"""

from epubrag.interfaces.chunk_producer import IChunkProducer
from epubrag.interfaces.embedding_provider import IEmbeddingProvider
from epubrag.interfaces.llm_provider import ILLMProvider

__all__ = [
    "IChunkProducer",
    "IEmbeddingProvider",
    "ILLMProvider",
]
