"""Embedding provider adapters."""

from epubrag.providers.embedding.ollama_embedding_provider import OllamaEmbeddingProvider
from epubrag.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

__all__ = ["OllamaEmbeddingProvider", "OpenAIEmbeddingProvider"]
