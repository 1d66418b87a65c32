"""Provider selection.

Settings name the embedding and generation backends explicitly
(``EMBEDDING_PROVIDER`` / ``GENERATION_PROVIDER``).  Unlike a first-available
fallback chain, a missing API key for the named backend is a configuration
error: an index built with one embedding model must be queried with the
same model, so silently switching providers would corrupt retrieval.
"""

from __future__ import annotations

from epubrag.config.settings import Settings
from epubrag.interfaces.embedding_provider import IEmbeddingProvider
from epubrag.interfaces.llm_provider import ILLMProvider
from epubrag.providers.embedding.ollama_embedding_provider import OllamaEmbeddingProvider
from epubrag.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider
from epubrag.providers.llm.anthropic_provider import AnthropicLLMProvider
from epubrag.providers.llm.ollama_provider import OllamaLLMProvider
from epubrag.providers.llm.openai_provider import OpenAILLMProvider
from epubrag.utils.errors import ConfigurationError


def build_embedding_provider(settings: Settings) -> IEmbeddingProvider:
    """Construct the embedding provider named by ``settings.embedding_provider``.

    Raises:
        ConfigurationError: For an unknown provider name, or ``openai``
            without an API key.
    """
    name = settings.embedding_provider
    if name == "ollama":
        return OllamaEmbeddingProvider(settings=settings)
    if name == "openai":
        if not settings.openai_api_key:
            raise ConfigurationError(
                message="EMBEDDING_PROVIDER=openai requires OPENAI_API_KEY",
                provider_name="openai_embedding",
            )
        return OpenAIEmbeddingProvider(settings=settings)
    raise ConfigurationError(message=f"Unknown embedding provider: {name!r}")


def build_llm_provider(settings: Settings) -> ILLMProvider:
    """Construct the generation provider named by ``settings.generation_provider``.

    Raises:
        ConfigurationError: For an unknown provider name, or a hosted
            provider without its API key.
    """
    name = settings.generation_provider
    if name == "ollama":
        return OllamaLLMProvider(settings=settings)
    if name == "openai":
        if not settings.openai_api_key:
            raise ConfigurationError(
                message="GENERATION_PROVIDER=openai requires OPENAI_API_KEY",
                provider_name="openai",
            )
        return OpenAILLMProvider(settings=settings)
    if name == "anthropic":
        if not settings.anthropic_api_key:
            raise ConfigurationError(
                message="GENERATION_PROVIDER=anthropic requires ANTHROPIC_API_KEY",
                provider_name="anthropic",
            )
        return AnthropicLLMProvider(settings=settings)
    raise ConfigurationError(message=f"Unknown generation provider: {name!r}")
