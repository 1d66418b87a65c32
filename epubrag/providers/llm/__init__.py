"""LLM provider adapters.

Three concrete implementations of ILLMProvider (epubrag/interfaces/llm_provider.py):
    - OllamaLLMProvider    - local models via an Ollama server (llama3.1 by default)
    - OpenAILLMProvider    - gpt-4o-mini, or any OpenAI-compatible endpoint
    - AnthropicLLMProvider - Claude via the Messages API

The CLI builds the one named by GENERATION_PROVIDER through
epubrag.providers.factory.build_llm_provider.
"""

from epubrag.providers.llm.anthropic_provider import AnthropicLLMProvider
from epubrag.providers.llm.ollama_provider import OllamaLLMProvider
from epubrag.providers.llm.openai_provider import OpenAILLMProvider

__all__ = ["AnthropicLLMProvider", "OllamaLLMProvider", "OpenAILLMProvider"]
