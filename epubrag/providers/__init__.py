"""Concrete adapters for the external embedding and generation services."""

from epubrag.providers.factory import build_embedding_provider, build_llm_provider

__all__ = ["build_embedding_provider", "build_llm_provider"]
